#!/usr/bin/python3
# -*- coding: utf-8 -*-

"""
    pyWellControl - Trip hydraulics utilities for well control
              Copyright (C) 2022, Mark Burgoyne

    This program is free software: you can redistribute it and/or modify
    it under the terms of the GNU General Public License as published by
    the Free Software Foundation, either version 3 of the License, or
    (at your option) any later version.

    This program is distributed in the hope that it will be useful,
    but WITHOUT ANY WARRANTY; without even the implied warranty of
    MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
    GNU General Public License for more details.

    The GNU General Public License can be found in the LICENSE directory,
    and at  <https://www.gnu.org/licenses/>.

          Contact author at mark.w.burgoyne@gmail.com
"""

import numpy as np

from pywellcontrol.shared_fns import pressure_from_head, density_from_pressure

# ============================================================================
#  Pressure balance
# ============================================================================

def hydrostatic_pressure(segments, to_tvd=None):
    """ Sum of segment hydrostatic contributions (kPa) from surface down to to_tvd (m).
        Segments below to_tvd are ignored and a segment straddling it is clipped.
        to_tvd None sums every segment
    """
    total = 0.0
    for s in segments:
        top = max(0.0, min(s.top_tvd, s.bottom_tvd))
        bot = max(0.0, max(s.top_tvd, s.bottom_tvd))
        if to_tvd is not None:
            if to_tvd <= top:
                continue
            bot = min(bot, to_tvd)
        if bot > top:
            total += pressure_from_head(s.density, bot - top)
    return total

def required_surface_pressure(target_density, control_tvd, hydrostatic, correction=0.0,
                              allow_negative=False, hold_open=False):
    """ Surface back pressure (kPa) needed to hold target_density (kg/m3) at control_tvd (m)

        hydrostatic: Hydrostatic pressure of the column down to the control depth (kPa)
        correction: Additional pressure to hold, e.g. swab compensation (kPa)
        allow_negative: Return a negative value instead of clamping at zero
        hold_open: Choke held fully open, result is always zero
    """
    if hold_open:
        return 0.0
    p = pressure_from_head(target_density, control_tvd) - hydrostatic + correction
    if allow_negative:
        return p
    return max(0.0, p)

def equivalent_density(hydrostatic, tvd, base_density, surface_pressure=0.0):
    """ Equivalent density (kg/m3) at a depth from its hydrostatic and surface pressures (kPa).
        Returns base_density when tvd is zero
    """
    return density_from_pressure(hydrostatic + surface_pressure, tvd, base_density)

def pressure_balance(annulus, pocket, bit_tvd, control_tvd, target_density, base_density,
                     correction=0.0, allow_negative=False, hold_open=False):
    """ Solves the annulus side pressure balance for one state of the wellbore.

        annulus: FluidSegments in the annulus above the bit
        pocket: FluidSegments in the open hole below the bit
        bit_tvd, control_tvd: Vertical depths (m)
        target_density: Target equivalent density at the control depth (kg/m3)
        base_density: Density reported when a depth is zero (kg/m3)
        correction: Swab/surge term added to the dynamic surface pressure (kPa)

        Returns dict with 'hydrostatic', 'target_pressure', 'surface_pressure', 'surface_pressure_raw',
        'surface_pressure_dynamic', 'esd_control', 'esd_bit', 'annulus_pressure_bit'
    """
    column = tuple(annulus) + tuple(pocket)
    hydro = hydrostatic_pressure(column, control_tvd)
    target = pressure_from_head(target_density, control_tvd)
    raw = required_surface_pressure(target_density, control_tvd, hydro, allow_negative=True)
    sabp = required_surface_pressure(target_density, control_tvd, hydro, allow_negative=allow_negative,
                                     hold_open=hold_open)
    if hold_open:
        dynamic = 0.0
    else:
        dynamic = sabp + correction
        if not allow_negative:
            dynamic = max(0.0, dynamic)
    ann_hydro = hydrostatic_pressure(annulus, bit_tvd)
    return {
        'hydrostatic': hydro,
        'target_pressure': target,
        'surface_pressure': sabp,
        'surface_pressure_raw': raw,
        'surface_pressure_dynamic': dynamic,
        'esd_control': equivalent_density(hydro, control_tvd, base_density, sabp),
        'esd_bit': equivalent_density(ann_hydro, bit_tvd, base_density, sabp),
        'annulus_pressure_bit': ann_hydro + sabp,
    }


# ============================================================================
#  Pressure window
# ============================================================================

class PressureWindow:
    """ Pore and fracture pressure versus TVD with linear interpolation, clamped outside the table.

        points: List of (tvd, pore, frac) tuples (m, kPa, kPa). pore or frac may be None
        pore_margin: Overbalance added to pore pressure (kPa). Defaults to 0
        frac_margin: Margin kept below fracture pressure (kPa). Defaults to 0
    """
    def __init__(self, points, pore_margin=0.0, frac_margin=0.0):
        pts = sorted(points, key=lambda p: p[0])
        self.points = pts
        self.pore_margin = pore_margin
        self.frac_margin = frac_margin
        self._pore = [(p[0], p[1]) for p in pts if p[1] is not None]
        self._frac = [(p[0], p[2]) for p in pts if p[2] is not None]

    @staticmethod
    def _interp(table, tvd):
        if not table:
            return None
        x = np.array([t[0] for t in table])
        y = np.array([t[1] for t in table])
        return float(np.interp(tvd, x, y))

    def pore(self, tvd):
        return self._interp(self._pore, tvd)

    def frac(self, tvd):
        return self._interp(self._frac, tvd)

    def window(self, tvd, apply_margins=True):
        """ Returns (min, max) allowable pressure (kPa) at tvd, or None if undefined """
        pore, frac = self.pore(tvd), self.frac(tvd)
        if pore is None or frac is None:
            return None
        lo = pore + self.pore_margin if apply_margins else pore
        hi = frac - self.frac_margin if apply_margins else frac
        return (lo, hi) if lo <= hi else None

    def min_density(self, tvd, apply_margins=True):
        """ Minimum density (kg/m3) to stay above pore pressure at tvd, or None """
        pore = self.pore(tvd)
        if tvd <= 0 or pore is None:
            return None
        p = pore + self.pore_margin if apply_margins else pore
        return density_from_pressure(p, tvd)

    def max_density(self, tvd, apply_margins=True):
        """ Maximum density (kg/m3) to stay below fracture pressure at tvd, or None """
        frac = self.frac(tvd)
        if tvd <= 0 or frac is None:
            return None
        p = frac - self.frac_margin if apply_margins else frac
        return density_from_pressure(p, tvd)

    def check(self, tvd, pressure):
        """ Returns (within, pore, frac) for a bottom hole pressure (kPa) at tvd """
        pore, frac = self.pore(tvd), self.frac(tvd)
        if pore is not None and pressure < pore + self.pore_margin:
            return (False, pore, frac)
        if frac is not None and pressure > frac - self.frac_margin:
            return (False, pore, frac)
        return (True, pore, frac)
