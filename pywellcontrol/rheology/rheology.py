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

import math
from typing import Optional, Tuple

from pywellcontrol.classes import flow_regime
from pywellcontrol.constants import (FANN_DIAL_TO_PA, SHEAR_RATE_600, SHEAR_RATE_300, RE_LAMINAR,
                                     HEDSTROM_COEFF, HEDSTROM_EXP, FANNING_COEFF, FANNING_EXP,
                                     MIN_SHEAR_RATE, DEFAULT_PV, DEFAULT_YP)

# ============================================================================
#  Fann viscometer two-point fits
# ============================================================================

def power_law_fit(dial600: float, dial300: float) -> Optional[Tuple[float, float]]:
    """ Returns power law (n, K) from Fann 600/300 rpm dial readings, or None when undetermined.
        n: Flow behaviour index (dimensionless)
        K: Consistency index (Pa.s^n)
    """
    if dial600 is None or dial300 is None or dial600 <= 0 or dial300 <= 0:
        return None
    tau600 = dial600 * FANN_DIAL_TO_PA
    tau300 = dial300 * FANN_DIAL_TO_PA
    n = math.log(tau600 / tau300) / math.log(SHEAR_RATE_600 / SHEAR_RATE_300)
    k = tau600 / SHEAR_RATE_600 ** n
    return (n, k)

def bingham_fit(dial600: float, dial300: float) -> Optional[Tuple[float, float]]:
    """ Returns Bingham plastic (pv, yp) from Fann 600/300 rpm dial readings, or None when undetermined.
        pv: Plastic viscosity (Pa.s)
        yp: Yield point (Pa)
    """
    if dial600 is None or dial300 is None or dial600 <= 0 or dial300 <= 0:
        return None
    pv_cp = max(0.0, dial600 - dial300)
    yp = (dial300 - pv_cp) * FANN_DIAL_TO_PA
    return (pv_cp * 0.001, yp)


class Mud:
    """ Mud record.

        density: Mud density (kg/m3)
        pv: Plastic viscosity (Pa.s). Optional
        yp: Yield point (Pa). Optional
        n, k: Power law index and consistency (Pa.s^n). Optional
        dial600, dial300: Fann 35 dial readings. Optional, used to derive missing parameters
        name: Display name
        color: Optional display tag, e.g. an (r, g, b, a) tuple
    """
    def __init__(self, density, pv=None, yp=None, n=None, k=None, dial600=None, dial300=None, name='', color=None):
        if density <= 0:
            raise ValueError(f"Mud density must be positive: {density}")
        self.density = float(density)
        self.pv = pv
        self.yp = yp
        self.n = n
        self.k = k
        self.dial600 = dial600
        self.dial300 = dial300
        self.name = name
        self.color = color

        if (self.pv is None or self.yp is None):
            fit = bingham_fit(dial600, dial300)
            if fit is not None:
                if self.pv is None:
                    self.pv = fit[0]
                if self.yp is None:
                    self.yp = fit[1]
        if (self.n is None or self.k is None):
            fit = power_law_fit(dial600, dial300)
            if fit is not None:
                if self.n is None:
                    self.n = fit[0]
                if self.k is None:
                    self.k = fit[1]

    @property
    def has_rheology(self):
        return self.pv is not None and self.yp is not None

    def bingham(self, default_pv=DEFAULT_PV, default_yp=DEFAULT_YP):
        """ Returns (pv, yp), falling back to the defaults when the record cannot supply them """
        if self.has_rheology:
            return (self.pv, self.yp)
        return (default_pv, default_yp)

    def __repr__(self):
        return f"Mud(density={self.density}, pv={self.pv}, yp={self.yp}, name={self.name!r})"


# ============================================================================
#  Annular friction
# ============================================================================

def wall_shear_stress(shear_rate, pv, yp):
    """ Bingham plastic wall shear stress (Pa) """
    return yp + pv * shear_rate

def hydraulic_diameter(hole_id, pipe_od):
    """ Equivalent diameter of an annulus (m) """
    return hole_id - pipe_od

def wall_shear_rate(velocity, de):
    return max(8.0 * velocity / de, MIN_SHEAR_RATE)

def reynolds_number(density, velocity, de, pv, yp):
    """ Reynolds number using the apparent viscosity at the wall """
    gamma_w = wall_shear_rate(velocity, de)
    mu_app = wall_shear_stress(gamma_w, pv, yp) / gamma_w
    return density * velocity * de / mu_app

def hedstrom_number(density, yp, de, pv):
    """ Hedstrom number, unbounded for a mud with yield stress and no plastic viscosity """
    if pv <= 0:
        return math.inf if yp > 0 else 0.0
    return density * max(yp, 0.0) * de * de / (pv * pv)

def critical_reynolds(hedstrom):
    return RE_LAMINAR * (1.0 + HEDSTROM_COEFF * hedstrom ** HEDSTROM_EXP)

def annular_friction(density, velocity, de, pv, yp):
    """ Returns annular frictional pressure gradient for a Bingham plastic mud as a dict

        density: Mud density (kg/m3)
        velocity: Mean annular velocity (m/s)
        de: Hydraulic diameter (m)
        pv: Plastic viscosity (Pa.s)
        yp: Yield point (Pa)

        Keys: 'gradient' (Pa/m), 'laminar' (Pa/m), 'turbulent' (Pa/m), 'reynolds', 'critical_reynolds', 'regime'
        Below the critical Reynolds number the laminar gradient is used. Above it, the larger
        of the laminar and turbulent gradients is reported with the regime of the larger term.
        A mud with yield stress only never reaches the critical Reynolds number and stays laminar.
    """
    none = {'gradient': 0.0, 'laminar': 0.0, 'turbulent': 0.0, 'reynolds': 0.0,
            'critical_reynolds': RE_LAMINAR, 'regime': flow_regime.NONE}
    if de <= 0:
        return none

    pv = max(pv, 0.0)
    gamma_w = wall_shear_rate(velocity, de)
    tau_w = wall_shear_stress(gamma_w, pv, yp)
    if tau_w <= 0:
        return none
    dpdl_lam = 2.0 * tau_w / de
    re = density * velocity * de / (tau_w / gamma_w)
    re_crit = critical_reynolds(hedstrom_number(density, yp, de, pv))

    if re < re_crit:
        return {'gradient': dpdl_lam, 'laminar': dpdl_lam, 'turbulent': 0.0, 'reynolds': re,
                'critical_reynolds': re_crit, 'regime': flow_regime.LAMINAR}

    f = FANNING_COEFF / re ** FANNING_EXP
    dpdl_turb = f * density * velocity * velocity / (2.0 * de)
    regime = flow_regime.TURBULENT if dpdl_turb > dpdl_lam else flow_regime.LAMINAR
    return {'gradient': max(dpdl_lam, dpdl_turb), 'laminar': dpdl_lam, 'turbulent': dpdl_turb, 'reynolds': re,
            'critical_reynolds': re_crit, 'regime': regime}
