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
import pandas as pd

from pywellcontrol.classes import pipe_end, flow_regime
from pywellcontrol.validate import validate_methods
from pywellcontrol.constants import CLINGING_BASE, DEFAULT_DENSITY, DEFAULT_PV, DEFAULT_YP
from pywellcontrol.shared_fns import density_from_pressure, march_depths
from pywellcontrol.rheology import annular_friction, hydraulic_diameter

def clinging_constant(pipe_od, hole_id):
    """ Burkhardt clinging constant Kc = 0.45 + 0.45 (Dp/Dh)^2
        Returns 0.45 when the pipe does not fit inside the hole or has no OD
    """
    if not (hole_id > pipe_od and pipe_od > 0):
        return CLINGING_BASE
    ratio = pipe_od / hole_id
    return CLINGING_BASE + CLINGING_BASE * ratio * ratio

def displacement_area(od, id, pipeend='CLOSED'):
    """ Pipe displacement area (m2): full OD when closed, wall only when open """
    pipeend = validate_methods(["pipeend"], [pipeend])
    if pipeend == pipe_end.CLOSED:
        return math.pi / 4.0 * od * od
    return math.pi / 4.0 * (od * od - id * id)

def _mud_parameters(mud):
    if mud is None:
        return DEFAULT_DENSITY, DEFAULT_PV, DEFAULT_YP
    pv, yp = mud.bingham()
    return mud.density, pv, yp

def surge_swab_at_depth(bit_md, wellbore, trip_speed, mud=None, clinging_override=None, pipeend='CLOSED', eccentricity=1.0):
    """ Returns surge and swab pressures for the bit at a single depth as a dict

        bit_md: Bit measured depth (m)
        wellbore: Wellbore object with drill string and annulus sections
        trip_speed: Trip speed (m/min), positive running in, negative pulling out
        mud: Mud object. Defaults to 1100 kg/m3, PV 0.02 Pa.s, YP 5 Pa
        clinging_override: Clinging constant to use instead of Burkhardt's correlation
        pipeend: 'CLOSED' or 'OPEN'
        eccentricity: Eccentricity factor (>= 1)

        Keys: 'MD', 'TVD', 'Surge_kPa', 'Swab_kPa' (negative), 'Surge_ECD', 'Swab_ECD' (negative),
              'Va_bit' (m/s), 'Regime' (flow_regime), 'Kc'
        If no drill string section covers the bit, all pressures are zero and the regime is NONE.
    """
    pipeend = validate_methods(["pipeend"], [pipeend])
    if eccentricity < 1:
        raise ValueError(f"Eccentricity factor must be >= 1: {eccentricity}")
    rho, pv, yp = _mud_parameters(mud)
    bit_tvd = wellbore.tvd(bit_md)
    kc_bit = clinging_override if clinging_override is not None else CLINGING_BASE

    result = {'MD': bit_md, 'TVD': bit_tvd, 'Surge_kPa': 0.0, 'Swab_kPa': 0.0, 'Surge_ECD': 0.0,
              'Swab_ECD': 0.0, 'Va_bit': 0.0, 'Regime': flow_regime.NONE, 'Kc': kc_bit}

    at_bit = wellbore.drill_string_at(bit_md)
    if not at_bit.found:
        return result

    pipe_od = at_bit.section.od
    disp_area = displacement_area(pipe_od, at_bit.section.id, pipeend)
    speed = abs(trip_speed) / 60.0
    total = 0.0

    for section in wellbore.annulus:
        if section.top >= bit_md:
            continue
        sec_top = section.top
        sec_bot = min(section.bottom, bit_md)
        sec_len = sec_bot - sec_top
        if sec_len <= 0:
            continue

        string_od = pipe_od
        for ds in wellbore.drill_string:
            if ds.top <= sec_top and ds.bottom >= sec_bot:
                string_od = ds.od
                break

        ann_area = math.pi / 4.0 * (section.id ** 2 - string_od ** 2)
        if ann_area <= 0:
            continue
        de = hydraulic_diameter(section.id, string_od)
        kc = clinging_override if clinging_override is not None else clinging_constant(string_od, section.id)
        va = speed * (1.0 + kc) * (disp_area / ann_area) * eccentricity

        friction = annular_friction(rho, va, de, pv, yp)
        total += friction['gradient'] * sec_len / 1000.0

        if sec_bot >= bit_md - 1:
            result['Va_bit'] = va
            result['Kc'] = kc
            result['Regime'] = friction['regime']

    ecd = density_from_pressure(total, bit_tvd, 0.0)
    result['Surge_kPa'] = total
    result['Swab_kPa'] = -total
    result['Surge_ECD'] = ecd
    result['Swab_ECD'] = -ecd
    return result

def surge_swab(wellbore, start_md, end_md, trip_speed, step=100.0, mud=None, clinging_override=None,
               pipeend='CLOSED', eccentricity=1.0):
    """ Returns a DataFrame of surge and swab pressures as the bit moves from start_md to end_md.
        Columns as per surge_swab_at_depth, one row per depth. The last step is clipped to land on end_md.

        wellbore: Wellbore object
        start_md: Starting bit depth (m)
        end_md: Ending bit depth (m)
        trip_speed: Trip speed (m/min), positive running in, negative pulling out
        step: Depth increment (m). Defaults to 100
        Other parameters: Same as surge_swab_at_depth()
    """
    rows = [surge_swab_at_depth(md, wellbore, trip_speed, mud=mud, clinging_override=clinging_override,
                                pipeend=pipeend, eccentricity=eccentricity)
            for md in march_depths(start_md, end_md, step)]
    df = pd.DataFrame(rows, columns=['MD', 'TVD', 'Surge_kPa', 'Swab_kPa', 'Surge_ECD', 'Swab_ECD',
                                     'Va_bit', 'Regime', 'Kc'])
    df['Regime'] = [r.name for r in df['Regime']]
    return df

def surge_swab_summary(df, wellbore=None, pipeend='CLOSED'):
    """ Summarises a surge_swab() DataFrame.
        Pipe dimensions are taken from the deepest drill string section of wellbore, if given.
        Returns dict with maximum surge and swab (positive magnitudes), their depths and ECDs,
        the average clinging constant, displacement area and a flag for missing pipe ID
    """
    pipeend = validate_methods(["pipeend"], [pipeend])
    od, id = 0.0, 0.0
    if wellbore is not None and wellbore.drill_string:
        deepest = max(wellbore.drill_string, key=lambda s: s.bottom)
        od, id = deepest.od, deepest.id

    if len(df) == 0:
        max_surge = {'Surge_kPa': 0.0, 'Surge_ECD': 0.0, 'MD': 0.0}
        max_swab = {'Swab_kPa': 0.0, 'Swab_ECD': 0.0, 'MD': 0.0}
        avg_kc = CLINGING_BASE
    else:
        max_surge = df.loc[df['Surge_kPa'].idxmax()]
        max_swab = df.loc[df['Swab_kPa'].idxmin()]
        avg_kc = float(df['Kc'].mean())

    return {
        'max_surge_kPa': float(max_surge['Surge_kPa']),
        'max_swab_kPa': abs(float(max_swab['Swab_kPa'])),
        'max_surge_ecd': float(max_surge['Surge_ECD']),
        'max_swab_ecd': abs(float(max_swab['Swab_ECD'])),
        'depth_max_surge': float(max_surge['MD']),
        'depth_max_swab': float(max_swab['MD']),
        'average_kc': avg_kc,
        'displacement_area': displacement_area(od, id, pipeend),
        'pipe_od': od,
        'pipe_id': id,
        'missing_pipe_id': id < 0.001,
    }
