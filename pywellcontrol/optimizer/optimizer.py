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
from dataclasses import dataclass, field
from typing import List

import pandas as pd

from pywellcontrol.constants import (KPA_PER_M_PER_KGM3, HEEL_INC, HIGH_ANGLE_INC, HEEL_FALLBACK_FRACTION,
                                     MIN_ANNULUS_CAPACITY, MIN_KILL_DENSITY, LOW_KILL_DENSITY, MAX_KILL_DENSITY,
                                     MIN_KILL_HEIGHT, DEFAULT_HOLE_ID, DEFAULT_PIPE_OD, DEFAULT_PIPE_ID)
from pywellcontrol.geometry.geometry import _circle_area

HEEL_WARNING = "No heel (90°) found. Using 70% of TD as estimate."
SMALL_KILL_WARNING = "Kill mud height too small. Using base mud density."
HIGH_CLAMP_WARNING = f"Kill mud density clamped to {MAX_KILL_DENSITY:.0f} kg/m³. Check inputs."


@dataclass
class OptimizerResult:
    """ Kill mud / slug plan. Densities kg/m3, volumes m3, depths and heights m

        is_valid: The kill density came from the pressure balance rather than the base mud fallback.
        clamped: The solved density was outside the plausible band and was clamped to it
    """
    kill_density: float
    kill_volume: float
    steel_displacement: float
    slug_drop_volume: float
    slug_drop_calculated: float
    surface_slug_volume: float
    surface_slug_density: float
    surface_slug_bottom_md: float
    surface_slug_tvd_height: float
    surface_slug_drop_height: float
    second_slug_volume: float
    second_slug_density: float
    second_slug_density_calculated: float
    second_slug_density_was_calculated: bool
    second_slug_tvd_height: float
    second_slug_drop_height: float
    active_mud_volume: float
    effective_esd: float
    annulus_capacity: float
    heel_md: float
    heel_tvd: float
    control_tvd: float
    base_density: float
    layers: List[dict] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    is_valid: bool = True
    clamped: bool = False

    def layer_table(self):
        """ Annulus layers from surface down as a DataFrame """
        return pd.DataFrame(self.layers, columns=['Layer', 'Density', 'Height', 'Volume'])


def find_heel(stations, total_depth, manual_heel_md=None, tvd_fn=None):
    """ Returns (heel MD, heel TVD, warning or None)

        stations: List of SurveyStation
        total_depth: Depth used for the fallback estimate (m)
        manual_heel_md: Overrides detection when given (m)
        tvd_fn: Optional MD to TVD function for manual and fallback depths. Defaults to TVD = MD

        First station at or above 90 deg inclination, else the highest inclination station when it
        exceeds 45 deg, else 70% of total_depth with a warning.
    """
    tvd_fn = tvd_fn if tvd_fn is not None else (lambda md: md)
    if manual_heel_md is not None:
        return manual_heel_md, tvd_fn(manual_heel_md), None
    ordered = sorted(stations or [], key=lambda s: s.md)
    for s in ordered:
        if s.inc >= HEEL_INC:
            return s.md, s.tvd, None
    if ordered:
        steepest = max(ordered, key=lambda s: s.inc)
        if steepest.inc > HIGH_ANGLE_INC:
            return steepest.md, steepest.tvd, None
    md = total_depth * HEEL_FALLBACK_FRACTION
    return md, tvd_fn(md), HEEL_WARNING

def _surface_annulus_capacity(wellbore):
    if wellbore.annulus:
        return wellbore.annulus[0].flow_area
    return _circle_area(DEFAULT_HOLE_ID) - _circle_area(DEFAULT_PIPE_OD)

def _surface_string_capacity(wellbore):
    if wellbore.drill_string:
        return wellbore.drill_string[0].capacity
    return _circle_area(DEFAULT_PIPE_ID)

def _slug_bottom_md(wellbore, volume):
    """ MD reached by a volume (m3) pumped into the string from surface """
    if not wellbore.drill_string:
        return 0.0
    limit = wellbore.drill_string[-1].bottom
    return wellbore.walk(wellbore.string_area, 0.0, volume, limit)

def optimize_kill_mud(wellbore, target_density, surface_slug_volume, surface_slug_density, base_density,
                      crack_pressure, start_md, control_md, second_slug_density=None, manual_heel_md=None,
                      observed_slug_drop=None, silent=True):
    """ Kill mud density that holds target_density at the control depth once the pipe is out,
        with a surface slug and a second slug placed to the heel.

        wellbore: Wellbore object
        target_density: Target equivalent density at control depth (kg/m3)
        surface_slug_volume: Volume of the surface slug (m3)
        surface_slug_density: Surface slug density (kg/m3)
        base_density: Active mud density (kg/m3)
        crack_pressure: Float crack pressure (kPa)
        start_md: Starting bit depth (m)
        control_md: Control depth (m)
        second_slug_density: Second slug density (kg/m3). Calculated when None
        manual_heel_md: Heel depth override (m)
        observed_slug_drop: Field observed slug drop volume (m3). Overrides the calculation
        silent: If False, prints warnings

        Returns an OptimizerResult. Out of range results are clamped and warned, never raised.
    """
    warnings = []
    heel_md, heel_tvd, heel_warning = find_heel(wellbore.survey, start_md, manual_heel_md, wellbore.tvd)
    if heel_warning:
        warnings.append(heel_warning)
    heel_tvd = float(heel_tvd)
    control_tvd = wellbore.tvd(control_md)

    crack_density = crack_pressure / heel_tvd / KPA_PER_M_PER_KGM3 if heel_tvd > 0 else 0.0
    second_calc = 2 * target_density - base_density + crack_density
    second = second_calc if second_slug_density is None else second_slug_density
    effective_esd = target_density + crack_density

    # Slugs inside the string
    slug_bottom_md = _slug_bottom_md(wellbore, surface_slug_volume)
    second_volume = wellbore.string_volume(slug_bottom_md, heel_md) if heel_md > slug_bottom_md else 0.0
    slug_bottom_tvd = wellbore.tvd(slug_bottom_md)
    surface_tvd_h = slug_bottom_tvd
    second_tvd_h = heel_tvd - slug_bottom_tvd

    surface_drop_h = (surface_slug_density - effective_esd) * surface_tvd_h / effective_esd
    second_drop_h = (second - effective_esd) * second_tvd_h / effective_esd
    drop_calc = max(0.0, surface_drop_h + second_drop_h) * _surface_string_capacity(wellbore)
    drop = drop_calc if observed_slug_drop is None else observed_slug_drop

    steel = wellbore.steel_volume(0.0, start_md)
    kill_volume = steel + drop

    # Layers in the annulus once the pipe is out
    cap = _surface_annulus_capacity(wellbore)
    eff_cap = max(cap, MIN_ANNULUS_CAPACITY)
    kill_bottom_md = kill_volume / eff_cap
    surface_bottom_md = kill_bottom_md + surface_slug_volume / eff_cap
    second_top_md = heel_md - second_volume / eff_cap
    active_length = max(0.0, second_top_md - surface_bottom_md)

    kill_bottom_tvd = wellbore.tvd(kill_bottom_md)
    surface_bottom_tvd = wellbore.tvd(surface_bottom_md)
    second_top_tvd = wellbore.tvd(second_top_md)

    kill_h = kill_bottom_tvd
    surface_h = surface_bottom_tvd - kill_bottom_tvd
    active_h = max(0.0, second_top_tvd - surface_bottom_tvd)
    second_h = heel_tvd - second_top_tvd
    original_h = max(0.0, control_tvd - heel_tvd)

    rest = (surface_slug_density * surface_h + base_density * active_h + second * second_h
            + base_density * original_h)
    solved = kill_h > MIN_KILL_HEIGHT
    if solved:
        kill_density = (target_density * control_tvd - rest) / kill_h
    else:
        kill_density = base_density
        warnings.append(SMALL_KILL_WARNING)

    clamped = False
    if kill_density < LOW_KILL_DENSITY:
        warnings.append(f"Calculated kill mud density ({kill_density:.0f} kg/m³) is very low. "
                        "Heavy slugs may be overcompensating.")
        if kill_density < MIN_KILL_DENSITY:
            kill_density = MIN_KILL_DENSITY
            clamped = True
    if kill_density > MAX_KILL_DENSITY:
        warnings.append(HIGH_CLAMP_WARNING)
        kill_density = MAX_KILL_DENSITY
        clamped = True

    layers = [
        {'Layer': 'Kill mud', 'Density': kill_density, 'Height': kill_h, 'Volume': kill_volume},
        {'Layer': 'Surface slug', 'Density': surface_slug_density, 'Height': surface_h, 'Volume': surface_slug_volume},
        {'Layer': 'Active mud', 'Density': base_density, 'Height': active_h, 'Volume': active_length * cap},
        {'Layer': 'Second slug', 'Density': second, 'Height': second_h, 'Volume': second_volume},
        {'Layer': 'Original mud', 'Density': base_density, 'Height': original_h, 'Volume': 0.0},
    ]

    if not silent:
        for w in warnings:
            print("Warning: " + w)

    return OptimizerResult(
        kill_density=kill_density,
        kill_volume=kill_volume,
        steel_displacement=steel,
        slug_drop_volume=drop,
        slug_drop_calculated=drop_calc,
        surface_slug_volume=surface_slug_volume,
        surface_slug_density=surface_slug_density,
        surface_slug_bottom_md=slug_bottom_md,
        surface_slug_tvd_height=surface_tvd_h,
        surface_slug_drop_height=surface_drop_h,
        second_slug_volume=second_volume,
        second_slug_density=second,
        second_slug_density_calculated=second_calc,
        second_slug_density_was_calculated=second_slug_density is None,
        second_slug_tvd_height=second_tvd_h,
        second_slug_drop_height=second_drop_h,
        active_mud_volume=active_length * cap,
        effective_esd=effective_esd,
        annulus_capacity=cap,
        heel_md=heel_md,
        heel_tvd=heel_tvd,
        control_tvd=control_tvd,
        base_density=base_density,
        layers=layers,
        warnings=warnings,
        is_valid=solved and math.isfinite(kill_density),
        clamped=clamped,
    )
