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

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Mapping

from pywellcontrol.classes import trip_mode, float_state, side, pipe_end
from pywellcontrol.validate import validate_methods
from pywellcontrol.constants import (DEFAULT_DENSITY, DEFAULT_CRACK_PRESSURE, RHO_AIR, FINE_STEP, COARSE_STEP,
                                     COARSE_MARGIN, MIN_VOLUME, EPS, DENSITY_MERGE_TOL)
from pywellcontrol.shared_fns import is_finite_number, march_depths, root_solve, density_from_pressure
from pywellcontrol.rheology import Mud
from pywellcontrol.layer import (Parcel, blend, stack_volume, merge_adjacent, push_top, push_bottom, take_bottom,
                                 take_top, spill_top, layout)
from pywellcontrol.pressure import hydrostatic_pressure, pressure_balance
from pywellcontrol.surgeswab import surge_swab_at_depth

# ============================================================================
#  Configuration
# ============================================================================

class TripSettings:
    """ Configuration of one trip simulation, validated before the run starts.

        start_md: Starting bit depth (m)
        end_md: Final bit depth (m), inclusive
        step: Depth interval between recorded steps (m). Must be positive
        mode: 'OUT' (pulling out, end_md <= start_md) or 'IN' (running in, end_md >= start_md)
        base_mud: Mud object for the active mud. Defaults to 1100 kg/m3
        backfill_mud: Mud pumped into the annulus while pulling out. Defaults to base_mud
        fill_mud: Mud used to fill the pipe while running in. Defaults to base_mud
        target_esd: Target equivalent density at the control depth (kg/m3). Defaults to base mud density
        control_md: Control depth (m). Defaults to start_md pulling out, end_md running in
        crack_pressure: Float valve crack pressure differential (kPa). Defaults to 2100
        initial_sabp: Surface back pressure held before the first pressure solve (kPa)
        hold_sabp_open: Choke held open, surface pressure always zero
        allow_negative: Report negative required surface pressure instead of clamping to zero
        fixed_backfill_volume: Volume of backfill_mud to pump before switching (m3). 0 pumps backfill_mud throughout
        switch_to_base_after_fixed: Switch to base mud once the fixed volume is used
        trip_speed: Trip speed magnitude (m/min) for the surge/swab correction. 0 disables it
        eccentricity: Eccentricity factor for surge/swab (>= 1)
        clinging_override: Clinging constant override for surge/swab
        fill_pipe: Fill the pipe from surface while running in
        float_sub_md: Floated casing, no pipe fill while the bit is deeper than this depth (m)
        observed_initial_pit_gain: Field observed pit gain from the initial U-tube (m3). Overrides the calculation
        initial_string, initial_annulus, initial_pocket: Optional starting stacks as sequences of Parcel,
                                                        ordered top to bottom. Default to base mud
        window: Optional PressureWindow checked at every recorded step
        adaptive: Use coarse sub-steps while the float is solidly closed
    """
    def __init__(self, start_md, end_md, step=30.0, mode='OUT', base_mud=None, backfill_mud=None, fill_mud=None,
                 target_esd=None, control_md=None, crack_pressure=DEFAULT_CRACK_PRESSURE, initial_sabp=0.0,
                 hold_sabp_open=False, allow_negative=False, fixed_backfill_volume=0.0,
                 switch_to_base_after_fixed=True, trip_speed=0.0, eccentricity=1.0, clinging_override=None,
                 fill_pipe=True, float_sub_md=None, observed_initial_pit_gain=None, initial_string=None,
                 initial_annulus=None, initial_pocket=None, window=None, adaptive=True):

        if not is_finite_number(step) or step <= 0:
            raise ValueError(f"Trip step must be a positive finite number: {step}")
        if not (is_finite_number(start_md) and is_finite_number(end_md)):
            raise ValueError(f"Start and end depths must be finite: {start_md}, {end_md}")
        if start_md < 0 or end_md < 0:
            raise ValueError(f"Depths must be non-negative: {start_md}, {end_md}")
        self.mode = validate_methods(["tripmode"], [mode])
        if self.mode == trip_mode.OUT and end_md > start_md:
            raise ValueError(f"Pulling out requires end_md <= start_md: {start_md} -> {end_md}")
        if self.mode == trip_mode.IN and end_md < start_md:
            raise ValueError(f"Running in requires end_md >= start_md: {start_md} -> {end_md}")
        if crack_pressure < 0:
            raise ValueError(f"Crack pressure must be non-negative: {crack_pressure}")
        if eccentricity < 1:
            raise ValueError(f"Eccentricity factor must be >= 1: {eccentricity}")
        if fixed_backfill_volume < 0:
            raise ValueError(f"Fixed backfill volume must be non-negative: {fixed_backfill_volume}")

        self.start_md = float(start_md)
        self.end_md = float(end_md)
        self.step = float(step)
        self.base_mud = base_mud if base_mud is not None else Mud(DEFAULT_DENSITY)
        self.backfill_mud = backfill_mud if backfill_mud is not None else self.base_mud
        self.fill_mud = fill_mud if fill_mud is not None else self.base_mud
        self.target_esd = float(target_esd) if target_esd is not None else self.base_mud.density
        if control_md is None:
            control_md = self.start_md if self.mode == trip_mode.OUT else self.end_md
        self.control_md = float(control_md)
        self.crack_pressure = float(crack_pressure)
        self.initial_sabp = float(initial_sabp)
        self.hold_sabp_open = hold_sabp_open
        self.allow_negative = allow_negative
        self.fixed_backfill_volume = float(fixed_backfill_volume)
        self.switch_to_base_after_fixed = switch_to_base_after_fixed
        self.trip_speed = abs(float(trip_speed))
        self.eccentricity = float(eccentricity)
        self.clinging_override = clinging_override
        self.fill_pipe = fill_pipe
        self.float_sub_md = float_sub_md
        self.observed_initial_pit_gain = observed_initial_pit_gain
        self.initial_string = tuple(initial_string) if initial_string is not None else None
        self.initial_annulus = tuple(initial_annulus) if initial_annulus is not None else None
        self.initial_pocket = tuple(initial_pocket) if initial_pocket is not None else None
        self.window = window
        self.adaptive = adaptive

    def record_depths(self):
        return march_depths(self.start_md, self.end_md, self.step)


class FloatValve:
    """ One-way float valve near the bit.

        crack_pressure: Differential needed to open the valve (kPa)
        Pulling out, the valve opens when the string side pressure exceeds the annulus side by more
        than the crack pressure. Running in, when the annulus side exceeds the string side.
        The valve re-evaluates on every sub-step and recloses when the differential drops.
    """
    def __init__(self, crack_pressure=DEFAULT_CRACK_PRESSURE):
        self.crack_pressure = crack_pressure

    def differential(self, p_string, p_annulus, mode):
        mode = validate_methods(["tripmode"], [mode])
        if mode == trip_mode.OUT:
            return p_string - p_annulus
        return p_annulus - p_string

    def is_open(self, p_string, p_annulus, mode):
        return self.differential(p_string, p_annulus, mode) > self.crack_pressure

    def margin(self, p_string, p_annulus, mode):
        """ Differential still available before the valve opens (kPa) """
        return self.crack_pressure - self.differential(p_string, p_annulus, mode)


# ============================================================================
#  Records
# ============================================================================

@dataclass(frozen=True)
class SimulationStep:
    """ Immutable record of the wellbore after one depth step.

        Pressures in kPa, densities in kg/m3, volumes in m3, depths in m.
        Field observations for reconciliation are kept apart in 'observed' and set with with_observed()
    """
    index: int
    bit_md: float
    bit_tvd: float
    control_md: float
    control_tvd: float
    target_pressure: float
    hydrostatic_pressure: float
    surface_pressure: float
    surface_pressure_raw: float
    surface_pressure_dynamic: float
    esd_control: float
    esd_bit: float
    ecd_control_dynamic: float
    swab_surge_pressure: float
    float_state: float_state
    float_open_fraction: float
    step_fill: float
    cumulative_fill: float
    expected_fill_closed: float
    expected_fill_open: float
    slug_contribution: float
    cumulative_slug_contribution: float
    pit_gain: float
    cumulative_pit_gain: float
    tank_delta: float
    cumulative_tank_delta: float
    backfill_remaining: float
    layers_string: tuple
    layers_annulus: tuple
    layers_pocket: tuple
    warnings: tuple = ()
    observed: Mapping = field(default_factory=dict, compare=False)

    def __post_init__(self):
        object.__setattr__(self, 'observed', MappingProxyType(dict(self.observed)))

    @property
    def float_label(self):
        pct = int(round(self.float_open_fraction * 100))
        if self.float_state == float_state.CLOSED:
            return "CLOSED 100%"
        return f"OPEN {pct}%"

    def with_observed(self, **values):
        """ Returns a copy carrying observed field values. Simulated fields are never changed """
        clash = [k for k in values if k in self.__dataclass_fields__]
        if clash:
            raise ValueError(f"Observed values may not overwrite simulated fields: {clash}")
        return replace(self, observed={**self.observed, **values})

    def to_record(self):
        """ Flat dict of the scalar fields, used for tabular output """
        return {
            'Step': self.index,
            'Bit_MD': self.bit_md,
            'Bit_TVD': self.bit_tvd,
            'SABP_kPa': self.surface_pressure,
            'SABP_Raw_kPa': self.surface_pressure_raw,
            'SABP_Dynamic_kPa': self.surface_pressure_dynamic,
            'ESD_Control': self.esd_control,
            'ESD_Bit': self.esd_bit,
            'ECD_Control_Dynamic': self.ecd_control_dynamic,
            'SwabSurge_kPa': self.swab_surge_pressure,
            'Float': self.float_label,
            'Step_Fill_m3': self.step_fill,
            'Cum_Fill_m3': self.cumulative_fill,
            'Exp_Closed_m3': self.expected_fill_closed,
            'Exp_Open_m3': self.expected_fill_open,
            'Slug_m3': self.slug_contribution,
            'Pit_Gain_m3': self.pit_gain,
            'Cum_Pit_Gain_m3': self.cumulative_pit_gain,
            'Tank_Delta_m3': self.tank_delta,
            'Cum_Tank_Delta_m3': self.cumulative_tank_delta,
            'Backfill_Remaining_m3': self.backfill_remaining,
        }


@dataclass(frozen=True)
class TripState:
    """ Engine state between sub-steps. Stacks are tuples of Parcel ordered top to bottom """
    bit_md: float
    string: tuple
    annulus: tuple
    pocket: tuple
    surface_pressure: float
    backfill_remaining: float


# ============================================================================
#  Stack pressures
# ============================================================================

def _string_layers(state, wellbore):
    return layout(state.string, wellbore, wellbore.string_area, state.bit_md, side.STRING, 0.0)

def _annulus_layers(state, wellbore):
    return layout(state.annulus, wellbore, wellbore.annulus_area, state.bit_md, side.ANNULUS, 0.0)

def _pocket_layers(state, wellbore, pocket_bottom):
    return layout(state.pocket, wellbore, wellbore.hole_area, state.bit_md, side.POCKET, pocket_bottom)

def _bit_pressures(state, wellbore):
    """ Returns (string side, annulus side) pressure at the bit (kPa) """
    bit_tvd = wellbore.tvd(state.bit_md)
    p_str = hydrostatic_pressure(_string_layers(state, wellbore), bit_tvd)
    p_ann = hydrostatic_pressure(_annulus_layers(state, wellbore), bit_tvd) + state.surface_pressure
    return p_str, p_ann

def _fit(stack, capacity, pad_density, spill_from_top=True):
    """ Pads or trims a stack to a capacity (m3) """
    stack = merge_adjacent(stack)
    vol = stack_volume(stack)
    if vol < capacity - MIN_VOLUME:
        return push_bottom(stack, Parcel(pad_density, capacity - vol))
    if vol > capacity + MIN_VOLUME:
        if spill_from_top:
            return take_top(stack, vol - capacity)[1]
        return take_bottom(stack, vol - capacity)[1]
    return stack

def initial_state(wellbore, settings, pocket_bottom):
    """ Builds the starting stacks: pipe and annulus full to the bit, open hole below it """
    bit = settings.start_md
    base = settings.base_mud
    string = settings.initial_string or (Parcel(base.density, wellbore.string_volume(0.0, bit), base.color),)
    annulus = settings.initial_annulus or (Parcel(base.density, wellbore.annulus_volume(0.0, bit), base.color),)
    pocket = settings.initial_pocket or (Parcel(base.density, wellbore.hole_volume(bit, pocket_bottom), base.color),)
    return TripState(
        bit_md=bit,
        string=_fit(string, wellbore.string_volume(0.0, bit), base.density),
        annulus=_fit(annulus, wellbore.annulus_volume(0.0, bit), base.density),
        pocket=_fit(pocket, wellbore.hole_volume(bit, pocket_bottom), base.density, spill_from_top=False),
        surface_pressure=0.0 if settings.hold_sabp_open else settings.initial_sabp,
        backfill_remaining=settings.fixed_backfill_volume,
    )


# ============================================================================
#  U-tube equalization
# ============================================================================

def _liquid_volume(stack):
    return sum(p.volume for p in stack if p.density > RHO_AIR + DENSITY_MERGE_TOL)

def drain_string(state, wellbore, volume):
    """ Moves volume (m3) from the bottom of the string to the bottom of the annulus.
        Air enters the string at surface and the annulus overflows at surface.
        Returns (new state, drained volume, spilled volume)
    """
    removed, string = take_bottom(state.string, min(volume, _liquid_volume(state.string)))
    drained = stack_volume(removed)
    if drained <= MIN_VOLUME:
        return state, 0.0, 0.0
    string = push_top(string, Parcel(RHO_AIR, drained))
    annulus = merge_adjacent(tuple(state.annulus) + tuple(reversed(removed)))
    spilled, annulus = spill_top(annulus, wellbore.annulus_volume(0.0, state.bit_md))
    return replace(state, string=string, annulus=annulus), drained, stack_volume(spilled)

def equalize(state, wellbore, crack_pressure):
    """ Drains the string into the annulus until the differential across the float falls to the
        crack pressure. Returns (new state, drained volume, spilled volume)
    """
    def residual(v):
        trial = drain_string(state, wellbore, v)[0]
        p_str, p_ann = _bit_pressures(trial, wellbore)
        return p_str - p_ann - crack_pressure

    hi = _liquid_volume(state.string)
    if hi <= MIN_VOLUME or residual(0.0) <= 0:
        return state, 0.0, 0.0
    v = root_solve(residual, 0.0, hi, xtol=1e-7)
    return drain_string(state, wellbore, v)


# ============================================================================
#  Sub-steps
# ============================================================================

def _backfill_parcels(settings, remaining, volume):
    """ Splits a backfill volume (m3) into parcels in pumping order following the backfill plan.
        Returns (parcels, backfill remaining)
    """
    if volume <= MIN_VOLUME:
        return (), remaining
    backfill = settings.backfill_mud
    base = settings.base_mud
    planned = settings.fixed_backfill_volume > MIN_VOLUME
    use = min(volume, max(remaining, 0.0)) if planned and settings.switch_to_base_after_fixed else volume
    parcels = []
    if use > MIN_VOLUME:
        parcels.append(Parcel(backfill.density, use, backfill.color))
    if volume - use > MIN_VOLUME:
        parcels.append(Parcel(base.density, volume - use, base.color))
    if planned:
        remaining -= use
    return tuple(parcels), remaining

def pull_step(state, wellbore, settings, dl, is_open):
    """ Pulls the pipe up by dl (m). Returns (new state, backfill volume, carried volume).

        Closed float: the hole volume below the new bit position comes from the bottom of the annulus,
        the string contents ride up with the pipe. Open float: the string bore drains into the hole.
        Backfill restores the annulus to full from surface. When the annulus holds less than the
        vacated hole volume, the first backfill pumped makes up the difference below the bit.
    """
    b0 = state.bit_md
    b1 = b0 - dl
    hole_slice = wellbore.hole_volume(b1, b0)
    string = state.string
    carried = 0.0
    if is_open:
        s_taken, string = take_bottom(string, wellbore.string_volume(b1, b0))
        a_taken, annulus = take_bottom(state.annulus, hole_slice - stack_volume(s_taken))
        taken = tuple(s_taken) + tuple(a_taken)
    else:
        taken, annulus = take_bottom(state.annulus, hole_slice)
        excess = stack_volume(string) - wellbore.string_volume(0.0, b1)
        if excess > MIN_VOLUME:
            out, string = take_top(string, excess)
            carried = stack_volume(out)

    short = max(0.0, hole_slice - stack_volume(taken))
    need = max(0.0, wellbore.annulus_volume(0.0, b1) - stack_volume(annulus)) + short
    pumped, remaining = _backfill_parcels(settings, state.backfill_remaining, need)
    below, above = take_top(pumped, short)

    mixed = blend(tuple(taken) + tuple(below), settings.base_mud.density)
    pocket = push_top(state.pocket, mixed) if mixed.volume > MIN_VOLUME else state.pocket
    for p in above:
        annulus = push_top(annulus, p)

    return replace(state, bit_md=b1, string=string, annulus=annulus, pocket=pocket,
                   backfill_remaining=remaining), need, carried

def run_step(state, wellbore, settings, dl, is_open, pocket_bottom):
    """ Runs the pipe down by dl (m). Returns (new state, pipe fill volume, returns volume).

        The hole slice below the bit is taken from the top of the pocket. Closed float: all of it is
        displaced into the annulus. Open float: the bore fills from below. The annulus overflows at
        surface and the pipe is filled from surface when allowed, otherwise air is left in the pipe.
    """
    b0 = state.bit_md
    b1 = b0 + dl
    hole_slice = wellbore.hole_volume(b0, b1)
    taken, pocket = take_top(state.pocket, hole_slice)
    short = hole_slice - stack_volume(taken)
    if short > MIN_VOLUME:
        taken = tuple(taken) + (Parcel(settings.base_mud.density, short, settings.base_mud.color),)
    mixed = blend(taken, settings.base_mud.density)

    string = state.string
    if is_open:
        bore = min(wellbore.string_volume(b0, b1), mixed.volume)
        string = push_bottom(string, Parcel(mixed.density, bore, mixed.color))
        annulus = push_bottom(state.annulus, Parcel(mixed.density, mixed.volume - bore, mixed.color))
    else:
        annulus = push_bottom(state.annulus, mixed)

    fill = 0.0
    deficit = wellbore.string_volume(0.0, b1) - stack_volume(string)
    if deficit > MIN_VOLUME:
        floated = settings.float_sub_md is not None and b1 > settings.float_sub_md
        if settings.fill_pipe and not floated:
            string = push_top(string, Parcel(settings.fill_mud.density, deficit, settings.fill_mud.color))
            fill = deficit
        else:
            string = push_top(string, Parcel(RHO_AIR, deficit))
    elif deficit < -MIN_VOLUME:
        string = take_top(string, -deficit)[1]

    returns, annulus = spill_top(annulus, wellbore.annulus_volume(0.0, b1))
    if pocket_bottom - b1 <= EPS:
        pocket = ()
    return replace(state, bit_md=b1, string=string, annulus=annulus, pocket=pocket), fill, stack_volume(returns)


# ============================================================================
#  Simulation
# ============================================================================

def _swab_surge(wellbore, settings, bit_md, is_open):
    """ Signed dynamic pressure at the bit (kPa): negative swab pulling out, positive surge running in """
    if settings.trip_speed <= 0:
        return 0.0
    res = surge_swab_at_depth(bit_md, wellbore, settings.trip_speed, mud=settings.base_mud,
                              clinging_override=settings.clinging_override,
                              pipeend=pipe_end.OPEN if is_open else pipe_end.CLOSED,
                              eccentricity=settings.eccentricity)
    if settings.mode == trip_mode.OUT:
        return res['Swab_kPa']
    return res['Surge_kPa']

def _window_warnings(settings, step_md, bit_tvd, control_tvd, p_bit, p_control):
    out = []
    if settings.window is None:
        return out
    for label, tvd, p in (("bit", bit_tvd, p_bit), ("control depth", control_tvd, p_control)):
        if tvd <= 0:
            continue
        within, pore, frac = settings.window.check(tvd, p)
        if not within:
            if pore is not None and p < pore + settings.window.pore_margin:
                out.append(f"Pressure at {label} ({p:.0f} kPa) below pore limit ({pore:.0f} kPa) with bit at {step_md:.1f} m")
            else:
                out.append(f"Pressure at {label} ({p:.0f} kPa) above fracture limit ({frac:.0f} kPa) with bit at {step_md:.1f} m")
    return out

def _record(index, state, wellbore, settings, pocket_bottom, acc, totals):
    """ Solves the pressure balance for the current state and returns (SimulationStep, new surface pressure) """
    bit_tvd = wellbore.tvd(state.bit_md)
    control_tvd = wellbore.tvd(settings.control_md)
    str_layers = _string_layers(state, wellbore)
    ann_layers = _annulus_layers(state, wellbore)
    pocket_layers = _pocket_layers(state, wellbore, pocket_bottom)
    swab = acc['swab'] / acc['count'] if acc['count'] > 0 else 0.0
    bal = pressure_balance(ann_layers, pocket_layers, bit_tvd, control_tvd, settings.target_esd,
                           settings.base_mud.density, correction=-swab, allow_negative=settings.allow_negative,
                           hold_open=settings.hold_sabp_open)
    sabp = bal['surface_pressure']
    ecd_dyn = density_from_pressure(bal['hydrostatic'] + sabp + swab, control_tvd, settings.base_mud.density)

    totals['fill'] += acc['fill']
    totals['slug'] += acc['slug']
    totals['pit'] += acc['pit']
    tank = acc['pit'] - acc['fill']
    totals['tank'] += tank

    fraction = acc['open'] / acc['count'] if acc['count'] > 0 else (1.0 if acc['open'] else 0.0)
    warnings = _window_warnings(settings, state.bit_md, bit_tvd, control_tvd,
                                bal['annulus_pressure_bit'], bal['hydrostatic'] + sabp)
    warnings.extend(acc['warnings'])

    step = SimulationStep(
        index=index,
        bit_md=state.bit_md,
        bit_tvd=bit_tvd,
        control_md=settings.control_md,
        control_tvd=control_tvd,
        target_pressure=bal['target_pressure'],
        hydrostatic_pressure=bal['hydrostatic'],
        surface_pressure=sabp,
        surface_pressure_raw=bal['surface_pressure_raw'],
        surface_pressure_dynamic=bal['surface_pressure_dynamic'],
        esd_control=bal['esd_control'],
        esd_bit=bal['esd_bit'],
        ecd_control_dynamic=ecd_dyn,
        swab_surge_pressure=swab,
        float_state=float_state.OPEN if fraction > 0 else float_state.CLOSED,
        float_open_fraction=fraction,
        step_fill=acc['fill'],
        cumulative_fill=totals['fill'],
        expected_fill_closed=acc['exp_closed'],
        expected_fill_open=acc['exp_open'],
        slug_contribution=acc['slug'],
        cumulative_slug_contribution=totals['slug'],
        pit_gain=acc['pit'],
        cumulative_pit_gain=totals['pit'],
        tank_delta=tank,
        cumulative_tank_delta=totals['tank'],
        backfill_remaining=max(0.0, state.backfill_remaining),
        layers_string=str_layers,
        layers_annulus=ann_layers,
        layers_pocket=pocket_layers,
        warnings=tuple(warnings),
    )
    return step, sabp

def _new_accumulator():
    return {'fill': 0.0, 'slug': 0.0, 'pit': 0.0, 'exp_closed': 0.0, 'exp_open': 0.0,
            'swab': 0.0, 'count': 0, 'open': 0, 'warnings': []}

def simulate_trip(wellbore, settings, cancel=None, progress=None, silent=True):
    """ Depth marching trip simulation.

        wellbore: Wellbore object
        settings: TripSettings object
        cancel: Optional callable returning True to stop. Checked between recorded steps
        progress: Optional callable receiving each SimulationStep as it is produced
        silent: If False, prints progress and warnings

        Returns dict with 'steps' (list of SimulationStep, strictly increasing index),
        'warnings' (list of str) and 'cancelled' (bool).
        Step 0 is the state before the pipe moves, after any initial U-tube equalization.
    """
    mode = settings.mode
    valve = FloatValve(settings.crack_pressure)
    pocket_bottom = max(wellbore.total_depth, settings.start_md, settings.end_md)
    state = initial_state(wellbore, settings, pocket_bottom)
    totals = {'fill': 0.0, 'slug': 0.0, 'pit': 0.0, 'tank': 0.0}
    warnings = []
    acc = _new_accumulator()

    if mode == trip_mode.OUT:
        observed = settings.observed_initial_pit_gain
        if observed is not None and observed > 0:
            state, drained, spilled = drain_string(state, wellbore, observed)
            if drained < observed - MIN_VOLUME:
                acc['warnings'].append(f"Observed pit gain {observed:.3f} m3 exceeds drainable string volume {drained:.3f} m3")
        else:
            state, drained, spilled = equalize(state, wellbore, settings.crack_pressure)
        acc['slug'] += drained
        acc['pit'] += spilled
        if drained > MIN_VOLUME:
            acc['open'] = 1
            if not silent:
                print(f"Initial U-tube: {drained * 1000:.0f} L drained from string")

    step, sabp = _record(0, state, wellbore, settings, pocket_bottom, acc, totals)
    state = replace(state, surface_pressure=sabp)
    steps = [step]
    warnings.extend(step.warnings)
    if progress is not None:
        progress(step)

    cancelled = False
    for target in settings.record_depths()[1:]:
        if cancel is not None and cancel():
            cancelled = True
            msg = f"Simulation cancelled with bit at {state.bit_md:.1f} m; {len(steps)} steps kept"
            warnings.append(msg)
            if not silent:
                print(msg)
            break

        acc = _new_accumulator()
        while abs(state.bit_md - target) > EPS:
            p_str, p_ann = _bit_pressures(state, wellbore)
            is_open = valve.is_open(p_str, p_ann, mode)
            if mode == trip_mode.OUT and is_open:
                state, drained, spilled = equalize(state, wellbore, settings.crack_pressure)
                acc['slug'] += drained
                acc['pit'] += spilled

            if settings.adaptive and not is_open and valve.margin(p_str, p_ann, mode) > COARSE_MARGIN:
                sub = COARSE_STEP
            else:
                sub = FINE_STEP
            dl = min(sub, abs(target - state.bit_md))
            b0, b1 = sorted((state.bit_md, state.bit_md - dl if mode == trip_mode.OUT else state.bit_md + dl))
            acc['exp_closed'] += wellbore.od_volume(b0, b1)
            acc['exp_open'] += wellbore.steel_volume(b0, b1)

            if mode == trip_mode.OUT:
                state, backfill, _ = pull_step(state, wellbore, settings, dl, is_open)
                acc['fill'] += backfill
            else:
                state, fill, returns = run_step(state, wellbore, settings, dl, is_open, pocket_bottom)
                acc['fill'] += fill
                acc['pit'] += returns
            # land exactly on the recorded depth
            if abs(state.bit_md - target) < 1e-7:
                state = replace(state, bit_md=target)

            acc['count'] += 1
            acc['open'] += 1 if is_open else 0
            acc['swab'] += _swab_surge(wellbore, settings, state.bit_md, is_open)

        step, sabp = _record(len(steps), state, wellbore, settings, pocket_bottom, acc, totals)
        state = replace(state, surface_pressure=sabp)
        steps.append(step)
        warnings.extend(step.warnings)
        if progress is not None:
            progress(step)
        if not silent:
            print(f"Bit at {step.bit_md:.1f} m: SABP {step.surface_pressure:.0f} kPa, "
                  f"ESD {step.esd_control:.1f} kg/m3, float {step.float_label}")

    if not silent:
        for w in warnings:
            print("Warning: " + w)
    return {'steps': steps, 'warnings': warnings, 'cancelled': cancelled}
