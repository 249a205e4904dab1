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

from concurrent.futures import ThreadPoolExecutor

import pandas as pd
from tabulate import tabulate

from pywellcontrol.classes import trip_mode
from pywellcontrol.snapshot import FrozenInputs
from pywellcontrol.trip import simulate_trip


class SimulationRun:
    """ Ordered simulation steps with summary aggregates and the frozen inputs they were computed from.

        steps: List of SimulationStep in increasing index order
        settings: TripSettings used for the run
        snapshot: FrozenInputs captured before the run
        warnings: List of warning strings collected over the run
        cancelled: True when the run was stopped before reaching the end depth
    """
    def __init__(self, steps, settings, snapshot, warnings=None, cancelled=False):
        self.steps = list(steps)
        self.settings = settings
        self.snapshot = snapshot
        self.warnings = list(warnings or [])
        self.cancelled = cancelled

    def __len__(self):
        return len(self.steps)

    def __repr__(self):
        return f"SimulationRun({len(self.steps)} steps, hash={self.snapshot.input_hash}, cancelled={self.cancelled})"

    @property
    def input_hash(self):
        return self.snapshot.input_hash

    @property
    def max_esd(self):
        return max((s.esd_control for s in self.steps), default=0.0)

    @property
    def min_esd(self):
        return min((s.esd_control for s in self.steps), default=0.0)

    @property
    def max_surface_pressure(self):
        return max((s.surface_pressure for s in self.steps), default=0.0)

    @property
    def total_backfill(self):
        """ Cumulative backfill pulling out, or cumulative pipe fill running in (m3) """
        return self.steps[-1].cumulative_fill if self.steps else 0.0

    @property
    def total_pit_gain(self):
        return self.steps[-1].cumulative_pit_gain if self.steps else 0.0

    @property
    def final_tank_delta(self):
        return self.steps[-1].cumulative_tank_delta if self.steps else 0.0

    def is_stale(self, wellbore, backfill_mud=None, active_mud=None):
        return self.snapshot.is_stale(wellbore, backfill_mud, active_mud)

    def summary(self):
        return {
            'Steps': len(self.steps),
            'Max_ESD': self.max_esd,
            'Min_ESD': self.min_esd,
            'Max_SABP_kPa': self.max_surface_pressure,
            'Total_Backfill_m3': self.total_backfill,
            'Total_Pit_Gain_m3': self.total_pit_gain,
            'Final_Tank_Delta_m3': self.final_tank_delta,
            'Input_Hash': self.input_hash,
            'Cancelled': self.cancelled,
        }

    def to_dataframe(self):
        """ One row per step """
        return pd.DataFrame([s.to_record() for s in self.steps])

    def report(self, silent=True):
        """ Text report of the run. Printed unless silent """
        mode = 'Trip out' if self.settings.mode == trip_mode.OUT else 'Trip in'
        label = 'SABP' if self.settings.mode == trip_mode.OUT else 'Choke'
        headers = ['Step', 'Bit MD', 'Bit TVD', label + ' (kPa)', 'ESD Ctrl', 'ESD Bit', 'Float',
                   'Fill (m3)', 'Pit Gain (m3)']
        table = [[s.index, s.bit_md, s.bit_tvd, s.surface_pressure, s.esd_control, s.esd_bit, s.float_label,
                  s.cumulative_fill, s.cumulative_pit_gain] for s in self.steps]
        lines = [f"{mode} {self.settings.start_md:.1f} m to {self.settings.end_md:.1f} m, "
                 f"control MD {self.settings.control_md:.1f} m, inputs {self.input_hash}",
                 tabulate(table, headers=headers, floatfmt='.2f'),
                 tabulate(list(self.summary().items()), headers=['Summary', 'Value'])]
        if self.warnings:
            lines.append('Warnings:')
            lines.extend('  ' + w for w in self.warnings)
        text = '\n\n'.join(lines)
        if not silent:
            print(text)
        return text


def run_simulation(wellbore, settings, cancel=None, progress=None, silent=True):
    """ Captures the inputs, runs the trip simulation and returns a SimulationRun

        wellbore: Wellbore object
        settings: TripSettings object
        cancel: Optional callable returning True to stop between steps
        progress: Optional callable receiving each SimulationStep
        silent: If False, prints progress and warnings
    """
    snapshot = FrozenInputs.capture(wellbore, settings.backfill_mud, settings.base_mud)
    res = simulate_trip(wellbore, settings, cancel=cancel, progress=progress, silent=silent)
    return SimulationRun(res['steps'], settings, snapshot, res['warnings'], res['cancelled'])

def run_batch(wellbore, settings_list, max_workers=None):
    """ Runs independent trip plans concurrently against the same read-only wellbore.
        Returns a list of SimulationRun in the order of settings_list
    """
    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        futures = [pool.submit(run_simulation, wellbore, s) for s in settings_list]
        return [f.result() for f in futures]

def compare_runs(runs, names=None):
    """ Returns a DataFrame with one summary row per run """
    names = names or [f"Plan {i + 1}" for i in range(len(runs))]
    rows = []
    for name, run in zip(names, runs):
        row = {'Plan': name}
        row.update(run.summary())
        rows.append(row)
    return pd.DataFrame(rows)
