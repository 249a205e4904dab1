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


# Constants
G = 9.80665  # Standard gravity (m/s2)
KPA_PER_M_PER_KGM3 = G / 1000  # Hydrostatic gradient of 1 kg/m3 fluid (kPa/m)
RHO_AIR = 1.2  # Density of air in an empty string (kg/m3)

# Fann 35 viscometer
FANN_DIAL_TO_PA = 0.478802  # Dial reading to shear stress (Pa)
SHEAR_RATE_600 = 1022.0  # 600 rpm shear rate (1/s)
SHEAR_RATE_300 = 511.0  # 300 rpm shear rate (1/s)

# Annular friction
RE_LAMINAR = 2100.0  # Base critical Reynolds number
HEDSTROM_COEFF = 0.05
HEDSTROM_EXP = 0.3
FANNING_COEFF = 0.079
FANNING_EXP = 0.25
MIN_SHEAR_RATE = 0.01  # 1/s
CLINGING_BASE = 0.45  # Burkhardt clinging constant base term

# Surge / swab defaults
DEFAULT_DENSITY = 1100.0  # kg/m3
DEFAULT_PV = 0.02  # Pa.s
DEFAULT_YP = 5.0  # Pa

# Trip engine
DEFAULT_CRACK_PRESSURE = 2100.0  # kPa
FINE_STEP = 1.0  # m, sub-step near float transitions
COARSE_STEP = 5.0  # m, sub-step when float solidly closed
COARSE_MARGIN = 50.0  # kPa of closing margin needed for a coarse sub-step
DENSITY_MERGE_TOL = 1e-6  # kg/m3
MIN_LENGTH = 1e-9  # m
MIN_VOLUME = 1e-12  # m3
EPS = 1e-9

# Kill mud optimizer
MIN_KILL_DENSITY = 800.0  # kg/m3
LOW_KILL_DENSITY = 1000.0  # kg/m3, below this a warning is raised
MAX_KILL_DENSITY = 2500.0  # kg/m3
MIN_KILL_HEIGHT = 0.1  # m
HEEL_INC = 90.0  # deg
HIGH_ANGLE_INC = 45.0  # deg
HEEL_FALLBACK_FRACTION = 0.7
MIN_ANNULUS_CAPACITY = 0.001  # m3/m
DEFAULT_HOLE_ID = 0.311  # 12-1/4" hole (m)
DEFAULT_PIPE_OD = 0.127  # 5" drill pipe (m)
DEFAULT_PIPE_ID = 0.1086  # 5" drill pipe bore (m)

# Frozen input snapshot
HASH_LENGTH = 16  # hex characters kept from the SHA-256 digest
SNAPSHOT_VERSION = 1
DIAMETER_TOL = 0.0001  # m
DEPTH_TOL = 0.1  # m
DENSITY_TOL = 1.0  # kg/m3
