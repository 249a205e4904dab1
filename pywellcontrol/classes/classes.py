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

from enum import Enum

class pipe_end(Enum):  # Pipe end condition for displacement
    CLOSED = 0  # Float or bit closed, full OD displaces fluid
    OPEN = 1  # Pipe wall only (OD2 - ID2)

class trip_mode(Enum):  # Direction of pipe movement
    OUT = 0  # Pulling out of hole, bit MD decreases
    IN = 1  # Running in hole, bit MD increases

class flow_regime(Enum):  # Annular flow regime
    LAMINAR = 0
    TURBULENT = 1
    NONE = 2  # No flow, or no pipe covering the bit

class side(Enum):  # Which stack a fluid segment belongs to
    STRING = 0
    ANNULUS = 1
    POCKET = 2

class float_state(Enum):  # Float valve state over a recorded step
    CLOSED = 0
    OPEN = 1

class lookup_status(Enum):  # Result tag of a geometry lookup
    FOUND = 0
    NOT_COVERED = 1

class_dic = {
    "pipeend": pipe_end,
    "tripmode": trip_mode,
    "regime": flow_regime,
    "side": side,
    "floatstate": float_state,
    "lookup": lookup_status,
}
