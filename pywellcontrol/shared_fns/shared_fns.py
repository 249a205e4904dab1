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
import numpy as np
from scipy.optimize import brentq
from typing import Union

from pywellcontrol.constants import KPA_PER_M_PER_KGM3

def pressure_from_head(density, tvd):
    """ Hydrostatic pressure (kPa) of a fluid column
        density: Fluid density (kg/m3)
        tvd: Vertical height of the column (m)
    """
    return density * KPA_PER_M_PER_KGM3 * tvd

def density_from_pressure(pressure, tvd, base_density=0.0):
    """ Equivalent density (kg/m3) that produces a pressure (kPa) over a vertical height (m).
        Returns base_density when the height is zero or negative
    """
    if tvd <= 0:
        return base_density
    return pressure / (KPA_PER_M_PER_KGM3 * tvd)

def root_solve(f, xmin, xmax, xtol=1e-9):
    """ Returns the root of f between xmin and xmax.
        If f does not change sign over the bracket, the end with the smallest |f| is returned
    """
    f_lo = f(xmin)
    f_hi = f(xmax)
    if f_lo == 0:
        return xmin
    if f_hi == 0:
        return xmax
    if f_lo * f_hi > 0:
        return xmin if abs(f_lo) < abs(f_hi) else xmax
    return brentq(f, xmin, xmax, xtol=xtol)

def convert_to_numpy(input_data):
    # Convert input data to a numpy array ensuring it is always sizeable
    if isinstance(input_data, np.ndarray):
        return input_data
    else:
        return np.atleast_1d(input_data)

def process_output(values, is_list):
    # Return a scalar for scalar input, otherwise an array
    if is_list:
        return np.asarray(values, dtype=float)
    return float(np.asarray(values).flat[0])

def is_finite_number(x: Union[float, int, None]) -> bool:
    if x is None or isinstance(x, bool):
        return False
    try:
        return math.isfinite(x)
    except TypeError:
        return False

def march_depths(start, end, step):
    """ Returns the list of depths from start to end (inclusive) in increments of step.
        The direction follows the sign of end - start and the last increment is clipped to land on end.
        Raises ValueError for a zero, negative or non-finite step
    """
    if not is_finite_number(step) or step <= 0:
        raise ValueError(f"Depth step must be a positive finite number: {step}")
    if not (is_finite_number(start) and is_finite_number(end)):
        raise ValueError(f"Start and end depths must be finite: {start}, {end}")
    direction = 1.0 if end >= start else -1.0
    depths = [float(start)]
    n = 1
    while True:
        d = start + direction * n * step
        if direction * (d - end) >= -1e-9:
            break
        depths.append(d)
        n += 1
    if abs(depths[-1] - end) > 1e-9:
        depths.append(float(end))
    return depths
