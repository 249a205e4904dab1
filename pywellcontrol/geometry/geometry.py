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

from pywellcontrol.classes import lookup_status
from pywellcontrol.constants import DEFAULT_HOLE_ID, MIN_VOLUME
from pywellcontrol.shared_fns import convert_to_numpy, process_output

# ============================================================================
#  Sections
# ============================================================================

def _circle_area(d):
    return math.pi / 4.0 * d * d


class DrillStringSection:
    """ Drill string section, consumed read-only by the calculators.

        top: Top measured depth (m)
        length: Section length (m)
        od: Outer diameter (m)
        id: Inner diameter (m). Defaults to 0 (solid)
        name: Display name
    """
    def __init__(self, top, length, od, id=0.0, name=''):
        if length < 0:
            raise ValueError(f"Drill string section length must be non-negative: {length}")
        if od <= 0:
            raise ValueError(f"Drill string section OD must be positive: {od}")
        if id < 0 or id >= od:
            raise ValueError(f"Drill string section ID must be in [0, OD): id={id}, od={od}")
        self.top = float(top)
        self.length = float(length)
        self.od = float(od)
        self.id = float(id)
        self.name = name

    @property
    def bottom(self):
        return self.top + self.length

    @property
    def capacity(self):
        """Bore area (m3/m)."""
        return _circle_area(self.id)

    @property
    def od_area(self):
        """Closed-end displacement area (m2)."""
        return _circle_area(self.od)

    @property
    def steel_area(self):
        """Open-end (wall only) displacement area (m2)."""
        return _circle_area(self.od) - _circle_area(self.id)

    def covers(self, md):
        return self.top <= md <= self.bottom

    def __repr__(self):
        return f"DrillStringSection(top={self.top}, length={self.length}, od={self.od}, id={self.id}, name={self.name!r})"


class AnnulusSection:
    """ Annulus (open hole or casing) section.

        top: Top measured depth (m)
        length: Section length (m)
        id: Hole or casing inner diameter (m)
        od: Pipe OD recorded against this section (m). Defaults to 0
        is_cased: True for cased hole
        name: Display name
    """
    def __init__(self, top, length, id, od=0.0, is_cased=False, name=''):
        if length < 0:
            raise ValueError(f"Annulus section length must be non-negative: {length}")
        if id <= 0:
            raise ValueError(f"Annulus section ID must be positive: {id}")
        if od < 0:
            raise ValueError(f"Annulus section OD must be non-negative: {od}")
        self.top = float(top)
        self.length = float(length)
        self.id = float(id)
        self.od = float(od)
        self.is_cased = is_cased
        self.name = name

    @property
    def bottom(self):
        return self.top + self.length

    @property
    def hole_area(self):
        return _circle_area(self.id)

    @property
    def flow_area(self):
        """Annular flow area against the recorded pipe OD (m2)."""
        return max(_circle_area(self.id) - _circle_area(self.od), 0.0)

    @property
    def volume(self):
        return self.flow_area * self.length

    def covers(self, md):
        return self.top <= md <= self.bottom

    def __repr__(self):
        return f"AnnulusSection(top={self.top}, length={self.length}, id={self.id}, od={self.od}, name={self.name!r})"


class SectionLookup:
    """ Tagged result of a depth lookup: status is lookup_status.FOUND with the section,
        or lookup_status.NOT_COVERED with section None
    """
    def __init__(self, status, section=None):
        self.status = status
        self.section = section

    @property
    def found(self):
        return self.status is lookup_status.FOUND

    def __repr__(self):
        return f"SectionLookup({self.status.name}, {self.section!r})"


def find_section(sections, md):
    """ Returns a SectionLookup for the first section covering md """
    for s in sections:
        if s.covers(md):
            return SectionLookup(lookup_status.FOUND, s)
    return SectionLookup(lookup_status.NOT_COVERED)


def _nearest_section(sections, md):
    lookup = find_section(sections, md)
    if lookup.found:
        return lookup.section
    if not sections:
        return None
    return min(sections, key=lambda s: min(abs(md - s.top), abs(md - s.bottom)))


# ============================================================================
#  Survey and MD to TVD sampling
# ============================================================================

class SurveyStation:
    """ Directional survey or plan station.

        md: Measured depth (m)
        inc: Inclination (degrees). Defaults to 0
        azi: Azimuth (degrees). Defaults to 0
        tvd: True vertical depth (m). Defaults to md when not given
    """
    def __init__(self, md, inc=0.0, azi=0.0, tvd=None):
        self.md = float(md)
        self.inc = float(inc)
        self.azi = float(azi)
        self.tvd = float(md) if tvd is None else float(tvd)

    def __repr__(self):
        return f"SurveyStation(md={self.md}, inc={self.inc}, tvd={self.tvd})"


class TvdSampler:
    """ Linear MD to TVD interpolation between survey stations.
        Outside the surveyed range the first/last station TVD is returned.
        With no stations, TVD is taken equal to MD.
    """
    def __init__(self, stations=None):
        stations = sorted(stations or [], key=lambda s: s.md)
        mds, tvds = [], []
        for s in stations:
            if mds and abs(s.md - mds[-1]) < 1e-9:
                continue
            mds.append(s.md)
            tvds.append(s.tvd)
        self.stations = stations
        self._md = np.array(mds, dtype=float)
        self._tvd = np.array(tvds, dtype=float)

    @property
    def has_stations(self):
        return self._md.size > 0

    def tvd(self, md):
        """ Returns TVD (m) for a scalar or list/array of MD (m) """
        is_list = not np.isscalar(md)
        mds = convert_to_numpy(md).astype(float)
        if not self.has_stations:
            return process_output(mds, is_list)
        return process_output(np.interp(mds, self._md, self._tvd), is_list)

    def __call__(self, md):
        return self.tvd(md)


# ============================================================================
#  Wellbore
# ============================================================================

class Wellbore:
    """ Read-only wellbore geometry: drill string and annulus sections with an MD to TVD sampler.

        drill_string: List of DrillStringSection
        annulus: List of AnnulusSection
        survey: List of SurveyStation. Defaults to a vertical well (TVD = MD)

        Depth lookups that miss every section fall back to the nearest section, so a trip
        plan may query beyond the currently defined geometry.
    """
    def __init__(self, drill_string, annulus, survey=None):
        self.drill_string = sorted(drill_string, key=lambda s: s.top)
        self.annulus = sorted(annulus, key=lambda s: s.top)
        self.sampler = TvdSampler(survey)

    @property
    def survey(self):
        return self.sampler.stations

    @property
    def total_depth(self):
        bottoms = [s.bottom for s in self.annulus] + [s.bottom for s in self.drill_string]
        return max(bottoms) if bottoms else 0.0

    def tvd(self, md):
        return self.sampler.tvd(md)

    def drill_string_at(self, md):
        return find_section(self.drill_string, md)

    def annulus_at(self, md):
        return find_section(self.annulus, md)

    # Cross sectional areas (m2) at a measured depth
    def hole_area(self, md):
        s = _nearest_section(self.annulus, md)
        return _circle_area(s.id if s is not None else DEFAULT_HOLE_ID)

    def string_area(self, md):
        s = _nearest_section(self.drill_string, md)
        return s.capacity if s is not None else 0.0

    def od_area(self, md):
        s = _nearest_section(self.drill_string, md)
        return s.od_area if s is not None else 0.0

    def steel_area(self, md):
        s = _nearest_section(self.drill_string, md)
        return s.steel_area if s is not None else 0.0

    def annulus_area(self, md):
        return max(self.hole_area(md) - self.od_area(md), 0.0)

    def _breakpoints(self, top, bottom):
        pts = {top, bottom}
        for s in self.annulus + self.drill_string:
            for d in (s.top, s.bottom):
                if top < d < bottom:
                    pts.add(d)
        return sorted(pts)

    def _integrate(self, area_fn, top, bottom):
        if bottom <= top:
            return 0.0
        pts = self._breakpoints(top, bottom)
        return sum(area_fn(0.5 * (a + b)) * (b - a) for a, b in zip(pts[:-1], pts[1:]))

    # Volumes (m3) between two measured depths
    def string_volume(self, top, bottom):
        return self._integrate(self.string_area, top, bottom)

    def annulus_volume(self, top, bottom):
        return self._integrate(self.annulus_area, top, bottom)

    def hole_volume(self, top, bottom):
        return self._integrate(self.hole_area, top, bottom)

    def od_volume(self, top, bottom):
        return self._integrate(self.od_area, top, bottom)

    def steel_volume(self, top, bottom):
        return self._integrate(self.steel_area, top, bottom)

    def walk(self, area_fn, start, volume, limit):
        """ Returns the MD reached when a volume (m3) is laid out from start towards limit,
            using the cross sectional area function area_fn. Stops at limit if the volume
            exceeds the capacity in between.
        """
        if volume <= MIN_VOLUME or start == limit:
            return start
        upward = limit < start
        pts = self._breakpoints(min(start, limit), max(start, limit))
        if upward:
            pts = pts[::-1]
        md = start
        remaining = volume
        for nxt in pts[1:]:
            a = area_fn(0.5 * (md + nxt))
            seg_vol = a * abs(nxt - md)
            if a > 0 and seg_vol >= remaining:
                return md - remaining / a if upward else md + remaining / a
            remaining -= seg_vol
            md = nxt
        return limit
