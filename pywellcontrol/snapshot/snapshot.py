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

import hashlib
import json
import struct
import zlib
from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from typing import Optional, Tuple

from pywellcontrol.constants import HASH_LENGTH, SNAPSHOT_VERSION, DIAMETER_TOL, DEPTH_TOL, DENSITY_TOL
from pywellcontrol.geometry import DrillStringSection, AnnulusSection, SurveyStation, TvdSampler, Wellbore
from pywellcontrol.rheology import Mud, power_law_fit


@dataclass(frozen=True)
class FrozenDrillString:
    name: str
    top: float
    length: float
    od: float
    id: float

    @property
    def bottom(self):
        return self.top + self.length

    @classmethod
    def from_section(cls, s):
        return cls(s.name, s.top, s.length, s.od, s.id)

    def to_section(self):
        return DrillStringSection(self.top, self.length, self.od, self.id, name=self.name)


@dataclass(frozen=True)
class FrozenAnnulus:
    name: str
    top: float
    length: float
    id: float
    od: float
    is_cased: bool = False

    @property
    def bottom(self):
        return self.top + self.length

    @property
    def flow_area(self):
        return AnnulusSection(self.top, self.length, self.id, self.od).flow_area

    @property
    def volume(self):
        return self.flow_area * self.length

    @classmethod
    def from_section(cls, s):
        return cls(s.name, s.top, s.length, s.id, s.od, s.is_cased)

    def to_section(self):
        return AnnulusSection(self.top, self.length, self.id, self.od, is_cased=self.is_cased, name=self.name)


@dataclass(frozen=True)
class FrozenMud:
    name: str
    density: float
    dial600: Optional[float] = None
    dial300: Optional[float] = None
    color: Optional[tuple] = None

    @classmethod
    def from_mud(cls, m):
        color = tuple(m.color) if m.color is not None else None
        return cls(m.name, m.density, m.dial600, m.dial300, color)

    def to_mud(self):
        return Mud(self.density, dial600=self.dial600, dial300=self.dial300, name=self.name, color=self.color)

    def power_law(self):
        if self.dial600 is None or self.dial300 is None:
            return None
        return power_law_fit(self.dial600, self.dial300)


@dataclass(frozen=True)
class FrozenSurvey:
    md: float
    tvd: float

    @classmethod
    def from_station(cls, s):
        return cls(s.md, s.tvd if s.tvd is not None else s.md)


def _pack(*values):
    return b''.join(struct.pack('<d', float(v)) for v in values)

def _mud_changes(label, old, new):
    if old is not None and new is not None:
        if abs(old.density - new.density) > DENSITY_TOL:
            return [f"{label} mud density changed ({int(old.density)} → {int(new.density)} kg/m³)"]
        return []
    if (old is None) != (new is None):
        return [f"{label} mud configuration changed"]
    return []


@dataclass(frozen=True)
class FrozenInputs:
    """ Immutable copy of everything a simulation reads, with a content hash over the values
        that change its result. Two snapshots compare equal exactly when their hashes match.

        captured_at is informational and excluded from the hash. Floats are hashed as IEEE-754
        little-endian doubles, so any change in a hashed value changes the hash.
    """
    drill_string: Tuple[FrozenDrillString, ...] = ()
    annulus: Tuple[FrozenAnnulus, ...] = ()
    backfill_mud: Optional[FrozenMud] = None
    active_mud: Optional[FrozenMud] = None
    surveys: Tuple[FrozenSurvey, ...] = ()
    captured_at: str = field(default='', compare=False)
    version: int = SNAPSHOT_VERSION

    @classmethod
    def capture(cls, wellbore, backfill_mud=None, active_mud=None, captured_at=None):
        """ Snapshot of a Wellbore and the muds a run uses """
        if captured_at is None:
            captured_at = datetime.now(timezone.utc).isoformat()
        return cls(
            drill_string=tuple(FrozenDrillString.from_section(s) for s in sorted(wellbore.drill_string, key=lambda s: s.top)),
            annulus=tuple(FrozenAnnulus.from_section(s) for s in sorted(wellbore.annulus, key=lambda s: s.top)),
            backfill_mud=FrozenMud.from_mud(backfill_mud) if backfill_mud is not None else None,
            active_mud=FrozenMud.from_mud(active_mud) if active_mud is not None else None,
            surveys=tuple(FrozenSurvey.from_station(s) for s in sorted(wellbore.survey, key=lambda s: s.md)),
            captured_at=captured_at,
        )

    @property
    def input_hash(self):
        h = hashlib.sha256()
        for ds in self.drill_string:
            h.update(_pack(ds.top, ds.length, ds.od, ds.id))
        for ann in self.annulus:
            h.update(_pack(ann.top, ann.length, ann.id, ann.od))
        if self.backfill_mud is not None:
            h.update(_pack(self.backfill_mud.density))
            if self.backfill_mud.dial600 is not None:
                h.update(_pack(self.backfill_mud.dial600))
            if self.backfill_mud.dial300 is not None:
                h.update(_pack(self.backfill_mud.dial300))
        for s in self.surveys:
            h.update(_pack(s.md, s.tvd))
        return h.hexdigest()[:HASH_LENGTH]

    def __eq__(self, other):
        if not isinstance(other, FrozenInputs):
            return NotImplemented
        return self.input_hash == other.input_hash

    def __hash__(self):
        return hash(self.input_hash)

    # Derived quantities
    @property
    def total_annulus_volume(self):
        return sum(a.volume for a in self.annulus)

    @property
    def max_drill_string_depth(self):
        return max((d.bottom for d in self.drill_string), default=0.0)

    @property
    def max_annulus_depth(self):
        return max((a.bottom for a in self.annulus), default=0.0)

    def make_tvd_sampler(self):
        return TvdSampler([SurveyStation(s.md, tvd=s.tvd) for s in self.surveys])

    def make_wellbore(self):
        """ Rebuilds a Wellbore from the frozen values """
        return Wellbore([d.to_section() for d in self.drill_string],
                        [a.to_section() for a in self.annulus],
                        [SurveyStation(s.md, tvd=s.tvd) for s in self.surveys])

    # Staleness
    def is_stale(self, wellbore, backfill_mud=None, active_mud=None):
        """ True when the current inputs hash differently from this snapshot, or the active mud
            density has moved. The active mud is outside the hash to keep stored hashes valid
        """
        current = FrozenInputs.capture(wellbore, backfill_mud, active_mud)
        if self.input_hash != current.input_hash:
            return True
        return bool(_mud_changes("Active", self.active_mud, current.active_mud))

    def changes(self, wellbore, backfill_mud=None, active_mud=None):
        """ Human readable list of differences between this snapshot and the current inputs """
        current = FrozenInputs.capture(wellbore, backfill_mud, active_mud)
        out = []
        if len(current.drill_string) != len(self.drill_string):
            out.append(f"Drill string sections changed ({len(self.drill_string)} → {len(current.drill_string)})")
        else:
            for i, (a, b) in enumerate(zip(self.drill_string, current.drill_string)):
                if abs(a.od - b.od) > DIAMETER_TOL or abs(a.id - b.id) > DIAMETER_TOL:
                    out.append(f"Drill string section {i + 1} geometry changed")
                if abs(a.top - b.top) > DEPTH_TOL or abs(a.length - b.length) > DEPTH_TOL:
                    out.append(f"Drill string section {i + 1} depths changed")

        if len(current.annulus) != len(self.annulus):
            out.append(f"Annulus sections changed ({len(self.annulus)} → {len(current.annulus)})")
        else:
            for i, (a, b) in enumerate(zip(self.annulus, current.annulus)):
                if abs(a.id - b.id) > DIAMETER_TOL or abs(a.od - b.od) > DIAMETER_TOL:
                    out.append(f"Annulus section {i + 1} geometry changed")

        out.extend(_mud_changes("Backfill", self.backfill_mud, current.backfill_mud))
        out.extend(_mud_changes("Active", self.active_mud, current.active_mud))
        return out

    # Transport
    def to_dict(self):
        return asdict(self)

    @classmethod
    def from_dict(cls, d):
        version = d.get('version', SNAPSHOT_VERSION)
        if version > SNAPSHOT_VERSION:
            raise ValueError(f"Unsupported snapshot version {version}")

        def mud(m):
            if m is None:
                return None
            color = tuple(m['color']) if m.get('color') is not None else None
            return FrozenMud(m['name'], m['density'], m.get('dial600'), m.get('dial300'), color)

        return cls(
            drill_string=tuple(FrozenDrillString(**x) for x in d.get('drill_string', [])),
            annulus=tuple(FrozenAnnulus(**x) for x in d.get('annulus', [])),
            backfill_mud=mud(d.get('backfill_mud')),
            active_mud=mud(d.get('active_mud')),
            surveys=tuple(FrozenSurvey(**x) for x in d.get('surveys', [])),
            captured_at=d.get('captured_at', ''),
            version=version,
        )

    def to_json(self):
        return json.dumps(self.to_dict())

    @classmethod
    def from_json(cls, text):
        return cls.from_dict(json.loads(text))

    def to_compressed(self):
        """ zlib compressed JSON bytes """
        return zlib.compress(self.to_json().encode('utf-8'))

    @classmethod
    def from_compressed(cls, data):
        try:
            text = zlib.decompress(data).decode('utf-8')
        except zlib.error as e:
            raise ValueError(f"Snapshot data could not be decompressed: {e}")
        return cls.from_json(text)
