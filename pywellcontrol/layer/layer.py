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

from dataclasses import dataclass, replace
from typing import Optional

from pywellcontrol.classes import side
from pywellcontrol.validate import validate_methods
from pywellcontrol.constants import DENSITY_MERGE_TOL, MIN_LENGTH, MIN_VOLUME, KPA_PER_M_PER_KGM3

LAYER_FORMAT_VERSION = 1

# ============================================================================
#  Parcels: fluid volumes in a stack, ordered surface (index 0) downward
# ============================================================================

@dataclass(frozen=True)
class Parcel:
    density: float  # kg/m3
    volume: float  # m3
    color: Optional[tuple] = None

    @property
    def mass(self):
        return self.density * self.volume


def _blend_colors(parcels):
    tagged = [p for p in parcels if p.color is not None and p.volume > MIN_VOLUME]
    vol = sum(p.volume for p in tagged)
    if vol <= MIN_VOLUME:
        return None
    width = len(tagged[0].color)
    return tuple(sum(p.color[i] * p.volume for p in tagged) / vol for i in range(width))

def blend(parcels, default_density=0.0):
    """ Mixes parcels into a single parcel of mass weighted density """
    vol = sum(p.volume for p in parcels)
    if vol <= MIN_VOLUME:
        return Parcel(default_density, 0.0)
    return Parcel(sum(p.mass for p in parcels) / vol, vol, _blend_colors(parcels))

def stack_volume(stack):
    return sum(p.volume for p in stack)

def stack_mass(stack):
    return sum(p.mass for p in stack)

def merge_adjacent(stack, tol=DENSITY_MERGE_TOL):
    """ Returns the stack with empty parcels pruned and neighbours of equal density merged """
    out = []
    for p in stack:
        if p.volume <= MIN_VOLUME:
            continue
        if out and abs(out[-1].density - p.density) < tol:
            out[-1] = replace(out[-1], volume=out[-1].volume + p.volume,
                              color=_blend_colors([out[-1], p]) if out[-1].color != p.color else p.color)
        else:
            out.append(p)
    return tuple(out)

def push_top(stack, parcel):
    return merge_adjacent((parcel,) + tuple(stack))

def push_bottom(stack, parcel):
    return merge_adjacent(tuple(stack) + (parcel,))

def take_bottom(stack, volume):
    """ Removes volume (m3) from the bottom of a stack.
        Returns (removed, remaining), both ordered top to bottom
    """
    remaining = list(stack)
    removed = []
    need = volume
    while need > MIN_VOLUME and remaining:
        p = remaining.pop()
        if p.volume <= need:
            removed.insert(0, p)
            need -= p.volume
        else:
            removed.insert(0, replace(p, volume=need))
            remaining.append(replace(p, volume=p.volume - need))
            need = 0.0
    return tuple(removed), merge_adjacent(remaining)

def take_top(stack, volume):
    """ Removes volume (m3) from the top of a stack.
        Returns (removed, remaining), both ordered top to bottom
    """
    removed, remaining = take_bottom(tuple(reversed(stack)), volume)
    return tuple(reversed(removed)), tuple(reversed(remaining))

def spill_top(stack, capacity):
    """ Removes whatever exceeds capacity (m3) from the top of the stack.
        Returns (spilled, remaining)
    """
    excess = stack_volume(stack) - capacity
    if excess <= MIN_VOLUME:
        return (), tuple(stack)
    return take_top(stack, excess)


# ============================================================================
#  Fluid segments: parcels laid out against the wellbore
# ============================================================================

@dataclass(frozen=True)
class FluidSegment:
    """ A contiguous column of one fluid.

        side: side.STRING, side.ANNULUS or side.POCKET
        top_md, bottom_md: Measured depth bounds (m)
        top_tvd, bottom_tvd: Vertical depth bounds (m)
        density: kg/m3
        volume: m3
        color: Optional display tag
    """
    side: side
    top_md: float
    bottom_md: float
    top_tvd: float
    bottom_tvd: float
    density: float
    volume: float
    color: Optional[tuple] = None

    def __post_init__(self):
        if self.bottom_md < self.top_md - MIN_LENGTH:
            raise ValueError(f"Segment bottom MD {self.bottom_md} above top MD {self.top_md}")
        if self.bottom_tvd < self.top_tvd - MIN_LENGTH:
            raise ValueError(f"Segment bottom TVD {self.bottom_tvd} above top TVD {self.top_tvd}")

    @property
    def length(self):
        return self.bottom_md - self.top_md

    @property
    def height(self):
        return self.bottom_tvd - self.top_tvd

    @property
    def pressure_contribution(self):
        """ Hydrostatic pressure of the segment (kPa) """
        return self.density * KPA_PER_M_PER_KGM3 * self.height

    def to_dict(self):
        return {
            'side': self.side.name,
            'top_md': self.top_md,
            'bottom_md': self.bottom_md,
            'top_tvd': self.top_tvd,
            'bottom_tvd': self.bottom_tvd,
            'density': self.density,
            'volume': self.volume,
            'color': list(self.color) if self.color is not None else None,
        }

    @classmethod
    def from_dict(cls, d):
        color = d.get('color')
        return cls(side=validate_methods(["side"], [d['side']]), top_md=d['top_md'], bottom_md=d['bottom_md'],
                   top_tvd=d['top_tvd'], bottom_tvd=d['bottom_tvd'], density=d['density'],
                   volume=d['volume'], color=tuple(color) if color is not None else None)


def layout(stack, wellbore, area_fn, anchor_md, stack_side, limit_md):
    """ Lays a parcel stack out against the wellbore and returns a tuple of FluidSegment.

        stack: Parcels ordered top to bottom
        wellbore: Wellbore providing walk() and tvd()
        area_fn: Cross sectional area function of MD for this stack
        anchor_md: Depth the stack is anchored to (m)
        stack_side: side of the resulting segments
        limit_md: Depth the stack extends towards. Above anchor_md for string and annulus
                  (filled from the bit up), below anchor_md for the pocket (filled from the bit down)
    """
    stack_side = validate_methods(["side"], [stack_side])
    upward = limit_md < anchor_md
    ordered = reversed(stack) if upward else stack
    segs = []
    md = anchor_md
    for p in ordered:
        if p.volume <= MIN_VOLUME:
            continue
        nxt = wellbore.walk(area_fn, md, p.volume, limit_md)
        top, bot = (nxt, md) if upward else (md, nxt)
        if bot - top > MIN_LENGTH:
            segs.append(FluidSegment(stack_side, top, bot, wellbore.tvd(top), wellbore.tvd(bot),
                                     p.density, p.volume, p.color))
        md = nxt
        if abs(md - limit_md) <= MIN_LENGTH:
            break
    if upward:
        segs.reverse()
    return tuple(segs)

def segment_pressure(segments):
    return sum(s.pressure_contribution for s in segments)

def serialize_layers(segments):
    """ Typed, versioned serialization of a fluid segment list """
    return {'version': LAYER_FORMAT_VERSION, 'layers': [s.to_dict() for s in segments]}

def deserialize_layers(data):
    version = data.get('version')
    if version != LAYER_FORMAT_VERSION:
        raise ValueError(f"Unsupported layer format version: {version}")
    return tuple(FluidSegment.from_dict(d) for d in data['layers'])
