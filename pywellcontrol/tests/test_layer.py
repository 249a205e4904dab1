#!/usr/bin/env python3
"""
Validation tests for layer module.
"""

import sys
import os
import json

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))
import pywellcontrol.layer as layer
from pywellcontrol.layer import Parcel
from pywellcontrol.classes import side
from pywellcontrol.geometry import DrillStringSection, AnnulusSection, Wellbore

def make_wellbore():
    return Wellbore([DrillStringSection(0, 2000, 0.127, 0.1086)], [AnnulusSection(0, 2000, 0.216)])

def test_blend_mass_weighted():
    """Blended density is mass weighted"""
    p = layer.blend([Parcel(1000, 1.0), Parcel(1600, 3.0)])
    assert abs(p.volume - 4.0) < 1e-12
    assert abs(p.density - 1450.0) < 1e-12

def test_blend_empty():
    """Blending nothing returns an empty parcel of the default density"""
    p = layer.blend([], 1200)
    assert p.volume == 0 and p.density == 1200

def test_merge_adjacent():
    """Equal neighbours merge and empty parcels are pruned"""
    stack = (Parcel(1200, 1.0), Parcel(1200, 2.0), Parcel(1500, 0.0), Parcel(1200, 0.5), Parcel(1400, 1.0))
    out = layer.merge_adjacent(stack)
    assert [p.density for p in out] == [1200, 1400]
    assert abs(out[0].volume - 3.5) < 1e-12

def test_take_bottom_splits():
    """Taking from the bottom splits the straddled parcel and keeps order"""
    stack = (Parcel(1200, 2.0), Parcel(1500, 1.0))
    removed, remaining = layer.take_bottom(stack, 1.5)
    assert [(p.density, p.volume) for p in removed] == [(1200, 0.5), (1500, 1.0)]
    assert len(remaining) == 1 and abs(remaining[0].volume - 1.5) < 1e-12

def test_take_top_splits():
    """Taking from the top splits the straddled parcel and keeps order"""
    stack = (Parcel(1200, 2.0), Parcel(1500, 1.0))
    removed, remaining = layer.take_top(stack, 2.5)
    assert [(p.density, p.volume) for p in removed] == [(1200, 2.0), (1500, 0.5)]
    assert [(p.density, p.volume) for p in remaining] == [(1500, 0.5)]

def test_take_conserves_volume():
    """Removed plus remaining equals the original volume"""
    stack = (Parcel(1100, 0.7), Parcel(1300, 1.9), Parcel(1800, 0.4))
    for v in [0.0, 0.3, 1.0, 2.5, 3.0, 5.0]:
        removed, remaining = layer.take_bottom(stack, v)
        assert abs(layer.stack_volume(removed) + layer.stack_volume(remaining) - 3.0) < 1e-12
        assert abs(layer.stack_mass(removed) + layer.stack_mass(remaining) - layer.stack_mass(stack)) < 1e-9

def test_inputs_not_mutated():
    """Stack operations return new tuples"""
    stack = (Parcel(1200, 2.0),)
    layer.push_top(stack, Parcel(1500, 1.0))
    layer.take_bottom(stack, 1.0)
    assert stack == (Parcel(1200, 2.0),)

def test_spill_top():
    """Excess above capacity is spilled from the top"""
    stack = (Parcel(1300, 1.0), Parcel(1200, 5.0))
    spilled, kept = layer.spill_top(stack, 5.5)
    assert abs(layer.stack_volume(spilled) - 0.5) < 1e-12 and spilled[0].density == 1300
    assert abs(layer.stack_volume(kept) - 5.5) < 1e-12
    spilled, kept = layer.spill_top(stack, 10.0)
    assert spilled == () and kept == stack

def test_layout_upward_from_bit():
    """Annulus stack laid out from the bit to surface"""
    wb = make_wellbore()
    cap = wb.annulus_volume(0, 1000)
    stack = (Parcel(1500, cap / 2), Parcel(1200, cap / 2))
    segs = layer.layout(stack, wb, wb.annulus_area, 1000, side.ANNULUS, 0)
    assert len(segs) == 2
    assert abs(segs[0].top_md) < 1e-6 and abs(segs[0].bottom_md - 500) < 1e-6
    assert abs(segs[1].top_md - 500) < 1e-6 and segs[1].bottom_md == 1000
    assert segs[0].density == 1500 and segs[0].side == side.ANNULUS

def test_layout_downward_pocket():
    """Pocket stack laid out from the bit downward"""
    wb = make_wellbore()
    stack = (Parcel(1300, wb.hole_volume(1500, 1600)), Parcel(1200, wb.hole_volume(1600, 2000)))
    segs = layer.layout(stack, wb, wb.hole_area, 1500, 'POCKET', 2000)
    assert abs(segs[0].bottom_md - 1600) < 1e-6
    assert abs(segs[-1].bottom_md - 2000) < 1e-6

def test_segment_invariant():
    """Bottom above top is rejected"""
    try:
        layer.FluidSegment(side.STRING, 100, 50, 100, 50, 1200, 1.0)
        assert False, "Expected ValueError"
    except ValueError:
        pass

def test_pressure_contribution():
    """rho g dTVD / 1000"""
    seg = layer.FluidSegment(side.ANNULUS, 0, 1000, 0, 1000, 1200, 10.0)
    assert abs(seg.pressure_contribution - 1200 * 9.80665) < 1e-9
    assert abs(layer.segment_pressure([seg, seg]) - 2 * 1200 * 9.80665) < 1e-9

def test_serialize_layers():
    """Versioned serialization survives JSON transport"""
    segs = (layer.FluidSegment(side.POCKET, 10, 20, 10, 19, 1250, 0.3, (1.0, 0.5, 0.0, 1.0)),)
    data = json.loads(json.dumps(layer.serialize_layers(segs)))
    assert data['version'] == layer.LAYER_FORMAT_VERSION
    assert layer.deserialize_layers(data) == segs
    try:
        layer.deserialize_layers({'version': 99, 'layers': []})
        assert False, "Expected ValueError"
    except ValueError:
        pass


if __name__ == '__main__':
    print("=" * 70)
    print("LAYER MODULE VALIDATION TESTS")
    print("=" * 70)

    tests = [v for k, v in globals().items() if k.startswith('test_') and callable(v)]
    passed = 0
    failed = 0

    for test in tests:
        try:
            test()
            passed += 1
            print(f"  PASS: {test.__name__}")
        except Exception as e:
            failed += 1
            print(f"  FAIL: {test.__name__}: {e}")

    print(f"\n{'=' * 70}")
    print(f"Results: {passed} passed, {failed} failed out of {passed + failed}")
    print("=" * 70)
    sys.exit(1 if failed > 0 else 0)
