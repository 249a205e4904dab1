#!/usr/bin/env python3
"""
Validation tests for geometry module.
"""

import sys
import os
import math
import numpy as np

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))
import pywellcontrol.geometry as geometry
from pywellcontrol.classes import lookup_status

def area(d):
    return math.pi / 4 * d * d

def make_wellbore(survey=None):
    ds = [geometry.DrillStringSection(0, 2500, 0.127, 0.1086, name='DP'),
          geometry.DrillStringSection(2500, 500, 0.165, 0.0714, name='DC')]
    ann = [geometry.AnnulusSection(0, 1500, 0.224, is_cased=True, name='Casing'),
           geometry.AnnulusSection(1500, 1500, 0.216, name='Open hole')]
    return geometry.Wellbore(ds, ann, survey)

def test_section_bottom_derived():
    """Bottom is top + length"""
    s = geometry.DrillStringSection(100, 250, 0.127, 0.1086)
    assert s.bottom == 350

def test_section_validation():
    """Invalid section dimensions raise ValueError"""
    bad = [lambda: geometry.DrillStringSection(0, -1, 0.127, 0.1),
           lambda: geometry.DrillStringSection(0, 10, 0.0, 0.0),
           lambda: geometry.DrillStringSection(0, 10, 0.127, 0.127),
           lambda: geometry.AnnulusSection(0, 10, 0.0)]
    for f in bad:
        try:
            f()
            assert False, "Expected ValueError"
        except ValueError:
            pass

def test_flow_area_clamped():
    """Annulus flow area is zero when the recorded OD fills the hole"""
    assert geometry.AnnulusSection(0, 10, 0.2, 0.25).flow_area == 0.0
    assert abs(geometry.AnnulusSection(0, 10, 0.216, 0.127).flow_area - (area(0.216) - area(0.127))) < 1e-12

def test_tagged_lookup():
    """Lookup reports FOUND or NOT_COVERED"""
    wb = make_wellbore()
    hit = wb.drill_string_at(2600)
    assert hit.status == lookup_status.FOUND and hit.section.name == 'DC'
    miss = wb.drill_string_at(3500)
    assert miss.status == lookup_status.NOT_COVERED and miss.section is None and not miss.found

def test_tvd_without_survey():
    """No survey: TVD equals MD"""
    wb = make_wellbore()
    assert wb.tvd(1234.5) == 1234.5
    assert np.allclose(wb.tvd([0, 100, 2000]), [0, 100, 2000])

def test_tvd_interpolation_and_clamp():
    """Linear interpolation between stations, clamped outside"""
    survey = [geometry.SurveyStation(0, 0, 0, 0), geometry.SurveyStation(1000, 30, 0, 950),
              geometry.SurveyStation(2000, 60, 0, 1700), geometry.SurveyStation(2000, 60, 0, 1700)]
    sampler = geometry.TvdSampler(survey)
    assert abs(sampler.tvd(500) - 475) < 1e-9
    assert abs(sampler(1500) - 1325) < 1e-9
    assert sampler.tvd(5000) == 1700
    assert len(sampler._md) == 3

def test_volumes_piecewise():
    """Volumes integrate across section boundaries"""
    wb = make_wellbore()
    exp_string = area(0.1086) * 2500 + area(0.0714) * 500
    assert abs(wb.string_volume(0, 3000) - exp_string) < 1e-9
    exp_hole = area(0.224) * 1500 + area(0.216) * 1500
    assert abs(wb.hole_volume(0, 3000) - exp_hole) < 1e-9
    exp_ann = exp_hole - area(0.127) * 2500 - area(0.165) * 500
    assert abs(wb.annulus_volume(0, 3000) - exp_ann) < 1e-9
    assert abs(wb.hole_volume(0, 3000) - wb.annulus_volume(0, 3000) - wb.od_volume(0, 3000)) < 1e-9
    assert abs(wb.od_volume(0, 3000) - wb.steel_volume(0, 3000) - wb.string_volume(0, 3000)) < 1e-9

def test_nearest_section_fallback():
    """Areas beyond the defined geometry use the nearest section"""
    wb = make_wellbore()
    assert wb.hole_area(3200) == area(0.216)
    assert wb.string_area(3200) == area(0.0714)

def test_walk_up_and_down():
    """Walking a volume returns the MD it reaches, clipped at the limit"""
    wb = make_wellbore()
    v = wb.annulus_volume(2000, 2800)
    assert abs(wb.walk(wb.annulus_area, 2800, v, 0) - 2000) < 1e-6
    v = wb.hole_volume(1000, 1800)
    assert abs(wb.walk(wb.hole_area, 1000, v, 3000) - 1800) < 1e-6
    assert wb.walk(wb.hole_area, 1000, 1e6, 3000) == 3000
    assert wb.walk(wb.hole_area, 1000, 0.0, 3000) == 1000

def test_total_depth():
    """Total depth is the deepest section bottom"""
    assert make_wellbore().total_depth == 3000


if __name__ == '__main__':
    print("=" * 70)
    print("GEOMETRY MODULE VALIDATION TESTS")
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
