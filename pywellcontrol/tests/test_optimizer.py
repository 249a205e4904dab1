#!/usr/bin/env python3
"""
Validation tests for optimizer module.
"""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))
import pywellcontrol.optimizer as optimizer
from pywellcontrol.geometry import DrillStringSection, AnnulusSection, SurveyStation, Wellbore

G = 9.80665

def make_wellbore(survey=None):
    return Wellbore([DrillStringSection(0, 3000, 0.127, 0.1086)], [AnnulusSection(0, 3000, 0.216, 0.127)], survey)

def base_case(wb=None, **kwargs):
    args = dict(target_density=1200, surface_slug_volume=2.0, surface_slug_density=2100, base_density=1200,
                crack_pressure=2100, start_md=3000, control_md=3000)
    args.update(kwargs)
    return optimizer.optimize_kill_mud(wb or make_wellbore(), **args)

def test_heel_first_90():
    """First station at or beyond 90 deg is the heel"""
    stations = [SurveyStation(0, 0, 0, 0), SurveyStation(1500, 60, 0, 1400), SurveyStation(2000, 90, 0, 1650),
                SurveyStation(2500, 91, 0, 1645)]
    md, tvd, warn = optimizer.find_heel(stations, 3000)
    assert (md, tvd, warn) == (2000, 1650, None)

def test_heel_max_inclination():
    """Without 90 deg, the steepest station beyond 45 deg"""
    stations = [SurveyStation(0, 0), SurveyStation(1500, 50, 0, 1450), SurveyStation(2500, 70, 0, 2100),
                SurveyStation(2800, 65, 0, 2200)]
    md, tvd, warn = optimizer.find_heel(stations, 3000)
    assert md == 2500 and tvd == 2100 and warn is None

def test_heel_fallback_warning():
    """No directional data: 70% of TD and a warning"""
    md, tvd, warn = optimizer.find_heel([SurveyStation(1000, 20)], 3000)
    assert abs(md - 2100) < 1e-9 and abs(tvd - 2100) < 1e-9
    assert warn == "No heel (90°) found. Using 70% of TD as estimate."
    md, tvd, warn = optimizer.find_heel([], 3000, manual_heel_md=1800)
    assert md == 1800 and warn is None

def test_second_slug_default():
    """Second slug density defaults to 2 target - base + crack / heelTVD / (g/1000)"""
    res = base_case()
    expected = 2 * 1200 - 1200 + 2100 / 2100 / (G / 1000)
    assert abs(res.second_slug_density - expected) < 1e-9
    assert res.second_slug_density_was_calculated
    assert abs(res.effective_esd - expected) < 1e-9
    manual = base_case(second_slug_density=1500)
    assert manual.second_slug_density == 1500 and not manual.second_slug_density_was_calculated
    assert abs(manual.second_slug_density_calculated - expected) < 1e-9

def test_slug_drop_and_kill_volume():
    """Drop height from the surface slug, kill volume = steel + drop"""
    wb = make_wellbore()
    res = base_case(wb)
    cap = wb.drill_string[0].capacity
    assert abs(res.surface_slug_bottom_md - 2.0 / cap) < 1e-6
    drop_h = (2100 - res.effective_esd) * res.surface_slug_tvd_height / res.effective_esd
    assert abs(res.surface_slug_drop_height - drop_h) < 1e-9
    assert abs(res.slug_drop_volume - (res.surface_slug_drop_height + res.second_slug_drop_height) * cap) < 1e-9
    assert abs(res.steel_displacement - wb.steel_volume(0, 3000)) < 1e-9
    assert abs(res.kill_volume - res.steel_displacement - res.slug_drop_volume) < 1e-12
    assert abs(res.second_slug_volume - wb.string_volume(res.surface_slug_bottom_md, 2100)) < 1e-9

def test_balance_solved():
    """Unclamped kill density balances the annulus to target x control TVD"""
    res = base_case()
    assert not res.clamped
    total = sum(l['Density'] * l['Height'] for l in res.layers)
    assert abs(total - 1200 * 3000) < 1e-6 * 1200 * 3000
    assert res.layer_table().shape == (5, 4)

def test_low_density_warning():
    """Heavy slugs overcompensating give a very low kill mud warning"""
    res = base_case()
    assert 800 <= res.kill_density < 1000, f"kill={res.kill_density}"
    assert any('very low' in w for w in res.warnings)
    assert res.is_valid

def test_high_density_clamped():
    """Kill density above 2500 is clamped, flagged and still valid"""
    res = base_case(target_density=2400)
    assert res.kill_density == 2500
    assert res.clamped and res.is_valid
    assert "Kill mud density clamped to 2500 kg/m³. Check inputs." in res.warnings

def test_small_kill_height():
    """Near zero kill height falls back to base mud with a warning and is not a valid solution"""
    res = base_case(start_md=0, surface_slug_density=1200, manual_heel_md=2000)
    assert res.kill_density == 1200
    assert "Kill mud height too small. Using base mud density." in res.warnings
    assert not res.is_valid and not res.clamped

def test_observed_drop_override():
    """Observed slug drop replaces the calculated one"""
    res = base_case(observed_slug_drop=3.0)
    assert res.slug_drop_volume == 3.0
    assert res.slug_drop_calculated > 0 and res.slug_drop_calculated != 3.0
    assert abs(res.kill_volume - res.steel_displacement - 3.0) < 1e-12

def test_heel_from_survey():
    """Heel is taken from the wellbore survey"""
    survey = [SurveyStation(0, 0, 0, 0), SurveyStation(1000, 0, 0, 1000), SurveyStation(2000, 90, 0, 1650),
              SurveyStation(3000, 90, 0, 1650)]
    res = base_case(make_wellbore(survey))
    assert res.heel_md == 2000 and res.heel_tvd == 1650 and abs(res.control_tvd - 1650) < 1e-9
    assert not any('heel' in w for w in res.warnings)


if __name__ == '__main__':
    print("=" * 70)
    print("OPTIMIZER MODULE VALIDATION TESTS")
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
