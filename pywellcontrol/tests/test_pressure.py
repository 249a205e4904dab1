#!/usr/bin/env python3
"""
Validation tests for pressure module.
"""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))
import pywellcontrol.pressure as pressure
from pywellcontrol.layer import FluidSegment
from pywellcontrol.classes import side
from pywellcontrol.shared_fns import pressure_from_head, density_from_pressure, root_solve, march_depths

G = 9.80665

def seg(top, bot, rho, s=side.ANNULUS):
    return FluidSegment(s, top, bot, top, bot, rho, 1.0)

def test_pressure_from_head():
    """Single conversion constant g = 9.80665"""
    assert abs(pressure_from_head(1000, 1000) - G * 1000) < 1e-9
    assert abs(density_from_pressure(pressure_from_head(1234, 2500), 2500) - 1234) < 1e-9
    assert density_from_pressure(500, 0, 1100) == 1100

def test_hydrostatic_clipped():
    """Hydrostatic sum stops at the requested TVD"""
    stack = [seg(0, 1000, 1200), seg(1000, 2000, 1500)]
    assert abs(pressure.hydrostatic_pressure(stack) - (1200 + 1500) * G) < 1e-9
    assert abs(pressure.hydrostatic_pressure(stack, 1500) - (1200 + 750) * G) < 1e-9
    assert pressure.hydrostatic_pressure(stack, 0) == 0

def test_single_fluid_esd():
    """1200 kg/m3 column, zero back pressure: ESD 1200"""
    for tvd in [1.0, 350.0, 2000.0, 4321.5]:
        res = pressure.pressure_balance([seg(0, tvd * 0.6, 1200)], [seg(tvd * 0.6, tvd, 1200, side.POCKET)],
                                        tvd * 0.6, tvd, 1200, 1200)
        assert res['surface_pressure'] == 0 or abs(res['surface_pressure']) < 1e-9
        assert abs(res['esd_control'] - 1200) < 1e-9, f"ESD={res['esd_control']} at {tvd}"
        assert abs(res['esd_bit'] - 1200) < 1e-9

def test_required_surface_pressure():
    """SABP = rho_t g TVD / 1000 - hydrostatic, clamped unless negative allowed"""
    hydro = pressure_from_head(1200, 3000)
    p = pressure.required_surface_pressure(1300, 3000, hydro)
    assert abs(p - 100 * G * 3) < 1e-9
    assert pressure.required_surface_pressure(1100, 3000, hydro) == 0
    assert pressure.required_surface_pressure(1100, 3000, hydro, allow_negative=True) < 0
    assert pressure.required_surface_pressure(1300, 3000, hydro, hold_open=True) == 0
    assert abs(pressure.required_surface_pressure(1300, 3000, hydro, correction=50) - (p + 50)) < 1e-9

def test_zero_depth_returns_base():
    """Control depth of zero reports the base density"""
    res = pressure.pressure_balance([], [], 0.0, 0.0, 1300, 1150)
    assert res['esd_control'] == 1150 and res['esd_bit'] == 1150
    assert pressure.equivalent_density(0, 0, 1150) == 1150

def test_dynamic_correction():
    """Swab correction raises the dynamic surface pressure only"""
    res = pressure.pressure_balance([seg(0, 1000, 1200)], [], 1000, 1000, 1250, 1200, correction=120)
    assert abs(res['surface_pressure_dynamic'] - res['surface_pressure'] - 120) < 1e-9
    assert abs(res['esd_control'] - 1250) < 1e-9

def test_pressure_window():
    """Interpolated and clamped pore / frac limits"""
    w = pressure.PressureWindow([(1000, 10000, 16000), (3000, 32000, 50000)], pore_margin=500, frac_margin=1000)
    assert w.pore(2000) == 21000
    assert w.frac(5000) == 50000
    assert w.window(2000) == (21500, 32000)
    assert w.check(2000, 25000)[0]
    assert not w.check(2000, 21200)[0]
    assert not w.check(2000, 32500)[0]
    assert abs(w.min_density(2000) - 21500 * 1000 / (G * 2000)) < 1e-9
    assert abs(w.max_density(2000, apply_margins=False) - 33000 * 1000 / (G * 2000)) < 1e-9

def test_root_solve():
    """brentq root with fallback to the better bracket end"""
    assert abs(root_solve(lambda x: x * x - 2, 0, 2) - 2 ** 0.5) < 1e-8
    assert root_solve(lambda x: x + 1, 0, 5) == 0

def test_march_depths():
    """End inclusive, last step clipped, zero step rejected"""
    assert march_depths(0, 250, 100) == [0, 100, 200, 250]
    assert march_depths(300, 0, 100) == [300, 200, 100, 0]
    for bad in [0, -10, float('nan'), float('inf')]:
        try:
            march_depths(0, 100, bad)
            assert False, "Expected ValueError"
        except ValueError:
            pass


if __name__ == '__main__':
    print("=" * 70)
    print("PRESSURE MODULE VALIDATION TESTS")
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
