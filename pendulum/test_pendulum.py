#!/usr/bin/env python3
# SPDX-FileCopyrightText: Copyright (c) 2025 NBEL
# SPDX-License-Identifier: Apache-2.0
#
# Tests for the double pendulum state, model and semi-implicit solver
#
# Usage:
#     python -m pytest pendulum/test_pendulum.py
#     python -m pendulum.test_pendulum

import math

import numpy as np

from pendulum import PendulumModel, PendulumState, SolverSemiImplicit, joint_positions
from pendulum.solvers import SolverBase
from pendulum.solvers.semi_implicit import (
    TWO_PI,
    integrate_pendulum,
)


def test_reference_step():
    """One step from rest at 90/90 degrees with the default constants."""
    print("=" * 60)
    print("Testing a single step against the closed form")
    print("=" * 60)

    model = PendulumModel()
    state = model.state()
    a0 = state.a1

    SolverSemiImplicit(model).step(state)

    # Raw accelerations: den = 20, daa1 = -196.2 / 200, daa2 = 0
    daa1, daa2 = state.aa1 / state.dt, state.aa2 / state.dt
    print(f"  daa1={daa1:.6f}, daa2={daa2:.6f}")
    assert abs(daa1 - (-0.981)) < 1e-5
    assert abs(daa2) < 1e-5

    expected_aa1 = -0.981 * 0.0166
    print(f"  aa1={state.aa1:.7f} (expected {expected_aa1:.7f})")
    assert abs(state.aa1 - expected_aa1) < 1e-5
    assert abs(state.aa2) < 1e-5

    # av += aa, then a += av * dt
    assert abs(state.av1 - state.aa1) < 1e-12
    assert abs(state.av2 - state.aa2) < 1e-12
    assert abs(state.a1 - (a0 + state.av1 * 0.0166)) < 1e-5
    assert abs(state.a2 - math.pi / 2) < 1e-5


def test_angles_stay_wrapped():
    """Angles stay in [0, 2*pi) over a long chaotic run."""
    print("\n" + "=" * 60)
    print("Testing angle wrapping over 5000 steps")
    print("=" * 60)

    model = PendulumModel(m1=3.0, m2=20.0, l1=8.0, l2=12.0, a1_deg=170.0, a2_deg=10.0)
    state = model.state()
    solver = SolverSemiImplicit(model)

    for i in range(5000):
        solver.step(state)
        assert 0.0 <= state.a1 < TWO_PI, f"a1={state.a1} at step {i}"
        assert 0.0 <= state.a2 < TWO_PI, f"a2={state.a2} at step {i}"

    print(f"  step_count={solver.step_count}, a1={state.a1:.4f}, a2={state.a2:.4f}")
    assert solver.step_count == 5000


def wrapped(a1: float, a2: float = 1.0) -> PendulumState:
    """Run angles through the kernel's wrap with a zero time step."""
    state = PendulumState(a1=a1, a2=a2, dt=0.0)
    return integrate_pendulum(state, state)


def test_wrap_angle():
    """The kernel wraps angles into [0, 2*pi) and passes NaN through."""
    print("\n" + "=" * 60)
    print("Testing angle wrap")
    print("=" * 60)

    assert wrapped(0.0).a1 == 0.0
    assert abs(wrapped(-0.5).a1 - (TWO_PI - 0.5)) < 1e-12
    assert abs(wrapped(TWO_PI + 0.25).a1 - 0.25) < 1e-12
    assert abs(wrapped(1.0, 3 * TWO_PI + 2.0).a2 - 2.0) < 1e-12
    assert wrapped(TWO_PI).a1 == 0.0
    # -tiny + 2*pi rounds to 2*pi
    assert wrapped(-1e-18).a1 == 0.0
    assert math.isnan(wrapped(float("nan")).a1)


def test_zero_time_step():
    """dt = 0 leaves angles and velocities untouched and zeroes acceleration."""
    print("\n" + "=" * 60)
    print("Testing dt = 0")
    print("=" * 60)

    state = PendulumState(a1=1.0, a2=2.0, av1=0.3, av2=-0.2, aa1=5.0, aa2=5.0, dt=0.0)
    SolverSemiImplicit().step(state)

    assert state.a1 == 1.0
    assert state.a2 == 2.0
    assert state.av1 == 0.3
    assert state.av2 == -0.2
    assert state.aa1 == 0.0
    assert state.aa2 == 0.0


def test_zero_mass_propagates_nan():
    """m1 = 0 does not raise; the accelerations become NaN."""
    print("\n" + "=" * 60)
    print("Testing degenerate mass")
    print("=" * 60)

    model = PendulumModel()
    state = model.state()
    state.m1 = 0.0

    SolverSemiImplicit(model).step(state)

    print(f"  aa1={state.aa1}, aa2={state.aa2}")
    assert math.isnan(state.aa1)
    assert math.isnan(state.aa2)


def test_state_out_copy():
    """Stepping into a separate state leaves the input untouched."""
    model = PendulumModel(m1=4.0, l2=7.0)
    state_in = model.state()
    before = state_in.copy()
    state_out = PendulumState()

    result = SolverSemiImplicit(model).step(state_in, state_out)

    assert result is state_out
    assert state_in == before
    assert state_out.m1 == 4.0
    assert state_out.l2 == 7.0
    assert state_out.dt == state_in.dt
    assert state_out.a1 != state_in.a1

    # Same computation in place
    integrate_pendulum(state_in, state_in)
    assert state_in == state_out


def test_solver_base_is_abstract():
    try:
        SolverBase().step(PendulumState())
    except NotImplementedError:
        return
    raise AssertionError("SolverBase.step() should raise NotImplementedError")


def test_simulate():
    model = PendulumModel()
    a = model.state()
    b = model.state()

    solver = SolverSemiImplicit(model)
    solver.simulate(a, 10)
    for _ in range(10):
        integrate_pendulum(b, b)

    assert a == b
    assert solver.step_count == 10


def test_joint_positions():
    """Angle 0 hangs straight down, angles grow counter-clockwise."""
    state = PendulumState(a1=0.0, a2=math.pi / 2, l1=2.0, l2=3.0)
    (x1, y1), (x2, y2) = joint_positions(state)

    assert np.allclose((x1, y1), (0.0, -2.0))
    assert np.allclose((x2, y2), (3.0, -2.0))

    state = PendulumState(a1=math.pi, a2=math.pi, l1=1.0, l2=1.0)
    (x1, y1), (x2, y2) = joint_positions(state)
    assert np.allclose((x1, y1), (0.0, 1.0))
    assert np.allclose((x2, y2), (0.0, 2.0))


def test_model_reset():
    """Full reset restores the initial constants but keeps g and dt."""
    model = PendulumModel(m1=2.0, m2=3.0, l1=4.0, l2=5.0, a1_deg=45.0, a2_deg=30.0)
    state = model.state()
    solver = SolverSemiImplicit(model)
    solver.simulate(state, 50)

    state.m1 = 99.0
    state.l2 = 0.5
    state.g = 1.0
    state.dt = 0.01
    model.reset(state)

    assert (state.m1, state.m2, state.l1, state.l2) == (2.0, 3.0, 4.0, 5.0)
    assert abs(state.a1 - math.radians(45.0)) < 1e-12
    assert abs(state.a2 - math.radians(30.0)) < 1e-12
    assert (state.av1, state.av2, state.aa1, state.aa2) == (0.0, 0.0, 0.0, 0.0)
    assert state.g == 1.0
    assert state.dt == 0.01


def test_partial_resets():
    state = PendulumState(a1=1.0, av1=2.0, av2=3.0, aa1=4.0, aa2=5.0)

    PendulumModel.reset_velocity(state)
    assert (state.av1, state.av2) == (0.0, 0.0)
    assert (state.aa1, state.aa2) == (4.0, 5.0)

    PendulumModel.reset_acceleration(state)
    assert (state.aa1, state.aa2) == (0.0, 0.0)
    assert state.a1 == 1.0


def test_randomize_ranges():
    """Randomized masses, lengths and angles fall in their ranges."""
    print("\n" + "=" * 60)
    print("Testing randomization ranges")
    print("=" * 60)

    model = PendulumModel(seed=1234)
    state = model.state()

    for _ in range(200):
        model.randomize(state)
        for m in (state.m1, state.m2):
            assert 0.1 <= m < 100.1
            assert abs((m - 0.1) - round(m - 0.1)) < 1e-9
        for length in (state.l1, state.l2):
            assert 0.1 <= length < 50.1
        for a in (state.a1, state.a2):
            assert 0.0 <= a < TWO_PI

    # Same seed, same sequence
    a, b = PendulumModel(seed=7), PendulumModel(seed=7)
    sa, sb = a.state(), b.state()
    a.randomize(sa)
    b.randomize(sb)
    assert sa == sb
    print(f"  seed=7 -> m=({sa.m1}, {sa.m2}), l=({sa.l1}, {sa.l2})")


def main():
    """Run all tests."""
    tests = [
        test_reference_step,
        test_angles_stay_wrapped,
        test_wrap_angle,
        test_zero_time_step,
        test_zero_mass_propagates_nan,
        test_state_out_copy,
        test_solver_base_is_abstract,
        test_simulate,
        test_joint_positions,
        test_model_reset,
        test_partial_resets,
        test_randomize_ranges,
    ]
    for test in tests:
        test()

    print("\n" + "=" * 60)
    print(f"ALL {len(tests)} TESTS PASSED")
    print("=" * 60)


if __name__ == "__main__":
    main()
