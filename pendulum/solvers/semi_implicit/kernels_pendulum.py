# SPDX-FileCopyrightText: Copyright (c) 2025 NBEL
# SPDX-License-Identifier: Apache-2.0
#
# Double pendulum equations of motion and the fixed-step update kernel

import math

import numpy as np
import warp as wp

from ...sim.state import PendulumState

TWO_PI = 2.0 * math.pi


@wp.func
def angular_accelerations(
    a1: wp.float64,
    a2: wp.float64,
    av1: wp.float64,
    av2: wp.float64,
    m1: wp.float64,
    m2: wp.float64,
    l1: wp.float64,
    l2: wp.float64,
    g: wp.float64,
) -> wp.vec2d:
    """
    Raw angular accelerations of the double pendulum.

    Standard coupled equations for two point masses on massless rigid arms:

        den  = 2*m1 + m2 - m2*cos(2*a1 - 2*a2)
        daa1 = (-g*(2*m1 + m2)*sin(a1) - m2*g*sin(a1 - 2*a2)
                - 2*sin(a1 - a2)*m2*(av2^2*l2 + av1^2*l1*cos(a1 - a2))) / (l1*den)
        daa2 = 2*sin(a1 - a2)*(av1^2*l1*(m1 + m2) + g*(m1 + m2)*cos(a1)
                + av2^2*l2*m2*cos(a1 - a2)) / (l2*den)

    A zero denominator yields inf/nan, never a trap.
    """
    two = wp.float64(2.0)

    delta = a1 - a2
    sin_delta = wp.sin(delta)
    cos_delta = wp.cos(delta)

    den = two * m1 + m2 - m2 * wp.cos(two * a1 - two * a2)

    num1 = -g * (two * m1 + m2) * wp.sin(a1)
    num1 = num1 - m2 * g * wp.sin(a1 - two * a2)
    num1 = num1 - two * sin_delta * m2 * (av2 * av2 * l2 + av1 * av1 * l1 * cos_delta)

    num2 = two * sin_delta * (
        av1 * av1 * l1 * (m1 + m2)
        + g * (m1 + m2) * wp.cos(a1)
        + av2 * av2 * l2 * m2 * cos_delta
    )

    return wp.vec2d(num1 / (l1 * den), num2 / (l2 * den))


@wp.func
def wrap_angle(angle: wp.float64) -> wp.float64:
    """
    Wrap an angle into [0, 2*pi). NaN and inf come out as NaN.
    """
    # float literals compile as float32; acos(-1) keeps pi at double precision
    two_pi = wp.float64(2.0) * wp.acos(wp.float64(-1.0))
    zero = wp.float64(0.0)

    wrapped = wp.mod(angle, two_pi)
    if wrapped < zero:
        wrapped = wrapped + two_pi
    # -tiny + 2*pi rounds up to exactly 2*pi
    if wrapped >= two_pi:
        wrapped = zero
    return wrapped


@wp.kernel
def integrate_pendulum_kernel(
    angles: wp.array(dtype=wp.vec2d),
    velocities: wp.array(dtype=wp.vec2d),
    masses: wp.array(dtype=wp.vec2d),
    lengths: wp.array(dtype=wp.vec2d),
    gravity: wp.float64,
    dt: wp.float64,
    angles_out: wp.array(dtype=wp.vec2d),
    velocities_out: wp.array(dtype=wp.vec2d),
    accelerations_out: wp.array(dtype=wp.vec2d),
):
    """
    Advance one pendulum per thread by one fixed time increment.

    Update order:
        1. raw accelerations from the equations of motion
        2. aa = daa * dt (acceleration is pre-scaled by dt)
        3. av += aa
        4. a += av * dt
        5. wrap both angles into [0, 2*pi)

    Because of step 2 the velocity receives a dt-squared scaled contribution.
    This is the reference scheme and must not be "corrected" to textbook
    semi-implicit Euler.
    """
    tid = wp.tid()

    a = angles[tid]
    v = velocities[tid]
    m = masses[tid]
    l = lengths[tid]

    daa = angular_accelerations(a[0], a[1], v[0], v[1], m[0], m[1], l[0], l[1], gravity)

    aa = daa * dt
    av = v + aa
    a_new = a + av * dt

    accelerations_out[tid] = aa
    velocities_out[tid] = av
    angles_out[tid] = wp.vec2d(wrap_angle(a_new[0]), wrap_angle(a_new[1]))


def _pair(x: float, y: float, device) -> wp.array:
    return wp.array(np.array([[x, y]], dtype=np.float64), dtype=wp.vec2d, device=device)


def integrate_pendulum(state_in: PendulumState, state_out: PendulumState, device: str = "cpu") -> PendulumState:
    """
    Launch integrate_pendulum_kernel on one state and copy the result back.

    state_out may be the same object as state_in. Only the angle, velocity
    and acceleration fields come from the kernel; masses, lengths, g and dt
    are copied through when the two states differ.
    """
    s = state_in

    angles_out = wp.zeros(1, dtype=wp.vec2d, device=device)
    velocities_out = wp.zeros(1, dtype=wp.vec2d, device=device)
    accelerations_out = wp.zeros(1, dtype=wp.vec2d, device=device)

    wp.launch(
        kernel=integrate_pendulum_kernel,
        dim=1,
        inputs=[
            _pair(s.a1, s.a2, device),
            _pair(s.av1, s.av2, device),
            _pair(s.m1, s.m2, device),
            _pair(s.l1, s.l2, device),
            float(s.g),
            float(s.dt),
        ],
        outputs=[angles_out, velocities_out, accelerations_out],
        device=device,
    )

    a = angles_out.numpy()[0]
    av = velocities_out.numpy()[0]
    aa = accelerations_out.numpy()[0]

    if state_out is not state_in:
        state_out.m1, state_out.m2 = s.m1, s.m2
        state_out.l1, state_out.l2 = s.l1, s.l2
        state_out.g, state_out.dt = s.g, s.dt

    state_out.aa1, state_out.aa2 = float(aa[0]), float(aa[1])
    state_out.av1, state_out.av2 = float(av[0]), float(av[1])
    state_out.a1, state_out.a2 = float(a[0]), float(a[1])
    return state_out
