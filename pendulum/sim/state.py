# SPDX-FileCopyrightText: Copyright (c) 2025 NBEL
# SPDX-License-Identifier: Apache-2.0
#
# State record for the double pendulum simulation

import math
from dataclasses import dataclass, replace
from typing import Tuple


@dataclass
class PendulumState:
    """
    Represents the time-varying state of a double pendulum.

    Every field is a plain mutable float so the control panel can edit it
    between frames; the solver consumes whatever values it finds at the top
    of the next step.

    Attributes:
        a1, a2: Joint angles in radians, held in [0, 2*pi) after every step
        av1, av2: Angular velocities
        aa1, aa2: Angular accelerations of the last step (already scaled by dt)
        m1, m2: Arm masses, must be > 0
        l1, l2: Arm lengths, must be > 0
        g: Gravitational constant (0 when gravity is switched off)
        dt: Time increment applied per step

    Zero masses or lengths are not guarded: the solver propagates NaN/Inf
    into the state instead of raising.
    """

    a1: float = 0.0
    a2: float = 0.0
    av1: float = 0.0
    av2: float = 0.0
    aa1: float = 0.0
    aa2: float = 0.0
    m1: float = 10.0
    m2: float = 10.0
    l1: float = 10.0
    l2: float = 10.0
    g: float = 9.81
    dt: float = 0.0166

    def copy(self) -> "PendulumState":
        """Return an independent copy of this state."""
        return replace(self)


def joint_positions(state: PendulumState) -> Tuple[Tuple[float, float], Tuple[float, float]]:
    """
    Convert joint angles to Cartesian positions.

    The first pivot sits at the origin, angle 0 points straight down and
    angles grow counter-clockwise (+x right, +y up).

    Returns:
        ((x1, y1), (x2, y2)) positions of the first and second joint
    """
    x1 = state.l1 * math.sin(state.a1)
    y1 = -state.l1 * math.cos(state.a1)
    x2 = x1 + state.l2 * math.sin(state.a2)
    y2 = y1 - state.l2 * math.cos(state.a2)
    return (x1, y1), (x2, y2)
