# SPDX-FileCopyrightText: Copyright (c) 2025 NBEL
# SPDX-License-Identifier: Apache-2.0
#
# Fixed-step semi-implicit solver for the double pendulum

from .solver_semi_implicit import SolverSemiImplicit
from .kernels_pendulum import (
    TWO_PI,
    angular_accelerations,
    integrate_pendulum,
    integrate_pendulum_kernel,
    wrap_angle,
)

__all__ = [
    "SolverSemiImplicit",
    "TWO_PI",
    "angular_accelerations",
    "integrate_pendulum",
    "integrate_pendulum_kernel",
    "wrap_angle",
]
