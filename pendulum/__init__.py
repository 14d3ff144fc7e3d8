# SPDX-FileCopyrightText: Copyright (c) 2025 NBEL
# SPDX-License-Identifier: Apache-2.0
#
# Double pendulum physics: state/model definitions and step solvers

from .sim import PendulumModel, PendulumState, joint_positions
from .solvers import SolverBase, SolverSemiImplicit

__all__ = [
    "PendulumModel",
    "PendulumState",
    "joint_positions",
    "SolverBase",
    "SolverSemiImplicit",
]
