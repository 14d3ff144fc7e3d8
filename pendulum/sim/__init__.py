# SPDX-FileCopyrightText: Copyright (c) 2025 NBEL
# SPDX-License-Identifier: Apache-2.0

from .state import PendulumState, joint_positions
from .model import PendulumModel

__all__ = [
    "PendulumModel",
    "PendulumState",
    "joint_positions",
]
