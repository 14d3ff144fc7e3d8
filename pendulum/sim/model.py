# SPDX-FileCopyrightText: Copyright (c) 2025 NBEL
# SPDX-License-Identifier: Apache-2.0
#
# Model class holding the initial constants of a double pendulum

import math
from typing import Optional

import numpy as np

from .state import PendulumState


class PendulumModel:
    """
    Represents the static definition of a double pendulum.

    Stores the initial constants the simulation starts from and returns to on
    a full reset, plus the random source used by the randomize actions.

    Key Features:
        - Builds fresh PendulumState objects from the initial constants
        - Resets an existing state in place (the state object is long-lived)
        - Randomizes masses, lengths and angles on an existing state
    """

    # Randomization ranges: value = offset + randint(0, span)
    MASS_OFFSET = 0.1
    MASS_SPAN = 100
    LENGTH_OFFSET = 0.1
    LENGTH_SPAN = 50

    def __init__(
        self,
        m1: float = 10.0,
        m2: float = 10.0,
        l1: float = 10.0,
        l2: float = 10.0,
        a1_deg: float = 90.0,
        a2_deg: float = 90.0,
        g: float = 9.81,
        dt: float = 0.0166,
        seed: Optional[int] = None,
    ):
        """
        Initialize a PendulumModel.

        Args:
            m1, m2: Initial arm masses
            l1, l2: Initial arm lengths
            a1_deg, a2_deg: Initial joint angles in degrees (0 = hanging down)
            g: Gravitational constant
            dt: Time increment per step
            seed: Seed for the randomize actions (None = nondeterministic)
        """
        self.m1 = m1
        self.m2 = m2
        self.l1 = l1
        self.l2 = l2
        self.a1 = math.radians(a1_deg)
        self.a2 = math.radians(a2_deg)
        self.gravity = g
        self.dt = dt

        self.rng = np.random.default_rng(seed)

    def state(self) -> PendulumState:
        """
        Create and return a new PendulumState for this model.

        Returns:
            PendulumState: At rest at the initial angles
        """
        return PendulumState(
            a1=self.a1,
            a2=self.a2,
            m1=self.m1,
            m2=self.m2,
            l1=self.l1,
            l2=self.l2,
            g=self.gravity,
            dt=self.dt,
        )

    def reset(self, state: PendulumState) -> PendulumState:
        """
        Restore masses, lengths and angles to the initial constants in place.

        Velocities and accelerations are zeroed. Gravity and dt are left alone,
        they belong to the panel settings rather than to the pendulum.
        """
        state.m1, state.m2 = self.m1, self.m2
        state.l1, state.l2 = self.l1, self.l2
        state.a1, state.a2 = self.a1, self.a2
        self.reset_velocity(state)
        self.reset_acceleration(state)
        return state

    @staticmethod
    def reset_velocity(state: PendulumState) -> None:
        state.av1 = 0.0
        state.av2 = 0.0

    @staticmethod
    def reset_acceleration(state: PendulumState) -> None:
        state.aa1 = 0.0
        state.aa2 = 0.0

    def randomize_mass(self, state: PendulumState) -> None:
        state.m1 = self.MASS_OFFSET + float(self.rng.integers(0, self.MASS_SPAN))
        state.m2 = self.MASS_OFFSET + float(self.rng.integers(0, self.MASS_SPAN))

    def randomize_length(self, state: PendulumState) -> None:
        state.l1 = self.LENGTH_OFFSET + float(self.rng.integers(0, self.LENGTH_SPAN))
        state.l2 = self.LENGTH_OFFSET + float(self.rng.integers(0, self.LENGTH_SPAN))

    def randomize_angles(self, state: PendulumState) -> None:
        state.a1 = float(self.rng.uniform(0.0, 2.0 * math.pi))
        state.a2 = float(self.rng.uniform(0.0, 2.0 * math.pi))

    def randomize(self, state: PendulumState) -> None:
        """Randomize masses, lengths and angles together."""
        self.randomize_mass(state)
        self.randomize_length(state)
        self.randomize_angles(state)
