# SPDX-FileCopyrightText: Copyright (c) 2025 NBEL
# SPDX-License-Identifier: Apache-2.0
#
# Base solver class for double pendulum simulations

from typing import Optional

from ..sim.model import PendulumModel
from ..sim.state import PendulumState


class SolverBase:
    """
    Generic base class for double pendulum solvers.

    Defines the interface that concrete solvers must implement and keeps a
    count of the steps taken.
    """

    def __init__(self, model: Optional[PendulumModel] = None):
        """
        Initialize the solver with a model.

        Args:
            model: The PendulumModel the states were created from (optional,
                   the step itself only reads the state)
        """
        self.model = model
        self.step_count = 0

    def step(self, state_in: PendulumState, state_out: Optional[PendulumState] = None) -> PendulumState:
        """
        Simulate the pendulum for one time increment (state_in.dt).

        Must be implemented by concrete solver subclasses.

        Args:
            state_in: The input state
            state_out: The output state (None = update state_in in place)

        Returns:
            The output state
        """
        raise NotImplementedError("Concrete solvers must implement step()")

    def simulate(self, state: PendulumState, steps: int) -> PendulumState:
        """Advance state in place by a number of steps."""
        for _ in range(steps):
            self.step(state)
        return state
