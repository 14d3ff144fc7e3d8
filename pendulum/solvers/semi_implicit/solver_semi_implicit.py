# SPDX-FileCopyrightText: Copyright (c) 2025 NBEL
# SPDX-License-Identifier: Apache-2.0
#
# Fixed-step semi-implicit solver for the double pendulum

from typing import Optional

from ..solver import SolverBase
from ...sim.model import PendulumModel
from ...sim.state import PendulumState
from .kernels_pendulum import integrate_pendulum


class SolverSemiImplicit(SolverBase):
    """
    A fixed-step semi-implicit integrator for the double pendulum.

    Velocities are updated first and the new velocities drive the angle
    update. The angular acceleration is pre-scaled by dt before it is added
    to the velocity, so the scheme does not match a textbook symplectic Euler
    integrator bit for bit. Large dt values go unstable; nothing corrects it.

    Example:
        >>> model = PendulumModel()
        >>> solver = SolverSemiImplicit(model)
        >>> state = model.state()
        >>>
        >>> for i in range(100):
        >>>     solver.step(state)
    """

    def __init__(self, model: Optional[PendulumModel] = None, device: str = "cpu"):
        """
        Initialize the semi-implicit solver.

        Args:
            model: The PendulumModel the states were created from
            device: Warp device the update kernel runs on ('cpu' or 'cuda')
        """
        super().__init__(model)
        self.device = device

    def step(self, state_in: PendulumState, state_out: Optional[PendulumState] = None) -> PendulumState:
        """
        Advance the pendulum by one step of state_in.dt.

        Args:
            state_in: The input state
            state_out: The output state (None = update state_in in place)

        Returns:
            The output state
        """
        if state_out is None:
            state_out = state_in

        integrate_pendulum(state_in, state_out, device=self.device)
        self.step_count += 1

        return state_out
