"""
Interactive double pendulum demo.

Main classes:
- PendulumDemo: Frame loop (physics step, drawing, window events)
- DemoConfig: Window, camera and start-up options
- ControlPanel: Keyboard-driven toggles, parameter edits and actions
"""

from .control_panel import ControlPanel, PARAMETER_BOUNDS
from .demo import DemoConfig, PendulumDemo

__all__ = [
    'ControlPanel',
    'PARAMETER_BOUNDS',
    'DemoConfig',
    'PendulumDemo',
]
