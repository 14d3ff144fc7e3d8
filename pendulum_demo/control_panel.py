"""
Keyboard control panel for the double pendulum demo.

Owns the toggles the frame loop reads every frame (pause, gravity, trail),
the camera settings and the configured gravity constant, and maps key presses
to edits and actions on the pendulum state. Edits are clamped to the panel
bounds only; the state itself is never validated.

Key bindings:
    SPACE       play / pause
    G / T / C   toggle gravity / trail / info panel
    M / L / A   randomize mass / length / angles
    X           randomize all
    V / K       reset angular velocity / angular acceleration
    E           erase trail
    R           full reset
    1..8        m1-/m1+ m2-/m2+ l1-/l1+ l2-/l2+
    9 / 0       a1-/a1+       - / =   a2-/a2+
    , / .       gravity constant -/+
    UP / DOWN   time step +/-
    LEFT/RIGHT  FOV -/+
    PGUP/PGDN   camera distance -/+
    I           print info to the console
    Q / ESC     quit
"""

import math
from typing import Dict, List, Tuple

import numpy as np
import pygame


# Panel bounds (min, max) for editable values
PARAMETER_BOUNDS: Dict[str, Tuple[float, float]] = {
    "m1": (0.1, 4096.0),
    "m2": (0.1, 4096.0),
    "l1": (0.1, 4096.0),
    "l2": (0.1, 4096.0),
    "a1": (0.0, 6.28),
    "a2": (0.0, 6.28),
    "dt": (0.0001, 1.0),
    "fov": (10.0, 90.0),
    "distance": (1.0, 4096.0),
}

# key -> (parameter, increment); state fields unless listed in PANEL_FIELDS
ADJUST_KEYS = {
    pygame.K_1: ("m1", -1.0), pygame.K_2: ("m1", 1.0),
    pygame.K_3: ("m2", -1.0), pygame.K_4: ("m2", 1.0),
    pygame.K_5: ("l1", -1.0), pygame.K_6: ("l1", 1.0),
    pygame.K_7: ("l2", -1.0), pygame.K_8: ("l2", 1.0),
    pygame.K_9: ("a1", -0.05), pygame.K_0: ("a1", 0.05),
    pygame.K_MINUS: ("a2", -0.05), pygame.K_EQUALS: ("a2", 0.05),
    pygame.K_COMMA: ("gravity", -0.1), pygame.K_PERIOD: ("gravity", 0.1),
    pygame.K_DOWN: ("dt", -0.001), pygame.K_UP: ("dt", 0.001),
    pygame.K_LEFT: ("fov", -1.0), pygame.K_RIGHT: ("fov", 1.0),
    pygame.K_PAGEUP: ("distance", -1.0), pygame.K_PAGEDOWN: ("distance", 1.0),
}

PANEL_FIELDS = ("gravity", "fov", "distance")

ACTION_KEYS = {
    pygame.K_SPACE: "toggle_pause",
    pygame.K_g: "toggle_gravity",
    pygame.K_t: "toggle_trail",
    pygame.K_c: "toggle_visible",
    pygame.K_m: "randomize_mass",
    pygame.K_l: "randomize_length",
    pygame.K_a: "randomize_angles",
    pygame.K_x: "randomize",
    pygame.K_v: "reset_velocity",
    pygame.K_k: "reset_acceleration",
    pygame.K_e: "reset_trail",
    pygame.K_r: "reset",
    pygame.K_i: "print_info",
    pygame.K_q: "quit",
    pygame.K_ESCAPE: "quit",
}


class ControlPanel:
    """
    UI collaborator of the frame loop.

    Attributes:
        paused: Skip the integrator step (rendering continues)
        gravity_on: Use `gravity` as g; 0 when off
        trail_enabled: Append and draw the trail every frame
        visible: Show the info readout in the window caption
        gravity: Configured gravitational constant
        fov: Camera field of view in degrees
        distance: Camera distance from the pivot
    """

    def __init__(self, gravity: float = 9.81, fov: float = 60.0, distance: float = 50.0,
                 paused: bool = False, gravity_on: bool = True, trail_enabled: bool = False,
                 visible: bool = False):
        self.paused = paused
        self.gravity_on = gravity_on
        self.trail_enabled = trail_enabled
        self.visible = visible
        self.gravity = gravity
        self.fov = fov
        self.distance = distance

    @property
    def play_pause_label(self) -> str:
        return "play" if self.paused else "pause"

    def handle_key(self, key: int, demo) -> bool:
        """
        Apply the edit or action bound to a key.

        Args:
            key: pygame key code
            demo: The PendulumDemo whose state and actions the key drives

        Returns:
            True if the key was bound
        """
        if key in ACTION_KEYS:
            self.trigger(ACTION_KEYS[key], demo)
            return True
        if key in ADJUST_KEYS:
            name, delta = ADJUST_KEYS[key]
            self.adjust(name, delta, demo.state)
            return True
        return False

    def trigger(self, action: str, demo) -> None:
        """Run a named action against the demo."""
        model, state = demo.model, demo.state

        if action == "toggle_pause":
            self.paused = not self.paused
            print("Paused" if self.paused else "Resumed")
        elif action == "toggle_gravity":
            self.gravity_on = not self.gravity_on
            print(f"Gravity {'on' if self.gravity_on else 'off'}")
        elif action == "toggle_trail":
            self.trail_enabled = not self.trail_enabled
            print(f"Trail {'on' if self.trail_enabled else 'off'}")
        elif action == "toggle_visible":
            self.visible = not self.visible
        elif action == "randomize_mass":
            model.randomize_mass(state)
        elif action == "randomize_length":
            model.randomize_length(state)
        elif action == "randomize_angles":
            model.randomize_angles(state)
        elif action == "randomize":
            model.randomize(state)
        elif action == "reset_velocity":
            model.reset_velocity(state)
        elif action == "reset_acceleration":
            model.reset_acceleration(state)
        elif action == "reset_trail":
            demo.clear_trail()
        elif action == "reset":
            demo.reset()
        elif action == "print_info":
            for line in demo.get_info_lines():
                print(line)
        elif action == "quit":
            demo.running = False
        else:
            raise ValueError(f"Unknown panel action '{action}'")

    def adjust(self, name: str, delta: float, state) -> float:
        """
        Nudge a panel or state value by delta, clamped to the panel bounds.

        Returns:
            The new value
        """
        target = self if name in PANEL_FIELDS else state
        value = getattr(target, name) + delta
        if name in PARAMETER_BOUNDS:
            lo, hi = PARAMETER_BOUNDS[name]
            value = float(np.clip(value, lo, hi))
        setattr(target, name, value)
        return value

    def caption(self, demo) -> str:
        """Window caption: the info readout when visible, a hint otherwise."""
        if not self.visible:
            return "double pendulum - press C for settings"
        s = demo.state
        (x1, y1), (x2, y2) = demo.positions
        return (
            f"t={demo.elapsed():.1f}s | "
            f"a1={math.degrees(s.a1):.1f} a2={math.degrees(s.a2):.1f} deg | "
            f"p1=({x1:.2f}, {y1:.2f}) p2=({x2:.2f}, {y2:.2f}) | "
            f"g={'%.2f' % self.gravity if self.gravity_on else 'off'} dt={s.dt:.4f} | "
            f"fov={self.fov:.0f} dist={self.distance:.0f} | "
            f"[{self.play_pause_label}]"
        )

    def status_lines(self) -> List[str]:
        return [
            f"gravity constant: {self.gravity:.2f} ({'on' if self.gravity_on else 'off'})",
            f"trails: {'on' if self.trail_enabled else 'off'}",
            f"camera: fov {self.fov:.1f}, scale {self.distance:.1f}",
        ]
