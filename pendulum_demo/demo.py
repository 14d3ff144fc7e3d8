#!/usr/bin/env python3
"""
Double Pendulum Demo

Runs the per-frame loop: read the panel toggles, apply gravity, derive the
joint positions, step the solver (unless paused), then draw the trail, arms
and bobs through the OpenGL renderer and present.

Uses:
- SolverSemiImplicit from pendulum/solvers for physics (warp kernel)
- Renderer from gl_renderer for drawing (moderngl on a pygame window)

Author: NBEL
License: Apache-2.0
"""

import argparse
import math
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

import moderngl
import pygame
import warp as wp

from pendulum import PendulumModel, PendulumState, SolverSemiImplicit, joint_positions
from gl_renderer import GLResourceError, Renderer

from .control_panel import ControlPanel


@dataclass
class DemoConfig:
    """Configuration for the double pendulum demo."""
    # Camera
    fov: float = 60.0
    distance: float = 50.0

    # Display
    window_width: int = 800
    window_height: int = 600
    polygon_sides: int = 32
    vsync: bool = True

    # Colors (None = renderer defaults)
    color_fg: Optional[Tuple[float, float, float]] = None
    color_bg: Optional[Tuple[float, float, float]] = None
    color_trail: Optional[Tuple[float, float, float]] = None

    # Panel defaults
    trail: bool = False
    paused: bool = False
    show_panel: bool = False

    # Warp device for the physics kernel
    device: str = "cpu"

    # Seed for the randomize actions (None = nondeterministic)
    seed: Optional[int] = None

    # Arms drawn with the 4-entry index list over stale vertices
    legacy_line_indices: bool = False

    # Headless progress output interval (steps)
    report_every: int = 100


class PendulumDemo:
    """
    Frame orchestrator for the double pendulum.

    Owns the long-lived PendulumState and feeds it through the solver and
    the renderer once per frame. The renderer is created in setup() (after
    the GL context exists) or can be passed in directly.

    Example:
        demo = PendulumDemo(DemoConfig(trail=True), PendulumModel(m2=5.0))
        demo.run()
    """

    def __init__(self, config: Optional[DemoConfig] = None, model: Optional[PendulumModel] = None,
                 renderer: Optional[Renderer] = None):
        """
        Initialize the demo.

        Args:
            config: Demo configuration (uses defaults if None)
            model: Initial pendulum constants (uses defaults if None)
            renderer: Pre-built renderer (created in setup() if None)
        """
        self.config = config or DemoConfig()

        wp.init()
        self.model = model or PendulumModel(seed=self.config.seed)
        self.solver = SolverSemiImplicit(self.model, device=self.config.device)
        self.state: PendulumState = self.model.state()

        cfg = self.config
        self.panel = ControlPanel(
            gravity=self.model.gravity,
            fov=cfg.fov,
            distance=cfg.distance,
            paused=cfg.paused,
            trail_enabled=cfg.trail,
            visible=cfg.show_panel,
        )

        self.renderer = renderer
        self.window: Optional[pygame.Surface] = None
        self.ctx: Optional[moderngl.Context] = None

        # Derived each frame
        self.positions: Tuple[Tuple[float, float], Tuple[float, float]] = joint_positions(self.state)

        # State tracking
        self.frame_count: int = 0
        self.running: bool = True
        self.start_time: float = time.perf_counter()
        self._caption: str = ""

    # ------------------------------------------------------------------------
    # Info / actions
    # ------------------------------------------------------------------------

    def elapsed(self) -> float:
        """Wall time since start or the last full reset, in seconds."""
        return time.perf_counter() - self.start_time

    def get_info_lines(self) -> List[str]:
        """Readout of the pendulum state for the panel / console."""
        s = self.state
        (x1, y1), (x2, y2) = self.positions
        return [
            f"Time elapsed: {self.elapsed():f}",
            "Pendulum 1:",
            f"  - x1: {x1:f}, y1: {y1:f}",
            f"  - angle: {math.degrees(s.a1):f} deg ({s.a1:f} rad)",
            f"  - angular velocity: {s.av1:f}",
            f"  - angular acceleration: {s.aa1:f}",
            "Pendulum 2:",
            f"  - x2: {x2:f}, y2: {y2:f}",
            f"  - angle: {math.degrees(s.a2):f} deg ({s.a2:f} rad)",
            f"  - angular velocity: {s.av2:f}",
            f"  - angular acceleration: {s.aa2:f}",
            f"mass: {s.m1:.2f}, {s.m2:.2f} | length: {s.l1:.2f}, {s.l2:.2f} | time step: {s.dt:.4f}",
        ] + self.panel.status_lines()

    def reset(self) -> None:
        """Full reset: initial constants, zero motion, restart the timer."""
        self.model.reset(self.state)
        self.positions = joint_positions(self.state)
        self.start_time = time.perf_counter()
        print("Reset!")

    def clear_trail(self) -> None:
        if self.renderer is not None:
            self.renderer.clear_trail()

    # ------------------------------------------------------------------------
    # Frame
    # ------------------------------------------------------------------------

    def _submit(self, label: str, draw, *args) -> bool:
        """Run one renderer call; a GPU failure aborts only that call."""
        try:
            draw(*args)
        except GLResourceError as exc:
            print(f"Warning: {label} skipped ({exc})")
            return False
        return True

    def step(self) -> None:
        """Apply gravity, derive positions and advance the physics one step."""
        panel = self.panel
        state = self.state

        state.g = panel.gravity if panel.gravity_on else 0.0

        # Positions are derived before the step, even while paused
        self.positions = joint_positions(state)

        if not panel.paused:
            self.solver.step(state)

    def render(self) -> None:
        """Draw the current frame (does not present)."""
        panel = self.panel
        renderer = self.renderer
        (x1, y1), (x2, y2) = self.positions

        # A failed frame setup skips every draw of the frame
        if not self._submit("frame setup", renderer.begin_frame, panel.fov, panel.distance):
            return

        if panel.trail_enabled:
            self._submit("trail", renderer.draw_trail, (x2, y2))

        self._submit("arm 1", renderer.draw_line, (0.0, 0.0), (x1, y1))
        self._submit("arm 2", renderer.draw_line, (x1, y1), (x2, y2))
        self._submit("bob 1", renderer.draw_bob, (x1, y1), self.state.m1)
        self._submit("bob 2", renderer.draw_bob, (x2, y2), self.state.m2)

    def frame(self) -> None:
        """One visual frame: physics then drawing."""
        self.step()
        self.render()
        self.frame_count += 1

    def present(self) -> None:
        """Hand the frame to the panel (window caption) and swap buffers."""
        caption = self.panel.caption(self)
        if caption != self._caption and self.frame_count % 10 == 0:
            pygame.display.set_caption(caption)
            self._caption = caption
        pygame.display.flip()

    # ------------------------------------------------------------------------
    # Window
    # ------------------------------------------------------------------------

    def setup(self) -> None:
        """Create the window, the GL context and the renderer."""
        cfg = self.config

        print("=" * 70)
        print("DOUBLE PENDULUM")
        print("=" * 70)
        print()

        pygame.init()
        if not pygame.display.get_init():
            raise RuntimeError("failed to initialize pygame display")

        pygame.display.gl_set_attribute(pygame.GL_CONTEXT_MAJOR_VERSION, 3)
        pygame.display.gl_set_attribute(pygame.GL_CONTEXT_MINOR_VERSION, 3)
        pygame.display.gl_set_attribute(pygame.GL_CONTEXT_PROFILE_MASK, pygame.GL_CONTEXT_PROFILE_CORE)
        pygame.display.gl_set_attribute(pygame.GL_CONTEXT_FORWARD_COMPATIBLE_FLAG, 1)

        flags = pygame.OPENGL | pygame.DOUBLEBUF | pygame.RESIZABLE
        try:
            self.window = pygame.display.set_mode(
                (cfg.window_width, cfg.window_height), flags, vsync=1 if cfg.vsync else 0,
            )
        except pygame.error as exc:
            raise RuntimeError(f"failed to create window: {exc}") from exc
        pygame.display.set_caption("double pendulum")
        print("Window initialized")

        try:
            self.ctx = moderngl.create_context()
        except Exception as exc:
            raise RuntimeError(f"failed to create OpenGL context: {exc}") from exc
        print(f"OpenGL context initialized ({self.ctx.info['GL_VERSION']})")

        if self.renderer is None:
            self.renderer = Renderer(
                self.ctx,
                window_width=cfg.window_width,
                window_height=cfg.window_height,
                polygon_sides=cfg.polygon_sides,
                legacy_line_indices=cfg.legacy_line_indices,
                color_fg=cfg.color_fg,
                color_bg=cfg.color_bg,
                color_trail=cfg.color_trail,
            )
        print()

    def handle_events(self) -> None:
        """Handle pygame events."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False
            elif event.type == pygame.VIDEORESIZE:
                self._submit("resize", self.renderer.resize, max(event.w, 1), max(event.h, 1))
            elif event.type == pygame.KEYDOWN:
                self.panel.handle_key(event.key, self)

    def shutdown(self) -> None:
        """Release GPU resources and close the window."""
        if self.renderer is not None:
            self.renderer.release()
        if self.ctx is not None:
            self.ctx.release()
            self.ctx = None
        pygame.quit()

    def run(self) -> Dict[str, Any]:
        """
        Run the interactive demo until the window closes.

        Returns:
            Summary dictionary with simulation results
        """
        try:
            self.setup()

            print("=" * 70)
            print("SIMULATION STARTED")
            print("=" * 70)
            print("Press C to show the settings, SPACE to pause, R to reset, Q/ESC to quit")
            print()

            self.start_time = time.perf_counter()
            while self.running:
                self.handle_events()
                self.frame()
                self.present()
        finally:
            self.shutdown()

        summary = self.get_summary()

        print()
        print("=" * 70)
        print("SIMULATION COMPLETE")
        print("=" * 70)
        print(f"  Frames: {summary['frames']}")
        print(f"  Steps: {summary['steps']}")
        print()

        return summary

    def run_headless(self, steps: int) -> Dict[str, Any]:
        """
        Run the solver only, without a window or GL context.

        Args:
            steps: Number of frames to simulate

        Returns:
            Summary dictionary with simulation results
        """
        report_every = max(self.config.report_every, 1)

        print("=" * 70)
        print(f"HEADLESS RUN: {steps} steps, dt={self.state.dt}")
        print("=" * 70)

        self.start_time = time.perf_counter()
        for i in range(steps):
            self.step()
            self.frame_count += 1
            if (i + 1) % report_every == 0:
                s = self.state
                print(f"step={i + 1} | a1={s.a1:.4f} | a2={s.a2:.4f} | av1={s.av1:+.4f} | av2={s.av2:+.4f}")

        self.positions = joint_positions(self.state)
        summary = self.get_summary()

        print()
        for line in self.get_info_lines():
            print(line)
        print()

        return summary

    def get_summary(self) -> Dict[str, Any]:
        s = self.state
        (x1, y1), (x2, y2) = self.positions
        return {
            'frames': self.frame_count,
            'steps': self.solver.step_count,
            'a1': s.a1,
            'a2': s.a2,
            'av1': s.av1,
            'av2': s.av2,
            'position_1': (x1, y1),
            'position_2': (x2, y2),
        }

    # ------------------------------------------------------------------------
    # Command line
    # ------------------------------------------------------------------------

    @classmethod
    def add_common_args(cls, parser: argparse.ArgumentParser) -> None:
        """Add common command-line arguments to parser."""
        parser.add_argument('--m1', type=float, default=10.0, help='Mass of the first arm (default: 10)')
        parser.add_argument('--m2', type=float, default=10.0, help='Mass of the second arm (default: 10)')
        parser.add_argument('--l1', type=float, default=10.0, help='Length of the first arm (default: 10)')
        parser.add_argument('--l2', type=float, default=10.0, help='Length of the second arm (default: 10)')
        parser.add_argument('--a1', type=float, default=90.0,
                            help='Initial angle of the first arm in degrees, 0 = down (default: 90)')
        parser.add_argument('--a2', type=float, default=90.0,
                            help='Initial angle of the second arm in degrees, 0 = down (default: 90)')
        parser.add_argument('--gravity', '-g', type=float, default=9.81,
                            help='Gravitational constant (default: 9.81)')
        parser.add_argument('--dt', type=float, default=0.0166, help='Time step (default: 0.0166)')
        parser.add_argument('--seed', type=int, default=None, help='Seed for the randomize actions')
        parser.add_argument('--device', type=str, default='cpu', choices=['cpu', 'cuda'],
                            help='Warp device for the physics kernel (default: cpu)')
        parser.add_argument('--fov', type=float, default=60.0, help='Camera field of view in degrees (default: 60)')
        parser.add_argument('--distance', type=float, default=50.0, help='Camera distance (default: 50)')
        parser.add_argument('--window-width', type=int, default=800, help='Window width (default: 800)')
        parser.add_argument('--window-height', type=int, default=600, help='Window height (default: 600)')
        parser.add_argument('--trail', action='store_true', help='Start with the trail enabled')
        parser.add_argument('--paused', action='store_true', help='Start paused')
        parser.add_argument('--show-panel', action='store_true', help='Start with the info panel visible')
        parser.add_argument('--no-vsync', action='store_true', help='Disable vsync')
        parser.add_argument('--legacy-line-indices', action='store_true',
                            help='Draw arms with the 4-entry index list (reads stale vertices)')
        parser.add_argument('--headless', action='store_true', help='Run the solver only, no window')
        parser.add_argument('--steps', '-n', type=int, default=1000,
                            help='Steps to simulate in headless mode (default: 1000)')
        parser.add_argument('--report-every', type=int, default=100,
                            help='Headless progress interval in steps (default: 100)')

    @classmethod
    def config_from_args(cls, args) -> DemoConfig:
        """Create DemoConfig from parsed arguments."""
        return DemoConfig(
            fov=args.fov,
            distance=args.distance,
            window_width=args.window_width,
            window_height=args.window_height,
            vsync=not args.no_vsync,
            trail=args.trail,
            paused=args.paused,
            show_panel=args.show_panel,
            device=args.device,
            seed=args.seed,
            legacy_line_indices=args.legacy_line_indices,
            report_every=args.report_every,
        )

    @classmethod
    def model_from_args(cls, args) -> PendulumModel:
        """Create PendulumModel from parsed arguments."""
        return PendulumModel(
            m1=args.m1,
            m2=args.m2,
            l1=args.l1,
            l2=args.l2,
            a1_deg=args.a1,
            a2_deg=args.a2,
            g=args.gravity,
            dt=args.dt,
            seed=args.seed,
        )
