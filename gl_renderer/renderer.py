"""
OpenGL Renderer for the Double Pendulum

Draws the pendulum scene with two inline shader programs and three dynamic
geometry batches on a moderngl context.

Features:
1. Arms drawn as line segments from the pivot through both joints
2. Bobs drawn as filled disks sized by mass
3. Optional trail of the second joint drawn as a line strip
4. Perspective camera recomposed every frame from live FOV / distance

Usage:
    from gl_renderer import Renderer

    renderer = Renderer(ctx, window_width=800, window_height=600)

    # In render loop:
    renderer.begin_frame(fov=60.0, distance=50.0)
    renderer.draw_trail((x2, y2))
    renderer.draw_line((0.0, 0.0), (x1, y1))
    renderer.draw_line((x1, y1), (x2, y2))
    renderer.draw_bob((x1, y1), m1)
    renderer.draw_bob((x2, y2), m2)

    # Shutdown:
    renderer.release()
"""

from typing import Optional

import moderngl
import numpy as np

from .batch import Color, GeometryBatch, Point, TrailBatch
from .camera import camera_matrix
from .resources import GLResourceError, GraphicsResourceManager


VERTEX_SHADER = """
#version 330 core

layout (location = 0) in vec2 aPos;
layout (location = 1) in vec3 aColor;

out vec3 fragColor;

uniform mat4 u_Camera;

void main()
{
    gl_Position = u_Camera * vec4(aPos, 0.0, 1.0);
    fragColor = aColor;
}
"""

FRAGMENT_SHADER = """
#version 330 core

in vec3 fragColor;

out vec4 outColor;

void main()
{
    outColor = vec4(fragColor, 1.0);
}
"""


class Renderer:
    """
    moderngl renderer for double pendulum visualization.

    Owns a GraphicsResourceManager; every GPU resource is created in
    __init__ and released by release().
    """

    # ========================================================================
    # COLOR CONSTANTS
    # ========================================================================

    COLOR_FG = (0.78, 0.82, 1.0)       # Arms and bobs
    COLOR_BG = (0.12, 0.11, 0.18)      # Clear color
    COLOR_TRAIL = (0.3, 0.3, 0.3)      # Trail of the second joint

    # Bob radius = clamp(mass * BOB_RADIUS_SCALE, BOB_RADIUS_MIN, BOB_RADIUS_MAX)
    BOB_RADIUS_SCALE = 0.1
    BOB_RADIUS_MIN = 0.1
    BOB_RADIUS_MAX = 2.0

    # ========================================================================
    # INITIALIZATION
    # ========================================================================

    def __init__(
        self,
        ctx: moderngl.Context,
        window_width: int = 800,
        window_height: int = 600,
        polygon_sides: int = 32,
        legacy_line_indices: bool = False,
        color_fg: Optional[Color] = None,
        color_bg: Optional[Color] = None,
        color_trail: Optional[Color] = None,
    ):
        """
        Initialize the renderer and allocate all GPU resources.

        Args:
            ctx: Current moderngl context
            window_width: Framebuffer width in pixels
            window_height: Framebuffer height in pixels
            polygon_sides: Perimeter vertices per bob disk
            legacy_line_indices: Draw arm segments with the 4-index list
                (see GeometryBatch)
            color_fg, color_bg, color_trail: Override the default colors

        Raises:
            GLResourceError: If any resource fails; the ones already created
                are released first
        """
        self.window_width = window_width
        self.window_height = window_height
        self.polygon_sides = polygon_sides
        self.color_fg = color_fg or self.COLOR_FG
        self.color_bg = color_bg or self.COLOR_BG
        self.color_trail = color_trail or self.COLOR_TRAIL

        self.resources = GraphicsResourceManager(ctx)
        try:
            self.shader = self.resources.create_shader(VERTEX_SHADER, FRAGMENT_SHADER)
            self.batch = GeometryBatch.create(self.resources, self.shader,
                                              legacy_line_indices=legacy_line_indices)
            self.trail = TrailBatch.create(self.resources, self.shader)
            self.resources.set_viewport(window_width, window_height)
        except GLResourceError:
            self.resources.destroy_all()
            raise

    @classmethod
    def bob_radius(cls, mass: float) -> float:
        """Disk radius for a bob of the given mass."""
        return float(np.clip(mass * cls.BOB_RADIUS_SCALE, cls.BOB_RADIUS_MIN, cls.BOB_RADIUS_MAX))

    # ========================================================================
    # FRAME
    # ========================================================================

    def resize(self, width: int, height: int) -> None:
        """Follow a framebuffer resize."""
        self.window_width = width
        self.window_height = height
        self.resources.set_viewport(width, height)

    def begin_frame(self, fov: float, distance: float) -> np.ndarray:
        """
        Clear the frame, bind the shader and upload the camera matrix.

        Returns:
            The camera matrix (projection x view x model)
        """
        self.resources.clear(self.color_bg)

        camera = camera_matrix(fov, distance, self.window_width, self.window_height)
        self.resources.bind_shader(self.shader)
        self.resources.set_uniform_matrix("u_Camera", camera)
        return camera

    # ========================================================================
    # PENDULUM DRAWING
    # ========================================================================

    def draw_line(self, p1: Point, p2: Point, color: Optional[Color] = None) -> None:
        self.batch.build_line_segment(p1, p2, color or self.color_fg)

    def draw_bob(self, center: Point, mass: float, color: Optional[Color] = None) -> None:
        self.batch.build_polygon(center, color or self.color_fg, self.bob_radius(mass), self.polygon_sides)

    def draw_trail(self, point: Point) -> None:
        """Append a point to the trail and draw the whole trail."""
        self.trail.append_point(point, self.color_trail)

    def clear_trail(self) -> None:
        self.trail.clear()

    # ========================================================================
    # SHUTDOWN
    # ========================================================================

    def release(self) -> None:
        """Destroy every GPU resource owned by this renderer."""
        self.resources.destroy_all()
