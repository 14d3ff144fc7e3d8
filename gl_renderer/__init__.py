"""
OpenGL Renderer for the Double Pendulum.

Main classes:
- Renderer: Draws the pendulum scene (arms, bobs, trail) with a camera
- GraphicsResourceManager: Owns buffers, vertex arrays and shader programs
- GeometryBatch / TrailBatch: Transient geometry uploaded every draw
"""

from .renderer import Renderer
from .batch import (
    GeometryBatch,
    TrailBatch,
    VERTEX_DTYPE,
    VERTEX_LAYOUT,
    MAX_VERTICES,
    MAX_INDICES,
    MAX_TRAIL_VERTICES,
)
from .resources import (
    GraphicsResourceManager,
    GLResourceError,
    BufferOverflowError,
    ShaderCompileError,
    ResourceReleasedError,
)

__all__ = [
    'Renderer',
    'GeometryBatch',
    'TrailBatch',
    'VERTEX_DTYPE',
    'VERTEX_LAYOUT',
    'MAX_VERTICES',
    'MAX_INDICES',
    'MAX_TRAIL_VERTICES',
    'GraphicsResourceManager',
    'GLResourceError',
    'BufferOverflowError',
    'ShaderCompileError',
    'ResourceReleasedError',
]
