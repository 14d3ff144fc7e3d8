"""
Transient geometry batches.

GeometryBatch rebuilds a small vertex/index set from scratch on every draw
(filled regular polygons and line segments). TrailBatch keeps a bounded FIFO
history of points and draws it as a line strip.

Both write into GPU buffers allocated once at startup: every draw is
rewrite CPU arrays -> sub-range upload -> bind -> draw -> unbind.
A batch has a single owner; do not interleave draws on the same batch.
"""

from typing import Optional, Sequence, Tuple

import moderngl
import numpy as np

from .resources import (
    GraphicsResourceManager,
    IndexBuffer,
    ShaderProgram,
    VertexArray,
    VertexAttribute,
    VertexBuffer,
)


# Interleaved vertex record: position (2 x f32) then color (3 x f32), 20 bytes
VERTEX_DTYPE = np.dtype([("position", np.float32, 2), ("color", np.float32, 3)])
VERTEX_SIZE = VERTEX_DTYPE.itemsize
INDEX_DTYPE = np.dtype(np.uint32)
INDEX_SIZE = INDEX_DTYPE.itemsize

VERTEX_LAYOUT = (
    VertexAttribute(index=0, components=2, name="aPos", offset=0),
    VertexAttribute(index=1, components=3, name="aColor", offset=8),
)

MAX_VERTICES = 256
MAX_INDICES = MAX_VERTICES * 8
MAX_TRAIL_VERTICES = 65535

Point = Tuple[float, float]
Color = Tuple[float, float, float]


class GeometryBatch:
    """
    Vertex/index arrays rebuilt for every draw call.

    Attributes:
        vertices: Structured array (VERTEX_DTYPE) written by the last build
        indices: uint32 array written by the last build
        legacy_line_indices: Draw line segments with the 4-entry index list
            {0, 1, 2, 3}. Only 2 vertices are valid, so the extra pair reads
            whatever the previous draw left in the vertex buffer. Off by
            default; segments then use {0, 1}.
    """

    def __init__(self, resources: GraphicsResourceManager, vertex_buffer: VertexBuffer,
                 index_buffer: IndexBuffer, vertex_array: VertexArray,
                 legacy_line_indices: bool = False):
        self.resources = resources
        self.vertex_buffer = vertex_buffer
        self.index_buffer = index_buffer
        self.vertex_array = vertex_array
        self.legacy_line_indices = legacy_line_indices

        self.vertices = np.zeros(0, dtype=VERTEX_DTYPE)
        self.indices = np.zeros(0, dtype=INDEX_DTYPE)

    @classmethod
    def create(cls, resources: GraphicsResourceManager, program: ShaderProgram,
               max_vertices: int = MAX_VERTICES, max_indices: Optional[int] = None,
               legacy_line_indices: bool = False) -> "GeometryBatch":
        """Allocate the batch's buffers and vertex array on a resource manager."""
        if max_indices is None:
            max_indices = max_vertices * 8

        vertex_buffer = resources.create_vertex_buffer(max_vertices * VERTEX_SIZE, VERTEX_SIZE)
        index_buffer = resources.create_index_buffer(max_indices * INDEX_SIZE)
        vertex_array = resources.create_vertex_array(
            program, vertex_buffer, VERTEX_LAYOUT, VERTEX_SIZE, index_buffer=index_buffer,
        )
        return cls(resources, vertex_buffer, index_buffer, vertex_array, legacy_line_indices)

    def build_polygon(self, center: Point, color: Color, radius: float, sides: int) -> None:
        """
        Build and draw a filled regular polygon as a triangle fan.

        Vertex 0 is the center, vertex i+1 sits at angle i * 2*pi/sides.
        Triangle i is (0, i+1, i+2); the last triangle's third index is
        replaced by the first perimeter vertex to close the disk.

        sides = 0 draws nothing.
        """
        cx, cy = center
        angles = np.arange(sides, dtype=np.float64) * (2.0 * np.pi / sides) if sides else np.zeros(0)

        vertices = np.empty(sides + 1, dtype=VERTEX_DTYPE)
        vertices["position"][0] = (cx, cy)
        vertices["position"][1:, 0] = cx + radius * np.cos(angles)
        vertices["position"][1:, 1] = cy + radius * np.sin(angles)
        vertices["color"] = color

        ring = np.arange(sides, dtype=INDEX_DTYPE)
        indices = np.empty((sides, 3), dtype=INDEX_DTYPE)
        indices[:, 0] = 0
        indices[:, 1] = ring + 1
        indices[:, 2] = ring + 2
        indices = indices.reshape(-1)

        if sides > 0:
            indices[-1] = indices[1]

        self.vertices = vertices
        self.indices = indices
        self._submit(moderngl.TRIANGLES)

    def build_line_segment(self, p1: Point, p2: Point, color: Color) -> None:
        """Build and draw a single line segment from p1 to p2."""
        vertices = np.empty(2, dtype=VERTEX_DTYPE)
        vertices["position"][0] = p1
        vertices["position"][1] = p2
        vertices["color"] = color

        if self.legacy_line_indices:
            indices = np.array([0, 1, 2, 3], dtype=INDEX_DTYPE)
        else:
            indices = np.array([0, 1], dtype=INDEX_DTYPE)

        self.vertices = vertices
        self.indices = indices
        self._submit(moderngl.LINES)

    def _submit(self, topology: int) -> None:
        resources = self.resources
        resources.update_buffer(self.vertex_buffer, self.vertices)
        resources.update_buffer(self.index_buffer, self.indices)

        resources.bind_vertex_array(self.vertex_array)
        try:
            resources.draw_indexed(topology, len(self.indices))
        finally:
            resources.unbind_vertex_array()


class TrailBatch:
    """
    Bounded FIFO of points drawn as a connected line strip.

    When the trail is full, appending a point discards the oldest one.
    The whole retained sequence is re-uploaded on every append.
    """

    def __init__(self, resources: GraphicsResourceManager, vertex_buffer: VertexBuffer,
                 vertex_array: VertexArray, capacity: int = MAX_TRAIL_VERTICES):
        self.resources = resources
        self.vertex_buffer = vertex_buffer
        self.vertex_array = vertex_array
        self.capacity = capacity

        self._vertices = np.zeros(capacity, dtype=VERTEX_DTYPE)
        self._count = 0

    @classmethod
    def create(cls, resources: GraphicsResourceManager, program: ShaderProgram,
               capacity: int = MAX_TRAIL_VERTICES) -> "TrailBatch":
        """Allocate the trail's vertex buffer and (non-indexed) vertex array."""
        vertex_buffer = resources.create_vertex_buffer(capacity * VERTEX_SIZE, VERTEX_SIZE)
        vertex_array = resources.create_vertex_array(program, vertex_buffer, VERTEX_LAYOUT, VERTEX_SIZE)
        return cls(resources, vertex_buffer, vertex_array, capacity)

    def __len__(self) -> int:
        return self._count

    @property
    def vertices(self) -> np.ndarray:
        """The live vertex sequence, oldest first (a view, do not keep it)."""
        return self._vertices[:self._count]

    def append_point(self, point: Point, color: Color) -> None:
        """Append a point (evicting the oldest when full) and draw the trail."""
        if self._count >= self.capacity:
            self._vertices[:-1] = self._vertices[1:]
            self._count = self.capacity - 1

        self._vertices[self._count] = (point, color)
        self._count += 1

        resources = self.resources
        resources.update_buffer(self.vertex_buffer, self.vertices)

        resources.bind_vertex_array(self.vertex_array)
        try:
            resources.draw(moderngl.LINE_STRIP, 0, self._count)
        finally:
            resources.unbind_vertex_array()

    def clear(self) -> None:
        self._count = 0
