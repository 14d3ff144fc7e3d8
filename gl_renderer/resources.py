"""
GPU resource management for the OpenGL renderer.

Owns every buffer, vertex array and shader program handle created on a
moderngl context and exposes the small update/bind/draw protocol the
geometry batches use:

    resources = GraphicsResourceManager(ctx)
    shader = resources.create_shader(VERTEX_SRC, FRAGMENT_SRC)
    vbo = resources.create_vertex_buffer(capacity=256 * 20)
    vao = resources.create_vertex_array(shader, vbo, VERTEX_LAYOUT, stride=20)

    # Every frame:
    resources.update_buffer(vbo, vertices)      # sub-range write, no realloc
    resources.bind_shader(shader)
    resources.bind_vertex_array(vao)
    resources.draw(moderngl.TRIANGLES, 0, len(vertices))
    resources.unbind_vertex_array()

    # Shutdown (or leave the `with resources:` block):
    resources.destroy_all()

Bind establishes the state consumed by the next draw. Drawing without a bound
shader and vertex array is a precondition violation checked with `assert`.

Every mutating call is followed by a GL error check. Failures raise a
GLResourceError subclass; pending error codes are printed the same way for
every call site.
"""

from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Tuple

import moderngl
import numpy as np


# ============================================================================
# ERRORS
# ============================================================================

GL_NO_ERROR = "GL_NO_ERROR"

GL_ERROR_MESSAGES = {
    "GL_INVALID_ENUM": "invalid enum value",
    "GL_INVALID_VALUE": "invalid parameter value",
    "GL_INVALID_OPERATION": "invalid operation, state for a command is invalid for its given parameters",
    "GL_STACK_OVERFLOW": "stack overflow, stack pushing operation causes stack overflow",
    "GL_STACK_UNDERFLOW": "stack underflow, stack popping operation occurs while stack is at its lowest point",
    "GL_OUT_OF_MEMORY": "out of memory, memory allocation cannot allocate enough memory",
    "GL_INVALID_FRAMEBUFFER_OPERATION": "reading or writing to a framebuffer that is not complete",
}

# glGetError is drained in a loop; stop if a broken driver never reports GL_NO_ERROR
_MAX_PENDING_ERRORS = 32


class GLResourceError(RuntimeError):
    """A GPU resource could not be created, updated or used."""

    def __init__(self, message: str, codes: Sequence[str] = ()):
        super().__init__(message)
        self.codes = list(codes)


class BufferOverflowError(GLResourceError):
    """A sub-range update would write past the buffer's declared capacity."""


class ShaderCompileError(GLResourceError):
    """A shader failed to compile or the program failed to link."""

    def __init__(self, message: str, log: str = ""):
        super().__init__(message)
        self.log = log


class ResourceReleasedError(GLResourceError):
    """A handle was used after it was destroyed."""


# ============================================================================
# HANDLES
# ============================================================================

class GLResource:
    """
    Opaque handle around one moderngl object.

    Handles are created and destroyed only by GraphicsResourceManager.
    """

    kind = "resource"

    def __init__(self, glo: Any):
        self._glo = glo
        self.released = False

    @property
    def glo(self) -> Any:
        """The wrapped moderngl object."""
        if self.released:
            raise ResourceReleasedError(f"{self.kind} used after destroy")
        return self._glo

    @property
    def id(self) -> int:
        """OpenGL object name."""
        return self.glo.glo

    def __repr__(self) -> str:
        state = "released" if self.released else f"id={self._glo.glo}"
        return f"<{type(self).__name__} {state}>"


class Buffer(GLResource):
    """Fixed-capacity GPU buffer written through sub-range updates."""

    kind = "buffer"

    def __init__(self, glo: Any, capacity: int, element_size: int):
        super().__init__(glo)
        self.capacity = capacity
        self.element_size = element_size
        self.used = 0  # bytes covered by the last update

    @property
    def count(self) -> int:
        """Number of elements the buffer can hold."""
        return self.capacity // self.element_size


class VertexBuffer(Buffer):
    kind = "vertex buffer"


class IndexBuffer(Buffer):
    kind = "index buffer"


class ShaderProgram(GLResource):
    kind = "shader program"


@dataclass(frozen=True)
class VertexAttribute:
    """One attribute of an interleaved vertex record (float components only)."""
    index: int
    components: int
    name: str
    offset: int


class VertexArray(GLResource):
    """
    Vertex layout binding a vertex buffer (and optional index buffer) to a
    shader's attributes.

    The buffers are referenced, not owned: destroying the array leaves them
    alive.
    """

    kind = "vertex array"

    def __init__(self, glo: Any, program: ShaderProgram, vertex_buffer: VertexBuffer,
                 index_buffer: Optional[IndexBuffer], attributes: Tuple[VertexAttribute, ...],
                 stride: int):
        super().__init__(glo)
        self.program = program
        self.vertex_buffer = vertex_buffer
        self.index_buffer = index_buffer
        self.attributes = attributes
        self.stride = stride

    @property
    def indexed(self) -> bool:
        return self.index_buffer is not None


def _ensure_live(resource: GLResource) -> None:
    if resource.released:
        raise ResourceReleasedError(f"{resource.kind} used after destroy")


def layout_format(attributes: Sequence[VertexAttribute], stride: int) -> str:
    """
    Build a moderngl buffer format string for an interleaved float layout.

    Gaps between attributes and trailing padding become 'x' pad bytes.

    Raises:
        ValueError: If attributes overlap or run past the stride
    """
    parts = []
    cursor = 0
    for attr in sorted(attributes, key=lambda a: a.offset):
        if attr.offset < cursor:
            raise ValueError(f"attribute '{attr.name}' overlaps the previous attribute")
        if attr.offset > cursor:
            parts.append(f"{attr.offset - cursor}x")
        parts.append(f"{attr.components}f")
        cursor = attr.offset + attr.components * 4
    if cursor > stride:
        raise ValueError(f"attributes need {cursor} bytes but stride is {stride}")
    if cursor < stride:
        parts.append(f"{stride - cursor}x")
    return " ".join(parts)


# ============================================================================
# MANAGER
# ============================================================================

class GraphicsResourceManager:
    """
    Creates, updates, binds, draws and destroys GPU resources on one context.

    All calls must come from the thread owning the context.
    """

    def __init__(self, ctx: moderngl.Context):
        """
        Args:
            ctx: A current moderngl context
        """
        self.ctx = ctx
        self._resources: List[GLResource] = []
        self._bound_program: Optional[ShaderProgram] = None
        self._bound_array: Optional[VertexArray] = None

    def __enter__(self) -> "GraphicsResourceManager":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.destroy_all()

    @property
    def live_resources(self) -> List[GLResource]:
        return list(self._resources)

    # ------------------------------------------------------------------------
    # Error state
    # ------------------------------------------------------------------------

    def check_error(self, where: str = "") -> List[str]:
        """
        Drain the GL error queue, printing one line per pending error.

        Returns:
            The pending error codes (empty when the context is clean)
        """
        codes = []
        for _ in range(_MAX_PENDING_ERRORS):
            code = self.ctx.error
            if code == GL_NO_ERROR:
                break
            codes.append(code)
            message = GL_ERROR_MESSAGES.get(code, code)
            suffix = f" ({where})" if where else ""
            print(f"ogl error: {message}{suffix}")
        return codes

    def _raise_on_error(self, where: str) -> None:
        codes = self.check_error(where)
        if codes:
            raise GLResourceError(f"{where} failed: {', '.join(codes)}", codes)

    # ------------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------------

    def _create_buffer(self, cls, capacity: int, element_size: int) -> Buffer:
        if capacity <= 0:
            raise ValueError(f"buffer capacity must be positive, got {capacity}")
        try:
            glo = self.ctx.buffer(reserve=capacity, dynamic=True)
        except moderngl.Error as exc:
            raise GLResourceError(f"create {cls.kind} failed: {exc}") from exc

        handle = cls(glo, capacity, element_size)
        self._resources.append(handle)
        try:
            self._raise_on_error(f"create {cls.kind}")
        except GLResourceError:
            self.destroy(handle)
            raise
        return handle

    def create_vertex_buffer(self, capacity: int, vertex_size: int = 20) -> VertexBuffer:
        """
        Allocate a dynamic vertex buffer of a fixed byte capacity.

        Args:
            capacity: Size in bytes; updates can never exceed it
            vertex_size: Bytes per vertex record (for count)
        """
        return self._create_buffer(VertexBuffer, capacity, vertex_size)

    def create_index_buffer(self, capacity: int) -> IndexBuffer:
        """Allocate a dynamic uint32 index buffer of a fixed byte capacity."""
        return self._create_buffer(IndexBuffer, capacity, 4)

    def create_shader(self, vertex_src: str, fragment_src: str) -> ShaderProgram:
        """
        Compile and link a vertex/fragment shader pair.

        Raises:
            ShaderCompileError: With the driver's compile or link log
        """
        try:
            glo = self.ctx.program(vertex_shader=vertex_src, fragment_shader=fragment_src)
        except moderngl.Error as exc:
            log = str(exc)
            print(f"ogl error: shader compile/link failed\n{log}")
            raise ShaderCompileError("shader compile/link failed", log=log) from exc

        handle = ShaderProgram(glo)
        self._resources.append(handle)
        try:
            self._raise_on_error("create shader")
        except GLResourceError:
            self.destroy(handle)
            raise
        return handle

    def create_vertex_array(self, program: ShaderProgram, vertex_buffer: VertexBuffer,
                            attributes: Sequence[VertexAttribute], stride: int,
                            index_buffer: Optional[IndexBuffer] = None) -> VertexArray:
        """
        Describe how a vertex buffer feeds a shader's attributes.

        Args:
            program: Shader whose attribute names the layout refers to
            vertex_buffer: Interleaved vertex data
            attributes: Attribute layout (index, components, name, offset)
            stride: Bytes per vertex record
            index_buffer: Optional uint32 index buffer for indexed draws
        """
        attributes = tuple(sorted(attributes, key=lambda a: a.offset))
        fmt = layout_format(attributes, stride)
        content = [(vertex_buffer.glo, fmt, *[a.name for a in attributes])]

        try:
            if index_buffer is not None:
                glo = self.ctx.vertex_array(program.glo, content,
                                            index_buffer=index_buffer.glo, index_element_size=4)
            else:
                glo = self.ctx.vertex_array(program.glo, content)
        except (moderngl.Error, KeyError) as exc:
            raise GLResourceError(f"create vertex array failed: {exc}") from exc

        handle = VertexArray(glo, program, vertex_buffer, index_buffer, attributes, stride)
        self._resources.append(handle)
        try:
            self._raise_on_error("create vertex array")
        except GLResourceError:
            self.destroy(handle)
            raise
        return handle

    # ------------------------------------------------------------------------
    # Updates
    # ------------------------------------------------------------------------

    def update_buffer(self, buffer: Buffer, data, offset: int = 0) -> int:
        """
        Overwrite part of a buffer without reallocating it.

        Args:
            buffer: Vertex or index buffer
            data: numpy array or buffer-protocol object (bytes, bytearray,
                memoryview). Plain lists are rejected.
            offset: Byte offset of the write

        Returns:
            Number of bytes written

        Raises:
            BufferOverflowError: If offset + byte count exceeds the capacity
            TypeError: If data does not expose a buffer
        """
        if isinstance(data, np.ndarray):
            payload = data.tobytes()
        else:
            try:
                payload = memoryview(data).tobytes()
            except TypeError as exc:
                raise TypeError(
                    f"{buffer.kind} update needs a numpy array or bytes-like object, "
                    f"got {type(data).__name__}"
                ) from exc
        byte_count = len(payload)

        if offset < 0 or offset + byte_count > buffer.capacity:
            raise BufferOverflowError(
                f"{buffer.kind} update of {byte_count} bytes at offset {offset} "
                f"exceeds capacity {buffer.capacity}"
            )
        if byte_count == 0:
            buffer.used = offset
            return 0

        buffer.glo.write(payload, offset=offset)
        self._raise_on_error(f"update {buffer.kind}")
        buffer.used = offset + byte_count
        return byte_count

    def set_uniform_matrix(self, name: str, matrix: np.ndarray) -> None:
        """
        Upload a 4x4 matrix uniform to the bound shader.

        The matrix is given row-major (numpy convention) and uploaded
        column-major as GLSL expects.
        """
        assert self._bound_program is not None, "bind_shader() must precede set_uniform_matrix()"
        program = self._bound_program.glo
        try:
            uniform = program[name]
        except KeyError as exc:
            raise GLResourceError(f"shader has no uniform '{name}'") from exc
        uniform.write(np.asarray(matrix, dtype=np.float32).T.tobytes())
        self._raise_on_error(f"set uniform {name}")

    # ------------------------------------------------------------------------
    # Binding
    # ------------------------------------------------------------------------

    def bind_shader(self, program: ShaderProgram) -> None:
        _ensure_live(program)
        self._bound_program = program

    def bind_vertex_array(self, vertex_array: VertexArray) -> None:
        _ensure_live(vertex_array)
        self._bound_array = vertex_array

    def unbind_vertex_array(self) -> None:
        self._bound_array = None

    # ------------------------------------------------------------------------
    # Drawing
    # ------------------------------------------------------------------------

    def draw(self, topology: int, first: int, count: int) -> None:
        """
        Non-indexed draw of count vertices starting at first from the bound
        vertex array.
        """
        vao = self._bound_array
        assert vao is not None, "bind_vertex_array() must precede draw()"
        assert self._bound_program is not None, "bind_shader() must precede draw()"
        assert first + count <= vao.vertex_buffer.count, "draw() reads past the vertex buffer"
        vao.glo.render(topology, vertices=count, first=first)
        self._raise_on_error("draw")

    def draw_indexed(self, topology: int, count: int) -> None:
        """Indexed draw of count indices from the bound vertex array."""
        vao = self._bound_array
        assert vao is not None, "bind_vertex_array() must precede draw_indexed()"
        assert self._bound_program is not None, "bind_shader() must precede draw_indexed()"
        assert vao.indexed, "draw_indexed() needs a vertex array with an index buffer"
        assert count <= vao.index_buffer.count, "draw_indexed() reads past the index buffer"
        vao.glo.render(topology, vertices=count)
        self._raise_on_error("draw indexed")

    def clear(self, color: Tuple[float, float, float]) -> None:
        r, g, b = color
        self.ctx.clear(r, g, b, 1.0)
        self._raise_on_error("clear")

    def set_viewport(self, width: int, height: int) -> None:
        self.ctx.viewport = (0, 0, width, height)
        self._raise_on_error("set viewport")

    # ------------------------------------------------------------------------
    # Destruction
    # ------------------------------------------------------------------------

    def destroy(self, resource: GLResource) -> None:
        """Release one resource. Destroying twice is a no-op."""
        if resource.released:
            return
        resource._glo.release()
        resource.released = True
        # Teardown keeps going; pending errors are reported only
        self.check_error(f"destroy {resource.kind}")
        if resource in self._resources:
            self._resources.remove(resource)
        if self._bound_array is resource:
            self._bound_array = None
        if self._bound_program is resource:
            self._bound_program = None

    def destroy_all(self) -> None:
        """Release every live resource: vertex arrays, then buffers, then shaders."""
        order = (VertexArray, Buffer, ShaderProgram)
        for kind in order:
            for resource in [r for r in self._resources if isinstance(r, kind)]:
                self.destroy(resource)
        for resource in list(self._resources):
            self.destroy(resource)
