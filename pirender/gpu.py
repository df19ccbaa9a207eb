"""GPU-side resources: vertex buffers, shader programs and render targets.

Everything here except the packing helpers needs a current OpenGL 3.3
context, such as the one a ``Platform`` window provides.
"""

from __future__ import annotations

import array
from collections.abc import Iterable
from typing import Any

from pirender.geometry import (
    FLOATS_PER_VERTEX,
    MAX_INDEXED_VERTICES,
    MeshData,
    cube_mesh_data,
    panel_mesh_data,
    sphere_mesh_data,
)

_FLOAT_SIZE = 4
_STRIDE = FLOATS_PER_VERTEX * _FLOAT_SIZE
_NORMAL_OFFSET = 3 * _FLOAT_SIZE


class ShaderError(RuntimeError):
    """A shader failed to compile or a program failed to link."""


def _gl() -> Any:
    # Imported on first use: loading the GL bindings needs a display.
    from pyglet import gl

    return gl


def pack_floats(values: Iterable[float]) -> bytes:
    """Return ``values`` as native 32-bit floats, ready for a buffer upload."""
    return array.array("f", (float(v) for v in values)).tobytes()


def pack_indices(values: Iterable[int]) -> bytes:
    """Return ``values`` as native unsigned 16-bit indices.

    Raises ValueError for an index that does not fit in 16 bits.
    """
    indices = [int(v) for v in values]
    for index in indices:
        if not 0 <= index < MAX_INDEXED_VERTICES:
            raise ValueError(f"index {index} does not fit in 16 bits")
    return array.array("H", indices).tobytes()


def _upload(gl: Any, target: int, raw: bytes) -> int:
    buffer_id = gl.GLuint()
    gl.glGenBuffers(1, buffer_id)
    gl.glBindBuffer(target, buffer_id)
    data = (gl.GLubyte * len(raw)).from_buffer_copy(raw) if raw else None
    gl.glBufferData(target, len(raw), data, gl.GL_STATIC_DRAW)
    return buffer_id.value


def compile_program(vertex_source: str, fragment_source: str) -> Any:
    """Compile and link a program from vertex and fragment source.

    Returns the linked program; raises ShaderError with the driver's log
    when compiling or linking fails.
    """
    from pyglet.graphics.shader import Shader, ShaderException, ShaderProgram

    try:
        vertex = Shader(vertex_source, "vertex")
    except ShaderException as exc:
        raise ShaderError(f"vertex shader failed to compile: {exc}") from exc
    try:
        fragment = Shader(fragment_source, "fragment")
    except ShaderException as exc:
        vertex.delete()
        raise ShaderError(f"fragment shader failed to compile: {exc}") from exc
    try:
        return ShaderProgram(vertex, fragment)
    except ShaderException as exc:
        raise ShaderError(f"program failed to link: {exc}") from exc
    finally:
        vertex.delete()
        fragment.delete()


class Mesh:
    """Indexed triangle mesh held in GPU buffers.

    Attribute 0 is the position and attribute 1 the normal.
    """

    def __init__(self, data: MeshData) -> None:
        gl = _gl()
        self.index_count = data.index_count
        vao = gl.GLuint()
        gl.glGenVertexArrays(1, vao)
        gl.glBindVertexArray(vao)
        self.vao = vao.value
        self.vbo = _upload(gl, gl.GL_ARRAY_BUFFER, pack_floats(data.vertices))
        self.ebo = _upload(gl, gl.GL_ELEMENT_ARRAY_BUFFER, pack_indices(data.indices))
        gl.glVertexAttribPointer(0, 3, gl.GL_FLOAT, gl.GL_FALSE, _STRIDE, 0)
        gl.glEnableVertexAttribArray(0)
        gl.glVertexAttribPointer(
            1, 3, gl.GL_FLOAT, gl.GL_FALSE, _STRIDE, _NORMAL_OFFSET
        )
        gl.glEnableVertexAttribArray(1)
        gl.glBindVertexArray(0)

    def draw(self) -> None:
        """Draw the mesh with whatever program is in use."""
        gl = _gl()
        gl.glBindVertexArray(self.vao)
        gl.glDrawElements(
            gl.GL_TRIANGLES, self.index_count, gl.GL_UNSIGNED_SHORT, 0
        )
        gl.glBindVertexArray(0)

    def delete(self) -> None:
        """Release the GPU buffers; safe to call twice."""
        gl = _gl()
        if self.vao:
            gl.glDeleteVertexArrays(1, gl.GLuint(self.vao))
            self.vao = 0
        if self.vbo:
            gl.glDeleteBuffers(1, gl.GLuint(self.vbo))
            self.vbo = 0
        if self.ebo:
            gl.glDeleteBuffers(1, gl.GLuint(self.ebo))
            self.ebo = 0


class CubeMesh(Mesh):
    """Unit cube with per-face normals."""

    def __init__(self) -> None:
        super().__init__(cube_mesh_data())


class PanelMesh(Mesh):
    """Unit square in the XY plane facing +Z."""

    def __init__(self) -> None:
        super().__init__(panel_mesh_data())


class SphereMesh(Mesh):
    """UV sphere of radius 0.5."""

    def __init__(self, sector_count: int = 32, stack_count: int = 16) -> None:
        super().__init__(sphere_mesh_data(sector_count, stack_count))


class RenderTarget:
    """Framebuffer with an RGBA colour texture and an optional depth buffer.

    Raises RuntimeError when the framebuffer is not complete.
    """

    def __init__(self, width: int, height: int, with_depth: bool = False) -> None:
        gl = _gl()
        self.width = width
        self.height = height

        fbo = gl.GLuint()
        gl.glGenFramebuffers(1, fbo)
        gl.glBindFramebuffer(gl.GL_FRAMEBUFFER, fbo)
        self.fbo = fbo.value

        texture = gl.GLuint()
        gl.glGenTextures(1, texture)
        gl.glBindTexture(gl.GL_TEXTURE_2D, texture)
        gl.glTexImage2D(
            gl.GL_TEXTURE_2D, 0, gl.GL_RGBA, width, height, 0,
            gl.GL_RGBA, gl.GL_UNSIGNED_BYTE, None,
        )
        gl.glTexParameteri(gl.GL_TEXTURE_2D, gl.GL_TEXTURE_MIN_FILTER, gl.GL_LINEAR)
        gl.glTexParameteri(gl.GL_TEXTURE_2D, gl.GL_TEXTURE_MAG_FILTER, gl.GL_LINEAR)
        gl.glFramebufferTexture2D(
            gl.GL_FRAMEBUFFER, gl.GL_COLOR_ATTACHMENT0, gl.GL_TEXTURE_2D, texture, 0
        )
        self.texture = texture.value

        self.depth = 0
        if with_depth:
            depth = gl.GLuint()
            gl.glGenRenderbuffers(1, depth)
            gl.glBindRenderbuffer(gl.GL_RENDERBUFFER, depth)
            gl.glRenderbufferStorage(
                gl.GL_RENDERBUFFER, gl.GL_DEPTH_COMPONENT24, width, height
            )
            gl.glFramebufferRenderbuffer(
                gl.GL_FRAMEBUFFER, gl.GL_DEPTH_ATTACHMENT, gl.GL_RENDERBUFFER, depth
            )
            self.depth = depth.value

        status = gl.glCheckFramebufferStatus(gl.GL_FRAMEBUFFER)
        gl.glBindFramebuffer(gl.GL_FRAMEBUFFER, 0)
        if status != gl.GL_FRAMEBUFFER_COMPLETE:
            self.delete()
            raise RuntimeError(
                f"framebuffer {width}x{height} not complete (status 0x{status:x})"
            )

    def bind(self) -> None:
        """Make this target the current draw framebuffer."""
        gl = _gl()
        gl.glBindFramebuffer(gl.GL_FRAMEBUFFER, self.fbo)

    def delete(self) -> None:
        """Release the framebuffer and its attachments; safe to call twice."""
        gl = _gl()
        if self.fbo:
            gl.glDeleteFramebuffers(1, gl.GLuint(self.fbo))
            self.fbo = 0
        if self.texture:
            gl.glDeleteTextures(1, gl.GLuint(self.texture))
            self.texture = 0
        if self.depth:
            gl.glDeleteRenderbuffers(1, gl.GLuint(self.depth))
            self.depth = 0