"""Frame renderer: scene pass, emissive radiance, block map, screen-space GI.

A frame is typically drawn as:

1. ``render_emissive_to_radiance`` — emissive colours into the radiance target;
2. ``render_block_map`` — occluders as white into the block map;
3. ``render_diffuse`` or ``render_sdf_diffuse`` — screen-space light spread;
4. ``render_static_instances`` / ``render_dynamic_instances`` — the lit scene;
5. ``render_ppgi`` — scene plus spread light;
6. ``finish_frame`` — the result onto the default framebuffer.

Everything except the two module-level helpers needs a current OpenGL
context, and every drawing method needs ``init()`` to have succeeded.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import Any

from pirender.gpu import (
    CubeMesh,
    PanelMesh,
    RenderTarget,
    compile_program,
    pack_floats,
)
from pirender.mathtool import create_identity_matrix, multiply_matrices
from pirender.shaders import shader_pair

logger = logging.getLogger(__name__)

DEFAULT_SCREEN_SIZE = (800, 600)
INITIAL_TARGET_SIZE = (800, 600)

BASE_LIGHT_RANGE = 0.08
OFF_SCREEN_FALLOFF = 8.0
SDF_LIGHT_RANGE = 0.2

SCENE_LIGHT_DIR = (-1.0, -1.0, -1.0)
CUBE_LIGHT_DIR = (1.0, 1.0, 1.0)
PANEL_LIGHT_DIR = (0.2, 0.6, 0.8)
WHITE = (1.0, 1.0, 1.0, 1.0)

ATTENUATION_CONSTANT = 0.5
ATTENUATION_LINEAR = 0.2
ATTENUATION_QUADRATIC = 0.0
PPGI_INTENSITY = 1.0

# Two triangles covering the screen: position (x, y) then texcoord (u, v).
_QUAD_VERTICES = (
    -1.0, 1.0, 0.0, 1.0,
    -1.0, -1.0, 0.0, 0.0,
    1.0, -1.0, 1.0, 0.0,
    -1.0, 1.0, 0.0, 1.0,
    1.0, -1.0, 1.0, 0.0,
    1.0, 1.0, 1.0, 1.0,
)
_QUAD_STRIDE = 4 * 4
_QUAD_VERTEX_COUNT = 6

_PROGRAM_NAMES = ("scene", "quad", "radiance", "block_map", "diffuse", "ppgi")


def player_screen_uv(
    player_world_pos: Sequence[float], view_projection: Sequence[float]
) -> tuple[float, float]:
    """Project a world position to screen UV coordinates in [0, 1].

    A point whose clip-space w is zero maps to the screen centre.
    """
    position = tuple(float(v) for v in player_world_pos)
    if len(position) != 3:
        raise ValueError(f"a world position needs 3 values, got {len(position)}")
    model = list(create_identity_matrix())
    model[12], model[13], model[14] = position
    mvp = multiply_matrices(view_projection, model)
    x, y, _, w = mvp[12:16]
    if w != 0.0:
        ndc_x, ndc_y = x / w, y / w
    else:
        ndc_x = ndc_y = 0.0
    return ((ndc_x + 1.0) * 0.5, (ndc_y + 1.0) * 0.5)


def light_range_for(screen_uv: Sequence[float]) -> float:
    """Return the player light's screen-space range for a player UV.

    On screen the range is ``BASE_LIGHT_RANGE``; off screen it shrinks
    quickly with the distance from the nearest screen edge.
    """
    u, v = (float(c) for c in screen_uv)
    if 0.0 <= u <= 1.0 and 0.0 <= v <= 1.0:
        return BASE_LIGHT_RANGE
    distance = max(0.0, -u, u - 1.0, -v, v - 1.0)
    return BASE_LIGHT_RANGE * max(0.0, 1.0 - distance * OFF_SCREEN_FALLOFF)


def _gl() -> Any:
    from pyglet import gl

    return gl


class Renderer:
    """Owns the shader programs, render targets and built-in meshes."""

    def __init__(self) -> None:
        self.screen_width, self.screen_height = DEFAULT_SCREEN_SIZE
        self._ready = False
        self._programs: dict[str, Any] = {}
        self._locations: dict[tuple[int, str], int] = {}
        self._targets: dict[str, RenderTarget] = {}
        self._blur: list[RenderTarget] = []
        self._quad_vao = 0
        self._quad_vbo = 0
        self._cube: CubeMesh | None = None
        self._panel: PanelMesh | None = None

    @property
    def ready(self) -> bool:
        return self._ready

    @property
    def texel_size(self) -> tuple[float, float]:
        return (1.0 / self.screen_width, 1.0 / self.screen_height)

    # -- setup -------------------------------------------------------------

    def init(self) -> None:
        """Compile the programs and create targets, quad and meshes.

        Raises ShaderError or RuntimeError; nothing is left allocated then.
        """
        gl = _gl()
        try:
            for name in _PROGRAM_NAMES:
                pair = shader_pair(name)
                self._programs[name] = compile_program(pair.vertex, pair.fragment)
            gl.glEnable(gl.GL_DEPTH_TEST)
            self._create_targets(*INITIAL_TARGET_SIZE)
            self._create_quad(gl)
            self._cube = CubeMesh()
            self._panel = PanelMesh()
        except Exception:
            self._release()
            raise
        self._ready = True

    def _create_targets(self, width: int, height: int) -> None:
        self._targets["scene"] = RenderTarget(width, height, with_depth=True)
        self._blur = [RenderTarget(width, height) for _ in range(2)]
        for name in ("radiance", "block_map", "ppgi"):
            self._targets[name] = RenderTarget(width, height)

    def _delete_targets(self) -> None:
        for target in (*self._targets.values(), *self._blur):
            target.delete()
        self._targets.clear()
        self._blur = []

    def _create_quad(self, gl: Any) -> None:
        vao = gl.GLuint()
        gl.glGenVertexArrays(1, vao)
        gl.glBindVertexArray(vao)
        self._quad_vao = vao.value

        vbo = gl.GLuint()
        gl.glGenBuffers(1, vbo)
        gl.glBindBuffer(gl.GL_ARRAY_BUFFER, vbo)
        self._quad_vbo = vbo.value
        raw = pack_floats(_QUAD_VERTICES)
        data = (gl.GLubyte * len(raw)).from_buffer_copy(raw)
        gl.glBufferData(gl.GL_ARRAY_BUFFER, len(raw), data, gl.GL_STATIC_DRAW)

        gl.glEnableVertexAttribArray(0)
        gl.glVertexAttribPointer(0, 2, gl.GL_FLOAT, gl.GL_FALSE, _QUAD_STRIDE, 0)
        gl.glEnableVertexAttribArray(1)
        gl.glVertexAttribPointer(1, 2, gl.GL_FLOAT, gl.GL_FALSE, _QUAD_STRIDE, 8)
        gl.glBindVertexArray(0)

    def resize(self, width: int, height: int) -> None:
        """Record the screen size and, once initialised, set the viewport."""
        self.screen_width = width
        self.screen_height = height
        if self._ready:
            _gl().glViewport(0, 0, width, height)

    def reinitialize_targets(self, width: int, height: int) -> None:
        """Recreate every render target at a new resolution."""
        self._require_ready()
        self._delete_targets()
        self._create_targets(width, height)
        _gl().glBindFramebuffer(_gl().GL_FRAMEBUFFER, 0)
        logger.info("render targets reinitialised for %dx%d", width, height)

    def shutdown(self) -> None:
        """Release every GPU resource; safe to call more than once."""
        if not self._ready:
            return
        self._release()

    def _release(self) -> None:
        self._ready = False
        if not (self._programs or self._targets or self._blur or self._quad_vao
                or self._quad_vbo or self._cube or self._panel):
            return
        gl = _gl()
        for program in self._programs.values():
            program.delete()
        self._programs.clear()
        self._locations.clear()
        self._delete_targets()
        if self._quad_vao:
            gl.glDeleteVertexArrays(1, gl.GLuint(self._quad_vao))
            self._quad_vao = 0
        if self._quad_vbo:
            gl.glDeleteBuffers(1, gl.GLuint(self._quad_vbo))
            self._quad_vbo = 0
        for mesh in (self._cube, self._panel):
            if mesh is not None:
                mesh.delete()
        self._cube = self._panel = None

    def _require_ready(self) -> None:
        if not self._ready:
            raise RuntimeError("renderer is not initialised; call init() first")

    # -- uniform helpers ---------------------------------------------------

    def _use(self, name: str) -> Any:
        program = self._programs[name]
        _gl().glUseProgram(program.id)
        return program

    def _location(self, program: Any, name: str) -> int:
        key = (program.id, name)
        if key not in self._locations:
            gl = _gl()
            encoded = name.encode("ascii") + b"\0"
            buffer = (gl.GLchar * len(encoded)).from_buffer_copy(encoded)
            self._locations[key] = gl.glGetUniformLocation(program.id, buffer)
        return self._locations[key]

    def _set_matrix(self, program: Any, name: str, matrix: Sequence[float]) -> None:
        gl = _gl()
        values = (gl.GLfloat * 16)(*matrix)
        gl.glUniformMatrix4fv(self._location(program, name), 1, gl.GL_FALSE, values)

    def _set_vec4(self, program: Any, name: str, values: Sequence[float]) -> None:
        gl = _gl()
        gl.glUniform4fv(self._location(program, name), 1, (gl.GLfloat * 4)(*values))

    def _set_vec3(self, program: Any, name: str, values: Sequence[float]) -> None:
        _gl().glUniform3f(self._location(program, name), *values)

    def _set_vec2(self, program: Any, name: str, values: Sequence[float]) -> None:
        _gl().glUniform2f(self._location(program, name), *values)

    def _set_float(self, program: Any, name: str, value: float) -> None:
        _gl().glUniform1f(self._location(program, name), value)

    def _set_sampler(
        self, program: Any, name: str, unit: int, texture: int
    ) -> None:
        gl = _gl()
        gl.glActiveTexture(gl.GL_TEXTURE0 + unit)
        gl.glBindTexture(gl.GL_TEXTURE_2D, texture)
        gl.glUniform1i(self._location(program, name), unit)

    def _bind_target(self, target: RenderTarget | None) -> None:
        gl = _gl()
        gl.glBindFramebuffer(gl.GL_FRAMEBUFFER, target.fbo if target else 0)
        gl.glViewport(0, 0, self.screen_width, self.screen_height)

    def _draw_quad(self) -> None:
        gl = _gl()
        gl.glBindVertexArray(self._quad_vao)
        gl.glDrawArrays(gl.GL_TRIANGLES, 0, _QUAD_VERTEX_COUNT)
        gl.glBindVertexArray(0)

    @staticmethod
    def _drain_errors() -> None:
        gl = _gl()
        while gl.glGetError() != gl.GL_NO_ERROR:
            pass

    @staticmethod
    def _report_error(context: str) -> None:
        gl = _gl()
        error = gl.glGetError()
        if error != gl.GL_NO_ERROR:
            logger.error("%s: GL error 0x%x", context, error)

    # -- scene passes ------------------------------------------------------

    def render(self, mvp: Sequence[float], model: Sequence[float]) -> None:
        """Clear the current framebuffer and draw one white cube."""
        self._require_ready()
        gl = _gl()
        gl.glClear(gl.GL_COLOR_BUFFER_BIT | gl.GL_DEPTH_BUFFER_BIT)
        program = self._use("scene")
        self._set_matrix(program, "u_mvpMatrix", mvp)
        self._set_matrix(program, "u_modelMatrix", model)
        self._set_vec4(program, "u_color", WHITE)
        self._set_vec3(program, "u_lightDir", CUBE_LIGHT_DIR)
        self._cube.draw()

    def render_cubes(
        self, vp: Sequence[float], model_matrices: Iterable[Sequence[float]]
    ) -> None:
        """Clear the current framebuffer and draw a white cube per matrix."""
        self._require_ready()
        gl = _gl()
        gl.glClear(gl.GL_COLOR_BUFFER_BIT | gl.GL_DEPTH_BUFFER_BIT)
        program = self._use("scene")
        self._set_vec4(program, "u_color", WHITE)
        self._set_vec3(program, "u_lightDir", CUBE_LIGHT_DIR)
        for model in model_matrices:
            self._set_matrix(program, "u_mvpMatrix", multiply_matrices(vp, model))
            self._set_matrix(program, "u_modelMatrix", model)
            self._cube.draw()

    def render_panel(self, vp: Sequence[float], model: Sequence[float]) -> None:
        """Draw a white panel into the current framebuffer without clearing."""
        self._require_ready()
        program = self._use("scene")
        self._set_vec4(program, "u_color", WHITE)
        self._set_vec3(program, "u_lightDir", PANEL_LIGHT_DIR)
        self._set_matrix(program, "u_mvpMatrix", multiply_matrices(vp, model))
        self._set_matrix(program, "u_modelMatrix", model)
        self._panel.draw()

    def _draw_lit(self, vp: Sequence[float], instances: Iterable[Any], clear: bool) -> None:
        self._require_ready()
        gl = _gl()
        self._bind_target(self._targets["scene"])
        if clear:
            gl.glClear(gl.GL_COLOR_BUFFER_BIT | gl.GL_DEPTH_BUFFER_BIT)
        program = self._use("scene")
        self._set_vec3(program, "u_lightDir", SCENE_LIGHT_DIR)
        self._set_sampler(program, "radianceTex", 0, self._targets["radiance"].texture)
        self._set_vec2(
            program, "u_screenSize", (float(self.screen_width), float(self.screen_height))
        )
        for inst in instances:
            self._set_matrix(
                program, "u_mvpMatrix", multiply_matrices(vp, inst.model_matrix)
            )
            self._set_matrix(program, "u_modelMatrix", inst.model_matrix)
            self._set_vec4(program, "u_color", inst.color)
            self._set_vec4(program, "u_emissive", inst.emissive)
            inst.mesh.draw()
        gl.glBindFramebuffer(gl.GL_FRAMEBUFFER, 0)

    def render_static_instances(self, vp: Sequence[float], instances: Iterable[Any]) -> None:
        """Clear the scene target and draw the lit instances into it."""
        self._draw_lit(vp, instances, clear=True)

    def render_dynamic_instances(self, vp: Sequence[float], instances: Iterable[Any]) -> None:
        """Draw lit instances over what the scene target already holds."""
        self._draw_lit(vp, instances, clear=False)

    def render_emissive_to_radiance(
        self, vp: Sequence[float], instances: Sequence[Any]
    ) -> None:
        """Draw each instance's emissive colour into the radiance target."""
        self._require_ready()
        gl = _gl()
        self._bind_target(self._targets["radiance"])
        gl.glClear(gl.GL_COLOR_BUFFER_BIT | gl.GL_DEPTH_BUFFER_BIT)
        logger.debug("rendering %d emissive instances", len(instances))
        program = self._use("radiance")
        for inst in instances:
            self._set_matrix(
                program, "u_mvpMatrix", multiply_matrices(vp, inst.model_matrix)
            )
            self._set_vec4(program, "u_emissive", inst.emissive)
            logger.debug("emissive %s", inst.emissive)
            inst.mesh.draw()
        gl.glBindFramebuffer(gl.GL_FRAMEBUFFER, 0)

    def render_block_map(self, vp: Sequence[float], instances: Iterable[Any]) -> None:
        """Draw occluding instances as white into the block map target."""
        self._require_ready()
        gl = _gl()
        self._bind_target(self._targets["block_map"])
        gl.glClear(gl.GL_COLOR_BUFFER_BIT | gl.GL_DEPTH_BUFFER_BIT)
        program = self._use("block_map")
        for inst in instances:
            self._set_matrix(
                program, "u_mvpMatrix", multiply_matrices(vp, inst.model_matrix)
            )
            inst.mesh.draw()
        gl.glBindFramebuffer(gl.GL_FRAMEBUFFER, 0)

    # -- global illumination ----------------------------------------------

    def render_diffuse(self, vp: Sequence[float], instances: Iterable[Any]) -> None:
        """Spread the radiance target into the first blur target."""
        self._require_ready()
        gl = _gl()
        self._drain_errors()
        self._bind_target(self._blur[0])
        gl.glClear(gl.GL_COLOR_BUFFER_BIT)
        program = self._use("diffuse")
        gl.glBindVertexArray(self._quad_vao)
        self._set_sampler(program, "radianceTex", 0, self._targets["radiance"].texture)
        self._set_sampler(program, "blockMapTex", 1, self._targets["block_map"].texture)
        self._set_vec2(program, "texelSize", self.texel_size)
        self._set_float(program, "att_c", ATTENUATION_CONSTANT)
        self._set_float(program, "att_l", ATTENUATION_LINEAR)
        self._set_float(program, "att_q", ATTENUATION_QUADRATIC)
        self._draw_quad()
        gl.glBindFramebuffer(gl.GL_FRAMEBUFFER, 0)
        self._report_error("render_diffuse")

    def render_sdf_diffuse(
        self,
        vp: Sequence[float],
        instances: Iterable[Any],
        player_world_pos: Sequence[float],
        view_projection: Sequence[float],
    ) -> None:
        """Light the first blur target from the player's screen position,
        shadowed by the block map."""
        self._require_ready()
        gl = _gl()
        self._drain_errors()
        uv = player_screen_uv(player_world_pos, view_projection)
        self._bind_target(self._blur[0])
        gl.glClear(gl.GL_COLOR_BUFFER_BIT)
        program = self._use("diffuse")
        gl.glBindVertexArray(self._quad_vao)
        self._set_sampler(program, "blockMapTex", 0, self._targets["block_map"].texture)
        self._set_vec2(program, "u_playerScreenPos", uv)
        self._set_vec2(program, "texelSize", self.texel_size)
        # The adaptive range from light_range_for is overridden by a fixed one.
        self._set_float(program, "u_lightRange", SDF_LIGHT_RANGE)
        self._draw_quad()
        gl.glBindFramebuffer(gl.GL_FRAMEBUFFER, 0)
        self._report_error("render_sdf_diffuse")

    def render_ppgi(self) -> None:
        """Add the spread light to the scene into the post-processing target."""
        self._require_ready()
        gl = _gl()
        self._bind_target(self._targets["ppgi"])
        gl.glClear(gl.GL_COLOR_BUFFER_BIT | gl.GL_DEPTH_BUFFER_BIT)
        program = self._use("ppgi")
        self._set_sampler(program, "u_scene", 0, self._targets["scene"].texture)
        self._set_sampler(program, "u_radiance", 1, self._blur[0].texture)
        self._set_float(program, "u_intensity", PPGI_INTENSITY)
        self._draw_quad()
        gl.glBindFramebuffer(gl.GL_FRAMEBUFFER, 0)

    def finish_frame(self, use_post_processing: bool = True) -> None:
        """Copy the post-processed (or plain scene) image to the screen."""
        self._require_ready()
        gl = _gl()
        self._bind_target(None)
        gl.glClear(gl.GL_COLOR_BUFFER_BIT | gl.GL_DEPTH_BUFFER_BIT)
        program = self._use("quad")
        source = self._targets["ppgi" if use_post_processing else "scene"]
        self._set_sampler(program, "screenTex", 0, source.texture)
        self._draw_quad()