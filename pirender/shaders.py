"""GLSL sources for every program the renderer builds.

All shaders target GLSL ES 3.00. Look a pair up by name with ``shader_pair``.
"""

from __future__ import annotations

import textwrap
from dataclasses import dataclass

_VERSION = "#version 300 es\n"
_PRECISION = "precision mediump float;\n"


def _source(body: str, *, precision: bool = True) -> str:
    header = _VERSION + (_PRECISION if precision else "")
    return header + textwrap.dedent(body).lstrip("\n")


_SCENE_VERTEX = _source(
    """
    in vec3 a_position;
    in vec3 a_normal;
    uniform mat4 u_mvpMatrix;
    uniform mat4 u_modelMatrix;
    out vec3 v_normal;
    out vec2 TexCoord;

    void main()
    {
        vec4 clip = u_mvpMatrix * vec4(a_position, 1.0);
        mat3 normalMatrix = mat3(transpose(inverse(u_modelMatrix)));
        v_normal = normalMatrix * a_normal;
        TexCoord = clip.xy / clip.w;
        gl_Position = clip;
    }
    """
)

_SCENE_FRAGMENT = _source(
    """
    in vec3 v_normal;
    in vec2 TexCoord;
    out vec4 fragColor;
    uniform vec4 u_color;
    uniform vec4 u_emissive;
    uniform vec3 u_lightDir;
    uniform vec2 u_screenSize;
    uniform sampler2D radianceTex;

    const vec3 AMBIENT = vec3(0.05, 0.05, 0.08);
    const float DIFFUSE_WEIGHT = 0.6;

    void main()
    {
        float lambert = dot(normalize(v_normal), normalize(-u_lightDir));
        float wrapped = clamp(0.5 * lambert + 0.5, 0.0, 1.0);
        vec2 screenUv = gl_FragCoord.xy / u_screenSize;
        vec3 gi = texture(radianceTex, screenUv).rgb;
        vec3 lit = DIFFUSE_WEIGHT * wrapped * u_color.rgb + u_emissive.rgb + AMBIENT + gi;
        fragColor = vec4(lit, u_color.a);
    }
    """
)

_POSITION_ONLY_VERTEX = _source(
    """
    layout(location = 0) in vec3 a_position;
    uniform mat4 u_mvpMatrix;

    void main()
    {
        gl_Position = u_mvpMatrix * vec4(a_position, 1.0);
    }
    """
)

_BLOCK_MAP_FRAGMENT = _source(
    """
    out vec4 FragColor;

    void main()
    {
        FragColor = vec4(1.0);
    }
    """
)

_QUAD_VERTEX = _source(
    """
    layout(location = 0) in vec2 aPos;
    layout(location = 1) in vec2 aTex;
    out vec2 TexCoord;

    void main()
    {
        gl_Position = vec4(aPos, 0.0, 1.0);
        TexCoord = aTex;
    }
    """,
    precision=False,
)

_QUAD_FRAGMENT = _source(
    """
    in vec2 TexCoord;
    out vec4 FragColor;
    uniform sampler2D screenTex;

    void main()
    {
        FragColor = texture(screenTex, TexCoord);
    }
    """
)

_RADIANCE_FRAGMENT = _source(
    """
    out vec4 FragColor;
    uniform vec4 u_emissive;

    void main()
    {
        FragColor = u_emissive;
    }
    """
)

_DIFFUSE_SDF_FRAGMENT = _source(
    """
    in vec2 TexCoord;
    out vec4 FragColor;
    uniform sampler2D blockMapTex;
    uniform vec2 texelSize;
    uniform vec2 u_playerScreenPos;
    uniform float u_lightRange;

    const int MARCH_STEPS = 16;
    const vec3 LIGHT_TINT = vec3(1.2, 0.6, 0.3);
    const vec3 DARK_AMBIENT = vec3(0.005, 0.005, 0.01);
    const vec4 BLACK = vec4(0.0, 0.0, 0.0, 1.0);

    bool isWall(vec2 uv)
    {
        return texture(blockMapTex, uv).r > 0.5;
    }

    bool offScreen(vec2 uv)
    {
        return any(lessThan(uv, vec2(0.0))) || any(greaterThan(uv, vec2(1.0)));
    }

    bool shadowed(vec2 origin, vec2 dir, float stride)
    {
        vec2 p = origin;
        for (int n = 1; n < MARCH_STEPS; ++n) {
            p += dir * stride;
            if (distance(p, u_playerScreenPos) < 2.0 * stride) {
                return false;
            }
            if (offScreen(p) || isWall(p)) {
                return true;
            }
        }
        return false;
    }

    void main()
    {
        if (isWall(TexCoord)) {
            FragColor = BLACK;
            return;
        }
        vec2 delta = u_playerScreenPos - TexCoord;
        float dist = length(delta);
        if (offScreen(u_playerScreenPos) || dist > u_lightRange) {
            FragColor = BLACK;
            return;
        }
        if (shadowed(TexCoord, normalize(delta), dist / float(MARCH_STEPS))) {
            FragColor = BLACK;
            return;
        }
        float falloff = smoothstep(0.0, 1.0, 1.0 - dist / u_lightRange);
        falloff *= falloff;
        FragColor = vec4(LIGHT_TINT * falloff + DARK_AMBIENT, 1.0);
    }
    """
)

_PPGI_VERTEX = _source(
    """
    layout(location = 0) in vec2 aPos;
    layout(location = 1) in vec2 aUV;
    out vec2 vUV;

    void main()
    {
        gl_Position = vec4(aPos, 0.0, 1.0);
        vUV = aUV;
    }
    """
)

_PPGI_FRAGMENT = _source(
    """
    in vec2 vUV;
    out vec4 FragColor;
    uniform sampler2D u_scene;
    uniform sampler2D u_radiance;
    uniform float u_intensity;

    void main()
    {
        FragColor = texture(u_scene, vUV) + u_intensity * texture(u_radiance, vUV);
    }
    """
)


@dataclass(frozen=True)
class ShaderPair:
    """Vertex and fragment source that link into one program."""

    name: str
    vertex: str
    fragment: str


_PAIRS: dict[str, ShaderPair] = {
    pair.name: pair
    for pair in (
        ShaderPair("scene", _SCENE_VERTEX, _SCENE_FRAGMENT),
        ShaderPair("quad", _QUAD_VERTEX, _QUAD_FRAGMENT),
        ShaderPair("radiance", _POSITION_ONLY_VERTEX, _RADIANCE_FRAGMENT),
        ShaderPair("block_map", _POSITION_ONLY_VERTEX, _BLOCK_MAP_FRAGMENT),
        ShaderPair("diffuse", _QUAD_VERTEX, _DIFFUSE_SDF_FRAGMENT),
        ShaderPair("ppgi", _PPGI_VERTEX, _PPGI_FRAGMENT),
    )
}

SHADER_NAMES: tuple[str, ...] = tuple(_PAIRS)


def shader_pair(name: str) -> ShaderPair:
    """Return the shader pair called ``name``.

    Raises KeyError for an unknown name.
    """
    try:
        return _PAIRS[name]
    except KeyError:
        known = ", ".join(SHADER_NAMES)
        raise KeyError(f"unknown shader {name!r}; known shaders: {known}") from None