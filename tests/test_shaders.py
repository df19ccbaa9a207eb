import pytest

from pirender.shaders import SHADER_NAMES, ShaderPair, shader_pair


@pytest.mark.parametrize("name", SHADER_NAMES)
def test_every_pair_targets_glsl_es_300(name):
    pair = shader_pair(name)
    assert pair.vertex.startswith("#version 300 es")
    assert pair.fragment.startswith("#version 300 es")


@pytest.mark.parametrize("name", SHADER_NAMES)
def test_pair_carries_requested_name_and_main(name):
    pair = shader_pair(name)
    assert pair.name == name
    assert "void main()" in pair.vertex
    assert "void main()" in pair.fragment


def test_unknown_name_raises_key_error():
    with pytest.raises(KeyError):
        shader_pair("no_such_shader")


def test_scene_shader_uniforms():
    pair = shader_pair("scene")
    for uniform in ("u_mvpMatrix", "u_modelMatrix"):
        assert f"uniform mat4 {uniform};" in pair.vertex
    for uniform in ("u_color", "u_emissive", "u_lightDir", "radianceTex", "u_screenSize"):
        assert uniform in pair.fragment


def test_diffuse_uses_fullscreen_quad_vertex_shader():
    assert shader_pair("diffuse").vertex == shader_pair("quad").vertex


def test_diffuse_is_the_sdf_light_shader():
    fragment = shader_pair("diffuse").fragment
    assert "uniform vec2 u_playerScreenPos;" in fragment
    assert "uniform float u_lightRange;" in fragment
    assert "uniform vec2 texelSize;" in fragment
    assert "uniform sampler2D blockMapTex;" in fragment


def test_ppgi_shader_uniforms():
    fragment = shader_pair("ppgi").fragment
    for uniform in ("u_scene", "u_radiance", "u_intensity"):
        assert uniform in fragment


def test_radiance_and_block_map_share_vertex_shader():
    assert shader_pair("radiance").vertex == shader_pair("block_map").vertex
    assert "u_emissive" in shader_pair("radiance").fragment


def test_shader_pair_is_immutable():
    pair = shader_pair("quad")
    with pytest.raises(AttributeError):
        pair.vertex = ""
    assert isinstance(pair, ShaderPair)
    assert pair.vertex.startswith("#version 300 es")
    assert shader_pair("quad").vertex == pair.vertex