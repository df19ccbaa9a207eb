import pytest

from pirender.mathtool import (
    create_identity_matrix,
    create_perspective_matrix,
    create_transform_matrix,
)
from pirender.renderer import (
    BASE_LIGHT_RANGE,
    DEFAULT_SCREEN_SIZE,
    Renderer,
    light_range_for,
    player_screen_uv,
)

IDENTITY = create_identity_matrix()


def test_origin_maps_to_screen_centre():
    assert player_screen_uv((0.0, 0.0, 0.0), IDENTITY) == pytest.approx((0.5, 0.5))


def test_ndc_corners_map_to_uv_corners():
    assert player_screen_uv((1.0, 1.0, 0.0), IDENTITY) == pytest.approx((1.0, 1.0))
    assert player_screen_uv((-1.0, -1.0, 0.0), IDENTITY) == pytest.approx((0.0, 0.0))


def test_zero_w_maps_to_centre():
    zero = (0.0,) * 16
    assert player_screen_uv((3.0, -2.0, 7.0), zero) == (0.5, 0.5)


def test_point_on_view_axis_projects_to_centre():
    projection = create_perspective_matrix(1.0, 1.5, 0.1, 100.0)
    assert player_screen_uv((0.0, 0.0, -5.0), projection) == pytest.approx((0.5, 0.5))


def test_translation_in_view_projection_shifts_uv():
    shifted = create_transform_matrix((1.0, 0.0, 0.0), (0.0, 0.0, 0.0), (1.0, 1.0, 1.0))
    assert player_screen_uv((0.0, 0.0, 0.0), shifted) == pytest.approx((1.0, 0.5))


def test_player_position_needs_three_values():
    with pytest.raises(ValueError):
        player_screen_uv((1.0, 2.0), IDENTITY)


@pytest.mark.parametrize("uv", [(0.5, 0.5), (0.0, 0.0), (1.0, 1.0), (0.0, 1.0)])
def test_light_range_on_screen_is_base(uv):
    assert light_range_for(uv) == BASE_LIGHT_RANGE
    assert BASE_LIGHT_RANGE == pytest.approx(0.08)


@pytest.mark.parametrize("uv", [(2.0, 0.5), (0.5, -1.0), (-3.0, 4.0)])
def test_light_range_far_off_screen_is_zero(uv):
    assert light_range_for(uv) == 0.0


def test_light_range_shrinks_with_distance_off_screen():
    ranges = [light_range_for((1.0 + d, 0.5)) for d in (0.01, 0.03, 0.06, 0.1)]
    assert all(a > b for a, b in zip(ranges, ranges[1:]))
    assert all(0.0 <= r < BASE_LIGHT_RANGE for r in ranges)


def test_light_range_is_symmetric_about_the_screen():
    assert light_range_for((-0.05, 0.5)) == pytest.approx(light_range_for((1.05, 0.5)))
    assert light_range_for((0.5, -0.05)) == pytest.approx(light_range_for((0.5, 1.05)))


def test_new_renderer_has_default_screen_size():
    renderer = Renderer()
    assert (renderer.screen_width, renderer.screen_height) == DEFAULT_SCREEN_SIZE
    assert DEFAULT_SCREEN_SIZE == (800, 600)
    assert renderer.ready is False


def test_resize_before_init_updates_size_and_texel():
    renderer = Renderer()
    renderer.resize(400, 200)
    assert (renderer.screen_width, renderer.screen_height) == (400, 200)
    assert renderer.texel_size == pytest.approx((1 / 400, 1 / 200))


@pytest.mark.parametrize(
    "call",
    [
        lambda r: r.render(IDENTITY, IDENTITY),
        lambda r: r.render_cubes(IDENTITY, [IDENTITY]),
        lambda r: r.render_panel(IDENTITY, IDENTITY),
        lambda r: r.render_static_instances(IDENTITY, []),
        lambda r: r.render_dynamic_instances(IDENTITY, []),
        lambda r: r.render_emissive_to_radiance(IDENTITY, []),
        lambda r: r.render_block_map(IDENTITY, []),
        lambda r: r.render_diffuse(IDENTITY, []),
        lambda r: r.render_sdf_diffuse(IDENTITY, [], (0.0, 0.0, 0.0), IDENTITY),
        lambda r: r.render_ppgi(),
        lambda r: r.finish_frame(True),
        lambda r: r.reinitialize_targets(640, 480),
    ],
)
def test_drawing_before_init_raises(call):
    with pytest.raises(RuntimeError, match="not initialised"):
        call(Renderer())


def test_shutdown_before_init_leaves_renderer_unusable():
    renderer = Renderer()
    renderer.shutdown()
    renderer.shutdown()
    assert renderer.ready is False
    with pytest.raises(RuntimeError):
        renderer.finish_frame(False)