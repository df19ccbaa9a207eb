import math

import pytest

from pirender.mathtool import (
    create_identity_matrix,
    create_look_at_matrix,
    create_model_matrix,
    create_orthographic_matrix,
    create_perspective_matrix,
    create_transform_matrix,
    create_view_matrix,
    invert_matrix,
    multiply_matrices,
)

IDENTITY = create_identity_matrix()


def _point_matrix(p):
    """A matrix whose first column is the homogeneous point p."""
    return (p[0], p[1], p[2], 1.0) + (0.0,) * 12


def _apply(m, p):
    return multiply_matrices(m, _point_matrix(p))[:4]


def _transpose(m):
    return tuple(m[r * 4 + c] for c in range(4) for r in range(4))


def test_identity_diagonal():
    assert IDENTITY == (
        1.0, 0.0, 0.0, 0.0,
        0.0, 1.0, 0.0, 0.0,
        0.0, 0.0, 1.0, 0.0,
        0.0, 0.0, 0.0, 1.0,
    )


def test_multiply_by_identity_is_neutral():
    m = create_transform_matrix((1, 2, 3), (0, 30, 15), (2, 3, 4))
    assert multiply_matrices(IDENTITY, m) == pytest.approx(m)
    assert multiply_matrices(m, IDENTITY) == pytest.approx(m)


def test_multiply_wrong_length_raises():
    with pytest.raises(ValueError):
        multiply_matrices((1.0,) * 15, IDENTITY)


def test_multiply_composes_translations():
    a = create_transform_matrix((1, 0, 0), (0, 0, 0), (1, 1, 1))
    b = create_transform_matrix((0, 2, 0), (0, 0, 0), (1, 1, 1))
    combined = multiply_matrices(a, b)
    assert combined[12:15] == pytest.approx((1, 2, 0))


def test_invert_round_trip():
    m = create_transform_matrix((4, -2, 7), (0, 40, 25), (2, 0.5, 3))
    inv = invert_matrix(m)
    assert multiply_matrices(m, inv) == pytest.approx(IDENTITY, abs=1e-9)
    assert multiply_matrices(inv, m) == pytest.approx(IDENTITY, abs=1e-9)


def test_invert_singular_raises():
    with pytest.raises(ValueError):
        invert_matrix((0.0,) * 16)
    with pytest.raises(ValueError):
        invert_matrix(create_transform_matrix((0, 0, 0), (0, 0, 0), (1, 0, 1)))


def test_rotation_inverse_is_transpose():
    r = create_model_matrix(35.0, -70.0)
    assert invert_matrix(r) == pytest.approx(_transpose(r), abs=1e-9)


def test_model_matrix_zero_angles_is_identity():
    assert create_model_matrix(0.0, 0.0) == pytest.approx(IDENTITY)


def test_transform_ignores_first_rotation_component():
    a = create_transform_matrix((1, 2, 3), (45, 10, 20), (1, 1, 1))
    b = create_transform_matrix((1, 2, 3), (0, 10, 20), (1, 1, 1))
    assert a == pytest.approx(b)


def test_transform_matches_model_matrix_rotation():
    t = create_transform_matrix((0, 0, 0), (0, 30, 60), (1, 1, 1))
    assert t == pytest.approx(create_model_matrix(30, 60))


def test_transform_translation_and_scale():
    t = create_transform_matrix((5, 6, 7), (0, 0, 0), (2, 3, 4))
    assert t[12:15] == pytest.approx((5, 6, 7))
    assert (t[0], t[5], t[10], t[15]) == pytest.approx((2, 3, 4, 1))


def test_perspective_structure():
    m = create_perspective_matrix(math.radians(60), 4 / 3, 0.1, 100.0)
    assert m[11] == -1.0
    assert m[15] == 0.0
    assert m[5] == pytest.approx(1.0 / math.tan(math.radians(30)))
    assert m[0] == pytest.approx(m[5] / (4 / 3))


def test_perspective_maps_near_and_far_planes():
    m = create_perspective_matrix(math.radians(90), 1.0, 1.0, 10.0)
    near = _apply(m, (0, 0, -1.0))
    far = _apply(m, (0, 0, -10.0))
    assert near[2] / near[3] == pytest.approx(-1.0)
    assert far[2] / far[3] == pytest.approx(1.0)


def test_orthographic_maps_box_corners():
    m = create_orthographic_matrix(-4, 4, -3, 3, 0.5, 50)
    lo = _apply(m, (-4, -3, -0.5))
    hi = _apply(m, (4, 3, -50))
    assert lo == pytest.approx((-1, -1, -1, 1))
    assert hi == pytest.approx((1, 1, 1, 1))


def test_look_at_moves_eye_to_origin():
    eye = (3.0, 4.0, 5.0)
    m = create_look_at_matrix(eye, (0, 0, 0), (0, 1, 0))
    assert _apply(m, eye) == pytest.approx((0, 0, 0, 1), abs=1e-9)


def test_look_at_puts_center_in_front():
    m = create_look_at_matrix((0, 0, 5), (0, 0, 0), (0, 1, 0))
    assert _apply(m, (0, 0, 0)) == pytest.approx((0, 0, -5, 1))


def test_view_matrix_differs_only_in_forward_translation():
    eye, center, up = (1.0, 2.0, 6.0), (0.5, -1.0, 0.0), (0, 1, 0)
    look = create_look_at_matrix(eye, center, up)
    view = create_view_matrix(eye, center, up)
    assert view[:14] == pytest.approx(look[:14])
    assert view[14] == pytest.approx(-look[14])
    assert view[15] == 1.0


def test_look_at_degenerate_raises():
    with pytest.raises(ValueError):
        create_look_at_matrix((1, 1, 1), (1, 1, 1), (0, 1, 0))
    with pytest.raises(ValueError):
        create_view_matrix((0, 0, 0), (0, 1, 0), (0, 1, 0))