"""Column-major 4x4 matrix helpers for the renderer.

Matrices are tuples of 16 floats in OpenGL (column-major) order.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

Matrix4 = tuple[float, ...]
Vector3 = Sequence[float]

_SINGULAR_EPSILON = 1e-6


def _as_matrix(m: Sequence[float]) -> Matrix4:
    values = tuple(float(v) for v in m)
    if len(values) != 16:
        raise ValueError(f"a 4x4 matrix needs 16 values, got {len(values)}")
    return values


def _as_vector(v: Vector3) -> tuple[float, float, float]:
    values = tuple(float(x) for x in v)
    if len(values) != 3:
        raise ValueError(f"a 3-vector needs 3 values, got {len(values)}")
    return values  # type: ignore[return-value]


def _normalized(v: tuple[float, float, float]) -> tuple[float, float, float]:
    length = math.sqrt(sum(x * x for x in v))
    if length == 0.0:
        raise ValueError("cannot normalise a zero-length vector")
    return (v[0] / length, v[1] / length, v[2] / length)


def _cross(a: Vector3, b: Vector3) -> tuple[float, float, float]:
    return (
        a[1] * b[2] - a[2] * b[1],
        a[2] * b[0] - a[0] * b[2],
        a[0] * b[1] - a[1] * b[0],
    )


def _dot(a: Vector3, b: Vector3) -> float:
    return a[0] * b[0] + a[1] * b[1] + a[2] * b[2]


def create_identity_matrix() -> Matrix4:
    """Return the 4x4 identity matrix."""
    return tuple(1.0 if i % 5 == 0 else 0.0 for i in range(16))


def multiply_matrices(a: Sequence[float], b: Sequence[float]) -> Matrix4:
    """Return the product ``a * b`` of two column-major matrices."""
    a = _as_matrix(a)
    b = _as_matrix(b)
    return tuple(
        sum(a[k * 4 + row] * b[col * 4 + k] for k in range(4))
        for col in range(4)
        for row in range(4)
    )


def create_perspective_matrix(
    fov_y: float, aspect: float, near_z: float, far_z: float
) -> Matrix4:
    """Return a perspective projection; ``fov_y`` is in radians."""
    f = 1.0 / math.tan(fov_y * 0.5)
    nf = 1.0 / (near_z - far_z)
    m = [0.0] * 16
    m[0] = f / aspect
    m[5] = f
    m[10] = (far_z + near_z) * nf
    m[11] = -1.0
    m[14] = (2.0 * far_z * near_z) * nf
    return tuple(m)


def create_orthographic_matrix(
    left: float, right: float, bottom: float, top: float, near_z: float, far_z: float
) -> Matrix4:
    """Return an orthographic projection for the given box."""
    m = [0.0] * 16
    m[0] = 2.0 / (right - left)
    m[5] = 2.0 / (top - bottom)
    m[10] = -2.0 / (far_z - near_z)
    m[12] = -(right + left) / (right - left)
    m[13] = -(top + bottom) / (top - bottom)
    m[14] = -(far_z + near_z) / (far_z - near_z)
    m[15] = 1.0
    return tuple(m)


def _view_basis(
    eye: Vector3, center: Vector3, up: Vector3
) -> tuple[tuple[float, float, float], ...]:
    eye = _as_vector(eye)
    center = _as_vector(center)
    up = _as_vector(up)
    forward = _normalized(tuple(c - e for c, e in zip(center, eye)))
    side = _normalized(_cross(forward, up))
    true_up = _cross(side, forward)
    return eye, forward, side, true_up


def create_look_at_matrix(eye: Vector3, center: Vector3, up: Vector3) -> Matrix4:
    """Return a view matrix looking from ``eye`` towards ``center``."""
    eye, f, s, u = _view_basis(eye, center, up)
    return (
        s[0], u[0], -f[0], 0.0,
        s[1], u[1], -f[1], 0.0,
        s[2], u[2], -f[2], 0.0,
        -_dot(s, eye), -_dot(u, eye), _dot(f, eye), 1.0,
    )


def create_view_matrix(position: Vector3, center: Vector3, up: Vector3) -> Matrix4:
    """Return a camera matrix; like the look-at matrix but with the forward
    translation term negated."""
    eye, f, s, u = _view_basis(position, center, up)
    return (
        s[0], u[0], -f[0], 0.0,
        s[1], u[1], -f[1], 0.0,
        s[2], u[2], -f[2], 0.0,
        -_dot(s, eye), -_dot(u, eye), -_dot(f, eye), 1.0,
    )


def _rotation_y(degrees: float) -> Matrix4:
    rad = math.radians(degrees)
    c, s = math.cos(rad), math.sin(rad)
    m = list(create_identity_matrix())
    m[0], m[2], m[8], m[10] = c, s, -s, c
    return tuple(m)


def _rotation_x(degrees: float) -> Matrix4:
    rad = math.radians(degrees)
    c, s = math.cos(rad), math.sin(rad)
    m = list(create_identity_matrix())
    m[5], m[6], m[9], m[10] = c, -s, s, c
    return tuple(m)


def create_model_matrix(rotate_y_deg: float, rotate_x_deg: float) -> Matrix4:
    """Return the rotation ``Ry * Rx`` for angles given in degrees."""
    return multiply_matrices(_rotation_y(rotate_y_deg), _rotation_x(rotate_x_deg))


def create_transform_matrix(
    offset: Vector3, rotate_deg: Vector3, scale: Vector3
) -> Matrix4:
    """Return a model matrix from an offset, rotation and scale.

    The rotation uses ``rotate_deg[1]`` about Y and ``rotate_deg[2]`` about X;
    the first component is ignored. Scale multiplies the diagonal only.
    """
    offset = _as_vector(offset)
    rotate_deg = _as_vector(rotate_deg)
    scale = _as_vector(scale)
    m = list(create_model_matrix(rotate_deg[1], rotate_deg[2]))
    m[12], m[13], m[14] = offset
    m[0] *= scale[0]
    m[5] *= scale[1]
    m[10] *= scale[2]
    return tuple(m)


def invert_matrix(m: Sequence[float]) -> Matrix4:
    """Return the inverse of ``m`` by Gauss-Jordan elimination.

    Raises ValueError when the matrix is singular.
    """
    m = _as_matrix(m)
    rows = [
        [m[i * 4 + j] for j in range(4)] + [1.0 if i == j else 0.0 for j in range(4)]
        for i in range(4)
    ]
    for i in range(4):
        pivot_row = max(range(i, 4), key=lambda r: abs(rows[r][i]))
        if pivot_row != i:
            rows[i], rows[pivot_row] = rows[pivot_row], rows[i]
        pivot = rows[i][i]
        if abs(pivot) < _SINGULAR_EPSILON:
            raise ValueError("matrix is not invertible")
        rows[i] = [value / pivot for value in rows[i]]
        for k in range(4):
            if k != i:
                factor = rows[k][i]
                rows[k] = [a - factor * b for a, b in zip(rows[k], rows[i])]
    return tuple(value for row in rows for value in row[4:])