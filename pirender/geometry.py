"""Vertex and index data for the built-in meshes.

Each vertex holds six floats: position (x, y, z) then normal (nx, ny, nz).
"""

from __future__ import annotations

from dataclasses import dataclass

FLOATS_PER_VERTEX = 6
MAX_INDEXED_VERTICES = 65536

_SPHERE_PI = 3.1415926


@dataclass(frozen=True)
class MeshData:
    """Interleaved vertices and triangle-list indices of one mesh."""

    vertices: tuple[float, ...]
    indices: tuple[int, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "vertices", tuple(float(v) for v in self.vertices))
        object.__setattr__(self, "indices", tuple(int(i) for i in self.indices))
        if len(self.vertices) % FLOATS_PER_VERTEX:
            raise ValueError("vertex data is not a whole number of vertices")
        if len(self.indices) % 3:
            raise ValueError("index data is not a whole number of triangles")
        count = self.vertex_count()
        if any(i < 0 or i >= count for i in self.indices):
            raise ValueError("index out of range of the vertex data")

    def vertex_count(self) -> int:
        """Return the number of vertices."""
        return len(self.vertices) // FLOATS_PER_VERTEX

    @property
    def index_count(self) -> int:
        return len(self.indices)


_H = 0.5

# (normal, four corners) per face, in draw order.
_CUBE_FACES = (
    ((0.0, 0.0, 1.0), ((-_H, -_H, _H), (_H, -_H, _H), (_H, _H, _H), (-_H, _H, _H))),
    ((0.0, 0.0, -1.0), ((-_H, -_H, -_H), (_H, -_H, -_H), (_H, _H, -_H), (-_H, _H, -_H))),
    ((-1.0, 0.0, 0.0), ((-_H, -_H, -_H), (-_H, -_H, _H), (-_H, _H, _H), (-_H, _H, -_H))),
    ((1.0, 0.0, 0.0), ((_H, -_H, -_H), (_H, -_H, _H), (_H, _H, _H), (_H, _H, -_H))),
    ((0.0, 1.0, 0.0), ((-_H, _H, -_H), (-_H, _H, _H), (_H, _H, _H), (_H, _H, -_H))),
    ((0.0, -1.0, 0.0), ((-_H, -_H, -_H), (-_H, -_H, _H), (_H, -_H, _H), (_H, -_H, -_H))),
)


def _quad_indices(base: int) -> tuple[int, ...]:
    return (base, base + 1, base + 2, base, base + 2, base + 3)


def cube_mesh_data() -> MeshData:
    """Return a unit cube centred on the origin with per-face normals."""
    vertices = [
        value
        for normal, corners in _CUBE_FACES
        for corner in corners
        for value in (*corner, *normal)
    ]
    indices = [i for face in range(len(_CUBE_FACES)) for i in _quad_indices(face * 4)]
    return MeshData(tuple(vertices), tuple(indices))


def panel_mesh_data() -> MeshData:
    """Return a unit square in the XY plane facing +Z."""
    corners = ((-_H, -_H), (_H, -_H), (_H, _H), (-_H, _H))
    vertices = [value for x, y in corners for value in (x, y, 0.0, 0.0, 0.0, 1.0)]
    return MeshData(tuple(vertices), (0, 1, 2, 2, 3, 0))


def sphere_mesh_data(sector_count: int = 32, stack_count: int = 16) -> MeshData:
    """Return a UV sphere of radius 0.5 with unit normals."""
    import math

    if sector_count < 1 or stack_count < 1:
        raise ValueError("sector_count and stack_count must be positive")
    if (sector_count + 1) * (stack_count + 1) > MAX_INDEXED_VERTICES:
        raise ValueError("sphere has too many vertices for 16-bit indices")

    vertices: list[float] = []
    for i in range(stack_count + 1):
        stack_angle = _SPHERE_PI / 2 - i * _SPHERE_PI / stack_count
        xy = math.cos(stack_angle)
        z = math.sin(stack_angle)
        for j in range(sector_count + 1):
            sector_angle = j * 2 * _SPHERE_PI / sector_count
            x = xy * math.cos(sector_angle)
            y = xy * math.sin(sector_angle)
            vertices.extend((x * 0.5, y * 0.5, z * 0.5, x, y, z))

    indices: list[int] = []
    for i in range(stack_count):
        row = i * (sector_count + 1)
        next_row = row + sector_count + 1
        for j in range(sector_count):
            k1, k2 = row + j, next_row + j
            if i != 0:
                indices.extend((k1, k2, k1 + 1))
            if i != stack_count - 1:
                indices.extend((k1 + 1, k2, k2 + 1))
    return MeshData(tuple(vertices), tuple(indices))