import math

import pytest

from pirender.geometry import (
    FLOATS_PER_VERTEX,
    MeshData,
    cube_mesh_data,
    panel_mesh_data,
    sphere_mesh_data,
)


def _vertices(mesh):
    v = mesh.vertices
    return [v[i:i + FLOATS_PER_VERTEX] for i in range(0, len(v), FLOATS_PER_VERTEX)]


def test_cube_counts():
    cube = cube_mesh_data()
    assert cube.vertex_count() == 24
    assert cube.index_count == 36


def test_cube_first_face_indices():
    cube = cube_mesh_data()
    assert cube.indices[:6] == (0, 1, 2, 0, 2, 3)
    assert cube.indices[-6:] == (20, 21, 22, 20, 22, 23)


def test_cube_positions_lie_on_face_of_normal():
    for vertex in _vertices(cube_mesh_data()):
        position, normal = vertex[:3], vertex[3:]
        assert sum(p * n for p, n in zip(position, normal)) == pytest.approx(0.5)
        assert all(abs(p) == 0.5 for p in position)


def test_cube_front_face_vertex():
    assert _vertices(cube_mesh_data())[0] == (-0.5, -0.5, 0.5, 0.0, 0.0, 1.0)


def test_panel_data():
    panel = panel_mesh_data()
    assert panel.vertex_count() == 4
    assert panel.indices == (0, 1, 2, 2, 3, 0)
    for vertex in _vertices(panel):
        assert vertex[2] == 0.0
        assert vertex[3:] == (0.0, 0.0, 1.0)


def test_sphere_default_vertex_count():
    sphere = sphere_mesh_data()
    assert sphere.vertex_count() == (32 + 1) * (16 + 1)


def test_sphere_normals_are_unit_and_positions_half():
    for vertex in _vertices(sphere_mesh_data(12, 8)):
        position, normal = vertex[:3], vertex[3:]
        assert math.sqrt(sum(n * n for n in normal)) == pytest.approx(1.0)
        assert position == pytest.approx(tuple(n * 0.5 for n in normal))


def test_sphere_indices_are_triangles_in_range():
    sphere = sphere_mesh_data(10, 5)
    assert sphere.index_count % 3 == 0
    assert max(sphere.indices) < sphere.vertex_count()
    assert min(sphere.indices) >= 0


def test_sphere_single_stack_has_no_triangles():
    assert sphere_mesh_data(8, 1).indices == ()


@pytest.mark.parametrize("sectors,stacks", [(0, 4), (4, 0), (-1, 3)])
def test_sphere_rejects_non_positive_counts(sectors, stacks):
    with pytest.raises(ValueError):
        sphere_mesh_data(sectors, stacks)


def test_sphere_rejects_too_many_vertices():
    with pytest.raises(ValueError):
        sphere_mesh_data(400, 400)


def test_mesh_data_validation():
    with pytest.raises(ValueError):
        MeshData((0.0,) * 7, ())
    with pytest.raises(ValueError):
        MeshData((0.0,) * 12, (0, 1))
    with pytest.raises(ValueError):
        MeshData((0.0,) * 12, (0, 1, 2))