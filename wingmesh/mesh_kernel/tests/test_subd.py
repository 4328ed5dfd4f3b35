"""Tests for Catmull-Clark Subdivision."""
import pytest

from wingmesh.mesh_kernel.errors import InvalidIterationCount, InvariantViolation
from wingmesh.mesh_kernel.ops.builder_ops import build_from_buffer, build_winged_edge_mesh
from wingmesh.mesh_kernel.ops.export_ops import face_cycles
from wingmesh.mesh_kernel.ops.primitive_ops import create_box, create_chips, create_pyramid, create_quad_box
from wingmesh.mesh_kernel.ops.subd_ops import (
    compute_catmull_clark_points,
    split_edge,
    split_face,
    subdivide_cc,
)

QUAD = [[0, 0, 0], [1, 0, 0], [1, 1, 0], [0, 1, 0]]
TRI = [[0, 0, 0], [1, 0, 0], [0, 1, 0]]


def _expected_counts(mesh):
    v, e, f = mesh.counts()
    sides = sum(len(mesh.face_edges(face.index)) for face in mesh.faces)
    return v + e + f, 2 * e + sides, sides


def test_subd_single_quad():
    mesh = build_winged_edge_mesh(QUAD, [0, 1, 2, 3], 4)
    subdivide_cc(mesh, iterations=1)

    # 4 corners + 4 edge points + 1 centre
    assert mesh.counts() == (9, 12, 4)
    mesh.validate()

    positions = [v.position for v in mesh.vertices]
    assert positions[0] == pytest.approx((1 / 12, 1 / 12, 0.0))
    assert positions[2] == pytest.approx((11 / 12, 11 / 12, 0.0))
    assert positions[4] == pytest.approx((0.5, 0.0, 0.0))
    assert positions[5] == pytest.approx((1.0, 0.5, 0.0))
    assert positions[6] == pytest.approx((0.5, 1.0, 0.0))
    assert positions[7] == pytest.approx((0.0, 0.5, 0.0))
    assert positions[8] == pytest.approx((0.5, 0.5, 0.0))

    assert face_cycles(mesh)[0] == [0, 4, 8, 7]
    for f in range(4):
        assert 8 in mesh.face_vertices(f)
    assert mesh.valence(8) == 4
    assert mesh.border_edge_count() == 8


def test_subd_cube():
    mesh = build_from_buffer(create_quad_box())
    subdivide_cc(mesh, iterations=1)

    assert mesh.counts() == (26, 48, 24)
    assert mesh.border_edge_count() == 0
    assert mesh.euler_characteristic() == 2
    mesh.validate()

    # Corners: (Q + 2R) / 3 with Q = 1/6 and R = 1/3 per axis
    for v in mesh.vertices[:8]:
        assert [abs(c) for c in v.position] == pytest.approx([5 / 18] * 3)

    positions = [v.position for v in mesh.vertices]
    assert any(p == pytest.approx((0.375, 0.375, 0.0)) for p in positions[8:20])
    for face_point in [(0, 0, -0.5), (0, 0, 0.5), (0, -0.5, 0), (0, 0.5, 0), (-0.5, 0, 0), (0.5, 0, 0)]:
        assert any(p == pytest.approx(face_point) for p in positions[20:])

    # original corners keep valence 3, edge points and face points get 4
    assert [mesh.valence(v) for v in range(8)] == [3] * 8
    assert all(mesh.valence(v) == 4 for v in range(8, 26))


def test_subd_open_triangle_uses_border_rule():
    mesh = build_winged_edge_mesh(TRI, [0, 1, 2], 3)
    subdivide_cc(mesh)

    assert mesh.counts() == (7, 9, 3)
    mesh.validate()
    positions = [v.position for v in mesh.vertices]
    assert positions[0] == pytest.approx((1 / 12, 1 / 12, 0.0))
    assert positions[1] == pytest.approx((5 / 6, 1 / 12, 0.0))
    assert positions[2] == pytest.approx((1 / 12, 5 / 6, 0.0))
    assert positions[6] == pytest.approx((1 / 3, 1 / 3, 0.0))
    assert all(len(mesh.face_edges(f)) == 4 for f in range(3))


@pytest.mark.parametrize("factory", [create_box, create_quad_box, create_chips, create_pyramid])
def test_subd_counts_follow_formula(factory):
    mesh = build_from_buffer(factory())
    euler = mesh.euler_characteristic()

    for _ in range(2):
        expected = _expected_counts(mesh)
        subdivide_cc(mesh, iterations=1)
        assert mesh.counts() == expected
        assert mesh.euler_characteristic() == euler
        assert all(len(mesh.face_edges(f)) == 4 for f in range(len(mesh.faces)))
        mesh.validate()


def test_subd_multiple_iterations():
    mesh = build_from_buffer(create_quad_box())
    subdivide_cc(mesh, iterations=2)

    assert mesh.counts() == (98, 192, 96)
    mesh.validate()


def test_closed_mesh_edge_count_quadruples():
    mesh = build_from_buffer(create_box())
    _, e, _ = mesh.counts()
    subdivide_cc(mesh)

    assert mesh.counts()[1] == 4 * e


@pytest.mark.parametrize("iterations", [0, -1, 101, 1.5, True, "2", None])
def test_invalid_iteration_count_leaves_mesh_untouched(iterations):
    mesh = build_from_buffer(create_quad_box())

    with pytest.raises(InvalidIterationCount):
        subdivide_cc(mesh, iterations=iterations)
    assert mesh.counts() == (8, 12, 6)


def test_iteration_ceiling_from_env(monkeypatch):
    monkeypatch.setenv("MESH_SUBD_MAX_ITERATIONS", "2")
    mesh = build_winged_edge_mesh(TRI, [0, 1, 2], 3)

    with pytest.raises(InvalidIterationCount) as exc:
        subdivide_cc(mesh, iterations=3)
    assert exc.value.details["max"] == 2
    subdivide_cc(mesh, iterations=2)
    assert mesh.counts()[2] == 12


def test_catmull_clark_points_do_not_mutate():
    mesh = build_from_buffer(create_quad_box())
    face_points, edge_points, vertex_points = compute_catmull_clark_points(mesh)

    assert (len(face_points), len(edge_points), len(vertex_points)) == (6, 12, 8)
    assert mesh.counts() == (8, 12, 6)
    assert mesh.vertices[0].position == (-0.5, -0.5, -0.5)


def test_split_edge():
    mesh = build_winged_edge_mesh(QUAD, [0, 1, 2, 3], 4)
    new_edge = split_edge(mesh, 0, (0.5, 0.0, 0.0))

    assert new_edge == 4
    assert mesh.edges[0].end_vertex == 4
    assert (mesh.edges[4].start_vertex, mesh.edges[4].end_vertex) == (4, 1)
    assert mesh.face_vertices(0) == [0, 4, 1, 2, 3]
    assert sorted(mesh.incident_edges(1)) == [1, 4]
    assert sorted(mesh.incident_edges(4)) == [0, 4]


def test_split_face_rejects_unsplit_faces():
    tri = build_winged_edge_mesh(TRI, [0, 1, 2], 3)
    with pytest.raises(InvariantViolation):
        split_face(tri, 0, (0.0, 0.0, 0.0), 3)

    quad = build_winged_edge_mesh(QUAD, [0, 1, 2, 3], 4)
    with pytest.raises(InvariantViolation):
        split_face(quad, 0, (0.5, 0.5, 0.0), 0)
