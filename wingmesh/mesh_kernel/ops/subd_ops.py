"""Mesh Subdivision Operations (Catmull-Clark, in place on the winged-edge store)."""
from __future__ import annotations

import logging
from typing import List, Tuple

from wingmesh.config.runtime_config import get_subd_max_iterations
from wingmesh.mesh_kernel.errors import InvalidIterationCount, InvariantViolation
from wingmesh.mesh_kernel.topology import (
    Vec3,
    WingedEdgeMesh,
    midpoint,
    vec_add,
    vec_mean,
    vec_scale,
)

logger = logging.getLogger(__name__)


def validate_iterations(iterations) -> None:
    ceiling = get_subd_max_iterations()
    if isinstance(iterations, bool) or not isinstance(iterations, int):
        raise InvalidIterationCount(
            f"iteration count must be an integer, got {iterations!r}",
            {"iterations": repr(iterations)},
        )
    if not 1 <= iterations <= ceiling:
        raise InvalidIterationCount(
            f"iteration count must be between 1 and {ceiling}, got {iterations}",
            {"iterations": iterations, "max": ceiling},
        )


def subdivide_cc(mesh: WingedEdgeMesh, iterations: int = 1) -> WingedEdgeMesh:
    """
    Performs Catmull-Clark Subdivision in place.
    Triangles and quads both come out as quads (3 quads per tri, 4 per quad).
    The iteration count is checked before the mesh is touched.
    """
    validate_iterations(iterations)

    v, e, f = mesh.counts()
    logger.info(
        "Catmull-Clark x%s on mesh with %s vertices, %s edges, %s faces",
        iterations, v, e, f,
    )
    for _ in range(iterations):
        catmull_clark_pass(mesh)
    return mesh


def catmull_clark_pass(mesh: WingedEdgeMesh) -> None:
    face_points, edge_points, vertex_points = compute_catmull_clark_points(mesh)

    # Both sweeps append records, so only the pre-pass ranges are visited.
    vertex_count, edge_count, face_count = mesh.counts()

    for edge_idx in range(edge_count):
        split_edge(mesh, edge_idx, edge_points[edge_idx])

    for face_idx in range(face_count):
        split_face(mesh, face_idx, face_points[face_idx], vertex_count)

    for vertex_idx in range(vertex_count):
        mesh.vertices[vertex_idx].position = vertex_points[vertex_idx]

    logger.debug(
        "Catmull-Clark pass: %s/%s/%s -> %s/%s/%s (V/E/F)",
        vertex_count, edge_count, face_count, *mesh.counts(),
    )


def compute_catmull_clark_points(
    mesh: WingedEdgeMesh,
) -> Tuple[List[Vec3], List[Vec3], List[Vec3]]:
    """Face, edge and vertex points for one pass, indexed like the arenas."""
    # 1. Face Points: Average of face vertices
    face_points = [mesh.face_centroid(face.index) for face in mesh.faces]

    # 2. Edge Points
    # Interior: (V0 + V1 + F_right + F_left) / 4
    # Border:   (V0 + V1) / 2
    edge_points: List[Vec3] = []
    for edge in mesh.edges:
        p0 = mesh.vertices[edge.start_vertex].position
        p1 = mesh.vertices[edge.end_vertex].position
        if edge.is_border:
            edge_points.append(midpoint(p0, p1))
        else:
            fr = face_points[edge.right_face]
            fl = face_points[edge.left_face]
            edge_points.append(vec_scale(vec_add(vec_add(p0, p1), vec_add(fr, fl)), 0.25))

    # 3. Vertex Points
    vertex_points = [_vertex_point(mesh, v.index, face_points) for v in mesh.vertices]

    return face_points, edge_points, vertex_points


def _vertex_point(mesh: WingedEdgeMesh, vertex: int, face_points: List[Vec3]) -> Vec3:
    P = mesh.vertices[vertex].position
    fan = mesh.incident_edges(vertex)

    def _mid(edge_idx: int) -> Vec3:
        other = mesh.edges[edge_idx].opposite_vertex(vertex)
        return midpoint(P, mesh.vertices[other].position)

    border = [e for e in fan if mesh.edges[e].is_border]
    if border:
        # Border Rule: (E1 + E2 + 4V) / 6 with E1/E2 the border edge midpoints
        if len(border) != 2:
            raise InvariantViolation(
                f"border vertex {vertex} has {len(border)} border edges, expected 2",
                {"vertex": vertex, "edges": border},
            )
        total = vec_add(vec_add(_mid(border[0]), _mid(border[1])), vec_scale(P, 4.0))
        return vec_scale(total, 1.0 / 6.0)

    # Smooth Rule: (Q + 2R + (n-3)P) / n
    n = len(fan)
    seen = set()
    incident_face_points = []
    for edge_idx in fan:
        edge = mesh.edges[edge_idx]
        for face in (edge.right_face, edge.left_face):
            if face is not None and face not in seen:
                seen.add(face)
                incident_face_points.append(face_points[face])

    Q = vec_mean(incident_face_points)
    R = vec_mean([_mid(e) for e in fan])
    total = vec_add(vec_add(Q, vec_scale(R, 2.0)), vec_scale(P, float(n - 3)))
    return vec_scale(total, 1.0 / float(n))


def split_edge(mesh: WingedEdgeMesh, edge_idx: int, point: Vec3) -> int:
    """
    Insert a vertex at ``point`` on the edge. The edge keeps its start and
    now ends at the new vertex; a new edge runs from there to the old end.
    Returns the new edge index.
    """
    edge = mesh.edges[edge_idx]
    mid = mesh.add_vertex(point)

    old_end = edge.end_vertex
    old_end_cw = edge.end_cw_edge
    old_end_ccw = edge.end_ccw_edge

    new_idx = mesh.add_edge(mid, old_end)
    new_edge = mesh.edges[new_idx]
    new_edge.right_face = edge.right_face
    new_edge.left_face = edge.left_face
    new_edge.end_cw_edge = old_end_cw
    new_edge.end_ccw_edge = old_end_ccw

    mesh.fix_neighbour(old_end_cw, edge_idx, new_idx)
    mesh.fix_neighbour(old_end_ccw, edge_idx, new_idx)

    edge.end_vertex = mid
    edge.end_cw_edge = new_idx
    edge.end_ccw_edge = new_idx
    new_edge.start_cw_edge = edge_idx
    new_edge.start_ccw_edge = edge_idx

    mesh.vertices[mid].edge = new_idx
    if mesh.vertices[old_end].edge == edge_idx:
        mesh.vertices[old_end].edge = new_idx

    # The left face must not start its walk at the new vertex (see split_face).
    if not edge.is_border:
        left = mesh.faces[edge.left_face]
        if left.edge == edge_idx:
            left.edge = new_idx

    return new_idx


def split_face(
    mesh: WingedEdgeMesh,
    face_idx: int,
    point: Vec3,
    original_vertex_count: int,
) -> List[int]:
    """
    Fan a face whose edges were all split into quads around a new centre
    vertex at ``point``. The face's edge cycle alternates corner -> edge
    point -> corner, starting at a corner (a vertex below
    ``original_vertex_count``). Sub-face 0 keeps ``face_idx``.
    Returns the sub-face indices in winding order.
    """
    edges = mesh.face_edges(face_idx)
    if len(edges) % 2 != 0:
        raise InvariantViolation(
            f"face {face_idx} has {len(edges)} edges after edge split, expected an even count",
            {"face": face_idx, "edges": edges},
        )
    first = mesh.face_start_vertex(face_idx, edges[0])
    if first >= original_vertex_count:
        raise InvariantViolation(
            f"face {face_idx} walk starts at edge point {first} instead of a corner",
            {"face": face_idx, "vertex": first},
        )

    center = mesh.add_vertex(point)
    k = len(edges) // 2

    spokes: List[int] = []
    sub_faces: List[int] = []
    for j in range(k):
        edge_point = mesh.face_start_vertex(face_idx, edges[2 * j + 1])
        spoke = mesh.add_edge(edge_point, center)
        spokes.append(spoke)
        sub_faces.append(face_idx if j == 0 else mesh.add_face(spoke))

    mesh.vertices[center].edge = spokes[0]

    # Spokes around the centre
    for j, spoke in enumerate(spokes):
        s = mesh.edges[spoke]
        s.right_face = sub_faces[j]
        s.left_face = sub_faces[(j + 1) % k]
        s.end_cw_edge = spokes[(j + 1) % k]
        s.end_ccw_edge = spokes[(j - 1) % k]

    # Sub-face j is: edges[2j-1] -> edges[2j] -> spoke j -> spoke j-1 (reversed)
    for j in range(k):
        current = edges[2 * j]
        previous = edges[2 * j - 1]
        spoke = spokes[j]
        previous_spoke = spokes[(j - 1) % k]

        mesh.edges[spoke].start_cw_edge = current
        mesh.edges[previous_spoke].start_ccw_edge = previous

        if mesh.is_edge_opposite(face_idx, current):
            mesh.edges[current].start_ccw_edge = spoke
        else:
            mesh.edges[current].end_ccw_edge = spoke

        if mesh.is_edge_opposite(face_idx, previous):
            mesh.edges[previous].end_cw_edge = previous_spoke
        else:
            mesh.edges[previous].start_cw_edge = previous_spoke

        mesh.fix_face(current, face_idx, sub_faces[j])
        mesh.fix_face(previous, face_idx, sub_faces[j])

    return sub_faces
