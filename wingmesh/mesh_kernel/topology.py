"""Winged-edge topology store.

The mesh is held in three arenas (vertices, edges, faces). Every
cross-reference between records is an integer index into the owning arena,
or ``None`` when the slot is empty, so structural edits are plain index
rewrites.

Wing convention for an edge ``a -> b`` with right face ``R`` (walks a->b)
and left face ``L`` (walks b->a)::

    start_cw_edge   edge before this one in R (around a)
    end_ccw_edge    edge after this one in R  (around b)
    start_ccw_edge  edge after this one in L  (around a)
    end_cw_edge     edge before this one in L (around b)

On a border edge (no left face) the two left-side slots link to the
neighbouring border edges instead.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from wingmesh.mesh_kernel.errors import InvariantViolation

Vec3 = Tuple[float, float, float]


# Helper: Simple Vector Add/Scale
def vec_add(a: Vec3, b: Vec3) -> Vec3: return (a[0] + b[0], a[1] + b[1], a[2] + b[2])
def vec_scale(v: Vec3, s: float) -> Vec3: return (v[0] * s, v[1] * s, v[2] * s)
def midpoint(a: Vec3, b: Vec3) -> Vec3: return vec_scale(vec_add(a, b), 0.5)


def vec_mean(points: Sequence[Vec3]) -> Vec3:
    total = (0.0, 0.0, 0.0)
    for p in points:
        total = vec_add(total, p)
    return vec_scale(total, 1.0 / float(len(points)))


@dataclass
class Vertex:
    index: int
    position: Vec3
    edge: Optional[int] = None  # anchor for the incident-edge walk


@dataclass
class Edge:
    index: int
    start_vertex: int
    end_vertex: int
    right_face: Optional[int] = None
    left_face: Optional[int] = None
    start_cw_edge: Optional[int] = None
    start_ccw_edge: Optional[int] = None
    end_cw_edge: Optional[int] = None
    end_ccw_edge: Optional[int] = None

    @property
    def is_border(self) -> bool:
        return self.left_face is None

    def opposite_vertex(self, vertex: int) -> int:
        if vertex == self.start_vertex:
            return self.end_vertex
        if vertex == self.end_vertex:
            return self.start_vertex
        raise InvariantViolation(
            f"vertex {vertex} is not an endpoint of edge {self.index}",
            {"edge": self.index, "vertex": vertex},
        )

    def describe(self) -> str:
        def _ref(value: Optional[int]) -> str:
            return "null" if value is None else str(value)

        return (
            f"Edge {{ index: {self.index}, "
            f"startVertex: {self.start_vertex}, endVertex: {self.end_vertex}, "
            f"rightFace: {_ref(self.right_face)}, leftFace: {_ref(self.left_face)}, "
            f"startCCWEdge: {_ref(self.start_ccw_edge)}, startCWEdge: {_ref(self.start_cw_edge)}, "
            f"endCCWEdge: {_ref(self.end_ccw_edge)}, endCWEdge: {_ref(self.end_cw_edge)} }}"
        )


@dataclass
class Face:
    index: int
    edge: Optional[int] = None  # any boundary edge; walks start here


class WingedEdgeMesh:
    """
    Index-addressed winged-edge store plus its traversal queries.
    Construction lives in ops.builder_ops; refinement in ops.subd_ops.
    """

    def __init__(
        self,
        vertices: Optional[List[Vertex]] = None,
        edges: Optional[List[Edge]] = None,
        faces: Optional[List[Face]] = None,
    ):
        self.vertices: List[Vertex] = vertices if vertices is not None else []
        self.edges: List[Edge] = edges if edges is not None else []
        self.faces: List[Face] = faces if faces is not None else []

    # --- Arena growth ---

    def add_vertex(self, position: Vec3) -> int:
        index = len(self.vertices)
        self.vertices.append(Vertex(index, position))
        return index

    def add_edge(self, start: int, end: int) -> int:
        index = len(self.edges)
        self.edges.append(Edge(index, start, end))
        return index

    def add_face(self, edge: Optional[int]) -> int:
        index = len(self.faces)
        self.faces.append(Face(index, edge))
        return index

    # --- Face traversal ---

    def is_edge_opposite(self, face: int, edge: int) -> bool:
        """True when ``face`` walks ``edge`` end -> start (it is the left face)."""
        return self.edges[edge].right_face != face

    def next_edge_around_face(self, face: int, edge: int) -> Optional[int]:
        e = self.edges[edge]
        return e.end_ccw_edge if e.right_face == face else e.start_ccw_edge

    def face_start_vertex(self, face: int, edge: int) -> int:
        """Vertex at which ``face`` enters ``edge``."""
        e = self.edges[edge]
        return e.start_vertex if e.right_face == face else e.end_vertex

    def face_edges(self, face: int) -> List[int]:
        """Boundary edges of ``face`` in winding order, starting at its anchor."""
        anchor = self.faces[face].edge
        if anchor is None:
            raise InvariantViolation(f"face {face} has no anchor edge", {"face": face})

        limit = len(self.edges)
        result: List[int] = []
        current: Optional[int] = anchor
        while True:
            e = self.edges[current]
            if e.right_face != face and e.left_face != face:
                raise InvariantViolation(
                    f"face walk of {face} reached an edge which does not bound it: {e.describe()}",
                    {"face": face, "edge": current},
                )
            result.append(current)
            if len(result) > limit:
                raise InvariantViolation(
                    f"face walk of {face} did not close within {limit} steps; anchor {self.edges[anchor].describe()}",
                    {"face": face, "anchor": anchor},
                )
            current = self.next_edge_around_face(face, current)
            if current is None:
                raise InvariantViolation(
                    f"face walk of {face} is open after {e.describe()}",
                    {"face": face, "edge": result[-1]},
                )
            if current == anchor:
                return result

    def face_vertices(self, face: int) -> List[int]:
        return [self.face_start_vertex(face, e) for e in self.face_edges(face)]

    def face_centroid(self, face: int) -> Vec3:
        return vec_mean([self.vertices[v].position for v in self.face_vertices(face)])

    # --- Vertex traversal ---

    def _cw_neighbour(self, edge: int, vertex: int) -> Optional[int]:
        e = self.edges[edge]
        if e.start_vertex == vertex:
            return e.start_cw_edge
        if e.end_vertex == vertex:
            return e.end_cw_edge
        raise InvariantViolation(
            f"vertex walk of {vertex} reached an edge which does not touch it: {e.describe()}",
            {"vertex": vertex, "edge": edge},
        )

    def _ccw_neighbour(self, edge: int, vertex: int) -> Optional[int]:
        e = self.edges[edge]
        if e.start_vertex == vertex:
            return e.start_ccw_edge
        if e.end_vertex == vertex:
            return e.end_ccw_edge
        raise InvariantViolation(
            f"vertex walk of {vertex} reached an edge which does not touch it: {e.describe()}",
            {"vertex": vertex, "edge": edge},
        )

    def incident_edges(self, vertex: int) -> List[int]:
        """
        Edges around ``vertex``.

        Rotates with the CW wings from the anchor until the fan closes. If a
        gap is hit the vertex sits on an open boundary, so the rest of the
        fan is collected by rotating the other way from the anchor.
        """
        anchor = self.vertices[vertex].edge
        if anchor is None:
            raise InvariantViolation(f"vertex {vertex} has no incident edge", {"vertex": vertex})

        limit = len(self.edges)
        forward = [anchor]
        current = self._cw_neighbour(anchor, vertex)
        while current is not None and current != anchor:
            forward.append(current)
            if len(forward) > limit:
                raise InvariantViolation(
                    f"vertex walk of {vertex} did not close within {limit} steps; anchor {self.edges[anchor].describe()}",
                    {"vertex": vertex, "anchor": anchor},
                )
            current = self._cw_neighbour(current, vertex)

        if current == anchor:
            return forward

        backward: List[int] = []
        current = self._ccw_neighbour(anchor, vertex)
        while current is not None and current != anchor:
            backward.append(current)
            if len(forward) + len(backward) > limit:
                raise InvariantViolation(
                    f"vertex walk of {vertex} did not terminate within {limit} steps; anchor {self.edges[anchor].describe()}",
                    {"vertex": vertex, "anchor": anchor},
                )
            current = self._ccw_neighbour(current, vertex)
        backward.reverse()
        return backward + forward

    def valence(self, vertex: int) -> int:
        return len(self.incident_edges(vertex))

    def border_edges_of(self, vertex: int) -> List[int]:
        return [e for e in self.incident_edges(vertex) if self.edges[e].is_border]

    def is_border_vertex(self, vertex: int) -> bool:
        return any(self.edges[e].is_border for e in self.incident_edges(vertex))

    # --- Structural fixups ---

    def fix_neighbour(self, edge: Optional[int], old_edge: int, new_edge: int) -> None:
        """
        Repoint every wing of ``edge`` that references ``old_edge`` to ``new_edge``.

        This is the only place wing consistency is restored after a split.
        """
        if edge is None:
            return
        e = self.edges[edge]
        if e.start_cw_edge == old_edge:
            e.start_cw_edge = new_edge
        if e.start_ccw_edge == old_edge:
            e.start_ccw_edge = new_edge
        if e.end_cw_edge == old_edge:
            e.end_cw_edge = new_edge
        if e.end_ccw_edge == old_edge:
            e.end_ccw_edge = new_edge

    def fix_face(self, edge: int, old_face: int, new_face: int) -> None:
        e = self.edges[edge]
        if e.right_face == old_face:
            e.right_face = new_face
        elif e.left_face == old_face:
            e.left_face = new_face
        else:
            raise InvariantViolation(
                f"edge {edge} does not bound face {old_face}",
                {"edge": edge, "face": old_face},
            )

    # --- Summaries ---

    def counts(self) -> Tuple[int, int, int]:
        return len(self.vertices), len(self.edges), len(self.faces)

    def border_edge_count(self) -> int:
        return sum(1 for e in self.edges if e.is_border)

    def euler_characteristic(self) -> int:
        v, e, f = self.counts()
        return v - e + f

    def validate(self) -> None:
        """Check face cycles, face sidedness and vertex fans over the whole store."""
        for e in self.edges:
            if e.right_face is None:
                raise InvariantViolation(f"edge {e.index} has no right face", {"edge": e.index})
            if e.left_face is not None and e.left_face == e.right_face:
                raise InvariantViolation(
                    f"edge {e.index} has face {e.right_face} on both sides",
                    {"edge": e.index, "face": e.right_face},
                )

        sides = 0
        for face in self.faces:
            cycle = self.face_edges(face.index)
            if len(cycle) < 3:
                raise InvariantViolation(
                    f"face {face.index} has only {len(cycle)} edges",
                    {"face": face.index},
                )
            sides += len(cycle)
        expected = sum(1 if e.is_border else 2 for e in self.edges)
        if sides != expected:
            raise InvariantViolation(
                f"face walks cover {sides} edge sides, expected {expected}",
                {"sides": sides, "expected": expected},
            )

        degree = [0] * len(self.vertices)
        for e in self.edges:
            degree[e.start_vertex] += 1
            degree[e.end_vertex] += 1
        for v in self.vertices:
            fan = self.incident_edges(v.index)
            if len(fan) != degree[v.index]:
                raise InvariantViolation(
                    f"vertex {v.index} fan reaches {len(fan)} of {degree[v.index]} edges",
                    {"vertex": v.index},
                )
            border = sum(1 for e in fan if self.edges[e].is_border)
            if border not in (0, 2):
                raise InvariantViolation(
                    f"vertex {v.index} has {border} border edges",
                    {"vertex": v.index, "border_edges": border},
                )
