"""
MESH BUILDER OPS
----------------
Builds a validated WingedEdgeMesh from a flat indexed face buffer
(triangles or quads). Non-manifold input is rejected, never repaired.
"""
from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Sequence, Tuple

from wingmesh.mesh_kernel.errors import (
    DanglingBoundary,
    InvalidTopology,
    NonManifoldBoundaryVertex,
    NonManifoldEdge,
    NonManifoldVertex,
)
from wingmesh.mesh_kernel.schemas import MeshBuffer
from wingmesh.mesh_kernel.topology import WingedEdgeMesh

logger = logging.getLogger(__name__)

SUPPORTED_ARITIES = (3, 4)


def weave_mesh_borders(
    mesh: WingedEdgeMesh,
    border_edges: Iterable[int],
    outgoing: Dict[int, List[int]],
) -> None:
    """
    Link every border edge to the border edge leaving its end vertex.

    ``outgoing`` maps a vertex index to the edges that start there.
    """
    for edge_idx in border_edges:
        edge = mesh.edges[edge_idx]
        vertex = edge.end_vertex

        candidates = [
            other for other in outgoing.get(vertex, [])
            if other != edge_idx and mesh.edges[other].is_border
        ]
        if not candidates:
            raise DanglingBoundary(
                f"border edge {edge.start_vertex}->{edge.end_vertex} (edge {edge_idx}) "
                f"has no border edge leaving vertex {vertex}",
                {"edge": edge_idx, "vertex": vertex},
            )
        if len(candidates) > 1:
            raise NonManifoldBoundaryVertex(
                f"boundary vertex {vertex} has {len(candidates)} outgoing border edges",
                {"vertex": vertex, "edges": candidates},
            )

        next_edge = candidates[0]
        edge.end_cw_edge = next_edge
        mesh.edges[next_edge].start_ccw_edge = edge_idx


class WingedEdgeMeshBuilder:
    """
    One-shot builder: ``create_from`` resets all state, so an instance can
    be reused for several imports.
    """

    def __init__(self):
        self._reset()

    def _reset(self) -> None:
        self.mesh = WingedEdgeMesh()
        # (start, end) -> edge index, one entry per directed edge created
        self._edge_map: Dict[Tuple[int, int], int] = {}
        # edges still waiting for a left face; leftovers are the border
        self._remaining: Dict[Tuple[int, int], int] = {}
        self._outgoing: Dict[int, List[int]] = {}

    def create_from(
        self,
        positions: Sequence[Sequence[float]],
        indices: Sequence[int],
        arity: int,
    ) -> WingedEdgeMesh:
        self._validate_input(positions, indices, arity)
        self._reset()

        self._build_vertices(positions)
        self._build_topology(indices, arity)
        weave_mesh_borders(self.mesh, list(self._remaining.values()), self._outgoing)
        self._check_vertex_fans()

        mesh = self.mesh
        v, e, f = mesh.counts()
        logger.debug(
            "Built winged-edge mesh: %s vertices, %s edges, %s faces (%s border edges)",
            v, e, f, len(self._remaining),
        )
        return mesh

    @staticmethod
    def _validate_input(positions, indices, arity) -> None:
        if isinstance(arity, bool) or arity not in SUPPORTED_ARITIES:
            raise InvalidTopology(
                f"unsupported face arity {arity!r}; only triangles (3) and quads (4) are supported",
                {"arity": arity},
            )
        if len(positions) == 0:
            raise InvalidTopology("mesh has no vertices")

        for i, pos in enumerate(positions):
            if len(pos) != 3:
                raise InvalidTopology(
                    f"vertex {i} has {len(pos)} components, expected 3",
                    {"vertex": i},
                )
            try:
                for c in pos:
                    float(c)
            except (TypeError, ValueError) as exc:
                raise InvalidTopology(
                    f"vertex {i} has a non-numeric component", {"vertex": i}
                ) from exc

        if len(indices) % arity != 0:
            raise InvalidTopology(
                f"index count ({len(indices)}) is not a multiple of {arity}; "
                "the face buffer is incomplete or malformed",
                {"index_count": len(indices), "arity": arity},
            )
        if len(indices) == 0:
            raise InvalidTopology("mesh has no faces")

        vertex_count = len(positions)
        for f in range(len(indices) // arity):
            face = indices[f * arity:(f + 1) * arity]
            for idx in face:
                if isinstance(idx, bool) or not isinstance(idx, int):
                    raise InvalidTopology(
                        f"face {f} has a non-integer vertex index {idx!r}",
                        {"face": f, "vertex": repr(idx)},
                    )
                if not 0 <= idx < vertex_count:
                    raise InvalidTopology(
                        f"face {f} references vertex {idx}, outside [0, {vertex_count})",
                        {"face": f, "vertex": idx},
                    )
            if len(set(face)) != arity:
                raise InvalidTopology(
                    f"face {f} references the same vertex more than once: {list(face)}",
                    {"face": f, "vertices": list(face)},
                )

        referenced = set(indices)
        for i in range(vertex_count):
            if i not in referenced:
                raise InvalidTopology(
                    f"vertex {i} is not used by any face", {"vertex": i}
                )

    def _build_vertices(self, positions) -> None:
        for pos in positions:
            self.mesh.add_vertex((float(pos[0]), float(pos[1]), float(pos[2])))

    def _build_topology(self, indices: Sequence[int], arity: int) -> None:
        mesh = self.mesh
        face_count = len(indices) // arity

        for f in range(face_count):
            base = f * arity
            face = mesh.add_face(None)

            sides: List[Tuple[int, bool]] = []
            for i in range(arity):
                start = indices[base + i]
                end = indices[base + (i + 1) % arity]
                sides.append(self._get_or_create_edge(start, end, face))
            mesh.faces[face].edge = sides[0][0]

            # Local wings for this face
            for i, (edge_idx, is_new) in enumerate(sides):
                prev_edge = sides[(i - 1) % arity][0]
                next_edge = sides[(i + 1) % arity][0]
                edge = mesh.edges[edge_idx]

                if is_new:
                    edge.start_cw_edge = prev_edge
                    edge.end_ccw_edge = next_edge
                else:
                    # second face on this edge, walking it end -> start
                    edge.start_ccw_edge = next_edge
                    edge.end_cw_edge = prev_edge

    def _get_or_create_edge(self, start: int, end: int, face: int) -> Tuple[int, bool]:
        mesh = self.mesh

        key = (start, end)
        if key in self._edge_map:
            raise NonManifoldEdge(
                f"mesh is not 2-manifold at edge {start}->{end}: "
                "a face has reversed winding or two faces overlap",
                {"start": start, "end": end, "face": face, "edge": self._edge_map[key]},
            )

        reverse = (end, start)
        existing = self._edge_map.get(reverse)
        if existing is not None:
            edge = mesh.edges[existing]
            if edge.left_face is not None:
                raise NonManifoldEdge(
                    f"mesh is not 2-manifold at edge {end}->{start}: "
                    "more than two faces share it",
                    {
                        "start": end,
                        "end": start,
                        "edge": existing,
                        "faces": [edge.right_face, edge.left_face, face],
                    },
                )
            edge.left_face = face
            del self._remaining[reverse]
            return existing, False

        edge_idx = mesh.add_edge(start, end)
        mesh.edges[edge_idx].right_face = face
        if mesh.vertices[start].edge is None:
            mesh.vertices[start].edge = edge_idx

        self._edge_map[key] = edge_idx
        self._remaining[key] = edge_idx
        self._outgoing.setdefault(start, []).append(edge_idx)
        return edge_idx, True

    def _check_vertex_fans(self) -> None:
        mesh = self.mesh
        degree = [0] * len(mesh.vertices)
        for edge in mesh.edges:
            degree[edge.start_vertex] += 1
            degree[edge.end_vertex] += 1

        for vertex in mesh.vertices:
            fan = mesh.incident_edges(vertex.index)
            if len(fan) != degree[vertex.index]:
                raise NonManifoldVertex(
                    f"vertex {vertex.index} joins {degree[vertex.index]} edges but its fan "
                    f"reaches only {len(fan)}; several fans meet at this vertex",
                    {"vertex": vertex.index, "degree": degree[vertex.index], "fan": len(fan)},
                )


def build_winged_edge_mesh(
    positions: Sequence[Sequence[float]],
    indices: Sequence[int],
    arity: int,
) -> WingedEdgeMesh:
    return WingedEdgeMeshBuilder().create_from(positions, indices, arity)


def build_from_buffer(buffer: MeshBuffer) -> WingedEdgeMesh:
    return build_winged_edge_mesh(buffer.vertices, buffer.indices, buffer.arity)
