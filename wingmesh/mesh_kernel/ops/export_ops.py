"""Mesh Export Operations (winged-edge store -> flat buffer)."""
from __future__ import annotations

from typing import List

from wingmesh.mesh_kernel.schemas import MeshBuffer
from wingmesh.mesh_kernel.topology import WingedEdgeMesh


def face_cycles(mesh: WingedEdgeMesh) -> List[List[int]]:
    return [mesh.face_vertices(face.index) for face in mesh.faces]


def to_buffer(mesh: WingedEdgeMesh) -> MeshBuffer:
    """
    Flatten the store. Vertex indices are preserved. A mesh made only of
    quads is emitted as quads; anything else is fan-triangulated from each
    face's first vertex, keeping the face winding.
    """
    vertices = [list(v.position) for v in mesh.vertices]
    cycles = face_cycles(mesh)

    if cycles and all(len(cycle) == 4 for cycle in cycles):
        quads = [idx for cycle in cycles for idx in cycle]
        return MeshBuffer(vertices=vertices, indices=quads, arity=4)

    indices: List[int] = []
    for cycle in cycles:
        root = cycle[0]
        for i in range(1, len(cycle) - 1):
            indices.extend((root, cycle[i], cycle[i + 1]))
    return MeshBuffer(vertices=vertices, indices=indices, arity=3)
