"""Mesh Service (Subdivision sessions) v1."""
from __future__ import annotations

import logging
import uuid
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import List, Optional

from wingmesh.config.runtime_config import get_max_sessions
from wingmesh.mesh_kernel.errors import MeshKernelError
from wingmesh.mesh_kernel.ops.builder_ops import build_from_buffer
from wingmesh.mesh_kernel.ops.export_ops import to_buffer
from wingmesh.mesh_kernel.ops.primitive_ops import create_primitive
from wingmesh.mesh_kernel.ops.subd_ops import subdivide_cc, validate_iterations
from wingmesh.mesh_kernel.schemas import (
    AgentMeshInstruction,
    MeshBuffer,
    MeshObject,
    MeshStats,
    PrimitiveOp,
    SubDOp,
)
from wingmesh.mesh_kernel.topology import WingedEdgeMesh

logger = logging.getLogger(__name__)


@dataclass
class MeshSession:
    id: str
    original: MeshBuffer
    mesh: WingedEdgeMesh
    level: int = 0
    tags: List[str] = field(default_factory=list)


class MeshService:
    """
    Stateful service for managing active mesh sessions.
    Each session keeps the buffer it was created from so it can be reverted.
    """

    def __init__(self, max_sessions: Optional[int] = None):
        self._sessions: "OrderedDict[str, MeshSession]" = OrderedDict()
        self._max_sessions = max_sessions or get_max_sessions()

    def execute_instruction(self, instruction: AgentMeshInstruction) -> Optional[MeshObject]:
        """
        The main entrypoint for Agents to drive the kernel.
        """
        op = instruction.op_code.upper()
        params = instruction.params
        target_id = instruction.target_id

        if op == "PRIMITIVE":
            return self.create_primitive(PrimitiveOp(**params))
        if op == "IMPORT":
            return self.import_mesh(MeshBuffer(**params), mesh_id=target_id)

        if op in ("SUBDIVIDE", "REVERT", "EXPORT"):
            # KeyError for unknown targets
            self._get(target_id)
            if op == "SUBDIVIDE":
                return self.subdivide(target_id, SubDOp(**params).iterations)
            if op == "REVERT":
                return self.revert(target_id)
            return self.get_mesh(target_id)

        return None

    def create_primitive(self, op: PrimitiveOp) -> MeshObject:
        buffer = create_primitive(op.kind, op.half_size)
        return self._register(buffer, tags=[f"primitive:{op.kind.value}"])

    def import_mesh(self, buffer: MeshBuffer, mesh_id: Optional[str] = None) -> MeshObject:
        return self._register(buffer, mesh_id=mesh_id, tags=["imported"])

    def subdivide(self, mesh_id: str, iterations: int = 1) -> MeshObject:
        session = self._get(mesh_id)
        validate_iterations(iterations)
        try:
            subdivide_cc(session.mesh, iterations=iterations)
        except MeshKernelError:
            # The store may be half split; start over from the original.
            logger.warning("Subdivide failed on mesh %s, rebuilding from original", mesh_id)
            session.mesh = build_from_buffer(session.original)
            session.level = 0
            raise
        session.level += iterations
        logger.info("Mesh %s subdivided to level %s", mesh_id, session.level)
        return self._export(session)

    def revert(self, mesh_id: str) -> MeshObject:
        session = self._get(mesh_id)
        session.mesh = build_from_buffer(session.original)
        session.level = 0
        logger.info("Mesh %s reverted", mesh_id)
        return self._export(session)

    def get_mesh(self, mesh_id: str) -> MeshObject:
        return self._export(self._get(mesh_id))

    def stats(self, mesh_id: str) -> MeshStats:
        session = self._get(mesh_id)
        mesh = session.mesh
        v, e, f = mesh.counts()
        return MeshStats(
            vertex_count=v,
            edge_count=e,
            face_count=f,
            border_edge_count=mesh.border_edge_count(),
            border_vertex_count=sum(1 for vx in mesh.vertices if mesh.is_border_vertex(vx.index)),
            euler_characteristic=mesh.euler_characteristic(),
            all_quads=all(len(mesh.face_edges(face.index)) == 4 for face in mesh.faces),
            subdivision_level=session.level,
        )

    def delete(self, mesh_id: str) -> None:
        self._get(mesh_id)
        del self._sessions[mesh_id]
        logger.info("Mesh %s deleted", mesh_id)

    # --- Internal Handlers ---

    def _get(self, mesh_id: str) -> MeshSession:
        session = self._sessions.get(mesh_id)
        if session is None:
            raise KeyError(mesh_id)
        return session

    def _register(
        self,
        buffer: MeshBuffer,
        mesh_id: Optional[str] = None,
        tags: Optional[List[str]] = None,
    ) -> MeshObject:
        """Build the store (validating the buffer) and register the session."""
        mesh = build_from_buffer(buffer)
        new_id = mesh_id or str(uuid.uuid4())
        self._sessions.pop(new_id, None)
        while len(self._sessions) >= self._max_sessions:
            evicted, _ = self._sessions.popitem(last=False)
            logger.warning("Session cap %s reached, evicting mesh %s", self._max_sessions, evicted)
        session = MeshSession(
            id=new_id,
            original=buffer.model_copy(deep=True),
            mesh=mesh,
            tags=list(tags or []),
        )
        self._sessions[new_id] = session
        logger.info("Registered mesh %s (%s vertices, %s faces)", new_id, len(mesh.vertices), len(mesh.faces))
        return self._export(session)

    def _export(self, session: MeshSession) -> MeshObject:
        buffer = to_buffer(session.mesh)
        return MeshObject(
            id=session.id,
            vertices=buffer.vertices,
            indices=buffer.indices,
            arity=buffer.arity,
            tags=list(session.tags),
            subdivision_level=session.level,
        )


# Module-level default service
_default_service: Optional[MeshService] = None


def get_mesh_service() -> MeshService:
    """Get default mesh service."""
    global _default_service
    if _default_service is None:
        _default_service = MeshService()
    return _default_service


def set_mesh_service(service: MeshService) -> None:
    """Override default service (for testing)."""
    global _default_service
    _default_service = service
