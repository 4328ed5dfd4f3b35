"""Mesh Kernel Schemas (Subdivision) v1."""
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

# --- Primitives ---
class Vector3Model(BaseModel):
    x: float
    y: float
    z: float


class MeshTopologyKind(str, Enum):
    TRIANGLES = "TRIANGLES"
    QUADS = "QUADS"

    @property
    def arity(self) -> int:
        return 3 if self is MeshTopologyKind.TRIANGLES else 4


class MeshBuffer(BaseModel):
    """
    Flat indexed geometry: the only shape meshes take outside the kernel.
    Every face has `arity` consecutive entries in `indices`.
    """
    vertices: List[List[float]]  # [[x,y,z], ...]
    indices: List[int]           # face-major, winding order
    # Not range-checked here: the builder raises InvalidTopology itself.
    arity: int = 4

    @property
    def topology(self) -> Optional[MeshTopologyKind]:
        if self.arity == 3:
            return MeshTopologyKind.TRIANGLES
        if self.arity == 4:
            return MeshTopologyKind.QUADS
        return None

    def faces(self) -> List[List[int]]:
        n = self.arity
        return [self.indices[i:i + n] for i in range(0, len(self.indices), n)]


class MeshObject(MeshBuffer):
    """A registered mesh as seen by callers of the service."""
    id: str
    tags: List[str] = Field(default_factory=list)
    subdivision_level: int = 0


class MeshStats(BaseModel):
    vertex_count: int
    edge_count: int
    face_count: int
    border_edge_count: int
    border_vertex_count: int
    euler_characteristic: int
    all_quads: bool
    subdivision_level: int = 0

# --- Atomic Operations (Agent Instruction Set) ---

class PrimitiveKind(str, Enum):
    BOX = "BOX"             # 12 triangles, closed
    CHIPS = "CHIPS"         # 3 sides of a box, open
    PYRAMID = "PYRAMID"     # flat triangle fan, open
    QUAD_BOX = "QUAD_BOX"   # 6 quads, closed


class PrimitiveOp(BaseModel):
    kind: PrimitiveKind = PrimitiveKind.QUAD_BOX
    half_size: Vector3Model = Field(default_factory=lambda: Vector3Model(x=0.5, y=0.5, z=0.5))


class SubDOp(BaseModel):
    """Catmull-Clark subdivision."""
    # Range is enforced by the subdivision engine (InvalidIterationCount).
    iterations: int = 1


class AgentMeshInstruction(BaseModel):
    """
    The atomic token sent by a caller to drive this kernel.
    """
    op_code: str  # PRIMITIVE, IMPORT, SUBDIVIDE, REVERT, EXPORT
    params: Dict[str, Any] = Field(default_factory=dict)
    target_id: Optional[str] = None
