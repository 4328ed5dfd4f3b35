"""Mesh Primitive Operations (flat buffers, no topology)."""
from __future__ import annotations

from typing import List, Optional

from wingmesh.mesh_kernel.schemas import MeshBuffer, PrimitiveKind, Vector3Model

# NOTE: Generators only emit vertex/index arrays; the builder validates them
# like any other imported mesh.


def _box_corners(half_size: Vector3Model) -> List[List[float]]:
    hx, hy, hz = half_size.x, half_size.y, half_size.z
    return [
        [-hx, -hy, -hz], [hx, -hy, -hz], [hx, hy, -hz], [-hx, hy, -hz],  # Back z-
        [-hx, -hy, hz],  [hx, -hy, hz],  [hx, hy, hz],  [-hx, hy, hz],   # Front z+
    ]


def _default_half_size(half_size: Optional[Vector3Model]) -> Vector3Model:
    return half_size or Vector3Model(x=0.5, y=0.5, z=0.5)


def create_quad_box(half_size: Optional[Vector3Model] = None) -> MeshBuffer:
    """Closed box, 6 quads."""
    indices = [
        0, 3, 2, 1,  # Back (z-)
        4, 5, 6, 7,  # Front (z+)
        0, 1, 5, 4,  # Bottom (y-)
        2, 3, 7, 6,  # Top (y+)
        0, 4, 7, 3,  # Left (x-)
        1, 2, 6, 5,  # Right (x+)
    ]
    return MeshBuffer(vertices=_box_corners(_default_half_size(half_size)), indices=indices, arity=4)


def create_box(half_size: Optional[Vector3Model] = None) -> MeshBuffer:
    """Closed box, 12 triangles."""
    indices = [
        0, 2, 1, 0, 3, 2,  # Back (z-)
        4, 5, 6, 4, 6, 7,  # Front (z+)
        0, 1, 5, 0, 5, 4,  # Bottom (y-)
        2, 3, 7, 2, 7, 6,  # Top (y+)
        0, 4, 7, 0, 7, 3,  # Left (x-)
        1, 2, 6, 1, 6, 5,  # Right (x+)
    ]
    return MeshBuffer(vertices=_box_corners(_default_half_size(half_size)), indices=indices, arity=3)


def create_chips(half_size: Optional[Vector3Model] = None) -> MeshBuffer:
    """Top, left and right sides of a box: an open strip with one boundary loop."""
    indices = [
        2, 7, 6, 2, 3, 7,  # Top (y+)
        0, 4, 7, 0, 7, 3,  # Left (x-)
        1, 2, 6, 1, 6, 5,  # Right (x+)
    ]
    return MeshBuffer(vertices=_box_corners(_default_half_size(half_size)), indices=indices, arity=3)


def create_pyramid() -> MeshBuffer:
    """Flat 4-triangle fan in the XZ plane (open)."""
    vertices = [
        [0.0, 0.0, 0.0],
        [0.5, 0.0, 1.0],
        [1.0, 0.0, 0.0],
        [-0.5, 0.0, 1.0],
        [0.0, 0.0, 2.0],
        [-1.0, 0.0, 0.0],
    ]
    indices = [
        0, 1, 2,
        1, 3, 4,
        0, 5, 3,
        0, 3, 1,
    ]
    return MeshBuffer(vertices=vertices, indices=indices, arity=3)


def create_primitive(kind: PrimitiveKind, half_size: Optional[Vector3Model] = None) -> MeshBuffer:
    kind = PrimitiveKind(kind)
    if kind == PrimitiveKind.BOX:
        return create_box(half_size)
    if kind == PrimitiveKind.CHIPS:
        return create_chips(half_size)
    if kind == PrimitiveKind.PYRAMID:
        return create_pyramid()
    if kind == PrimitiveKind.QUAD_BOX:
        return create_quad_box(half_size)
    raise ValueError(f"Primitive kind {kind} is not supported")
