"""
FastAPI routes for the mesh kernel.

POST /mesh/primitives, POST /mesh/import -> register a session
POST /mesh/{mesh_id}/subdivide, POST /mesh/{mesh_id}/revert -> refine / restore
GET /mesh/{mesh_id}, GET /mesh/{mesh_id}/stats, DELETE /mesh/{mesh_id}
POST /mesh/instructions -> agent instruction entrypoint
"""
from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from fastapi import APIRouter, Depends, Response, status
from pydantic import ValidationError

from wingmesh.common.error_envelope import error_response, kernel_error_response, not_found_error
from wingmesh.mesh_kernel.errors import (
    InvalidIterationCount,
    InvariantViolation,
    MeshKernelError,
    TopologyError,
)
from wingmesh.mesh_kernel.schemas import (
    AgentMeshInstruction,
    MeshBuffer,
    MeshObject,
    MeshStats,
    PrimitiveOp,
    SubDOp,
)
from wingmesh.mesh_kernel.service import MeshService, get_mesh_service

router = APIRouter(prefix="/mesh", tags=["mesh"])


def get_service() -> MeshService:
    return get_mesh_service()


@contextmanager
def _kernel_errors(mesh_id: str = "") -> Iterator[None]:
    """Translate kernel exceptions into the canonical error envelope."""
    try:
        yield
    except KeyError:
        not_found_error("mesh", mesh_id)
    except ValidationError as exc:
        error_response(
            code="mesh.invalid_params",
            message="Instruction parameters failed validation",
            status_code=422,
            resource_kind="mesh",
            details={"errors": exc.errors(include_url=False, include_context=False)},
        )
    except (TopologyError, InvalidIterationCount) as exc:
        kernel_error_response(exc, 422)
    except InvariantViolation as exc:
        kernel_error_response(exc, 500)
    except MeshKernelError as exc:
        kernel_error_response(exc, 400)


@router.post("/primitives", response_model=MeshObject, status_code=201)
def create_primitive(op: PrimitiveOp, service: MeshService = Depends(get_service)) -> MeshObject:
    with _kernel_errors():
        return service.create_primitive(op)


@router.post("/import", response_model=MeshObject, status_code=201)
def import_mesh(buffer: MeshBuffer, service: MeshService = Depends(get_service)) -> MeshObject:
    with _kernel_errors():
        return service.import_mesh(buffer)


@router.post("/instructions", response_model=MeshObject)
def execute_instruction(
    instruction: AgentMeshInstruction,
    service: MeshService = Depends(get_service),
) -> MeshObject:
    target = instruction.target_id or ""
    with _kernel_errors(target):
        result = service.execute_instruction(instruction)
    if result is None:
        error_response(
            code="mesh.instruction_unhandled",
            message=f"Instruction {instruction.op_code} could not be applied",
            status_code=400,
            resource_kind="mesh",
            details={"op_code": instruction.op_code, "target_id": instruction.target_id},
        )
    return result


@router.get("/{mesh_id}", response_model=MeshObject)
def get_mesh(mesh_id: str, service: MeshService = Depends(get_service)) -> MeshObject:
    with _kernel_errors(mesh_id):
        return service.get_mesh(mesh_id)


@router.get("/{mesh_id}/stats", response_model=MeshStats)
def get_stats(mesh_id: str, service: MeshService = Depends(get_service)) -> MeshStats:
    with _kernel_errors(mesh_id):
        return service.stats(mesh_id)


@router.post("/{mesh_id}/subdivide", response_model=MeshObject)
def subdivide(
    mesh_id: str,
    op: SubDOp,
    service: MeshService = Depends(get_service),
) -> MeshObject:
    with _kernel_errors(mesh_id):
        return service.subdivide(mesh_id, op.iterations)


@router.post("/{mesh_id}/revert", response_model=MeshObject)
def revert(mesh_id: str, service: MeshService = Depends(get_service)) -> MeshObject:
    with _kernel_errors(mesh_id):
        return service.revert(mesh_id)


@router.delete("/{mesh_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_mesh(mesh_id: str, service: MeshService = Depends(get_service)) -> Response:
    with _kernel_errors(mesh_id):
        service.delete(mesh_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
