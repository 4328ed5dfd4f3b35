"""Canonical error envelope for all wingmesh responses.

Standardized structure:
{
  "error": {
    "code": "mesh.non_manifold_edge",
    "message": "string",
    "http_status": 422,
    "resource_kind": "mesh | null",
    "details": {"start": 0, "end": 1}
  }
}
Kernel errors keep their own ``code`` and ``details``.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import HTTPException
from pydantic import BaseModel, Field

from wingmesh.mesh_kernel.errors import MeshKernelError

logger = logging.getLogger(__name__)


class ErrorDetail(BaseModel):
    code: str
    message: str
    http_status: int
    resource_kind: Optional[str] = None
    details: Dict[str, Any] = Field(default_factory=dict)


class ErrorEnvelope(BaseModel):
    """Top-level error body returned by every endpoint."""
    error: ErrorDetail


def build_error_envelope(
    code: str,
    message: str,
    status_code: int = 400,
    resource_kind: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
) -> ErrorEnvelope:
    """Envelope without raising; http_status mirrors status_code."""
    return ErrorEnvelope(
        error=ErrorDetail(
            code=code,
            message=message,
            http_status=status_code,
            resource_kind=resource_kind,
            details=details or {},
        )
    )


def error_response(
    code: str,
    message: str,
    status_code: int = 400,
    resource_kind: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
) -> HTTPException:
    """Raise an HTTPException whose detail is the envelope.

    Args:
        code: Machine-readable error code (e.g., "mesh.not_found")
        message: Human-readable error message
        status_code: HTTP status code (default 400)
        resource_kind: The resource type (mesh, ...)
        details: Indices or ids involved
    """
    envelope = build_error_envelope(code, message, status_code, resource_kind, details)
    raise HTTPException(status_code=status_code, detail=envelope.model_dump())


def kernel_error_response(
    exc: MeshKernelError,
    status_code: int,
    resource_kind: str = "mesh",
) -> HTTPException:
    """Raise the envelope for a mesh kernel error, keeping its code and details."""
    if status_code >= 500:
        logger.error("%s: %s %s", exc.code, exc.message, exc.details)
    return error_response(
        code=exc.code,
        message=exc.message,
        status_code=status_code,
        resource_kind=resource_kind,
        details=exc.details,
    )


def not_found_error(resource_kind: str, resource_id: str) -> HTTPException:
    """Unknown resource id (404)."""
    return error_response(
        code=f"{resource_kind}.not_found",
        message=f"{resource_kind} {resource_id} not found",
        status_code=404,
        resource_kind=resource_kind,
        details={"id": resource_id},
    )
