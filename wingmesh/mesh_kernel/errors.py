"""Mesh Kernel error taxonomy.

Bad input raises a ``TopologyError`` subclass (also a ``ValueError``);
impossible internal states raise ``InvariantViolation`` (a ``RuntimeError``).
Every error carries a machine-readable ``code`` and a ``details`` dict with
the vertex/edge/face indices involved, so the HTTP layer can build an
error envelope without parsing messages.
"""
from __future__ import annotations

from typing import Any, Dict, Optional


class MeshKernelError(Exception):
    """Base class for every error raised by the mesh kernel."""

    code = "mesh.error"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details: Dict[str, Any] = details or {}


class TopologyError(MeshKernelError, ValueError):
    """Input geometry does not describe a valid 2-manifold."""

    code = "mesh.topology_error"


class InvalidTopology(TopologyError):
    code = "mesh.invalid_topology"


class NonManifoldEdge(TopologyError):
    """Duplicate directed edge, or a third face claiming an edge."""

    code = "mesh.non_manifold_edge"


class NonManifoldVertex(TopologyError):
    """A vertex whose incident edges do not form a single fan."""

    code = "mesh.non_manifold_vertex"


class NonManifoldBoundaryVertex(NonManifoldVertex):
    """A boundary vertex with more than one outgoing border edge."""

    code = "mesh.non_manifold_boundary_vertex"


class DanglingBoundary(TopologyError):
    """A border edge whose end vertex has no border edge to continue the loop."""

    code = "mesh.dangling_boundary"


class InvariantViolation(MeshKernelError, RuntimeError):
    """Internal state that valid input can never produce (a kernel bug)."""

    code = "mesh.invariant_violation"


class InvalidIterationCount(MeshKernelError, ValueError):
    code = "mesh.invalid_iteration_count"
