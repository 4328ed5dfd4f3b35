"""Runtime configuration helpers for the mesh kernel."""
from __future__ import annotations

import logging
import os
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_SUBD_MAX_ITERATIONS = 100
DEFAULT_MAX_SESSIONS = 50


def _get_env(name: str, default: Optional[str] = None) -> Optional[str]:
    return os.getenv(name, default)


def _get_int(name: str, default: int) -> int:
    raw = _get_env(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring non-integer %s=%r, using %s", name, raw, default)
        return default
    if value < 1:
        logger.warning("Ignoring non-positive %s=%r, using %s", name, raw, default)
        return default
    return value


def get_env() -> Optional[str]:
    return _get_env("ENV") or _get_env("APP_ENV")


def get_subd_max_iterations() -> int:
    """Upper bound for a single subdivide call; every pass roughly quadruples the mesh."""
    return _get_int("MESH_SUBD_MAX_ITERATIONS", DEFAULT_SUBD_MAX_ITERATIONS)


def get_max_sessions() -> int:
    return _get_int("MESH_MAX_SESSIONS", DEFAULT_MAX_SESSIONS)
