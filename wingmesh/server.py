"""FastAPI application for the wingmesh subdivision kernel."""
from __future__ import annotations

from fastapi import FastAPI

from wingmesh.config.runtime_config import get_env
from wingmesh.mesh_kernel.routes import router


def create_app() -> FastAPI:
    app = FastAPI(title="Wingmesh Kernel", version="0.1.0")
    app.include_router(router)

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok", "env": get_env()}

    return app


app = create_app()
