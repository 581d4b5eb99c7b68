"""Standalone FastAPI application serving one HA node's API."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import FastAPI

from ha_arbiter_fastapi.routes import create_ha_router, create_health_router

if TYPE_CHECKING:
    from ha_arbiter.runtime import ArbiterRuntime


def create_app(runtime: ArbiterRuntime) -> FastAPI:
    """Build an app exposing /health and the /ha routes of runtime."""
    app = FastAPI(title=f"ha-arbiter {runtime.settings.node_name}")
    app.include_router(
        create_health_router(runtime.health_checker, runtime.split_brain_detector)
    )
    app.include_router(
        create_ha_router(
            runtime.registry,
            runtime.lease_manager,
            runtime.coordinator,
            runtime.readiness_checker,
        )
    )
    return app
