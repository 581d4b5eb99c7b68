"""FastAPI adapter for the HA arbiter."""

from ha_arbiter_fastapi.app import create_app
from ha_arbiter_fastapi.routes import create_ha_router, create_health_router
from ha_arbiter_fastapi.settings import get_arbiter_settings

__all__ = [
    "create_app",
    "create_ha_router",
    "create_health_router",
    "get_arbiter_settings",
]
