"""Rotas da API."""

from .client_access import router as client_access_router
from .catalog import router as catalog_router
from .monthly_active_lists import router as monthly_active_lists_router
from .health import router as health_router

__all__ = [
    "client_access_router",
    "catalog_router",
    "monthly_active_lists_router",
    "health_router",
]
