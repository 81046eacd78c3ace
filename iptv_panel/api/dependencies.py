"""
DEPENDENCIES (Dependências)
============================

Funções injetadas nas rotas.
"""

from typing import AsyncGenerator

from fastapi import Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from iptv_panel.application.services import (
    AccessContext,
    CatalogCache,
    ClientMeta,
    QuotaGate,
    UsageService,
)
from iptv_panel.container import ServiceContainer


def get_container(request: Request) -> ServiceContainer:
    return request.app.state.container


async def get_db(
    container: ServiceContainer = Depends(get_container),
) -> AsyncGenerator[AsyncSession, None]:
    """Sessão do banco por requisição."""
    async with container.session_factory() as session:
        yield session


def get_catalog(container: ServiceContainer = Depends(get_container)) -> CatalogCache:
    return container.catalog


def get_quota_gate(container: ServiceContainer = Depends(get_container)) -> QuotaGate:
    return container.quota_gate


def get_usage_service(container: ServiceContainer = Depends(get_container)) -> UsageService:
    return container.usage


def get_access_context(
    server_code: str = Query(..., min_length=1),
    username: str = Query(..., min_length=1),
    password: str = Query(..., min_length=1),
) -> AccessContext:
    """Credenciais do usuário final vindas da query string."""
    return AccessContext(server_code, username, password)


def get_client_meta(request: Request) -> ClientMeta:
    forwarded = request.headers.get("x-forwarded-for", "")
    ip_address = (
        forwarded.split(",")[0].strip()
        or request.headers.get("x-real-ip", "")
        or (request.client.host if request.client else "")
        or "unknown"
    )
    return ClientMeta(
        user_agent=request.headers.get("user-agent", ""),
        ip_address=ip_address,
    )
