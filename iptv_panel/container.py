"""
CONTAINER DE SERVIÇOS
=====================

Criado uma vez no startup e compartilhado (somente leitura) pelas rotas.
Testes montam o seu próprio container com fakes, sem estado global.
"""

from dataclasses import dataclass
from functools import partial
from typing import Optional

import httpx
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from iptv_panel.application.services import (
    CacheTTL,
    CatalogCache,
    CredentialVerifier,
    QuotaGate,
    UsageService,
)
from iptv_panel.config import Settings
from iptv_panel.domain.clock import SystemClock
from iptv_panel.infrastructure.database import create_engine, create_session_factory
from iptv_panel.infrastructure.repositories import ServerDirectory
from iptv_panel.infrastructure.services.redis_service import create_cache_store
from iptv_panel.infrastructure.services.xtream_service import XtreamClient


@dataclass
class ServiceContainer:
    settings: Settings
    engine: Optional[AsyncEngine]
    session_factory: async_sessionmaker[AsyncSession]
    cache_store: object
    clock: object
    servers: ServerDirectory
    catalog: CatalogCache
    verifier: CredentialVerifier
    quota_gate: QuotaGate
    usage: UsageService

    async def close(self) -> None:
        await self.cache_store.close()
        if self.engine is not None:
            await self.engine.dispose()


def build_container(
    settings: Settings,
    session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
    cache_store=None,
    clock=None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> ServiceContainer:
    clock = clock or SystemClock(settings.quota_timezone)

    engine = None
    if session_factory is None:
        engine = create_engine(settings)
        session_factory = create_session_factory(engine)

    if cache_store is None:
        cache_store = create_cache_store(settings, clock)

    client_factory = partial(
        XtreamClient, timeout=settings.upstream_timeout_seconds, transport=transport
    )

    servers = ServerDirectory(session_factory, timeout=settings.ledger_timeout_seconds)
    catalog = CatalogCache(
        servers,
        cache_store,
        client_factory=client_factory,
        ttl=CacheTTL.from_settings(settings),
        cache_timeout=settings.cache_timeout_seconds,
        stream_extension=settings.stream_extension,
    )
    verifier = CredentialVerifier(client_factory, catalog=catalog)
    quota_gate = QuotaGate(
        session_factory,
        servers,
        verifier,
        clock=clock,
        ledger_timeout=settings.ledger_timeout_seconds,
    )
    usage = UsageService(
        session_factory, servers, clock=clock, ledger_timeout=settings.ledger_timeout_seconds
    )

    return ServiceContainer(
        settings=settings,
        engine=engine,
        session_factory=session_factory,
        cache_store=cache_store,
        clock=clock,
        servers=servers,
        catalog=catalog,
        verifier=verifier,
        quota_gate=quota_gate,
        usage=usage,
    )
