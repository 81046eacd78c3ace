from datetime import datetime, timezone
from typing import AsyncGenerator

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from iptv_panel.config import Settings
from iptv_panel.container import build_container
from iptv_panel.domain.entities import Base, Plan, Server, default_plan
from iptv_panel.infrastructure.repositories import PlanRepository, ServerRepository
from iptv_panel.infrastructure.services.redis_service import MemoryCacheStore
from tests.utils import FakeXtreamProvider, ManualClock

PROVIDER_DNS = "http://provider.test:8080"


@pytest.fixture
async def engine():
    """
    Banco SQLite em memória, uma conexão compartilhada por teste.
    """
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock(datetime(2024, 7, 10, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def provider() -> FakeXtreamProvider:
    return FakeXtreamProvider()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        database_url="sqlite+aiosqlite:///:memory:",
        redis_url=None,
        upstream_timeout_seconds=2.0,
        cache_timeout_seconds=0.2,
        ledger_timeout_seconds=2.0,
    )


@pytest.fixture
def cache_store(clock) -> MemoryCacheStore:
    return MemoryCacheStore(clock)


@pytest.fixture
async def seeded(session_factory):
    """
    Servidores de teste:
    - 042: plano com teto 2
    - 777: plano ilimitado (default_plan)
    - 100: sem plano
    - 999: inativo
    """
    async with session_factory() as session:
        plans = PlanRepository(session)
        servers = ServerRepository(session)

        limited = await plans.save(Plan(name="Básico", active_list_limit=2, billing_type="por_lista"))
        unlimited = await plans.save(default_plan())

        await servers.save(Server(code="042", name="Servidor 42", dns=PROVIDER_DNS, plan_id=limited.id))
        await servers.save(Server(code="777", name="Servidor 777", dns=PROVIDER_DNS, plan_id=unlimited.id))
        await servers.save(Server(code="100", name="Sem plano", dns=PROVIDER_DNS))
        await servers.save(Server(code="999", name="Inativo", dns=PROVIDER_DNS, active=False, plan_id=limited.id))

        await session.commit()


@pytest.fixture
def container(settings, session_factory, cache_store, clock, provider, seeded):
    return build_container(
        settings,
        session_factory=session_factory,
        cache_store=cache_store,
        clock=clock,
        transport=provider.transport,
    )
