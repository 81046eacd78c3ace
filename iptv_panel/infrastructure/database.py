"""Gerencia conexão com o banco (PostgreSQL em produção)."""
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from iptv_panel.config import Settings


def create_engine(settings: Settings) -> AsyncEngine:
    """Cria a engine uma única vez, no startup da aplicação."""
    url = settings.async_database_url
    options = {"echo": settings.debug, "pool_pre_ping": True}
    if url.startswith("postgresql"):
        options.update(pool_size=10, max_overflow=20)
    return create_async_engine(url, **options)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def init_db(engine: AsyncEngine) -> None:
    """Cria tabelas do banco (usar só em dev; produção usa alembic)."""
    from iptv_panel.domain.entities import Base
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
