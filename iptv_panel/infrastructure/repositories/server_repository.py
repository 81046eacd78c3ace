"""
SERVIDORES E PLANOS
===================

Diretório de servidores (tenants) consultado pelo cache de catálogo
e pelo controle de listas ativas.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from iptv_panel.domain.entities import Plan, Server, normalize_server_code
from iptv_panel.domain.exceptions import LedgerUnavailable, TenantNotFound

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ServerContext:
    """Visão somente-leitura do servidor usada pelo núcleo."""

    code: str
    dns: str
    ceiling: Optional[int]  # None = ilimitado
    plan_name: Optional[str] = None

    @property
    def is_unlimited(self) -> bool:
        return self.ceiling is None


class ServerRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_active_by_code(self, code: str) -> Optional[Server]:
        result = await self.session.execute(
            select(Server)
            .options(selectinload(Server.plan))
            .where(Server.code == normalize_server_code(code))
            .where(Server.active == True)  # noqa: E712
        )
        return result.scalar_one_or_none()

    async def save(self, server: Server) -> Server:
        server.code = normalize_server_code(server.code)
        self.session.add(server)
        await self.session.flush()
        return server


class PlanRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def save(self, plan: Plan) -> Plan:
        self.session.add(plan)
        await self.session.flush()
        return plan


class ServerDirectory:
    """Resolve código do servidor -> DNS + teto do plano."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession], timeout: float = 5.0):
        self.session_factory = session_factory
        self.timeout = timeout

    async def find_tenant(self, code: str) -> Optional[ServerContext]:
        try:
            return await asyncio.wait_for(self._find(code), self.timeout)
        except asyncio.TimeoutError as e:
            logger.error(f"Timeout buscando servidor {normalize_server_code(code)}")
            raise LedgerUnavailable("Tempo esgotado consultando o banco de dados") from e
        except SQLAlchemyError as e:
            logger.exception(f"Erro de banco buscando servidor {normalize_server_code(code)}")
            raise LedgerUnavailable("Banco de dados indisponível") from e

    async def require_tenant(self, code: str) -> ServerContext:
        server = await self.find_tenant(code)
        if server is None:
            raise TenantNotFound(normalize_server_code(code))
        return server

    async def _find(self, code: str) -> Optional[ServerContext]:
        async with self.session_factory() as session:
            server = await ServerRepository(session).get_active_by_code(code)
            if server is None:
                return None

            # Servidor sem plano não tem teto
            plan = server.plan
            return ServerContext(
                code=server.code,
                dns=server.dns,
                ceiling=plan.ceiling if plan else None,
                plan_name=plan.name if plan else None,
            )
