"""
USAGE SERVICE - Resumo de uso mensal
====================================

Quantas listas o servidor já contou no mês e quanto falta do teto.
"""

import asyncio
import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from iptv_panel.domain.clock import SystemClock, period_key
from iptv_panel.domain.exceptions import LedgerUnavailable
from iptv_panel.infrastructure.repositories import MonthlyActiveListRepository, ServerDirectory

logger = logging.getLogger(__name__)


class UsageService:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        servers: ServerDirectory,
        clock=None,
        ledger_timeout: float = 5.0,
    ):
        self.session_factory = session_factory
        self.servers = servers
        self.clock = clock or SystemClock()
        self.ledger_timeout = ledger_timeout

    def _month(self, month: Optional[str]) -> str:
        return month or period_key(self.clock.now())

    async def _bounded(self, operation):
        try:
            return await asyncio.wait_for(operation, self.ledger_timeout)
        except asyncio.TimeoutError as e:
            logger.error("Timeout consultando listas ativas")
            raise LedgerUnavailable("Tempo esgotado consultando listas ativas") from e
        except SQLAlchemyError as e:
            logger.exception("Erro de banco consultando listas ativas")
            raise LedgerUnavailable("Banco de dados indisponível ao consultar listas ativas") from e

    async def _count(self, server_code: str, month: str) -> int:
        async with self.session_factory() as session:
            return await MonthlyActiveListRepository(session).count_active(server_code, month)

    async def _rows(self, server_code: str, month: str) -> list[dict]:
        async with self.session_factory() as session:
            rows = await MonthlyActiveListRepository(session).list_for_month(server_code, month)
            return [row.to_dict() for row in rows]

    async def get_usage_summary(self, server_code: str, month: Optional[str] = None) -> dict:
        server = await self.servers.require_tenant(server_code)
        month = self._month(month)

        current = await self._bounded(self._count(server.code, month))

        limit = server.ceiling
        percentage = (current / limit * 100) if limit else 0

        return {
            "server_code": server.code,
            "period": month,
            "plan": server.plan_name,
            "current": current,
            "limit": limit,
            "unlimited": limit is None,
            "percentage": round(percentage, 1),
            "remaining": None if limit is None else max(limit - current, 0),
        }

    async def list_monthly_active(self, server_code: str, month: Optional[str] = None) -> list[dict]:
        server = await self.servers.require_tenant(server_code)
        month = self._month(month)

        return await self._bounded(self._rows(server.code, month))
