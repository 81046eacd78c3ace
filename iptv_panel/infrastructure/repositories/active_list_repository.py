"""Último acesso por servidor + usuário (tabela active_lists)."""

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from iptv_panel.domain.entities import ActiveList


class ActiveListRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def _find(self, server_code: str, username: str):
        result = await self.session.execute(
            select(ActiveList).where(
                ActiveList.server_code == server_code,
                ActiveList.username == username,
            )
        )
        return result.scalar_one_or_none()

    async def upsert(
        self,
        server_code: str,
        username: str,
        now: datetime,
        user_agent: str = "",
        ip_address: str = "",
    ) -> ActiveList:
        """
        Cria ou atualiza e faz commit.

        Se outra requisição inserir primeiro, a violação de unicidade
        vira um update da linha existente.
        """
        row = await self._find(server_code, username)
        if row is None:
            row = ActiveList(server_code=server_code, username=username)
            self.session.add(row)
            self._apply(row, now, user_agent, ip_address)
            try:
                await self.session.commit()
                return row
            except IntegrityError:
                await self.session.rollback()
                row = await self._find(server_code, username)
                if row is None:
                    raise

        self._apply(row, now, user_agent, ip_address)
        await self.session.commit()
        return row

    @staticmethod
    def _apply(row: ActiveList, now: datetime, user_agent: str, ip_address: str) -> None:
        row.last_access = now
        row.user_agent = user_agent or ""
        row.ip_address = ip_address or ""
        row.is_active = True
