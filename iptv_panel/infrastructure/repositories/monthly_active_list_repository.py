"""Acesso ao livro-razão mensal de listas ativas."""

from datetime import datetime
from typing import Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from iptv_panel.domain.entities import MonthlyActiveList


class MonthlyActiveListRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def find(self, server_code: str, username: str, month: str) -> Optional[MonthlyActiveList]:
        result = await self.session.execute(
            select(MonthlyActiveList).where(
                MonthlyActiveList.server_code == server_code,
                MonthlyActiveList.username == username,
                MonthlyActiveList.reference_month == month,
            )
        )
        return result.scalar_one_or_none()

    async def count_active(self, server_code: str, month: str) -> int:
        result = await self.session.execute(
            select(func.count(MonthlyActiveList.id)).where(
                MonthlyActiveList.server_code == server_code,
                MonthlyActiveList.reference_month == month,
                MonthlyActiveList.active == True,  # noqa: E712
            )
        )
        return result.scalar_one()

    async def create(
        self,
        server_code: str,
        username: str,
        month: str,
        now: datetime,
        user_agent: str = "",
        ip_address: str = "",
    ) -> MonthlyActiveList:
        """Insere a linha do mês. IntegrityError sobe se outra requisição ganhou a corrida."""
        row = MonthlyActiveList(
            server_code=server_code,
            username=username,
            reference_month=month,
            first_seen_at=now,
            last_seen_at=now,
            user_agent=user_agent or "",
            ip_address=ip_address or "",
            active=True,
        )
        self.session.add(row)
        await self.session.flush()
        return row

    async def touch(
        self,
        row: MonthlyActiveList,
        now: datetime,
        user_agent: str = "",
        ip_address: str = "",
    ) -> MonthlyActiveList:
        row.last_seen_at = now
        row.user_agent = user_agent or row.user_agent
        row.ip_address = ip_address or row.ip_address
        await self.session.flush()
        return row

    async def list_for_month(self, server_code: str, month: str) -> list[MonthlyActiveList]:
        result = await self.session.execute(
            select(MonthlyActiveList)
            .where(
                MonthlyActiveList.server_code == server_code,
                MonthlyActiveList.reference_month == month,
                MonthlyActiveList.active == True,  # noqa: E712
            )
            .order_by(MonthlyActiveList.last_seen_at.desc())
        )
        return list(result.scalars().all())
