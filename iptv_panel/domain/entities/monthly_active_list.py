"""
MONTHLY ACTIVE LIST - Listas ativas por mês
============================================

Livro-razão da cota: uma linha por servidor + usuário + mês.
Nunca é apagada aqui; limpeza antiga fica fora do sistema.
"""

from datetime import datetime
from sqlalchemy import String, Boolean, DateTime, UniqueConstraint, Index
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampMixin


class MonthlyActiveList(Base, TimestampMixin):
    """
    Uma lista (usuário final) contada no mês de referência.

    Mês no formato: "2025-01", "2025-02", etc.
    """

    __tablename__ = "monthly_active_lists"

    __table_args__ = (
        UniqueConstraint(
            "server_code", "username", "reference_month",
            name="uq_monthly_active_lists_server_user_month",
        ),
        Index("ix_monthly_active_lists_server_month_active", "server_code", "reference_month", "active"),
        Index("ix_monthly_active_lists_month_active", "reference_month", "active"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    server_code: Mapped[str] = mapped_column(String(20), nullable=False)
    username: Mapped[str] = mapped_column(String(200), nullable=False)

    # Período (YYYY-MM)
    reference_month: Mapped[str] = mapped_column(String(7), nullable=False, index=True)

    first_seen_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    last_seen_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)

    # Informativo apenas
    user_agent: Mapped[str] = mapped_column(String(500), default="")
    ip_address: Mapped[str] = mapped_column(String(100), default="")

    active: Mapped[bool] = mapped_column(Boolean, default=True)

    def to_dict(self) -> dict:
        return {
            "server_code": self.server_code,
            "username": self.username,
            "reference_month": self.reference_month,
            "first_seen_at": self.first_seen_at,
            "last_seen_at": self.last_seen_at,
            "user_agent": self.user_agent,
            "ip_address": self.ip_address,
            "active": self.active,
        }
