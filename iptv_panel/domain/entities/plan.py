"""
PLAN - Planos de cobrança
==========================

Define o teto mensal de listas ativas de cada servidor.
"""

from typing import Optional
from sqlalchemy import String, Boolean, Integer, Numeric, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampMixin
from .enums import BillingType


class Plan(Base, TimestampMixin):
    """
    Plano contratado pelo dono do servidor.

    active_list_limit:
        None -> ilimitado
        N > 0 -> no máximo N listas distintas por mês
    """

    __tablename__ = "plans"

    __table_args__ = (
        CheckConstraint(
            "active_list_limit IS NULL OR active_list_limit > 0",
            name="ck_plans_active_list_limit_positive",
        ),
        CheckConstraint(
            "duration_months BETWEEN 1 AND 12",
            name="ck_plans_duration_months",
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)

    active_list_limit: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    billing_type: Mapped[str] = mapped_column(String(20), default=BillingType.FIXED.value)
    price: Mapped[float] = mapped_column(Numeric(10, 2), default=0)
    duration_months: Mapped[int] = mapped_column(Integer, default=1)

    active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)

    @property
    def is_unlimited(self) -> bool:
        return self.active_list_limit is None

    @property
    def ceiling(self) -> Optional[int]:
        """Teto mensal de listas ativas (None = ilimitado)."""
        return self.active_list_limit


def default_plan() -> Plan:
    """
    Plano padrão para servidores recém-criados.

    Só constrói o objeto; quem quiser persistir chama o repositório.
    """
    return Plan(
        name="Padrão",
        active_list_limit=None,
        billing_type=BillingType.FIXED.value,
        price=0,
        duration_months=1,
        active=True,
    )
