"""
SERVER - Servidores IPTV (tenants)
===================================

Cada servidor aponta para um DNS do provedor Xtream e tem um plano.
"""

from typing import Optional, TYPE_CHECKING
from sqlalchemy import String, Boolean, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin

if TYPE_CHECKING:
    from .plan import Plan


def normalize_server_code(code: str) -> str:
    """Códigos são sempre comparados sem espaços e em maiúsculas."""
    return (code or "").strip().upper()


class Server(Base, TimestampMixin):
    """Servidor (tenant) que revende acesso ao provedor."""

    __tablename__ = "servers"

    id: Mapped[int] = mapped_column(primary_key=True)
    code: Mapped[str] = mapped_column(String(20), unique=True, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)

    # URL base do provedor (ex: http://dns.provedor.com:8080)
    dns: Mapped[str] = mapped_column(String(500), nullable=False)

    active: Mapped[bool] = mapped_column(Boolean, default=True)

    plan_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("plans.id", ondelete="SET NULL"), nullable=True, index=True
    )
    plan: Mapped[Optional["Plan"]] = relationship()
