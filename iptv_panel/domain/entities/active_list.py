"""ACTIVE LIST - último acesso de cada usuário por servidor (sem período)."""

from datetime import datetime
from sqlalchemy import String, Boolean, DateTime, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampMixin


class ActiveList(Base, TimestampMixin):
    __tablename__ = "active_lists"

    __table_args__ = (
        UniqueConstraint("server_code", "username", name="uq_active_lists_server_user"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    server_code: Mapped[str] = mapped_column(String(20), nullable=False)
    username: Mapped[str] = mapped_column(String(200), nullable=False)
    user_agent: Mapped[str] = mapped_column(String(500), default="")
    ip_address: Mapped[str] = mapped_column(String(100), default="")
    last_access: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)
