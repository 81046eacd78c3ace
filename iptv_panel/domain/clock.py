"""Relógio injetável e cálculo do período mensal (YYYY-MM)."""

from datetime import datetime
from zoneinfo import ZoneInfo


class SystemClock:
    """Relógio real, sempre com timezone explícito (padrão UTC)."""

    def __init__(self, timezone: str = "UTC"):
        self.tz = ZoneInfo(timezone)

    def now(self) -> datetime:
        return datetime.now(self.tz)


def period_key(moment: datetime) -> str:
    """Retorna o mês de referência no formato YYYY-MM."""
    return moment.strftime("%Y-%m")
