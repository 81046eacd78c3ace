"""Enums - valores fixos que se repetem no sistema."""

from enum import Enum


class BillingType(str, Enum):
    """Forma de cobrança do plano."""
    FIXED = "fixo"            # Valor fixo mensal
    PER_LIST = "por_lista"    # Cobrado por lista ativa no mês


class MediaClass(str, Enum):
    """Tipos de conteúdo do catálogo."""
    LIVE = "live"
    MOVIES = "movies"
    SERIES = "series"
