"""Entidades do domínio."""
from .base import Base, TimestampMixin
from .enums import BillingType, MediaClass
from .plan import Plan, default_plan
from .server import Server, normalize_server_code
from .monthly_active_list import MonthlyActiveList
from .active_list import ActiveList

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    # Enums
    "BillingType",
    "MediaClass",
    # Models
    "Plan",
    "Server",
    "MonthlyActiveList",
    "ActiveList",
    # Helpers
    "default_plan",
    "normalize_server_code",
]
