from .server_repository import ServerContext, ServerDirectory, ServerRepository, PlanRepository
from .monthly_active_list_repository import MonthlyActiveListRepository
from .active_list_repository import ActiveListRepository

__all__ = [
    "ServerContext",
    "ServerDirectory",
    "ServerRepository",
    "PlanRepository",
    "MonthlyActiveListRepository",
    "ActiveListRepository",
]
