"""
SCHEMAS DE VALIDAÇÃO
=====================

Estrutura de entrada e saída da API.
"""

from datetime import datetime
from typing import Any, Optional
from pydantic import BaseModel, Field


# ============================================
# ACESSO DO CLIENTE
# ============================================

class ClientAccessRequest(BaseModel):
    """Registro de acesso de uma lista (usuário final)."""

    server_code: str = Field(..., min_length=1, description="Código do servidor")
    username: str = Field(..., min_length=1, description="Usuário no provedor")
    password: str = Field(..., min_length=1, description="Senha no provedor")


class ClientAccessResponse(BaseModel):
    success: bool = True
    message: str
    period: str
    first_access: bool
    user_info: dict[str, Any] = Field(default_factory=dict)


# ============================================
# LISTAS ATIVAS
# ============================================

class MonthlyActiveListOut(BaseModel):
    server_code: str
    username: str
    reference_month: str
    first_seen_at: datetime
    last_seen_at: datetime
    user_agent: str = ""
    ip_address: str = ""
    active: bool


class MonthlyActiveListResponse(BaseModel):
    period: str
    total: int
    monthly_lists: list[MonthlyActiveListOut]


class UsageSummaryResponse(BaseModel):
    server_code: str
    period: str
    plan: Optional[str] = None
    current: int
    limit: Optional[int] = None
    unlimited: bool
    percentage: float
    remaining: Optional[int] = None


# ============================================
# STREAM
# ============================================

class StreamUrlResponse(BaseModel):
    url: str


# ============================================
# ERROS
# ============================================

class ErrorResponse(BaseModel):
    error: str
    code: str
    retryable: bool = False

    # Só em quota_exceeded
    period: Optional[str] = None
    limit: Optional[int] = None
    current: Optional[int] = None
