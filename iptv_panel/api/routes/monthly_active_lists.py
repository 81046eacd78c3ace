"""
LISTAS ATIVAS MENSAIS
=====================

Consulta do livro-razão para o painel (autenticação fica fora deste módulo).
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from iptv_panel.api.dependencies import get_usage_service
from iptv_panel.api.schemas.schemas import (
    ErrorResponse,
    MonthlyActiveListResponse,
    UsageSummaryResponse,
)
from iptv_panel.application.services import UsageService

MONTH_PATTERN = r"^\d{4}-\d{2}$"

router = APIRouter(
    tags=["Listas Ativas"],
    responses={
        404: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)


@router.get("/monthly-active-lists", response_model=MonthlyActiveListResponse)
async def list_monthly_active_lists(
    server_code: str = Query(..., min_length=1),
    month: Optional[str] = Query(None, pattern=MONTH_PATTERN),
    usage: UsageService = Depends(get_usage_service),
):
    """Listas contadas no mês, mais recentes primeiro."""
    summary = await usage.get_usage_summary(server_code, month)
    rows = await usage.list_monthly_active(server_code, summary["period"])
    return {"period": summary["period"], "total": len(rows), "monthly_lists": rows}


@router.get("/usage/{server_code}", response_model=UsageSummaryResponse)
async def get_usage(
    server_code: str,
    month: Optional[str] = Query(None, pattern=MONTH_PATTERN),
    usage: UsageService = Depends(get_usage_service),
):
    return await usage.get_usage_summary(server_code, month)
