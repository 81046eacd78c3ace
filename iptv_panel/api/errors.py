"""Converte erros do domínio em respostas HTTP com mensagens distintas."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from iptv_panel.domain.exceptions import (
    InvalidCredentials,
    LedgerUnavailable,
    PanelError,
    QuotaExceeded,
    TenantNotFound,
    UpstreamError,
)

logger = logging.getLogger(__name__)

STATUS_BY_ERROR = {
    TenantNotFound: 404,
    InvalidCredentials: 401,
    QuotaExceeded: 429,
    UpstreamError: 502,
    LedgerUnavailable: 503,
}


def status_for(exc: PanelError) -> int:
    for error_type, status_code in STATUS_BY_ERROR.items():
        if isinstance(exc, error_type):
            return status_code
    return 500


async def panel_error_handler(request: Request, exc: PanelError) -> JSONResponse:
    status_code = status_for(exc)
    body = {"error": exc.message, "code": exc.code, "retryable": exc.retryable}

    if isinstance(exc, UpstreamError):
        body["error"] = f"Provedor indisponível no momento, tente novamente. ({exc.message})"
    elif isinstance(exc, QuotaExceeded):
        body.update(period=exc.period, limit=exc.limit, current=exc.current)

    if status_code >= 500:
        logger.warning(f"{exc.code} em {request.url.path}: {exc.message}")

    headers = {"Retry-After": "30"} if exc.retryable else None
    return JSONResponse(status_code=status_code, content=body, headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PanelError, panel_error_handler)
