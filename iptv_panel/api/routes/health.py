"""
HEALTH CHECK
============
Usado por monitoramento externo. 503 se o banco falhar.
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from iptv_panel.api.dependencies import get_container, get_db
from iptv_panel.container import ServiceContainer
from iptv_panel.infrastructure.services.redis_service import cache_health_check

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["Health"])


@router.get("")
async def health_check(
    db: AsyncSession = Depends(get_db),
    container: ServiceContainer = Depends(get_container),
):
    status = "healthy"
    checks = {}

    try:
        await db.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except Exception as e:
        logger.error(f"Health check: banco indisponível: {e}")
        checks["database"] = f"error: {e}"
        status = "unhealthy"

    # Cache fora degrada para o provedor, não derruba o serviço
    checks["cache"] = await cache_health_check(container.cache_store)
    checks["timestamp"] = datetime.now(timezone.utc).isoformat()

    return JSONResponse(
        status_code=200 if status == "healthy" else 503,
        content={"status": status, "checks": checks},
    )
