"""
PAINEL IPTV API - Ponto de Entrada
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from iptv_panel.api.errors import register_exception_handlers
from iptv_panel.api.routes import (
    catalog_router,
    client_access_router,
    health_router,
    monthly_active_lists_router,
)
from iptv_panel.config import Settings, get_settings
from iptv_panel.container import ServiceContainer, build_container
from iptv_panel.infrastructure.database import init_db
from iptv_panel.infrastructure.logging_config import setup_logging

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    container: Optional[ServiceContainer] = None,
) -> FastAPI:
    """
    Monta a aplicação.

    Com `container` informado (testes) o lifespan não cria engine nem cache.
    """
    settings = settings or (container.settings if container else get_settings())

    # ============================================================
    # LIFESPAN
    # ============================================================
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(settings.log_level)
        logger.info("Iniciando Painel IPTV API...")

        owned = getattr(app.state, "container", None) is None
        if owned:
            app.state.container = build_container(settings)
            if settings.is_development:
                await init_db(app.state.container.engine)
                logger.info("Tabelas criadas (desenvolvimento)")

        yield

        if owned:
            await app.state.container.close()
        logger.info("Encerrando Painel IPTV API...")

    app = FastAPI(
        title="Painel IPTV API",
        description="Cache de catálogo e controle de listas ativas multi-tenant",
        version="0.1.0",
        lifespan=lifespan,
    )

    if container is not None:
        app.state.container = container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # ============================================================
    # ROTAS
    # ============================================================
    app.include_router(client_access_router, prefix="/api")
    app.include_router(catalog_router, prefix="/api")
    app.include_router(monthly_active_lists_router, prefix="/api")
    app.include_router(health_router)

    return app


# uvicorn iptv_panel.api.main:app
app = create_app()
