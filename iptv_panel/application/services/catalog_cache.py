"""
CATALOG CACHE - Cache de leitura do provedor
============================================

Protege o provedor Xtream (sensível a rate limit) de consultas repetidas.

Fluxo de toda operação cacheada:
1. Resolve o servidor (TenantNotFound se desconhecido/inativo)
2. Monta a chave: SERVIDOR:operação:hash(parâmetros normalizados)
3. HIT -> devolve o valor como está, sem chamar o provedor
4. MISS -> chama o provedor, grava com o TTL da operação e devolve

Falhas do store (Redis fora, timeout) nunca chegam ao chamador:
leitura com erro vira MISS e escrita com erro é só logada.
Falhas do provedor viram UpstreamError e NÃO são cacheadas.
"""

import asyncio
import hashlib
import json
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Awaitable, Callable, Optional

from redis.exceptions import RedisError

from iptv_panel.config import Settings
from iptv_panel.domain.entities import MediaClass
from iptv_panel.infrastructure.repositories import ServerContext, ServerDirectory
from iptv_panel.infrastructure.services.xtream_service import XtreamClient

from .context import AccessContext

logger = logging.getLogger(__name__)

# Falhas do store tratadas como cache miss
CACHE_ERRORS = (RedisError, OSError, asyncio.TimeoutError)

# Parâmetros que o provedor diferencia maiúsculas/minúsculas
CASE_SENSITIVE_PARAMS = {"username"}


@dataclass(frozen=True)
class CacheTTL:
    """Janelas de validade em segundos por classe de operação."""

    live: int = 30
    vod: int = 300
    epg: int = 120
    user_info: int = 30

    @classmethod
    def from_settings(cls, settings: Settings) -> "CacheTTL":
        return cls(
            live=settings.cache_ttl_live,
            vod=settings.cache_ttl_vod,
            epg=settings.cache_ttl_epg,
            user_info=settings.cache_ttl_user_info,
        )

    def for_media(self, media: MediaClass) -> int:
        return self.live if media == MediaClass.LIVE else self.vod


def _normalize_params(params: Optional[dict]) -> dict:
    normalized = {}
    for key, value in (params or {}).items():
        if value is None:
            continue
        key = str(key).strip().lower()
        if isinstance(value, str):
            value = value.strip()
            if key not in CASE_SENSITIVE_PARAMS:
                value = value.lower()
            if not value:
                continue
        normalized[key] = value
    return normalized


def build_cache_key(server_code: str, operation: str, params: Optional[dict] = None) -> str:
    """Mesmos dados de entrada -> sempre a mesma chave."""
    canonical = json.dumps(
        _normalize_params(params), sort_keys=True, separators=(",", ":"), default=str
    )
    digest = hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:32]
    return f"{server_code.strip().upper()}:{operation}:{digest}"


def _media_operation(media: MediaClass, suffix: str) -> str:
    return f"{MediaClass(media).value}_{suffix}"


class CatalogCache:
    def __init__(
        self,
        servers: ServerDirectory,
        store,
        client_factory: Callable[[str, str, str], XtreamClient] = XtreamClient,
        ttl: Optional[CacheTTL] = None,
        cache_timeout: float = 0.5,
        stream_extension: str = "m3u8",
    ):
        self.servers = servers
        self.store = store
        self.client_factory = client_factory
        self.ttl = ttl or CacheTTL()
        self.cache_timeout = cache_timeout
        self.stream_extension = stream_extension

    # =========================================================================
    # STORE (erros absorvidos)
    # =========================================================================

    async def _cache_read(self, key: str) -> Optional[Any]:
        try:
            raw = await asyncio.wait_for(self.store.get(key), self.cache_timeout)
        except CACHE_ERRORS as e:
            logger.error(f"Erro ao ler do cache: {type(e).__name__}: {e}")
            return None

        if raw is None:
            return None

        try:
            return json.loads(raw)
        except ValueError:
            logger.error(f"Valor corrompido no cache, ignorando: {key}")
            return None

    async def _cache_write(self, key: str, data: Any, ttl: int) -> None:
        try:
            value = json.dumps(data, default=str)
            await asyncio.wait_for(self.store.set(key, value, ttl), self.cache_timeout)
        except CACHE_ERRORS as e:
            logger.error(f"Erro ao escrever no cache: {type(e).__name__}: {e}")

    # =========================================================================
    # LEITURA COM CACHE
    # =========================================================================

    async def _cached(
        self,
        ctx: AccessContext,
        operation: str,
        params: Optional[dict],
        ttl: int,
        fetch: Callable[[XtreamClient], Awaitable[Any]],
    ) -> Any:
        server = await self.servers.require_tenant(ctx.server_code)
        key = build_cache_key(server.code, operation, params)

        cached = await self._cache_read(key)
        if cached is not None:
            return cached

        client = self.client_factory(server.dns, ctx.username, ctx.password)
        data = await fetch(client)

        await self._cache_write(key, data, ttl)
        return data

    async def get_profile(self, ctx: AccessContext) -> dict:
        return await self._cached(
            ctx, "user_info", {"username": ctx.username}, self.ttl.user_info,
            lambda client: client.get_profile(),
        )

    async def list_categories(self, ctx: AccessContext, media: MediaClass) -> list:
        media = MediaClass(media)
        return await self._cached(
            ctx, _media_operation(media, "categories"), None, self.ttl.for_media(media),
            lambda client: client.get_categories(media),
        )

    async def list_items(
        self, ctx: AccessContext, media: MediaClass, category: Optional[str] = None
    ) -> list:
        media = MediaClass(media)
        category = (category or "").strip() or None
        return await self._cached(
            ctx, _media_operation(media, "items"), {"category": category}, self.ttl.for_media(media),
            lambda client: client.get_items(media, category),
        )

    async def get_item_detail(self, ctx: AccessContext, media: MediaClass, item_id: str) -> dict:
        media = MediaClass(media)
        if media == MediaClass.LIVE:
            raise ValueError("Detalhes só existem para filmes e séries")
        item_id = str(item_id).strip()
        return await self._cached(
            ctx, _media_operation(media, "detail"), {"id": item_id}, self.ttl.vod,
            lambda client: client.get_item_detail(media, item_id),
        )

    async def get_guide_data(self, ctx: AccessContext, channel_id: str) -> dict:
        channel_id = str(channel_id).strip()
        return await self._cached(
            ctx, "epg", {"channel_id": channel_id}, self.ttl.epg,
            lambda client: client.get_epg(channel_id),
        )

    # =========================================================================
    # SEM CACHE
    # =========================================================================

    async def build_playback_url(
        self,
        ctx: AccessContext,
        stream_id: str,
        media: MediaClass,
        extension: Optional[str] = None,
        timeshift_start: Optional[datetime] = None,
        timeshift_minutes: int = 0,
    ) -> str:
        """URL sempre calculada na hora (pode carregar token temporário)."""
        server = await self.servers.require_tenant(ctx.server_code)
        client = self.client_factory(server.dns, ctx.username, ctx.password)
        return client.build_stream_url(
            stream_id,
            MediaClass(media),
            extension=extension or self.stream_extension,
            timeshift_start=timeshift_start,
            timeshift_minutes=timeshift_minutes,
        )

    # =========================================================================
    # MANUTENÇÃO
    # =========================================================================

    async def warm_profile(self, server: ServerContext, ctx: AccessContext, profile: dict) -> None:
        """Grava o perfil obtido na validação de credenciais."""
        key = build_cache_key(server.code, "user_info", {"username": ctx.username})
        await self._cache_write(key, profile, self.ttl.user_info)

    async def invalidate(self, server_code: str, operation: str, params: Optional[dict] = None) -> None:
        """Remove uma entrada (ex: após mudança no provedor)."""
        key = build_cache_key(server_code, operation, params)
        try:
            await asyncio.wait_for(self.store.delete(key), self.cache_timeout)
        except CACHE_ERRORS as e:
            logger.error(f"Erro ao deletar cache: {type(e).__name__}: {e}")
