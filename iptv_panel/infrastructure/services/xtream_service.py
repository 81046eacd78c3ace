"""
SERVIÇO XTREAM - Provedor de conteúdo (MULTI-TENANT)
====================================================

Cliente do player_api.php do Xtream Codes.
Cada instância representa UM usuário final em UM servidor (DNS).

As credenciais vão em toda chamada e nunca são logadas.

Usado por:
- CatalogCache
- CredentialVerifier
"""

import logging
from datetime import datetime
from typing import Any, Optional
from urllib.parse import quote

import httpx

from iptv_panel.domain.entities import MediaClass
from iptv_panel.domain.exceptions import UpstreamError

logger = logging.getLogger(__name__)


# Segmento da URL de reprodução por tipo de conteúdo
STREAM_PATHS = {
    MediaClass.LIVE: "live",
    MediaClass.MOVIES: "movie",
    MediaClass.SERIES: "series",
}


class XtreamClient:
    """Cliente Xtream isolado por servidor + usuário."""

    def __init__(
        self,
        base_url: str,
        username: str,
        password: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not base_url:
            raise ValueError("DNS do servidor é obrigatório")

        self.base_url = base_url.rstrip("/")
        self.username = username
        self.password = password
        self.timeout = timeout
        self.transport = transport

    @property
    def api_url(self) -> str:
        return f"{self.base_url}/player_api.php"

    # ==========================
    # HTTP HELPERS
    # ==========================
    async def _request(self, action: Optional[str] = None, **params: Any) -> Any:
        query = {"username": self.username, "password": self.password}
        if action:
            query["action"] = action
        query.update({k: v for k, v in params.items() if v is not None})

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.get(self.api_url, params=query)
                response.raise_for_status()
                return response.json()

        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            logger.warning(
                f"Xtream HTTP error [{self.base_url}] action={action or 'profile'} status={status_code}"
            )
            message = e.response.text[:200] or f"Provedor respondeu HTTP {status_code}"
            raise UpstreamError(message, status_code=status_code) from e

        except httpx.TimeoutException as e:
            logger.warning(f"Xtream timeout [{self.base_url}] action={action or 'profile'}")
            raise UpstreamError("Tempo esgotado aguardando o provedor") from e

        except httpx.HTTPError as e:
            logger.warning(
                f"Xtream request error [{self.base_url}] action={action or 'profile'}: {type(e).__name__}"
            )
            raise UpstreamError(f"Falha de comunicação com o provedor: {type(e).__name__}") from e

        except ValueError as e:
            logger.warning(f"Xtream JSON inválido [{self.base_url}] action={action or 'profile'}")
            raise UpstreamError("Resposta inválida do provedor") from e

    async def _fetch_list(self, action: str, **params: Any) -> list:
        data = await self._request(action, **params)
        if not isinstance(data, list):
            raise UpstreamError(f"Resposta inesperada do provedor para {action}")
        return data

    async def _fetch_dict(self, action: str, **params: Any) -> dict:
        data = await self._request(action, **params)
        if not isinstance(data, dict) or not data:
            raise UpstreamError(f"Resposta inesperada do provedor para {action}")
        return data

    # ==========================
    # PERFIL
    # ==========================
    async def get_profile(self) -> dict:
        """
        Dados da conta do usuário (user_info + server_info).

        O provedor devolve a senha dentro de user_info; removemos aqui
        para ela nunca chegar ao cache nem à resposta.
        """
        data = await self._request()
        user_info = data.get("user_info") if isinstance(data, dict) else None

        if not isinstance(user_info, dict) or str(user_info.get("auth", "0")) != "1":
            message = None
            if isinstance(user_info, dict):
                message = user_info.get("message")
            raise UpstreamError(message or "Usuário não autenticado no provedor", status_code=401)

        profile = dict(data)
        profile["user_info"] = {k: v for k, v in user_info.items() if k != "password"}
        return profile

    # ==========================
    # CATEGORIAS
    # ==========================
    async def get_categories(self, media: MediaClass) -> list:
        actions = {
            MediaClass.LIVE: "get_live_categories",
            MediaClass.MOVIES: "get_vod_categories",
            MediaClass.SERIES: "get_series_categories",
        }
        return await self._fetch_list(actions[media])

    # ==========================
    # ITENS
    # ==========================
    async def get_items(self, media: MediaClass, category_id: Optional[str] = None) -> list:
        actions = {
            MediaClass.LIVE: "get_live_streams",
            MediaClass.MOVIES: "get_vod_streams",
            MediaClass.SERIES: "get_series",
        }
        return await self._fetch_list(actions[media], category_id=category_id)

    async def get_item_detail(self, media: MediaClass, item_id: str) -> dict:
        if media == MediaClass.MOVIES:
            return await self._fetch_dict("get_vod_info", vod_id=item_id)
        if media == MediaClass.SERIES:
            return await self._fetch_dict("get_series_info", series_id=item_id)
        raise ValueError("Detalhes só existem para filmes e séries")

    # ==========================
    # EPG
    # ==========================
    async def get_epg(self, stream_id: str) -> dict:
        return await self._fetch_dict("get_simple_data_table", stream_id=stream_id)

    # ==========================
    # URL DE REPRODUÇÃO
    # ==========================
    def build_stream_url(
        self,
        stream_id: str,
        media: MediaClass,
        extension: str = "m3u8",
        timeshift_start: Optional[datetime] = None,
        timeshift_minutes: int = 0,
    ) -> str:
        """Monta a URL de reprodução. Nunca é cacheada."""
        user = quote(self.username, safe="")
        password = quote(self.password, safe="")
        stream = quote(str(stream_id), safe="")

        if timeshift_start is not None and timeshift_minutes > 0 and media == MediaClass.LIVE:
            start = timeshift_start.strftime("%Y-%m-%d:%H-%M")
            return (
                f"{self.base_url}/timeshift/{user}/{password}/"
                f"{timeshift_minutes}/{start}/{stream}.{extension}"
            )

        return f"{self.base_url}/{STREAM_PATHS[media]}/{user}/{password}/{stream}.{extension}"
