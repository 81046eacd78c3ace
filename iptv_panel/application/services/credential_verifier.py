"""Valida as credenciais do usuário final direto no provedor."""

import logging
from typing import Callable, Optional

from iptv_panel.domain.exceptions import InvalidCredentials, UpstreamError
from iptv_panel.infrastructure.repositories import ServerContext
from iptv_panel.infrastructure.services.xtream_service import XtreamClient

from .context import AccessContext

logger = logging.getLogger(__name__)


class CredentialVerifier:
    """
    Uma chamada de perfil no provedor. Sucesso = credenciais válidas.

    Nunca lê do cache (o perfil cacheado não prova a senha), mas grava
    o perfil obtido para aquecer o cache de user_info.
    Senha errada e provedor fora do ar são o mesmo erro aqui.
    """

    def __init__(
        self,
        client_factory: Callable[[str, str, str], XtreamClient] = XtreamClient,
        catalog=None,
    ):
        self.client_factory = client_factory
        self.catalog = catalog

    async def verify(self, server: ServerContext, ctx: AccessContext) -> dict:
        if not ctx.username or not ctx.password:
            raise InvalidCredentials()

        client = self.client_factory(server.dns, ctx.username, ctx.password)
        try:
            profile = await client.get_profile()
        except UpstreamError as e:
            logger.info(
                f"Credenciais recusadas [{server.code}] usuário={ctx.username}: {e.message}"
            )
            raise InvalidCredentials() from e

        if self.catalog is not None:
            await self.catalog.warm_profile(server, ctx, profile)

        return profile
