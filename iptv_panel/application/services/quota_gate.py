"""
QUOTA GATE - Listas ativas por mês
==================================

Decide se um novo acesso (servidor + usuário) pode ser contado no mês.

Regras:
- Já contado no mês -> só atualiza último acesso (nunca barra por cota)
- Novo no mês -> conta as linhas ativas; se teto finito e atingido, QuotaExceeded
- Mês novo -> começa do zero (linha nova, sem herdar contagem)

Concorrência:
- Mesmo servidor+usuário+mês: a constraint única decide; quem perder
  a inserção converte em atualização. Isso vale também quando o teto
  já está cheio: antes de recusar, a linha do próprio usuário é buscada de novo.
- A tabela active_lists é gravada depois do commit do mês; falha nela
  é logada e não desfaz nem recusa o acesso já contado.
- Usuários diferentes perto do teto podem passar juntos pela contagem.
  Aceitamos esse excesso pequeno em vez de serializar o servidor inteiro;
  conciliação de cobrança deve ser feita por recontagem periódica.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from iptv_panel.domain.clock import SystemClock, period_key
from iptv_panel.domain.exceptions import LedgerUnavailable, QuotaExceeded
from iptv_panel.infrastructure.repositories import (
    ActiveListRepository,
    MonthlyActiveListRepository,
    ServerContext,
    ServerDirectory,
)

from .context import AccessContext, ClientMeta
from .credential_verifier import CredentialVerifier

logger = logging.getLogger(__name__)


@dataclass
class AccessResult:
    accepted: bool
    server_code: str
    username: str
    period: str
    first_access: bool
    user_info: dict = field(default_factory=dict)


class QuotaGate:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        servers: ServerDirectory,
        verifier: CredentialVerifier,
        clock=None,
        ledger_timeout: float = 5.0,
        repository_class=MonthlyActiveListRepository,
        active_list_repository_class=ActiveListRepository,
    ):
        self.session_factory = session_factory
        self.servers = servers
        self.verifier = verifier
        self.clock = clock or SystemClock()
        self.ledger_timeout = ledger_timeout
        self.repository_class = repository_class
        self.active_list_repository_class = active_list_repository_class

    async def register_access(
        self,
        server_code: str,
        username: str,
        password: str,
        client_meta: Optional[ClientMeta] = None,
    ) -> AccessResult:
        """
        Registra o acesso do usuário final no mês corrente.

        Raises:
            TenantNotFound, InvalidCredentials, QuotaExceeded, LedgerUnavailable
        """
        ctx = AccessContext(server_code, username, password)
        meta = client_meta or ClientMeta()

        server = await self.servers.require_tenant(ctx.server_code)

        # Credencial inválida não toca no livro-razão
        profile = await self.verifier.verify(server, ctx)

        now = self.clock.now()
        period = period_key(now)

        created = await self._bounded(self._record(server, ctx.username, period, now, meta))

        # A lista já foi contada e gravada; último acesso é só informativo
        try:
            await self._bounded(self._touch_active_list(server.code, ctx.username, now, meta))
        except LedgerUnavailable as e:
            logger.warning(
                f"Último acesso não registrado [{server.code}] usuário={ctx.username}: {e.message}"
            )

        return AccessResult(
            accepted=True,
            server_code=server.code,
            username=ctx.username,
            period=period,
            first_access=created,
            user_info=profile.get("user_info", {}),
        )

    async def _bounded(self, operation):
        """Toda escrita no banco tem prazo; falha sempre sobe."""
        try:
            return await asyncio.wait_for(operation, self.ledger_timeout)
        except asyncio.TimeoutError as e:
            logger.error("Timeout registrando acesso no banco")
            raise LedgerUnavailable("Tempo esgotado ao registrar acesso") from e
        except SQLAlchemyError as e:
            logger.exception("Erro de banco registrando acesso")
            raise LedgerUnavailable("Banco de dados indisponível ao registrar acesso") from e

    async def _record(
        self,
        server: ServerContext,
        username: str,
        period: str,
        now: datetime,
        meta: ClientMeta,
    ) -> bool:
        """Retorna True se criou a linha do mês, False se só atualizou."""
        async with self.session_factory() as session:
            repo = self.repository_class(session)

            row = await repo.find(server.code, username, period)
            if row is not None:
                await repo.touch(row, now, meta.user_agent, meta.ip_address)
                await session.commit()
                return False

            if server.ceiling is not None:
                current = await repo.count_active(server.code, period)
                if current >= server.ceiling:
                    # A linha pode ter sido criada por outra requisição do mesmo usuário
                    row = await repo.find(server.code, username, period)
                    if row is not None:
                        await repo.touch(row, now, meta.user_agent, meta.ip_address)
                        await session.commit()
                        return False

                    logger.info(
                        f"Limite mensal atingido [{server.code}] {current}/{server.ceiling} em {period}"
                    )
                    raise QuotaExceeded(server.code, period, server.ceiling, current)

            try:
                await repo.create(
                    server.code, username, period, now, meta.user_agent, meta.ip_address
                )
                await session.commit()
                logger.info(f"Nova lista ativa [{server.code}] usuário={username} mês={period}")
                return True
            except IntegrityError:
                # Outra requisição do mesmo usuário inseriu antes
                await session.rollback()

            row = await repo.find(server.code, username, period)
            if row is None:
                raise LedgerUnavailable("Conflito ao registrar acesso; linha não encontrada")
            await repo.touch(row, now, meta.user_agent, meta.ip_address)
            await session.commit()
            return False

    async def _touch_active_list(
        self, server_code: str, username: str, now: datetime, meta: ClientMeta
    ) -> None:
        async with self.session_factory() as session:
            await self.active_list_repository_class(session).upsert(
                server_code, username, now, meta.user_agent, meta.ip_address
            )
