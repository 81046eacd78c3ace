"""
ERROS DO DOMÍNIO
================

Cada erro carrega um `code` estável e se é ou não `retryable`,
para que a camada HTTP monte mensagens distintas para o usuário.
"""

from typing import Optional


class PanelError(Exception):
    code = "panel_error"
    retryable = False

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class TenantNotFound(PanelError):
    """Servidor desconhecido ou inativo. Erro de configuração, não do usuário."""

    code = "tenant_not_found"

    def __init__(self, server_code: str):
        super().__init__(f"Servidor '{server_code}' não encontrado ou inativo")
        self.server_code = server_code


class InvalidCredentials(PanelError):
    code = "invalid_credentials"

    def __init__(self, message: str = "Credenciais inválidas"):
        super().__init__(message)


class QuotaExceeded(PanelError):
    code = "quota_exceeded"

    def __init__(self, server_code: str, period: str, limit: int, current: int):
        super().__init__(
            f"Limite mensal de listas ativas atingido ({current}/{limit} em {period})"
        )
        self.server_code = server_code
        self.period = period
        self.limit = limit
        self.current = current


class UpstreamError(PanelError):
    code = "upstream_error"
    retryable = True

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class LedgerUnavailable(PanelError):
    """Banco indisponível ou lento ao registrar acesso. Nunca é engolido."""

    code = "ledger_unavailable"
    retryable = True
