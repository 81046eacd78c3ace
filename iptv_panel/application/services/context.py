"""Dados de requisição que atravessam os serviços."""

from dataclasses import dataclass

from iptv_panel.domain.entities import normalize_server_code


@dataclass(frozen=True, repr=False)
class AccessContext:
    """Servidor + credenciais do usuário final. Vale só para a requisição."""

    server_code: str
    username: str
    password: str

    def __post_init__(self):
        object.__setattr__(self, "server_code", normalize_server_code(self.server_code))
        object.__setattr__(self, "username", (self.username or "").strip())

    def __repr__(self) -> str:
        return f"AccessContext(server_code={self.server_code!r}, username={self.username!r})"


@dataclass(frozen=True)
class ClientMeta:
    """User-agent e IP do último acesso (informativo)."""

    user_agent: str = ""
    ip_address: str = ""
