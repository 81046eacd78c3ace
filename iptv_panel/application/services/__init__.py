from .context import AccessContext, ClientMeta
from .catalog_cache import CacheTTL, CatalogCache, build_cache_key
from .credential_verifier import CredentialVerifier
from .quota_gate import AccessResult, QuotaGate
from .usage_service import UsageService

__all__ = [
    "AccessContext",
    "ClientMeta",
    "CacheTTL",
    "CatalogCache",
    "build_cache_key",
    "CredentialVerifier",
    "AccessResult",
    "QuotaGate",
    "UsageService",
]
