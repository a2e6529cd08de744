from functools import lru_cache

from omnipply.config import get_settings
from omnipply.services.backend.client import BackendClient
from omnipply.services.roles.cache import TTLCache
from omnipply.services.roles.client import RolesService


@lru_cache(maxsize=1)
def make_effective_roles_cache() -> TTLCache:
    """Process-wide effective roles cache."""
    return TTLCache(ttl_seconds=get_settings().effective_roles_ttl_seconds)


def get_roles_service(backend: BackendClient) -> RolesService:
    return RolesService(backend=backend, cache=make_effective_roles_cache())
