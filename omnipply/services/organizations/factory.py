from omnipply.db.redis.redis import get_redis_client
from omnipply.services.backend.client import BackendClient
from omnipply.services.organizations.cache import OrganizationCache
from omnipply.services.organizations.client import OrganizationService


def get_organization_service(backend: BackendClient) -> OrganizationService:
    cache = OrganizationCache(redis_client=get_redis_client())
    return OrganizationService(backend=backend, cache=cache)
