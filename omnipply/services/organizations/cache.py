from datetime import datetime, timedelta, timezone

from redis.asyncio import Redis

from omnipply.config import Settings, get_settings
from omnipply.schemas.organizations import Organization, OrganizationCacheEntry, OrganizationCacheStatus

CACHE_KEY_PREFIX = "org"


class OrganizationCache:
    def __init__(self, redis_client: Redis, settings: Settings | None = None):
        self._redis = redis_client
        self._settings = settings or get_settings()

    def _cache_key(self, slug: str) -> str:
        return f"{CACHE_KEY_PREFIX}:v{self._settings.redis_org_cache_version}:{slug}"

    @property
    def ttl_seconds(self) -> int:
        return self._settings.redis_org_cache_ttl_seconds

    async def get(self, slug: str) -> Organization | None:
        key = self._cache_key(slug)
        raw = await self._redis.get(key)

        if raw is None:
            return None

        entry = OrganizationCacheEntry.model_validate_json(raw)

        # increment hit count without resetting TTL
        entry.hit_count += 1
        ttl = await self._redis.ttl(key)
        await self._redis.set(key, entry.model_dump_json(), ex=ttl if ttl > 0 else self.ttl_seconds)

        return entry.organization

    async def set(self, organization: Organization) -> None:
        now = datetime.now(timezone.utc)

        entry = OrganizationCacheEntry(
            organization=organization,
            cache_version=self._settings.redis_org_cache_version,
            hit_count=0,
            cached_at=now,
            expires_at=now + timedelta(seconds=self.ttl_seconds),
        )

        await self._redis.set(
            self._cache_key(organization.slug),
            entry.model_dump_json(),
            ex=self.ttl_seconds,
        )

    async def invalidate(self, slug: str) -> None:
        await self._redis.delete(self._cache_key(slug))

    async def status(self, slug: str) -> OrganizationCacheStatus:
        key = self._cache_key(slug)
        raw = await self._redis.get(key)

        if raw is None:
            return OrganizationCacheStatus(slug=slug, is_cached=False)

        entry = OrganizationCacheEntry.model_validate_json(raw)
        ttl = await self._redis.ttl(key)

        return OrganizationCacheStatus(
            slug=slug,
            is_cached=True,
            hit_count=entry.hit_count,
            cached_at=entry.cached_at,
            expires_at=entry.expires_at,
            ttl_seconds=ttl if ttl > 0 else None,
        )
