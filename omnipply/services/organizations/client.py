import asyncio
import logging

from omnipply.exceptions import BackendException, BackendRPCError, OperationFailedError
from omnipply.schemas.organizations import (
    Organization,
    OrganizationCacheStatus,
    OrganizationSettingsUpdate,
)
from omnipply.services.backend.client import BackendClient, eq
from omnipply.services.organizations.cache import OrganizationCache
from omnipply.utils.slugs import slugify

logger = logging.getLogger(__name__)

EMPTY_SLUG_BASE = "organization"
MAX_SLUG_ATTEMPTS = 1000
UNIQUE_VIOLATION = "23505"
PERMISSION_CODES = ("42501", "PGRST301")


class SlugGenerationError(Exception):
    pass


class OrganizationService:
    def __init__(self, backend: BackendClient, cache: OrganizationCache):
        self._backend = backend
        self._cache = cache

    async def get_by_slug(self, slug: str) -> Organization:
        cached = await self._cache.get(slug)
        if cached:
            logger.info("Organization cache hit", extra={"slug": slug})
            return cached

        logger.info("Organization cache miss, querying backend", extra={"slug": slug})
        row = await asyncio.to_thread(
            self._backend.select_one, "organizations", "id,name,slug,description", {"slug": eq(slug)}
        )
        organization = Organization(
            id=str(row["id"]),
            name=row["name"],
            slug=row["slug"],
            description=row.get("description") or None,
        )
        await self._cache.set(organization)
        return organization

    async def invalidate(self, slug: str) -> None:
        await self._cache.invalidate(slug)
        logger.info("Organization cache invalidated", extra={"slug": slug})

    async def get_cache_status(self, slug: str) -> OrganizationCacheStatus:
        return await self._cache.status(slug)

    def slug_exists(self, slug: str) -> bool:
        """True when any organization, soft-deleted ones included, already uses ``slug``."""
        try:
            row = self._backend.select_maybe_one("organizations", columns="id", filters={"slug": eq(slug)})
        except BackendException as e:
            # the unique constraint still rejects duplicates on insert
            logger.warning(f"Error checking slug existence for {slug}: {e}")
            return False
        return row is not None

    def _next_available(self, base: str) -> str:
        for counter in range(1, MAX_SLUG_ATTEMPTS + 1):
            candidate = f"{base}-{counter}"
            if not self.slug_exists(candidate):
                return candidate
        raise SlugGenerationError(f"Unable to generate unique slug after {MAX_SLUG_ATTEMPTS} attempts")

    def generate_unique_slug(self, name: str) -> str:
        base = slugify(name)
        if not base:
            return self._next_available(EMPTY_SLUG_BASE)
        if not self.slug_exists(base):
            return base
        return self._next_available(base)

    async def update_settings(self, org_id: str, old_slug: str, update: OrganizationSettingsUpdate) -> Organization:
        values = {
            "name": update.name,
            "slug": update.slug,
            "description": (update.description or "").strip() or None,
            "logo_url": update.logo_url or None,
        }
        try:
            await asyncio.to_thread(self._backend.update, "organizations", values, {"id": eq(org_id)})
        except BackendRPCError as e:
            if e.code in PERMISSION_CODES or e.status in (403, 406):
                raise OperationFailedError("You don't have permission to update this organization.") from e
            if e.code == UNIQUE_VIOLATION:
                raise ValueError("That slug is already taken. Please choose a different one.") from e
            raise

        await self._cache.invalidate(old_slug)
        if update.slug != old_slug:
            await self._cache.invalidate(update.slug)
            logger.info(f"Organization {org_id} slug changed: {old_slug} -> {update.slug}")

        return Organization(id=org_id, name=update.name, slug=update.slug, description=values["description"])
