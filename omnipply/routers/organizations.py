import logging

from fastapi import APIRouter, HTTPException, status

from omnipply.dependencies import CurrentUserDep, OrganizationServiceDep
from omnipply.schemas.organizations import (
    Organization,
    OrganizationCacheStatus,
    OrganizationSettingsUpdate,
    SlugRequest,
    SlugResponse,
)
from omnipply.services.organizations.client import SlugGenerationError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/organizations", tags=["organizations"])


@router.post("/slug", response_model=SlugResponse, summary="Suggest an unused slug for an organization name")
def suggest_slug(request: SlugRequest, user: CurrentUserDep, service: OrganizationServiceDep):
    try:
        return SlugResponse(slug=service.generate_unique_slug(request.name))
    except SlugGenerationError as e:
        logger.error("Slug generation failed", extra={"name": request.name, "error": str(e)})
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.get("/{slug}", response_model=Organization, summary="Get an organization by slug (cached)")
async def get_organization(slug: str, service: OrganizationServiceDep):
    return await service.get_by_slug(slug)


@router.patch("/{slug}", response_model=Organization, summary="Update organization settings")
async def update_organization(
    slug: str,
    update: OrganizationSettingsUpdate,
    user: CurrentUserDep,
    service: OrganizationServiceDep,
):
    organization = await service.get_by_slug(slug)
    try:
        return await service.update_settings(organization.id, slug, update)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get(
    "/{slug}/cache/status",
    response_model=OrganizationCacheStatus,
    summary="Check whether an organization is cached",
)
async def get_organization_cache_status(slug: str, service: OrganizationServiceDep):
    return await service.get_cache_status(slug)


@router.delete(
    "/{slug}/cache",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Drop the cached organization so the next read refetches it",
)
async def invalidate_organization_cache(slug: str, user: CurrentUserDep, service: OrganizationServiceDep):
    await service.invalidate(slug)
