from functools import lru_cache
from typing import Annotated, Any, Dict, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from omnipply.config import Settings, get_settings
from omnipply.schemas.capabilities import Capabilities
from omnipply.services.advertising import AdvertiseService
from omnipply.services.applications import ApplicationsService
from omnipply.services.attachments import AttachmentService, UploadRateLimiter
from omnipply.services.backend.client import BackendClient
from omnipply.services.backend.factory import make_backend_client, make_service_client
from omnipply.services.capabilities import CapabilitiesService, CurrentUserLookup
from omnipply.services.forms import FormsService
from omnipply.services.notifications.client import NotificationsService
from omnipply.services.notifications.mailer import NotificationMailer
from omnipply.services.organizations.client import OrganizationService
from omnipply.services.organizations.factory import get_organization_service
from omnipply.services.programs import ProgramsService
from omnipply.services.reviews import ReviewsService
from omnipply.services.roles.cache import TTLCache
from omnipply.services.roles.client import RolesService
from omnipply.services.roles.factory import get_roles_service
from omnipply.services.schema_loader import SchemaLoader

_bearer = HTTPBearer(auto_error=False)


@lru_cache(maxsize=1)
def make_user_cache() -> TTLCache:
    return TTLCache(ttl_seconds=get_settings().user_cache_ttl_seconds)


@lru_cache(maxsize=1)
def make_capabilities_cache() -> TTLCache:
    return TTLCache(ttl_seconds=get_settings().capabilities_ttl_seconds)


@lru_cache(maxsize=1)
def make_upload_rate_limiter() -> UploadRateLimiter:
    settings = get_settings()
    return UploadRateLimiter(max_uploads=settings.upload_rate_limit, window_seconds=settings.upload_rate_window_seconds)


def get_access_token(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(_bearer)],
) -> Optional[str]:
    return credentials.credentials if credentials else None


def get_backend(token: Annotated[Optional[str], Depends(get_access_token)]) -> BackendClient:
    """Backend client acting as the caller (anonymous when no token is sent)."""
    return make_backend_client().with_token(token)


def get_service_backend() -> BackendClient:
    return make_service_client()


def get_current_user(token: Annotated[Optional[str], Depends(get_access_token)]) -> Dict[str, Any]:
    return CurrentUserLookup(make_backend_client(), make_user_cache()).current_user(token)


SettingsDep = Annotated[Settings, Depends(get_settings)]
BackendDep = Annotated[BackendClient, Depends(get_backend)]
ServiceBackendDep = Annotated[BackendClient, Depends(get_service_backend)]
CurrentUserDep = Annotated[Dict[str, Any], Depends(get_current_user)]


def get_capabilities_service(backend: BackendDep) -> CapabilitiesService:
    return CapabilitiesService(backend=backend, cache=make_capabilities_cache())


CapabilitiesServiceDep = Annotated[CapabilitiesService, Depends(get_capabilities_service)]


def get_capabilities(user: CurrentUserDep, service: CapabilitiesServiceDep) -> Capabilities:
    return service.load_capabilities(user["id"])


CapabilitiesDep = Annotated[Capabilities, Depends(get_capabilities)]


def require_super_admin(capabilities: CapabilitiesDep) -> Capabilities:
    if not capabilities.is_super_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Superadmin access required")
    return capabilities


SuperAdminDep = Annotated[Capabilities, Depends(require_super_admin)]


def get_forms_service(backend: BackendDep) -> FormsService:
    return FormsService(backend)


def get_advertise_service(backend: BackendDep) -> AdvertiseService:
    return AdvertiseService(backend=backend, forms=FormsService(backend))


def get_roles(backend: BackendDep) -> RolesService:
    return get_roles_service(backend)


def get_programs_service(backend: BackendDep) -> ProgramsService:
    return ProgramsService(backend)


def get_schema_loader(backend: BackendDep) -> SchemaLoader:
    return SchemaLoader(backend)


def get_applications_service(backend: BackendDep) -> ApplicationsService:
    return ApplicationsService(backend)


def get_reviews_service(backend: BackendDep) -> ReviewsService:
    return ReviewsService(backend)


def get_attachment_service(backend: BackendDep, settings: SettingsDep) -> AttachmentService:
    return AttachmentService(
        backend=backend,
        rate_limiter=make_upload_rate_limiter(),
        bucket=settings.attachments_bucket,
        max_size_mb=settings.max_upload_mb,
    )


def get_notifications_service(backend: BackendDep) -> NotificationsService:
    return NotificationsService(backend)


def get_mailer(backend: ServiceBackendDep, settings: SettingsDep) -> NotificationMailer:
    return NotificationMailer(backend=backend, settings=settings)


def get_organizations(backend: BackendDep) -> OrganizationService:
    return get_organization_service(backend)


FormsServiceDep = Annotated[FormsService, Depends(get_forms_service)]
AdvertiseServiceDep = Annotated[AdvertiseService, Depends(get_advertise_service)]
RolesServiceDep = Annotated[RolesService, Depends(get_roles)]
ProgramsServiceDep = Annotated[ProgramsService, Depends(get_programs_service)]
SchemaLoaderDep = Annotated[SchemaLoader, Depends(get_schema_loader)]
ApplicationsServiceDep = Annotated[ApplicationsService, Depends(get_applications_service)]
ReviewsServiceDep = Annotated[ReviewsService, Depends(get_reviews_service)]
AttachmentServiceDep = Annotated[AttachmentService, Depends(get_attachment_service)]
NotificationsServiceDep = Annotated[NotificationsService, Depends(get_notifications_service)]
MailerDep = Annotated[NotificationMailer, Depends(get_mailer)]
OrganizationServiceDep = Annotated[OrganizationService, Depends(get_organizations)]
