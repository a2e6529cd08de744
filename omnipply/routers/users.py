import logging
from typing import Optional

from fastapi import APIRouter, Query, status

from omnipply.dependencies import RolesServiceDep, SuperAdminDep
from omnipply.schemas.api.users import UsersResponse, UserWithRoles
from omnipply.schemas.roles import EffectiveRoles, RoleUpdate, UserRole
from omnipply.services.roles.client import role_labels

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=UsersResponse, summary="Search users and filter them by active role")
def list_users(
    admin: SuperAdminDep,
    service: RolesServiceDep,
    search: Optional[str] = Query(None, description="Name or email fragment"),
    role: Optional[UserRole] = Query(None, description="Only users holding this role"),
):
    users, effective = service.list_users_with_roles(search, role)
    rows = []
    for user in users:
        roles = effective.get(user.id)
        rows.append(
            UserWithRoles(
                user=user,
                effective_roles=roles,
                labels=role_labels(user.role, roles or EffectiveRoles()),
            )
        )
    return UsersResponse(users=rows, total=len(rows), role_filter=role.value if role else None)


@router.get("/{user_id}/effective-roles", response_model=EffectiveRoles)
def effective_roles(user_id: str, admin: SuperAdminDep, service: RolesServiceDep):
    return service.get_effective_roles(user_id)


@router.put("/{user_id}/role", status_code=status.HTTP_204_NO_CONTENT, summary="Change a user's role")
def update_role(user_id: str, update: RoleUpdate, admin: SuperAdminDep, service: RolesServiceDep):
    service.update_user_role(user_id, update.new_role, wipe=update.wipe, target=update.target)
