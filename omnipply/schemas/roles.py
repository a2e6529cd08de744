from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel


class UserRole(str, Enum):
    APPLICANT = "applicant"
    ADMIN = "admin"
    REVIEWER = "reviewer"
    COALITION_MANAGER = "coalition_manager"
    SUPERADMIN = "superadmin"


class RoleTarget(str, Enum):
    ALL = "all"
    ADMIN = "admin"
    REVIEWER = "reviewer"
    COALITION = "coalition"


class EffectiveRoles(BaseModel):
    """Snapshot of what a user can do, derived from profile role and assignments."""

    superadmin_from_profile: bool = False
    has_admin: bool = False
    has_reviewer: bool = False
    has_co_manager: bool = False


class UserProfile(BaseModel):
    id: str
    full_name: Optional[str] = None
    email: Optional[str] = None
    role: str = UserRole.APPLICANT.value
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class RoleUpdate(BaseModel):
    new_role: UserRole
    wipe: bool = False
    target: RoleTarget = RoleTarget.ALL
