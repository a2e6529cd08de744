from typing import List, Optional

from pydantic import BaseModel, Field

from omnipply.schemas.roles import EffectiveRoles, UserProfile


class UserWithRoles(BaseModel):
    """A user row together with its effective roles, when loaded."""

    user: UserProfile
    effective_roles: Optional[EffectiveRoles] = Field(
        None, description="None when the roles lookup returned nothing for this user"
    )
    labels: List[str] = Field(default_factory=list, description="Active role names for display")


class UsersResponse(BaseModel):
    """Response envelope for the superadmin user listing."""

    users: List[UserWithRoles]
    total: int = Field(..., description="Users matching the search and role filter")
    role_filter: Optional[str] = None
