from typing import List, Optional

from pydantic import BaseModel, computed_field

CAPABILITY_ROLES = ("admin", "reviewer", "coalition_manager", "superadmin")


class OrgMini(BaseModel):
    id: str
    name: str
    slug: Optional[str] = None


class CoalitionMini(BaseModel):
    id: str
    name: str
    slug: Optional[str] = None


class ProgramMini(BaseModel):
    id: str
    name: Optional[str] = None
    organization_id: Optional[str] = None
    organization_name: Optional[str] = None
    organization_slug: Optional[str] = None


class Capabilities(BaseModel):
    admin_orgs: List[OrgMini] = []
    reviewer_programs: List[ProgramMini] = []
    coalitions: List[CoalitionMini] = []
    user_role: Optional[str] = None

    @computed_field
    @property
    def is_org_admin(self) -> bool:
        return len(self.admin_orgs) > 0

    @computed_field
    @property
    def has_reviewer_assignments(self) -> bool:
        return len(self.reviewer_programs) > 0

    @computed_field
    @property
    def is_super_admin(self) -> bool:
        return self.user_role in ("admin", "superadmin")

    @computed_field
    @property
    def has_any_capabilities(self) -> bool:
        if self.admin_orgs or self.reviewer_programs or self.coalitions:
            return True
        return self.user_role in CAPABILITY_ROLES
