import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

from omnipply.schemas.roles import EffectiveRoles, RoleTarget, UserProfile, UserRole
from omnipply.services.backend.client import BackendClient
from omnipply.services.roles.cache import TTLCache

logger = logging.getLogger(__name__)

USER_LIST_LIMIT = 1000


def _to_roles(row: Mapping[str, Any]) -> EffectiveRoles:
    return EffectiveRoles(
        superadmin_from_profile=bool(row.get("superadmin_from_profile")),
        has_admin=bool(row.get("has_admin")),
        has_reviewer=bool(row.get("has_reviewer")),
        has_co_manager=bool(row.get("has_co_manager")),
    )


def is_superadmin(profile_role: Optional[str], effective: EffectiveRoles) -> bool:
    return profile_role == UserRole.SUPERADMIN.value or effective.superadmin_from_profile


def role_labels(profile_role: Optional[str], effective: EffectiveRoles) -> List[str]:
    """Active role names for display; ``applicant`` when nothing else applies."""
    flags = [
        (UserRole.SUPERADMIN, is_superadmin(profile_role, effective)),
        (UserRole.ADMIN, effective.has_admin),
        (UserRole.REVIEWER, effective.has_reviewer),
        (UserRole.COALITION_MANAGER, effective.has_co_manager),
    ]
    labels = [role.value for role, active in flags if active]
    return labels or [UserRole.APPLICANT.value]


def matches_role(profile_role: Optional[str], effective: EffectiveRoles, role_filter: UserRole) -> bool:
    role_filter = UserRole(role_filter)
    if role_filter == UserRole.SUPERADMIN:
        return is_superadmin(profile_role, effective)
    if role_filter == UserRole.ADMIN:
        return effective.has_admin
    if role_filter == UserRole.REVIEWER:
        return effective.has_reviewer
    if role_filter == UserRole.COALITION_MANAGER:
        return effective.has_co_manager
    return not (
        effective.has_admin
        or effective.has_reviewer
        or effective.has_co_manager
        or is_superadmin(profile_role, effective)
    )


def filter_users_by_role(
    users: Iterable[UserProfile],
    role_filter: Optional[UserRole],
    effective: Mapping[str, EffectiveRoles],
) -> List[UserProfile]:
    """
    Keep users whose effective roles match ``role_filter``.

    With no filter every user is kept. With a filter, users whose roles
    have not been loaded are left out.
    """
    users = list(users)
    if not role_filter:
        return users
    kept = []
    for user in users:
        roles = effective.get(user.id)
        if roles is None:
            continue
        if matches_role(user.role, roles, role_filter):
            kept.append(user)
    return kept


class RolesService:
    def __init__(self, backend: BackendClient, cache: TTLCache):
        self._backend = backend
        self._cache = cache

    def get_cached_effective_roles(self, user_id: str) -> Optional[EffectiveRoles]:
        return self._cache.get(user_id)

    def get_effective_roles(self, user_id: str) -> EffectiveRoles:
        cached = self._cache.get(user_id)
        if cached is not None:
            return cached

        now = self._cache.now()
        data = self._backend.rpc("super_user_effective_roles_v1", {"p_user_id": user_id})
        if isinstance(data, list):
            data = data[0] if data else None
        roles = _to_roles(data or {})
        self._cache.set(user_id, roles, now)
        return roles

    def get_effective_roles_batch(self, user_ids: Iterable[str]) -> Dict[str, EffectiveRoles]:
        """
        Effective roles for many users with a single remote call for the uncached ones.

        Users the backend does not return are absent from the result.
        """
        now = self._cache.now()
        results, uncached = self._cache.partition(user_ids, now)
        if not uncached:
            return results

        logger.debug(f"Fetching effective roles for {len(uncached)} users ({len(results)} cached)")
        rows = self._backend.rpc("super_user_effective_roles_batch_v1", {"p_user_ids": uncached})
        for row in rows or []:
            user_id = row.get("user_id")
            if not user_id:
                continue
            roles = _to_roles(row)
            self._cache.set(user_id, roles, now)
            results[user_id] = roles
        return results

    def list_users(self, search: Optional[str] = None) -> List[UserProfile]:
        search = (search or "").strip()
        rows = self._backend.rpc(
            "super_list_users_v1",
            {
                "p_search": search or None,
                "p_role_filter": None,
                "p_limit": USER_LIST_LIMIT,
                "p_offset": 0,
            },
        )
        return [UserProfile.model_validate(row) for row in rows or []]

    def list_users_with_roles(self, search: Optional[str] = None, role_filter: Optional[UserRole] = None):
        users = self.list_users(search)
        effective = self.get_effective_roles_batch([u.id for u in users]) if users else {}
        return filter_users_by_role(users, role_filter, effective), effective

    def update_user_role(
        self,
        user_id: str,
        new_role: UserRole,
        wipe: bool = False,
        target: RoleTarget = RoleTarget.ALL,
    ) -> None:
        self._backend.rpc(
            "super_update_user_role_v2",
            {
                "p_user_id": user_id,
                "p_new_role": UserRole(new_role).value,
                "p_wipe": wipe,
                "p_target": RoleTarget(target).value,
            },
        )
        self._cache.delete(user_id)
        logger.info(f"Role updated for user {user_id}: {UserRole(new_role).value} (wipe={wipe}, target={target})")
