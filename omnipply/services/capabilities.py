import logging
from typing import Any, Dict, List, Optional

from omnipply.exceptions import AuthenticationError, BackendException
from omnipply.schemas.capabilities import Capabilities, CoalitionMini, OrgMini, ProgramMini
from omnipply.services.backend.client import BackendClient, eq, in_, is_null
from omnipply.services.roles.cache import TTLCache

logger = logging.getLogger(__name__)


def _program_key(row: Dict[str, Any]) -> Optional[str]:
    value = row.get("program_id") or row.get("id")
    return str(value) if value is not None else None


class CapabilitiesService:
    """What the signed-in user may administer, review or manage."""

    def __init__(self, backend: BackendClient, cache: TTLCache):
        self._backend = backend
        self._cache = cache

    def _rpc_list(self, name: str) -> List[Dict[str, Any]]:
        try:
            return self._backend.rpc(name) or []
        except BackendException as e:
            logger.warning(f"{name} unavailable, treating as empty: {e}")
            return []

    def fetch_admin_orgs(self) -> List[OrgMini]:
        return [OrgMini.model_validate(row) for row in self._rpc_list("my_admin_orgs_v1")]

    def fetch_coalitions(self) -> List[CoalitionMini]:
        return [CoalitionMini.model_validate(row) for row in self._rpc_list("my_coalitions_v1")]

    def fetch_reviewer_programs(self) -> List[ProgramMini]:
        rows = self._rpc_list("my_reviewer_programs_v2")
        if not rows:
            return []

        ids = [key for key in (_program_key(row) for row in rows) if key]
        try:
            live = self._backend.select(
                "programs", columns="id", filters={"id": in_(ids), "deleted_at": is_null()}
            )
        except BackendException as e:
            logger.warning(f"Could not filter deleted reviewer programs: {e}")
            return []
        live_ids = {str(row["id"]) for row in live}

        programs = []
        for row in rows:
            key = _program_key(row)
            if key in live_ids:
                programs.append(ProgramMini.model_validate({**row, "id": key}))
        return programs

    def get_user_role(self, user_id: str) -> Optional[str]:
        """Profile role, None for soft-deleted or missing profiles."""
        try:
            profile = self._backend.select_maybe_one(
                "profiles", columns="role,deleted_at", filters={"id": eq(user_id)}
            )
        except BackendException as e:
            logger.error(f"Failed to get user role: {e}")
            return None
        if not profile:
            return None
        if profile.get("deleted_at"):
            logger.info(f"User {user_id} is soft deleted, denying access")
            return None
        return profile.get("role") or None

    def load_capabilities(self, user_id: str) -> Capabilities:
        cached = self._cache.get(user_id)
        if cached is not None:
            return cached

        capabilities = Capabilities(
            admin_orgs=self.fetch_admin_orgs(),
            reviewer_programs=self.fetch_reviewer_programs(),
            coalitions=self.fetch_coalitions(),
            user_role=self.get_user_role(user_id),
        )
        self._cache.set(user_id, capabilities)
        logger.debug(
            f"Capabilities for {user_id}: {len(capabilities.admin_orgs)} orgs, "
            f"{len(capabilities.reviewer_programs)} programs, {len(capabilities.coalitions)} coalitions, "
            f"role={capabilities.user_role}"
        )
        return capabilities


class CurrentUserLookup:
    """Resolves a session token to its user, remembering the answer for a while."""

    def __init__(self, backend: BackendClient, cache: TTLCache):
        self._backend = backend
        self._cache = cache

    def current_user(self, token: Optional[str]) -> Dict[str, Any]:
        if not token:
            raise AuthenticationError("Not signed in")
        cached = self._cache.get(token)
        if cached is not None:
            return cached
        user = self._backend.with_token(token).get_user()
        self._cache.set(token, user)
        return user

    def forget(self, token: str) -> None:
        self._cache.delete(token)
