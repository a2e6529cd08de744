"""Tests for services/roles/client.py: effective roles, batching and role filters."""
import pytest

from conftest import FakeBackend
from omnipply.schemas.roles import EffectiveRoles, RoleTarget, UserProfile, UserRole
from omnipply.services.roles.cache import TTLCache
from omnipply.services.roles.client import RolesService, filter_users_by_role, role_labels


def _row(user_id, **flags):
    return {"user_id": user_id, **flags}


@pytest.fixture
def service_factory(clock):
    def make(**rpc):
        backend = FakeBackend(rpc_responses=rpc)
        return RolesService(backend, TTLCache(ttl_seconds=30, clock=clock)), backend

    return make


class TestEffectiveRoles:
    def test_single_lookup_is_cached(self, service_factory):
        service, backend = service_factory(super_user_effective_roles_v1=[{"has_admin": True}])
        first = service.get_effective_roles("u1")
        second = service.get_effective_roles("u1")
        assert first.has_admin is True
        assert second is first
        assert len(backend.rpc_calls("super_user_effective_roles_v1")) == 1

    def test_cached_lookup_makes_no_call(self, service_factory):
        service, backend = service_factory()
        assert service.get_cached_effective_roles("u1") is None
        assert backend.calls == []

    def test_refetch_after_ttl(self, service_factory, clock):
        service, backend = service_factory(super_user_effective_roles_v1={"has_reviewer": True})
        service.get_effective_roles("u1")
        clock.advance(30)
        service.get_effective_roles("u1")
        assert len(backend.rpc_calls("super_user_effective_roles_v1")) == 2


class TestBatch:
    def test_one_call_for_uncached_subset(self, service_factory):
        service, backend = service_factory(
            super_user_effective_roles_v1={"has_admin": True},
            super_user_effective_roles_batch_v1=lambda params: [_row(uid, has_reviewer=True) for uid in params["p_user_ids"]],
        )
        service.get_effective_roles("u1")
        result = service.get_effective_roles_batch(["u1", "u2", "u3", "u2"])

        calls = backend.rpc_calls("super_user_effective_roles_batch_v1")
        assert calls == [{"p_user_ids": ["u2", "u3"]}]
        assert result["u1"].has_admin is True
        assert result["u2"].has_reviewer is True
        assert set(result) == {"u1", "u2", "u3"}

    def test_no_call_when_everything_cached(self, service_factory):
        service, backend = service_factory(super_user_effective_roles_batch_v1=[_row("u1")])
        service.get_effective_roles_batch(["u1"])
        service.get_effective_roles_batch(["u1"])
        assert len(backend.rpc_calls("super_user_effective_roles_batch_v1")) == 1

    def test_users_missing_from_backend_are_absent(self, service_factory):
        service, _ = service_factory(super_user_effective_roles_batch_v1=[_row("u1", has_admin=True)])
        result = service.get_effective_roles_batch(["u1", "ghost"])
        assert "ghost" not in result


class TestUpdateRole:
    def test_update_invalidates_cache(self, service_factory):
        service, backend = service_factory(
            super_user_effective_roles_v1={"has_admin": False},
            super_update_user_role_v2=None,
        )
        service.get_effective_roles("u1")
        service.update_user_role("u1", UserRole.ADMIN, wipe=True, target=RoleTarget.REVIEWER)

        assert backend.rpc_calls("super_update_user_role_v2") == [
            {"p_user_id": "u1", "p_new_role": "admin", "p_wipe": True, "p_target": "reviewer"}
        ]
        assert service.get_cached_effective_roles("u1") is None


class TestFilterUsersByRole:
    USERS = [
        UserProfile(id="super", role="superadmin"),
        UserProfile(id="admin", role="applicant"),
        UserProfile(id="plain", role="applicant"),
        UserProfile(id="unloaded", role="applicant"),
    ]
    EFFECTIVE = {
        "super": EffectiveRoles(),
        "admin": EffectiveRoles(has_admin=True, has_reviewer=True),
        "plain": EffectiveRoles(),
    }

    def _ids(self, role):
        return [u.id for u in filter_users_by_role(self.USERS, role, self.EFFECTIVE)]

    def test_no_filter_keeps_everyone(self):
        assert self._ids(None) == ["super", "admin", "plain", "unloaded"]

    def test_superadmin_from_profile_role(self):
        assert self._ids(UserRole.SUPERADMIN) == ["super"]

    def test_admin_and_reviewer(self):
        assert self._ids(UserRole.ADMIN) == ["admin"]
        assert self._ids(UserRole.REVIEWER) == ["admin"]

    def test_applicant_means_no_other_role(self):
        assert self._ids(UserRole.APPLICANT) == ["plain"]

    def test_unloaded_users_excluded_when_filtering(self):
        assert "unloaded" not in self._ids(UserRole.APPLICANT)


class TestRoleLabels:
    def test_applicant_fallback(self):
        assert role_labels("applicant", EffectiveRoles()) == ["applicant"]

    def test_multiple_roles(self):
        roles = EffectiveRoles(superadmin_from_profile=True, has_co_manager=True)
        assert role_labels("applicant", roles) == ["superadmin", "coalition_manager"]
