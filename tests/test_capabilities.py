"""Tests for services/capabilities.py: what a signed-in user can manage."""
import pytest

from conftest import FakeBackend
from omnipply.exceptions import AuthenticationError, BackendRPCError
from omnipply.schemas.capabilities import Capabilities
from omnipply.services.capabilities import CapabilitiesService, CurrentUserLookup
from omnipply.services.roles.cache import TTLCache


def _backend(**overrides):
    rpc = {
        "my_admin_orgs_v1": [{"id": "o1", "name": "BYO", "slug": "byo"}],
        "my_reviewer_programs_v2": [
            {"program_id": "p1", "name": "Live"},
            {"program_id": "p2", "name": "Deleted"},
        ],
        "my_coalitions_v1": [],
    }
    rpc.update(overrides)
    return FakeBackend(
        rpc_responses=rpc,
        tables={"programs": [{"id": "p1"}], "profiles": [{"role": "reviewer", "deleted_at": None}]},
    )


class TestCapabilitiesService:
    def test_load(self, clock):
        service = CapabilitiesService(_backend(), TTLCache(ttl_seconds=5, clock=clock))
        caps = service.load_capabilities("u1")
        assert [o.slug for o in caps.admin_orgs] == ["byo"]
        assert [p.id for p in caps.reviewer_programs] == ["p1"]
        assert caps.user_role == "reviewer"
        assert caps.is_org_admin and caps.has_reviewer_assignments
        assert not caps.is_super_admin

    def test_cached_for_ttl(self, clock):
        backend = _backend()
        service = CapabilitiesService(backend, TTLCache(ttl_seconds=5, clock=clock))
        service.load_capabilities("u1")
        service.load_capabilities("u1")
        assert len(backend.rpc_calls("my_admin_orgs_v1")) == 1
        clock.advance(5)
        service.load_capabilities("u1")
        assert len(backend.rpc_calls("my_admin_orgs_v1")) == 2

    def test_failing_lookup_degrades_to_empty(self, clock):
        backend = _backend(my_coalitions_v1=BackendRPCError("missing function", code="PGRST202"))
        caps = CapabilitiesService(backend, TTLCache(ttl_seconds=5, clock=clock)).load_capabilities("u1")
        assert caps.coalitions == []
        assert caps.is_org_admin

    def test_soft_deleted_profile_has_no_role(self, clock):
        backend = _backend()
        backend.tables["profiles"] = [{"role": "superadmin", "deleted_at": "2025-01-01T00:00:00Z"}]
        service = CapabilitiesService(backend, TTLCache(ttl_seconds=5, clock=clock))
        assert service.get_user_role("u1") is None


class TestCapabilityFlags:
    def test_profile_admin_counts_as_super_admin(self):
        assert Capabilities(user_role="admin").is_super_admin
        assert Capabilities(user_role="superadmin").has_any_capabilities

    def test_applicant_has_nothing(self):
        caps = Capabilities(user_role="applicant")
        assert not caps.has_any_capabilities
        assert caps.model_dump()["has_any_capabilities"] is False


class TestCurrentUserLookup:
    def test_cached_by_token(self, clock):
        backend = FakeBackend()
        backend.users["jwt"] = {"id": "u1"}
        lookup = CurrentUserLookup(backend, TTLCache(ttl_seconds=60, clock=clock))
        assert lookup.current_user("jwt")["id"] == "u1"
        del backend.users["jwt"]
        assert lookup.current_user("jwt")["id"] == "u1"
        lookup.forget("jwt")
        with pytest.raises(AuthenticationError):
            lookup.current_user("jwt")

    def test_no_token(self, clock):
        with pytest.raises(AuthenticationError):
            CurrentUserLookup(FakeBackend(), TTLCache(ttl_seconds=60, clock=clock)).current_user(None)
