"""Tests for services/schema_loader.py: where an application schema comes from."""
from conftest import FakeBackend
from omnipply.exceptions import BackendRPCError
from omnipply.services.schema_loader import SchemaLoader, schema_from_metadata

FIELDS_A = [{"id": "a", "label": "A"}]
FIELDS_B = [{"id": "b", "label": "B"}]


class TestSchemaFromMetadata:
    def test_pending_schema_wins_while_under_review(self):
        program = {
            "metadata": {
                "review_status": "pending_changes",
                "pending_schema": {"fields": FIELDS_B},
                "application": {"schema": {"fields": FIELDS_A}},
            }
        }
        assert schema_from_metadata(program) == {"fields": FIELDS_B}

    def test_working_schema_when_changes_requested(self):
        program = {
            "metadata": {
                "review_status": "changes_requested",
                "pending_schema": {"fields": FIELDS_B},
                "application": {"schema": {"fields": FIELDS_A}},
            }
        }
        assert schema_from_metadata(program) == {"fields": FIELDS_A}

    def test_builder_list(self):
        assert schema_from_metadata({"metadata": {"application": {"builder": FIELDS_A}}}) == {"fields": FIELDS_A}

    def test_legacy_application_schema(self):
        program = {"metadata": {"application_schema": {"fields": FIELDS_A}}}
        assert schema_from_metadata(program) == {"fields": FIELDS_A}

    def test_nothing_on_the_row(self):
        assert schema_from_metadata({"metadata": {}}) is None
        assert schema_from_metadata({}) is None


class TestSchemaLoader:
    def test_metadata_first_no_backend_calls(self):
        backend = FakeBackend()
        loader = SchemaLoader(backend)
        schema = loader.load_application_schema({"id": "p1", "metadata": {"application": {"schema": {"fields": FIELDS_A}}}})
        assert schema == {"fields": FIELDS_A}
        assert backend.calls == []

    def test_public_view_then_builder_rpc(self):
        backend = FakeBackend(
            tables={"programs_public": [{"application_schema": None}]},
            rpc_responses={"app_builder_get_v1": {"fields": FIELDS_B}},
        )
        schema = SchemaLoader(backend).load_application_schema({"id": "p1"})
        assert schema == {"fields": FIELDS_B}
        assert backend.rpc_calls("app_builder_get_v1") == [{"p_program_id": "p1"}]

    def test_public_view_schema(self):
        backend = FakeBackend(tables={"programs_public": [{"application_schema": {"fields": FIELDS_A}}]})
        assert SchemaLoader(backend).load_application_schema({"id": "p1"}) == {"fields": FIELDS_A}

    def test_builder_failure_is_empty(self):
        backend = FakeBackend(rpc_responses={"app_builder_get_v1": BackendRPCError("denied", code="42501")})
        assert SchemaLoader(backend).load_application_schema({"id": "p1"}) == {"fields": []}

    def test_no_program(self):
        assert SchemaLoader(FakeBackend()).load_application_schema(None) == {"fields": []}

    def test_by_id_reads_program_row(self):
        backend = FakeBackend(
            tables={"programs": [{"id": "p1", "metadata": {"application": {"builder": FIELDS_A}}}]}
        )
        assert SchemaLoader(backend).load_application_schema_by_id("p1") == {"fields": FIELDS_A}

    def test_by_id_missing_program_falls_back_to_public(self):
        backend = FakeBackend(tables={"programs_public": [{"application_schema": {"fields": FIELDS_B}}]})
        assert SchemaLoader(backend).load_application_schema_by_id("p1") == {"fields": FIELDS_B}

    def test_by_id_without_id(self):
        assert SchemaLoader(FakeBackend()).load_application_schema_by_id(None) == {"fields": []}
