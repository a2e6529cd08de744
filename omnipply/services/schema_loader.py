import logging
from typing import Any, Dict, List, Mapping, Optional

from omnipply.exceptions import BackendException, NotFoundError
from omnipply.services.backend.client import BackendClient, eq

logger = logging.getLogger(__name__)

PENDING_STATUSES = ("pending_changes", "submitted")


def _fields(schema: Any) -> Dict[str, List[Any]]:
    if isinstance(schema, Mapping) and isinstance(schema.get("fields"), list):
        return {"fields": schema["fields"]}
    return {"fields": []}


def schema_from_metadata(program: Mapping[str, Any]) -> Optional[Dict[str, List[Any]]]:
    """
    Schema stored on the program row itself, or None when the row carries none.

    Precedence: a pending schema awaiting superadmin review, then the working
    ``metadata.application.schema`` (also while changes are requested),
    ``metadata.application.builder`` and finally ``metadata.application_schema``.
    """
    meta = program.get("metadata") or {}
    app_meta = meta.get("application") or {}
    review_status = meta.get("review_status")

    if review_status in PENDING_STATUSES and meta.get("pending_schema"):
        return _fields(meta["pending_schema"])
    if app_meta.get("schema"):
        return _fields(app_meta["schema"])
    if app_meta.get("builder"):
        builder = app_meta["builder"]
        return {"fields": builder if isinstance(builder, list) else []}
    if meta.get("application_schema"):
        return _fields(meta["application_schema"])
    return None


class SchemaLoader:
    def __init__(self, backend: BackendClient):
        self._backend = backend

    def _public_schema(self, program_id: str) -> Optional[Any]:
        row = self._backend.select_maybe_one(
            "programs_public", columns="application_schema", filters={"id": eq(program_id)}
        )
        return (row or {}).get("application_schema")

    def _builder_schema(self, program_id: str) -> Dict[str, List[Any]]:
        try:
            return _fields(self._backend.rpc("app_builder_get_v1", {"p_program_id": program_id}))
        except BackendException as e:
            logger.error(f"app_builder_get_v1 failed for program {program_id}: {e}")
            return {"fields": []}

    def load_application_schema(self, program: Optional[Mapping[str, Any]]) -> Dict[str, List[Any]]:
        if not program:
            logger.warning("No program provided to schema loader")
            return {"fields": []}

        schema = schema_from_metadata(program)
        if schema is not None:
            return schema

        program_id = str(program.get("id"))
        try:
            public = self._public_schema(program_id)
        except BackendException as e:
            logger.error(f"Error loading public schema for program {program_id}: {e}")
            return {"fields": []}
        if public:
            return _fields(public)
        return self._builder_schema(program_id)

    def load_application_schema_by_id(self, program_id: Optional[str]) -> Dict[str, List[Any]]:
        if not program_id:
            logger.warning("No program id provided to schema loader")
            return {"fields": []}

        try:
            program = self._backend.select_one("programs", columns="id,name,metadata", filters={"id": eq(program_id)})
        except NotFoundError:
            program = None
        except BackendException as e:
            logger.error(f"Error loading program {program_id}: {e}")
            return {"fields": []}

        if program:
            return self.load_application_schema(program)

        try:
            public = self._public_schema(program_id)
        except BackendException as e:
            logger.warning(f"Public program lookup failed for {program_id}: {e}")
            public = None
        if public:
            return _fields(public)
        return self._builder_schema(program_id)
