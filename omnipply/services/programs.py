import logging
from datetime import datetime
from typing import Any, List, Mapping, Optional

from omnipply.schemas.programs import ProgramType, ProgramWindow, PublicProgram, ReviewForm, ReviewStatus
from omnipply.services.backend.client import BackendClient, eq
from omnipply.utils.deadlines import (
    deadline_message,
    is_application_open,
    is_before_open_date,
    is_past_deadline,
    open_date_message,
)

logger = logging.getLogger(__name__)

PUBLIC_COLUMNS = "id,name,description,type,organization_id,application_schema,published,open_at,close_at"


def get_review_status(program: Optional[Mapping[str, Any]]) -> ReviewStatus:
    meta = (program or {}).get("metadata") or {}
    raw = meta.get("review_status")
    try:
        return ReviewStatus(raw)
    except ValueError:
        return ReviewStatus.DRAFT


def review_form_with_defaults(raw: Optional[Mapping[str, Any]]) -> ReviewForm:
    """Fill missing reviewer form keys with defaults; explicit nulls count as missing."""
    given = {k: v for k, v in (raw or {}).items() if v is not None}
    return ReviewForm(**given)


def program_window(program: Mapping[str, Any], now: Optional[datetime] = None) -> ProgramWindow:
    open_at, close_at = program.get("open_at"), program.get("close_at")
    return ProgramWindow(
        is_open=is_application_open(open_at, close_at, now),
        is_past_deadline=is_past_deadline(close_at, now),
        is_before_open=is_before_open_date(open_at, now),
        deadline_message=deadline_message(close_at, now),
        open_message=open_date_message(open_at, now),
    )


class ProgramsService:
    def __init__(self, backend: BackendClient):
        self._backend = backend

    def fetch_public_program(self, program_id: str) -> PublicProgram:
        row = self._backend.select_one("programs_public", columns=PUBLIC_COLUMNS, filters={"id": eq(program_id)})
        return PublicProgram.model_validate(row)

    def fetch_program(self, program_id: str) -> Mapping[str, Any]:
        """Full program row including metadata (subject to row-level access)."""
        return self._backend.select_one("programs", columns="*", filters={"id": eq(program_id)})

    def public_list_programs(
        self,
        program_type: Optional[ProgramType] = None,
        search: Optional[str] = None,
        coalition_id: Optional[str] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[PublicProgram]:
        rows = self._backend.rpc(
            "public_list_programs_v1",
            {
                "p_type": program_type.value if program_type else None,
                "p_search": search or None,
                "p_coalition_id": coalition_id,
                "p_limit": limit,
                "p_offset": offset,
            },
        )
        return [PublicProgram.model_validate(row) for row in rows or []]
