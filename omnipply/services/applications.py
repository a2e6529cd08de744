import logging
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from omnipply.exceptions import BackendException, NotFoundError
from omnipply.schemas.applications import Application
from omnipply.services.answers import missing_required, over_word_limit
from omnipply.services.backend.client import BackendClient
from omnipply.utils.dates import utcnow

logger = logging.getLogger(__name__)

PROFILE_ANSWER_KEY = "profile"
PROFILE_SNAPSHOT_VERSION = 1


class MissingRequiredAnswersError(ValueError):
    """Submission refused because required questions are unanswered."""

    def __init__(self, missing: List[str]):
        super().__init__("Please answer the required questions: " + ", ".join(missing))
        self.missing = missing


class WordLimitExceededError(ValueError):
    """Submission refused because some answers run past their word limit."""

    def __init__(self, fields: List[str]):
        super().__init__("Please shorten these answers to fit the word limit: " + ", ".join(fields))
        self.fields = fields


def program_uses_profile(program: Optional[Mapping[str, Any]]) -> bool:
    meta = (program or {}).get("metadata") or {}
    profile_conf = (meta.get("application") or {}).get("profile") or {}
    form_conf = meta.get("form") or {}
    return bool(profile_conf.get("enabled")) or bool(form_conf.get("include_profile"))


def merge_profile_into_answers(
    answers: Optional[Mapping[str, Any]],
    profile: Optional[Mapping[str, Any]],
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Copy of ``answers`` with the profile snapshot stored under ``profile``."""
    merged = dict(answers or {})
    if not profile:
        return merged
    snapshot_at = (now or utcnow()).isoformat().replace("+00:00", "Z")
    merged[PROFILE_ANSWER_KEY] = {
        **profile,
        "__source": "profile",
        "__version": PROFILE_SNAPSHOT_VERSION,
        "__snapshot_at": snapshot_at,
    }
    return merged


def _row(data: Any) -> Optional[Dict[str, Any]]:
    if isinstance(data, list):
        return data[0] if data else None
    return data or None


class ApplicationsService:
    def __init__(self, backend: BackendClient):
        self._backend = backend

    def start_or_get(self, program_id: str) -> Application:
        """The caller's application for a program, created as a draft if needed."""
        row = _row(self._backend.rpc("app_start_or_get_application_v1", {"p_program_id": program_id}))
        if row is None:
            raise NotFoundError(f"Could not open an application for program {program_id}")
        return Application.model_validate(row)

    def get(self, application_id: str) -> Application:
        row = _row(self._backend.rpc("app_get_application_v1", {"p_application_id": application_id}))
        if row is None:
            raise NotFoundError(f"Application {application_id} not found")
        return Application.model_validate(row)

    def save(self, application_id: str, answers: Optional[Mapping[str, Any]]) -> Any:
        return self._backend.rpc(
            "app_save_application_v1", {"p_application_id": application_id, "p_answers": dict(answers or {})}
        )

    def submit(self, application_id: str, answers: Optional[Mapping[str, Any]], schema: Any = None) -> Any:
        if schema is not None:
            missing = missing_required(schema, answers)
            if missing:
                raise MissingRequiredAnswersError(missing)
            over = over_word_limit(schema, answers)
            if over:
                raise WordLimitExceededError(over)
        data = self._backend.rpc(
            "app_submit_application_v1", {"p_application_id": application_id, "p_answers": dict(answers or {})}
        )
        logger.info(f"Application {application_id} submitted")
        return data

    def fetch_profile_snapshot(self) -> Optional[Dict[str, Any]]:
        try:
            return self._backend.rpc("get_profile_snapshot") or None
        except BackendException as e:
            logger.warning(f"get_profile_snapshot error: {e}")
            return None

    def start_with_profile(self, program: Mapping[str, Any]) -> Application:
        """Open the application and autofill the profile snapshot when the program asks for it."""
        application = self.start_or_get(str(program["id"]))
        if not program_uses_profile(program) or PROFILE_ANSWER_KEY in application.answers:
            return application

        profile = self.fetch_profile_snapshot()
        if profile:
            application.answers = merge_profile_into_answers(application.answers, profile)
            self.save(application.id, application.answers)
        return application
