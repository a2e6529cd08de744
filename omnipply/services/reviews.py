import logging
import math
from typing import Any, Dict, Iterable, List, Optional

from omnipply.schemas.programs import ReviewForm
from omnipply.schemas.reviews import ReviewQueueItem, ReviewSubmissionStatus, ReviewUpsert
from omnipply.services.backend.client import BackendClient
from omnipply.services.programs import review_form_with_defaults

logger = logging.getLogger(__name__)


def _finite_or_none(score: Optional[float]) -> Optional[float]:
    if score is None or not math.isfinite(score):
        return None
    return score


class ReviewsService:
    def __init__(self, backend: BackendClient):
        self._backend = backend

    def list_review_queue(self, program_id: str, status: Optional[str] = None) -> List[ReviewQueueItem]:
        rows = self._backend.rpc(
            "app_list_review_queue_v1", {"p_program_id": program_id, "p_status_filter": status or None}
        )
        return [ReviewQueueItem.model_validate(row) for row in rows or []]

    def get_application_for_review(self, application_id: str) -> Dict[str, Any]:
        """Application bundle for a reviewer: application, program, schema, answers."""
        data = self._backend.rpc("app_get_application_for_review_v1", {"p_application_id": application_id})
        if isinstance(data, list):
            data = data[0] if data else {}
        return data or {}

    def upsert_review(self, application_id: str, review: ReviewUpsert) -> Any:
        status = ReviewSubmissionStatus(review.status)
        data = self._backend.rpc(
            "app_upsert_review_v1",
            {
                "p_application_id": application_id,
                "p_ratings": review.ratings or {},
                "p_score": _finite_or_none(review.score),
                "p_comments": review.comments or None,
                "p_status": status.value,
                "p_decision": review.decision or None,
            },
        )
        logger.info(f"Review {status.value} for application {application_id}")
        return data

    def get_review_form(self, program_id: str) -> ReviewForm:
        data = self._backend.rpc("get_program_review_form", {"p_program_id": program_id})
        if isinstance(data, list):
            data = data[0] if data else None
        return review_form_with_defaults(data)

    def get_review_forms_batch(self, program_ids: Iterable[str]) -> Dict[str, ReviewForm]:
        ids = list(dict.fromkeys(program_ids))
        if not ids:
            return {}
        rows = self._backend.rpc("get_program_review_forms_batch_v1", {"p_program_ids": ids})
        return {str(row["program_id"]): review_form_with_defaults(row.get("review_form")) for row in rows or []}
