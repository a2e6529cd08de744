import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Path, Query

from omnipply.dependencies import CurrentUserDep, ReviewsServiceDep
from omnipply.schemas.programs import ReviewForm
from omnipply.schemas.reviews import ReviewQueueItem, ReviewUpsert
from omnipply.services.answers import render_answers

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reviews", tags=["reviews"])


@router.get("/queue", response_model=List[ReviewQueueItem], summary="Applications waiting for review in a program")
def review_queue(
    user: CurrentUserDep,
    service: ReviewsServiceDep,
    program_id: str = Query(..., description="Program whose queue to list"),
    status: Optional[str] = Query(None, description="Only applications in this status"),
):
    return service.list_review_queue(program_id, status)


@router.get("/forms/{program_id}", response_model=ReviewForm, summary="Reviewer form configuration for a program")
def review_form(program_id: str, user: CurrentUserDep, service: ReviewsServiceDep):
    return service.get_review_form(program_id)


@router.get("/{application_id}", summary="Application bundle with answers rendered for reviewers")
def get_application_for_review(
    user: CurrentUserDep,
    service: ReviewsServiceDep,
    application_id: str = Path(..., description="Application under review"),
) -> Dict[str, Any]:
    bundle = service.get_application_for_review(application_id)
    application = bundle.get("application") or {}
    bundle["rendered"] = render_answers(bundle.get("schema"), application.get("answers") or bundle.get("answers"))
    return bundle


@router.put("/{application_id}", summary="Save or submit a review")
def upsert_review(application_id: str, review: ReviewUpsert, user: CurrentUserDep, service: ReviewsServiceDep):
    result = service.upsert_review(application_id, review)
    logger.info(f"Reviewer {user['id']} saved review for application {application_id}")
    return {"saved": True, "result": result}
