import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from omnipply.dependencies import FormsServiceDep, SuperAdminDep, get_access_token, get_current_user
from omnipply.exceptions import AuthenticationError
from omnipply.schemas.api.forms import FormUpdateRequest
from omnipply.schemas.forms import FormSubmission, FormSubmissionStatus, FormType, OrganizationSignup

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/forms", tags=["forms"])


def optional_user_id(token: Optional[str] = Depends(get_access_token)) -> Optional[str]:
    """Signed-in user's id, or None for anonymous submissions."""
    if not token:
        return None
    try:
        return get_current_user(token)["id"]
    except AuthenticationError:
        logger.info("Ignoring invalid token on public form submission")
        return None


@router.post(
    "/organization-signup",
    response_model=FormSubmission,
    status_code=status.HTTP_201_CREATED,
    summary="Request a new organization listing",
)
def organization_signup(
    signup: OrganizationSignup,
    service: FormsServiceDep,
    user_id: Optional[str] = Depends(optional_user_id),
):
    submission = service.submit_organization_signup(signup, user_id)
    logger.info(f"Organization signup {submission.id} received for {signup.name}")
    return submission


@router.get("", response_model=List[FormSubmission], summary="All form submissions (superadmin)")
def list_forms(
    admin: SuperAdminDep,
    service: FormsServiceDep,
    form_type: Optional[FormType] = Query(None),
    status: Optional[FormSubmissionStatus] = Query(None),
):
    return service.list_form_submissions(form_type.value if form_type else None, status)


@router.get("/{form_id}", response_model=FormSubmission)
def get_form(form_id: str, admin: SuperAdminDep, service: FormsServiceDep):
    submission = service.get_form_submission(form_id)
    if submission is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Form submission {form_id} not found")
    return submission


@router.patch("/{form_id}", response_model=FormSubmission)
def update_form(form_id: str, update: FormUpdateRequest, admin: SuperAdminDep, service: FormsServiceDep):
    return service.update_form_submission(form_id, status=update.status, notes=update.notes)
