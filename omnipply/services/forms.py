import logging
from typing import Any, Dict, List, Optional

from omnipply.exceptions import BackendRPCError, OperationFailedError
from omnipply.schemas.forms import FormSubmission, FormSubmissionStatus, FormType, OrganizationSignup
from omnipply.services.backend.client import NO_ROWS_CODE, BackendClient, eq

logger = logging.getLogger(__name__)


def _first_row(data: Any) -> Optional[Dict[str, Any]]:
    if isinstance(data, list):
        return data[0] if data else None
    return data or None


class FormsService:
    """Superadmin form inbox: organization signups and advertise requests."""

    def __init__(self, backend: BackendClient):
        self._backend = backend

    def submit_form(self, form_type: str, form_data: Dict[str, Any], user_id: Optional[str] = None) -> FormSubmission:
        try:
            data = self._backend.rpc(
                "super_submit_form_v1",
                {"p_form_type": form_type, "p_form_data": form_data, "p_user_id": user_id or None},
            )
        except BackendRPCError as e:
            raise OperationFailedError(f"Failed to submit form: {e.message}") from e

        row = _first_row(data)
        if row is None:
            raise OperationFailedError("Failed to submit form: No data returned")
        logger.info(f"Form submitted: type={form_type} id={row.get('id')}")
        return FormSubmission.model_validate(row)

    def submit_organization_signup(self, signup: OrganizationSignup, user_id: Optional[str] = None) -> FormSubmission:
        return self.submit_form(FormType.ORGANIZATION_SIGNUP.value, signup.model_dump(), user_id)

    def list_form_submissions(
        self, form_type: Optional[str] = None, status: Optional[FormSubmissionStatus] = None
    ) -> List[FormSubmission]:
        try:
            data = self._backend.rpc(
                "super_list_forms_v1",
                {"p_form_type": form_type or None, "p_status": status.value if status else None},
            )
        except BackendRPCError as e:
            raise OperationFailedError(f"Failed to fetch form submissions: {e.message}") from e
        return [FormSubmission.model_validate(row) for row in data or []]

    def update_form_submission(
        self, form_id: str, status: Optional[FormSubmissionStatus] = None, notes: Optional[str] = None
    ) -> FormSubmission:
        try:
            data = self._backend.rpc(
                "super_update_form_v1",
                {"p_id": form_id, "p_status": status.value if status else None, "p_notes": notes or None},
            )
        except BackendRPCError as e:
            raise OperationFailedError(f"Failed to update form submission: {e.message}") from e

        row = _first_row(data)
        if row is None:
            raise OperationFailedError("Failed to update form submission: No data returned")
        return FormSubmission.model_validate(row)

    def get_form_submission(self, form_id: str) -> Optional[FormSubmission]:
        """Single submission, or None when it does not exist."""
        try:
            rows = self._backend.select("superadmin_forms", filters={"id": eq(form_id)}, limit=1)
        except BackendRPCError as e:
            if e.code == NO_ROWS_CODE:
                return None
            raise OperationFailedError(f"Failed to fetch form submission: {e.message}") from e
        if not rows:
            return None
        return FormSubmission.model_validate(rows[0])
