from typing import Optional

from pydantic import BaseModel, Field

from omnipply.schemas.forms import FormSubmissionStatus


class FormUpdateRequest(BaseModel):
    """Superadmin triage of a form submission."""

    status: Optional[FormSubmissionStatus] = None
    notes: Optional[str] = Field(None, description="Internal notes; blank clears nothing")
