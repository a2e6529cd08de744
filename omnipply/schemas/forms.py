from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ValidationInfo, field_validator

from omnipply.utils.validation import is_valid_email, is_valid_url, require_text


class FormType(str, Enum):
    ORGANIZATION_SIGNUP = "organization_signup"
    ADVERTISE = "advertise"


class FormSubmissionStatus(str, Enum):
    PENDING = "pending"
    REVIEWED = "reviewed"
    APPROVED = "approved"
    REJECTED = "rejected"


class FormSubmission(BaseModel):
    id: str
    form_type: str
    form_data: Dict[str, Any] = {}
    status: FormSubmissionStatus = FormSubmissionStatus.PENDING
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    user_id: Optional[str] = None


class OrganizationSignup(BaseModel):
    """Public request to list a new organization."""

    name: str
    description: str
    contact_name: str
    contact_email: str
    website: str
    meeting_time: str
    logo_url: Optional[str] = None

    @field_validator("name", "description", "contact_name", "contact_email", "website", "meeting_time")
    @classmethod
    def not_blank(cls, value: str, info: ValidationInfo) -> str:
        return require_text(value, info.field_name.replace("_", " ").capitalize())

    @field_validator("contact_email")
    @classmethod
    def valid_email(cls, value: str) -> str:
        if not is_valid_email(value):
            raise ValueError("Please enter a valid email address")
        return value

    @field_validator("website")
    @classmethod
    def valid_website(cls, value: str) -> str:
        if not is_valid_url(value):
            raise ValueError("Please enter a valid URL (starting with http:// or https://)")
        return value

    @field_validator("logo_url")
    @classmethod
    def blank_logo_is_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return value.strip() or None
