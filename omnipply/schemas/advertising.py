from datetime import date
from typing import List, Optional

from pydantic import BaseModel, model_validator

from omnipply.schemas.forms import FormSubmission
from omnipply.services.pricing import DurationPreset
from omnipply.utils.validation import validate_campaign_dates


class CampaignRequest(BaseModel):
    """Request to feature an organization and/or some of its programs."""

    organization_id: str
    organization_slug: Optional[str] = None
    organization_name: Optional[str] = None
    include_org: bool = False
    include_programs: bool = False
    program_ids: List[str] = []
    duration_preset: DurationPreset = DurationPreset.SEVEN_DAYS
    show_from: Optional[date] = None
    hide_after: Optional[date] = None
    notes: Optional[str] = None

    @model_validator(mode="after")
    def check_selection(self) -> "CampaignRequest":
        if not self.include_org and not self.include_programs:
            raise ValueError("Please select at least one option to feature.")
        if self.include_programs and not self.program_ids:
            raise ValueError("Please select at least one program to feature.")
        if self.duration_preset == DurationPreset.UNTIL_DEADLINE and self.include_org:
            raise ValueError("Organizations have no deadline; 'Until deadline' applies to programs only.")
        custom = self.duration_preset == DurationPreset.CUSTOM
        validate_campaign_dates(self.show_from, self.hide_after if custom else None, require_end=custom)
        return self


class QuoteLine(BaseModel):
    program_id: str
    price: int
    close_at: Optional[str] = None


class CampaignQuoteResponse(BaseModel):
    duration_preset: DurationPreset
    duration_label: str
    show_from: Optional[date] = None
    hide_after: Optional[date] = None
    org_price: int
    program_price: int
    total: int
    lines: List[QuoteLine] = []


class SubmissionFailure(BaseModel):
    target_type: str
    program_id: Optional[str] = None
    error: str


class AdvertiseRequest(FormSubmission):
    time_remaining: Optional[str] = None


class CampaignSubmitResponse(BaseModel):
    submitted: List[FormSubmission] = []
    failures: List[SubmissionFailure] = []

    @property
    def ok(self) -> bool:
        return not self.failures
