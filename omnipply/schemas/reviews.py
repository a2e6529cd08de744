from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict


class ReviewSubmissionStatus(str, Enum):
    DRAFT = "draft"
    SUBMITTED = "submitted"


class ReviewQueueItem(BaseModel):
    model_config = ConfigDict(extra="allow")

    application_id: str
    applicant_id: Optional[str] = None
    applicant_name: Optional[str] = None
    status: Optional[str] = None
    submitted_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ReviewUpsert(BaseModel):
    ratings: Dict[str, Any] = {}
    score: Optional[float] = None
    comments: Optional[str] = None
    status: ReviewSubmissionStatus = ReviewSubmissionStatus.DRAFT
    decision: Optional[str] = None
