from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict


class ReviewStatus(str, Enum):
    DRAFT = "draft"
    SUBMITTED = "submitted"
    CHANGES_REQUESTED = "changes_requested"
    APPROVED = "approved"
    UNPUBLISHED = "unpublished"
    PUBLISHED = "published"
    PENDING_CHANGES = "pending_changes"


class ProgramType(str, Enum):
    AUDITION = "audition"
    SCHOLARSHIP = "scholarship"
    APPLICATION = "application"
    COMPETITION = "competition"


DEFAULT_DECISION_OPTIONS = ["accept", "waitlist", "reject"]


class ReviewForm(BaseModel):
    """Which inputs reviewers see for a program."""

    model_config = ConfigDict(extra="allow")

    show_score: bool = True
    show_comments: bool = True
    show_decision: bool = False
    decision_options: List[str] = DEFAULT_DECISION_OPTIONS


class PublicProgram(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    name: Optional[str] = None
    description: Optional[str] = None
    type: Optional[str] = None
    organization_id: Optional[str] = None
    open_at: Optional[datetime] = None
    close_at: Optional[datetime] = None
    published: Optional[bool] = None
    application_schema: Optional[Dict[str, Any]] = None
    metadata: Optional[Dict[str, Any]] = None


class ProgramWindow(BaseModel):
    is_open: bool
    is_past_deadline: bool
    is_before_open: bool
    deadline_message: str
    open_message: str
