from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict


class ApplicationStatus(str, Enum):
    DRAFT = "draft"
    SUBMITTED = "submitted"
    REVIEWING = "reviewing"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    WAITLISTED = "waitlisted"


class Application(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    program_id: Optional[str] = None
    user_id: Optional[str] = None
    status: Optional[str] = None
    answers: Dict[str, Any] = {}
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AttachmentInfo(BaseModel):
    fileName: str
    filePath: str
    fileSize: int
    contentType: str
    uploadedAt: str
    uploadedBy: str


class MissingAnswers(BaseModel):
    missing: List[str]
