from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict


class NotificationRecord(BaseModel):
    """Row inserted into ``notifications``, as delivered by the database webhook."""

    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    user_id: str
    type: str
    title: str = ""
    message: str = ""
    data: Optional[Dict[str, Any]] = None


class NotificationWebhook(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: Optional[str] = None
    table: Optional[str] = None
    record: NotificationRecord


class EmailContent(BaseModel):
    subject: str
    html: str
    text: str


class UnreadNotifications(BaseModel):
    count: int
    has_unread: bool


class MailerResult(BaseModel):
    status: str
    email_id: Optional[str] = None
