import logging
import secrets
from typing import Optional

from fastapi import APIRouter, Header, HTTPException, status

from omnipply.dependencies import CurrentUserDep, MailerDep, NotificationsServiceDep, SettingsDep
from omnipply.exceptions import NotificationDeliveryError
from omnipply.schemas.notifications import MailerResult, NotificationWebhook, UnreadNotifications

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("/unread", response_model=UnreadNotifications)
def unread(user: CurrentUserDep, service: NotificationsServiceDep):
    return service.unread(user["id"])


@router.post("/webhook", response_model=MailerResult, summary="Email applicants when a result notification is inserted")
def notification_webhook(
    payload: NotificationWebhook,
    settings: SettingsDep,
    mailer: MailerDep,
    x_webhook_secret: Optional[str] = Header(None),
):
    expected = settings.notification_webhook_secret
    if expected and not secrets.compare_digest(x_webhook_secret or "", expected):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid webhook secret")

    try:
        return mailer.handle(payload.record)
    except NotificationDeliveryError as e:
        logger.error(f"Error in notification webhook: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
