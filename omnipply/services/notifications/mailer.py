"""
Result emails for applicants.

Triggered by the database webhook on ``notifications`` inserts. Only result
publication notifications produce an email; everything else is ignored.
"""
import html
import logging
from typing import Any, Dict, List, Mapping, Optional

import requests

from omnipply.config import Settings, get_settings
from omnipply.exceptions import BackendException, NotificationDeliveryError
from omnipply.schemas.notifications import EmailContent, MailerResult, NotificationRecord
from omnipply.services.backend.client import BackendClient, eq

logger = logging.getLogger(__name__)

RESULT_TYPES = ("results_published", "results_unpublished")
DEFAULT_PROGRAM_NAME = "your application"

DECISION_TEXT = {"accept": "Accepted", "waitlist": "Waitlisted", "reject": "Not Accepted"}
DECISION_COLOR = {"accept": "#10b981", "waitlist": "#f59e0b", "reject": "#ef4444"}
DEFAULT_DECISION_COLOR = "#6b7280"

PUBLICATION_COLUMNS = (
    "id,visibility,payload,published_at,"
    "applications!inner(id,programs!inner(id,name,organizations!inner(name,slug)))"
)


def decision_text(decision: Any) -> str:
    decision = str(decision)
    return DECISION_TEXT.get(decision.lower(), decision)


def _esc(value: Any) -> str:
    if value is None or value == "":
        return ""
    return html.escape(str(value))


def _program_info(publication: Optional[Mapping[str, Any]]) -> tuple:
    program = ((publication or {}).get("applications") or {}).get("programs") or {}
    org = program.get("organizations") or {}
    return program.get("name") or DEFAULT_PROGRAM_NAME, org.get("name") or ""


def build_email_content(
    title: str,
    message: str,
    publication: Optional[Mapping[str, Any]],
    site_base_url: str = "https://omnipply.com",
    contact_email: str = "omnipply@gmail.com",
) -> EmailContent:
    """Subject, plain text and HTML bodies honouring the publication's visibility flags."""
    visibility = (publication or {}).get("visibility") or {}
    payload = (publication or {}).get("payload") or {}
    program_name, org_name = _program_info(publication)
    has_program = program_name != DEFAULT_PROGRAM_NAME

    decision = payload.get("decision") if visibility.get("decision") else None
    score = payload.get("score") if visibility.get("score") else None
    comments = payload.get("comments") if visibility.get("comments") else None
    custom_message = visibility.get("customMessage")
    results_url = f"{site_base_url}/my-submissions"

    subject = f"Application Update: {program_name} - {title}" if has_program else title

    text: List[str] = [
        "Your Results Are Available",
        "",
        "Hello,",
        "",
        _esc(message),
        "",
        "You can view your complete results and any additional details by visiting the link below.",
        "",
    ]
    if has_program:
        text.append(f"Program: {_esc(program_name)}")
        if org_name:
            text.append(f"Organization: {_esc(org_name)}")
        text.append("")
    if decision:
        text += [f"Decision: {_esc(decision_text(decision))}", ""]
    if score is not None:
        text += [f"Score: {_esc(score)}", ""]
    if comments:
        text += ["Reviewer Comments:", _esc(comments), ""]
    if custom_message:
        text += [_esc(custom_message), ""]
    text += [
        f"View your full results at: {results_url}",
        "",
        "This email was sent to notify you about your application results.",
        f"If you have questions, please reply to this email or contact us at {contact_email}",
        "",
        f"Omnipply - {site_base_url}",
    ]

    sections = []
    if has_program:
        org_line = f'<p style="margin:4px 0 0;font-size:14px;color:#6b7280;">{_esc(org_name)}</p>' if org_name else ""
        sections.append(
            '<div style="margin:20px 0;padding:16px;background-color:#f9fafb;border-left:4px solid #3b82f6;">'
            '<p style="margin:0;font-size:14px;font-weight:600;color:#6b7280;">Program</p>'
            f'<p style="margin:4px 0 0;font-size:18px;font-weight:600;color:#111827;">{_esc(program_name)}</p>'
            f"{org_line}</div>"
        )
    if decision:
        color = DECISION_COLOR.get(decision.lower(), DEFAULT_DECISION_COLOR)
        sections.append(
            f'<div style="margin:20px 0;padding:20px;background-color:#f9fafb;border-left:4px solid {color};">'
            '<p style="margin:0;font-size:14px;font-weight:600;color:#6b7280;">Decision</p>'
            f'<p style="margin:8px 0 0;font-size:24px;font-weight:700;color:{color};">{_esc(decision_text(decision))}</p>'
            "</div>"
        )
    if score is not None:
        sections.append(
            '<div style="margin:20px 0;padding:16px;background-color:#eff6ff;">'
            '<p style="margin:0;font-size:14px;font-weight:600;color:#6b7280;">Score</p>'
            f'<p style="margin:8px 0 0;font-size:32px;font-weight:700;color:#2563eb;">{_esc(score)}</p>'
            "</div>"
        )
    if comments:
        sections.append(
            '<div style="margin:20px 0;padding:16px;background-color:#f0fdf4;border-left:4px solid #10b981;">'
            '<p style="margin:0 0 8px;font-size:14px;font-weight:600;color:#6b7280;">Reviewer Comments</p>'
            f'<p style="margin:0;font-size:15px;white-space:pre-wrap;">{_esc(comments)}</p>'
            "</div>"
        )
    if custom_message:
        sections.append(
            '<div style="margin:20px 0;padding:16px;background-color:#fef3c7;border-left:4px solid #f59e0b;">'
            f'<p style="margin:0;font-size:15px;color:#92400e;white-space:pre-wrap;">{_esc(custom_message)}</p>'
            "</div>"
        )

    body = "\n".join(sections)
    html_body = f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>Your Results Are Available</title>
</head>
<body style="margin:0;padding:0;font-family:system-ui,-apple-system,'Segoe UI',Roboto,Arial,sans-serif;background-color:#f3f4f6;">
  <div style="max-width:600px;margin:40px auto;background-color:#ffffff;border:1px solid #e5e7eb;border-radius:8px;">
    <h1 style="margin:0;padding:40px 40px 20px;text-align:center;font-size:24px;color:#111827;border-bottom:1px solid #e5e7eb;">Your Results Are Available</h1>
    <div style="padding:30px 40px;">
      <p style="font-size:16px;color:#374151;">Hello,</p>
      <p style="font-size:16px;color:#374151;">{_esc(message)}</p>
      <p style="font-size:16px;color:#374151;">You can view your complete results and any additional details by clicking the button below.</p>
      {body}
      <div style="margin:30px 0;text-align:center;">
        <a href="{results_url}" style="display:inline-block;padding:12px 24px;background-color:#3b82f6;color:#ffffff;text-decoration:none;border-radius:6px;font-weight:600;">View Full Results</a>
      </div>
    </div>
    <div style="padding:20px 40px;background-color:#f9fafb;border-top:1px solid #e5e7eb;font-size:12px;color:#6b7280;text-align:center;">
      This email was sent to notify you about your application results.<br>
      If you have questions, please reply to this email or contact us at <a href="mailto:{contact_email}">{contact_email}</a>
      <p style="font-size:11px;color:#9ca3af;"><a href="{site_base_url}/unsubscribe">Unsubscribe</a> | <a href="{site_base_url}">Omnipply</a></p>
    </div>
  </div>
</body>
</html>"""

    return EmailContent(subject=subject, html=html_body, text="\n".join(text))


class NotificationMailer:
    def __init__(
        self,
        backend: BackendClient,
        settings: Optional[Settings] = None,
        session: Optional[requests.Session] = None,
    ):
        self._backend = backend
        self._settings = settings or get_settings()
        self._session = session or requests.Session()

    def recipient_email(self, user_id: str) -> Optional[str]:
        """Account email from the auth admin API, falling back to the profile."""
        try:
            user = self._backend.admin_get_user(user_id)
            if user and user.get("email"):
                return user["email"]
        except BackendException as e:
            logger.error(f"Error getting auth user {user_id}: {e}")

        try:
            profile = self._backend.select_maybe_one("profiles", columns="email,full_name", filters={"id": eq(user_id)})
        except BackendException as e:
            logger.error(f"Error getting profile {user_id}: {e}")
            return None
        return (profile or {}).get("email") or None

    def fetch_publication(self, publication_id: str) -> Optional[Dict[str, Any]]:
        try:
            return self._backend.select_maybe_one(
                "application_publications", columns=PUBLICATION_COLUMNS, filters={"id": eq(publication_id)}
            )
        except BackendException as e:
            logger.error(f"Error fetching publication {publication_id}: {e}")
            return None

    def send(self, to: str, content: EmailContent, ref_id: str = "") -> Dict[str, Any]:
        settings = self._settings
        body = {
            "from": f"Omnipply <{settings.resend_from_email}>",
            "to": to,
            "subject": content.subject,
            "html": content.html,
            "text": content.text,
            "headers": {
                "List-Unsubscribe": f"<{settings.site_base_url}/unsubscribe>",
                "List-Unsubscribe-Post": "List-Unsubscribe=One-Click",
                "X-Entity-Ref-ID": ref_id,
            },
        }
        if settings.resend_reply_to:
            body["reply_to"] = settings.resend_reply_to

        try:
            response = self._session.post(
                settings.resend_api_url,
                json=body,
                headers={"Authorization": f"Bearer {settings.resend_api_key}"},
                timeout=settings.resend_timeout,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise NotificationDeliveryError(f"Failed to send email: {e}") from e
        return response.json() if response.content else {}

    def handle(self, record: NotificationRecord) -> MailerResult:
        if record.type not in RESULT_TYPES:
            logger.info(f"Ignoring notification type: {record.type}")
            return MailerResult(status="ignored")

        email = self.recipient_email(record.user_id)
        if not email:
            raise NotificationDeliveryError(f"No email found for user {record.user_id}")

        data = record.data or {}
        publication_id = data.get("publication_id")
        publication = self.fetch_publication(publication_id) if publication_id else None

        content = build_email_content(
            record.title,
            record.message,
            publication,
            site_base_url=self._settings.site_base_url,
            contact_email=self._settings.resend_reply_to or "omnipply@gmail.com",
        )
        result = self.send(email, content, ref_id=publication_id or "")
        logger.info(f"Result email sent for notification {record.id} ({record.type})")
        return MailerResult(status="sent", email_id=result.get("id"))
