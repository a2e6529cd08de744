"""Tests for services/notifications: result emails and unread counts."""
import pytest
import requests

from conftest import FakeBackend
from omnipply.exceptions import BackendRPCError, NotificationDeliveryError
from omnipply.schemas.notifications import NotificationRecord
from omnipply.services.notifications.client import NotificationsService
from omnipply.services.notifications.mailer import NotificationMailer, build_email_content, decision_text

PUBLICATION = {
    "id": "pub1",
    "visibility": {"decision": True, "score": False, "comments": True, "customMessage": "See you <soon>"},
    "payload": {"decision": "accept", "score": 9, "comments": "Lovely tone & phrasing"},
    "applications": {"id": "a1", "programs": {"id": "p1", "name": "Summer Intensive", "organizations": {"name": "BYO"}}},
}


class FakeResendResponse:
    def __init__(self, status_code=200, body=None):
        self.status_code = status_code
        self._body = body or {"id": "email_123"}
        self.content = b"x"

    def json(self):
        return self._body

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


class FakeResendSession:
    def __init__(self, response=None):
        self.response = response or FakeResendResponse()
        self.posts = []

    def post(self, url, json=None, headers=None, timeout=None):
        self.posts.append({"url": url, "json": json, "headers": headers, "timeout": timeout})
        return self.response


class TestBuildEmailContent:
    def test_subject_names_program(self):
        content = build_email_content("Results are in", "Hi", PUBLICATION)
        assert content.subject == "Application Update: Summer Intensive - Results are in"

    def test_subject_without_program(self):
        assert build_email_content("Results are in", "Hi", None).subject == "Results are in"

    def test_visibility_flags_respected(self):
        content = build_email_content("t", "m", PUBLICATION)
        assert "Decision: Accepted" in content.text
        assert "Score" not in content.text
        assert "Reviewer Comments:" in content.text
        assert "Organization: BYO" in content.text

    def test_user_text_is_escaped_in_html(self):
        content = build_email_content("t", "<b>m</b>", PUBLICATION)
        assert "&lt;b&gt;m&lt;/b&gt;" in content.html
        assert "Lovely tone &amp; phrasing" in content.html
        assert "See you &lt;soon&gt;" in content.html
        assert "<b>m</b>" not in content.html

    def test_score_zero_is_shown(self):
        publication = {"visibility": {"score": True}, "payload": {"score": 0}}
        assert "Score: 0" in build_email_content("t", "m", publication).text

    def test_decision_text(self):
        assert decision_text("Waitlist") == "Waitlisted"
        assert decision_text(1) == "1"
        assert decision_text("maybe") == "maybe"


class TestNotificationMailer:
    def _mailer(self, settings, backend=None, session=None):
        backend = backend or FakeBackend(tables={"application_publications": [PUBLICATION]})
        backend.admin_users["u1"] = {"id": "u1", "email": "ada@example.com"}
        return NotificationMailer(backend, settings, session or FakeResendSession())

    def test_ignores_other_types(self, settings):
        mailer = self._mailer(settings)
        result = mailer.handle(NotificationRecord(user_id="u1", type="review_assigned"))
        assert result.status == "ignored"

    def test_sends_result_email(self, settings):
        session = FakeResendSession()
        mailer = self._mailer(settings, session=session)
        record = NotificationRecord(
            id="n1", user_id="u1", type="results_published", title="Results", message="Hi", data={"publication_id": "pub1"}
        )
        result = mailer.handle(record)

        assert result.status == "sent"
        assert result.email_id == "email_123"
        body = session.posts[0]["json"]
        assert body["to"] == "ada@example.com"
        assert body["from"] == "Omnipply <notifications@omnipply.test>"
        assert body["headers"]["X-Entity-Ref-ID"] == "pub1"
        assert body["headers"]["List-Unsubscribe"] == "<https://omnipply.test/unsubscribe>"
        assert session.posts[0]["headers"]["Authorization"] == "Bearer re_test"

    def test_falls_back_to_profile_email(self, settings):
        backend = FakeBackend(tables={"profiles": [{"email": "profile@example.com"}]})
        mailer = NotificationMailer(backend, settings, FakeResendSession())
        backend.admin_users["u2"] = BackendRPCError("forbidden", status=403)
        assert mailer.recipient_email("u2") == "profile@example.com"

    def test_no_email_raises(self, settings):
        mailer = NotificationMailer(FakeBackend(), settings, FakeResendSession())
        with pytest.raises(NotificationDeliveryError, match="No email"):
            mailer.handle(NotificationRecord(user_id="ghost", type="results_published"))

    def test_resend_failure_raises(self, settings):
        session = FakeResendSession(FakeResendResponse(status_code=422))
        mailer = self._mailer(settings, session=session)
        with pytest.raises(NotificationDeliveryError):
            mailer.handle(NotificationRecord(user_id="u1", type="results_unpublished"))


class TestUnreadNotifications:
    def test_counts_unread(self):
        backend = FakeBackend()
        backend.counts["notifications"] = 2
        unread = NotificationsService(backend).unread("u1")
        assert unread.count == 2
        assert unread.has_unread is True
        assert backend.calls[0] == ("count", "notifications", {"user_id": "eq.u1", "read_at": "is.null"})

    def test_none_unread(self):
        assert NotificationsService(FakeBackend()).has_unread("u1") is False
