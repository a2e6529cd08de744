"""Tests for services/backend/client.py against a recorded fake HTTP session."""
import json

import pytest
import requests

from omnipply.exceptions import (
    AuthenticationError,
    BackendConnectionError,
    BackendRPCError,
    BackendTimeoutError,
    NotFoundError,
    is_backend_updating_error,
)
from omnipply.services.backend.client import BackendClient, eq, in_, is_null


class FakeResponse:
    def __init__(self, status_code=200, body=None, headers=None):
        self.status_code = status_code
        self.headers = headers or {}
        self.content = b"" if body is None else json.dumps(body).encode()
        self.text = self.content.decode()

    def json(self):
        return json.loads(self.content)


class FakeSession:
    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def request(self, method, url, headers=None, timeout=None, **kwargs):
        self.requests.append({"method": method, "url": url, "headers": headers, "timeout": timeout, **kwargs})
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def _client(*responses, token=None):
    session = FakeSession(*responses)
    return BackendClient("https://backend.test/", "anon-key", access_token=token, session=session), session


class TestFilters:
    def test_filter_helpers(self):
        assert eq("abc") == "eq.abc"
        assert is_null() == "is.null"
        assert in_(["a", 2]) == "in.(a,2)"

    def test_schema_reload_detection(self):
        assert is_backend_updating_error(BackendRPCError("reloading", code="PGRST302"))
        assert is_backend_updating_error(BackendRPCError("gone", status=404))
        assert not is_backend_updating_error(BackendRPCError("denied", code="42501", status=403))
        assert not is_backend_updating_error(ValueError("x"))


class TestTransport:
    def test_rpc_posts_params_with_keys(self):
        client, session = _client(FakeResponse(body=[{"ok": True}]), token="user-jwt")
        assert client.rpc("my_admin_orgs_v1", {"p": 1}) == [{"ok": True}]

        sent = session.requests[0]
        assert sent["method"] == "POST"
        assert sent["url"] == "https://backend.test/rest/v1/rpc/my_admin_orgs_v1"
        assert sent["json"] == {"p": 1}
        assert sent["headers"]["apikey"] == "anon-key"
        assert sent["headers"]["Authorization"] == "Bearer user-jwt"

    def test_anonymous_uses_api_key_as_bearer(self):
        client, session = _client(FakeResponse(body=None))
        assert client.rpc("noop") is None
        assert session.requests[0]["headers"]["Authorization"] == "Bearer anon-key"

    def test_error_payload_becomes_rpc_error(self):
        body = {"message": "permission denied", "code": "42501", "details": None, "hint": "check grants"}
        client, _ = _client(FakeResponse(status_code=403, body=body))
        with pytest.raises(BackendRPCError) as exc:
            client.rpc("super_list_users_v1")
        assert exc.value.code == "42501"
        assert exc.value.status == 403
        assert exc.value.hint == "check grants"

    def test_timeout_and_connection_errors(self):
        client, _ = _client(requests.Timeout("slow"), requests.ConnectionError("down"))
        with pytest.raises(BackendTimeoutError):
            client.rpc("a")
        with pytest.raises(BackendConnectionError):
            client.rpc("b")

    def test_with_token_shares_session(self):
        client, session = _client()
        scoped = client.with_token("jwt")
        assert scoped.session is session
        assert scoped.access_token == "jwt"
        assert client.access_token is None


class TestTables:
    def test_select_builds_query(self):
        client, session = _client(FakeResponse(body=[{"id": "1"}]))
        rows = client.select("programs", columns="id", filters={"id": in_(["1"])}, order="name.asc", limit=5)
        assert rows == [{"id": "1"}]
        assert session.requests[0]["params"] == {"select": "id", "id": "in.(1)", "order": "name.asc", "limit": 5}

    def test_select_one_missing_row_is_not_found(self):
        client, session = _client(FakeResponse(status_code=406, body={"code": "PGRST116", "message": "0 rows"}))
        with pytest.raises(NotFoundError):
            client.select_one("organizations", filters={"slug": eq("nope")})
        assert session.requests[0]["headers"]["Accept"] == "application/vnd.pgrst.object+json"

    def test_count_reads_content_range(self):
        client, session = _client(FakeResponse(headers={"Content-Range": "0-2/3"}))
        assert client.count("notifications", {"read_at": is_null()}) == 3
        assert session.requests[0]["method"] == "HEAD"
        assert session.requests[0]["headers"]["Prefer"] == "count=exact"

    def test_count_without_range_is_zero(self):
        client, _ = _client(FakeResponse(headers={"Content-Range": "*/*"}))
        assert client.count("notifications") == 0

    def test_update_returns_representation(self):
        client, session = _client(FakeResponse(body=[{"id": "o1", "name": "New"}]))
        assert client.update("organizations", {"name": "New"}, {"id": eq("o1")}) == [{"id": "o1", "name": "New"}]
        sent = session.requests[0]
        assert sent["method"] == "PATCH"
        assert sent["headers"]["Prefer"] == "return=representation"


class TestAuthAndStorage:
    def test_get_user_requires_token(self):
        client, _ = _client()
        with pytest.raises(AuthenticationError):
            client.get_user()

    def test_get_user_rejected_token(self):
        client, _ = _client(FakeResponse(status_code=401, body={"msg": "invalid JWT"}), token="bad")
        with pytest.raises(AuthenticationError, match="invalid JWT"):
            client.get_user()

    def test_get_user(self):
        client, session = _client(FakeResponse(body={"id": "u1", "email": "a@b.co"}), token="jwt")
        assert client.get_user()["id"] == "u1"
        assert session.requests[0]["url"].endswith("/auth/v1/user")

    def test_upload_headers(self):
        client, session = _client(FakeResponse(body={"Key": "k"}))
        client.upload_object("application-files", "applications/a/f/1_x.pdf", b"%PDF", "application/pdf")
        headers = session.requests[0]["headers"]
        assert headers["x-upsert"] == "false"
        assert headers["Content-Type"] == "application/pdf"
        assert session.requests[0]["data"] == b"%PDF"

    def test_signed_url_made_absolute(self):
        client, _ = _client(FakeResponse(body={"signedURL": "/object/sign/b/p?token=t"}))
        assert client.create_signed_url("b", "p") == "https://backend.test/storage/v1/object/sign/b/p?token=t"
