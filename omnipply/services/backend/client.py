import logging
from typing import Any, Dict, List, Optional

import requests

from omnipply.config import Settings, get_settings
from omnipply.exceptions import (
    AuthenticationError,
    BackendConnectionError,
    BackendRPCError,
    BackendTimeoutError,
    NotFoundError,
)

logger = logging.getLogger(__name__)

# PostgREST code for "single row requested, zero (or many) returned"
NO_ROWS_CODE = "PGRST116"
SINGLE_OBJECT = "application/vnd.pgrst.object+json"


def eq(value: Any) -> str:
    return f"eq.{value}"


def is_null() -> str:
    return "is.null"


def in_(values: List[Any]) -> str:
    return "in.(" + ",".join(str(v) for v in values) + ")"


class BackendClient:
    """Client for the hosted backend: REST RPC endpoints, tables, auth and storage."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        access_token: Optional[str] = None,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.access_token = access_token
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None, service_role: bool = False) -> "BackendClient":
        settings = settings or get_settings()
        key = settings.backend_service_key if service_role else settings.backend_anon_key
        return cls(
            base_url=settings.backend_url,
            api_key=key,
            timeout=settings.backend_timeout,
        )

    def with_token(self, access_token: Optional[str]) -> "BackendClient":
        """Return a client that acts on behalf of the given user session."""
        return BackendClient(
            base_url=self.base_url,
            api_key=self.api_key,
            access_token=access_token,
            timeout=self.timeout,
            session=self.session,
        )

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _headers(self, extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.access_token or self.api_key}",
        }
        if extra:
            headers.update(extra)
        return headers

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        url = f"{self.base_url}{path}"
        headers = self._headers(kwargs.pop("headers", None))
        try:
            response = self.session.request(method, url, headers=headers, timeout=self.timeout, **kwargs)
        except requests.Timeout as e:
            logger.error(f"Backend timeout: {method} {path}")
            raise BackendTimeoutError(f"Backend timeout after {self.timeout}s: {e}") from e
        except requests.ConnectionError as e:
            logger.error(f"Backend unreachable: {method} {path}: {e}")
            raise BackendConnectionError(f"Cannot connect to backend: {e}") from e

        if response.status_code >= 400:
            raise self._error_from_response(response)
        return response

    @staticmethod
    def _error_from_response(response: requests.Response) -> BackendRPCError:
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        message = body.get("message") or body.get("msg") or body.get("error_description") or body.get("error")
        if not message:
            message = response.text or f"HTTP {response.status_code}"
        return BackendRPCError(
            str(message),
            code=body.get("code"),
            status=response.status_code,
            details=body.get("details"),
            hint=body.get("hint"),
        )

    @staticmethod
    def _json(response: requests.Response) -> Any:
        if not response.content:
            return None
        return response.json()

    # ------------------------------------------------------------------
    # RPC and tables
    # ------------------------------------------------------------------

    def rpc(self, name: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """Invoke a server-side function by name."""
        logger.debug(f"RPC {name}")
        response = self._request("POST", f"/rest/v1/rpc/{name}", json=params or {})
        return self._json(response)

    def select(
        self,
        table: str,
        columns: str = "*",
        filters: Optional[Dict[str, str]] = None,
        order: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        params: Dict[str, Any] = {"select": columns}
        params.update(filters or {})
        if order:
            params["order"] = order
        if limit is not None:
            params["limit"] = limit
        response = self._request("GET", f"/rest/v1/{table}", params=params)
        return self._json(response) or []

    def select_one(self, table: str, columns: str = "*", filters: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        params: Dict[str, Any] = {"select": columns}
        params.update(filters or {})
        try:
            response = self._request(
                "GET", f"/rest/v1/{table}", params=params, headers={"Accept": SINGLE_OBJECT}
            )
        except BackendRPCError as e:
            if e.code == NO_ROWS_CODE:
                raise NotFoundError(f"No {table} row matches {filters}") from e
            raise
        return self._json(response)

    def select_maybe_one(
        self, table: str, columns: str = "*", filters: Optional[Dict[str, str]] = None
    ) -> Optional[Dict[str, Any]]:
        rows = self.select(table, columns=columns, filters=filters, limit=1)
        return rows[0] if rows else None

    def count(self, table: str, filters: Optional[Dict[str, str]] = None) -> int:
        params: Dict[str, Any] = {"select": "*"}
        params.update(filters or {})
        response = self._request(
            "HEAD", f"/rest/v1/{table}", params=params, headers={"Prefer": "count=exact"}
        )
        content_range = response.headers.get("Content-Range", "")
        total = content_range.rsplit("/", 1)[-1] if "/" in content_range else ""
        return int(total) if total.isdigit() else 0

    def update(self, table: str, values: Dict[str, Any], filters: Dict[str, str]) -> List[Dict[str, Any]]:
        response = self._request(
            "PATCH",
            f"/rest/v1/{table}",
            params=filters,
            json=values,
            headers={"Prefer": "return=representation"},
        )
        return self._json(response) or []

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    def get_user(self) -> Dict[str, Any]:
        """Return the user owning the bound access token."""
        if not self.access_token:
            raise AuthenticationError("No session token provided")
        try:
            response = self._request("GET", "/auth/v1/user")
        except BackendRPCError as e:
            if e.status in (401, 403):
                raise AuthenticationError(e.message) from e
            raise
        user = self._json(response)
        if not user or not user.get("id"):
            raise AuthenticationError("Session has no user")
        return user

    def admin_get_user(self, user_id: str) -> Optional[Dict[str, Any]]:
        """Look up any user through the admin API (service role key required)."""
        response = self._request("GET", f"/auth/v1/admin/users/{user_id}")
        body = self._json(response)
        if isinstance(body, dict) and "user" in body:
            return body["user"]
        return body

    # ------------------------------------------------------------------
    # Storage
    # ------------------------------------------------------------------

    def upload_object(
        self,
        bucket: str,
        path: str,
        data: bytes,
        content_type: str,
        upsert: bool = False,
        cache_control: str = "3600",
    ) -> Dict[str, Any]:
        response = self._request(
            "POST",
            f"/storage/v1/object/{bucket}/{path}",
            data=data,
            headers={
                "Content-Type": content_type,
                "x-upsert": "true" if upsert else "false",
                "cache-control": f"max-age={cache_control}",
            },
        )
        return self._json(response) or {}

    def create_signed_url(self, bucket: str, path: str, expires_in: int = 3600) -> str:
        response = self._request(
            "POST", f"/storage/v1/object/sign/{bucket}/{path}", json={"expiresIn": expires_in}
        )
        body = self._json(response) or {}
        signed = body.get("signedURL") or body.get("signedUrl") or ""
        return f"{self.base_url}/storage/v1{signed}" if signed.startswith("/") else signed
