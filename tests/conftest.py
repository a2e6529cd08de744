"""
Shared fixtures: an in-memory backend double, an async redis double and a
manual clock for TTL behaviour.
"""

from typing import Any, Dict, List, Optional

import pytest

from omnipply.config import Settings
from omnipply.exceptions import AuthenticationError, BackendRPCError, NotFoundError


class FakeBackend:
    """
    Stands in for ``BackendClient``.

    ``rpc_responses`` / ``tables`` values may be plain data, an exception
    instance to raise, or a callable receiving the params/filters.
    """

    def __init__(self, rpc_responses: Optional[Dict[str, Any]] = None, tables: Optional[Dict[str, Any]] = None):
        self.rpc_responses = dict(rpc_responses or {})
        self.tables = dict(tables or {})
        self.counts: Dict[str, int] = {}
        self.users: Dict[str, Dict[str, Any]] = {}
        self.admin_users: Dict[str, Dict[str, Any]] = {}
        self.calls: List[tuple] = []
        self.updates: List[tuple] = []
        self.uploads: List[tuple] = []
        self.access_token: Optional[str] = None

    @staticmethod
    def _resolve(value: Any, arg: Any) -> Any:
        if isinstance(value, Exception):
            raise value
        if callable(value):
            return value(arg)
        return value

    def rpc_calls(self, name: str) -> List[Dict[str, Any]]:
        return [params for kind, call_name, params in self.calls if kind == "rpc" and call_name == name]

    def with_token(self, access_token: Optional[str]) -> "FakeBackend":
        self.access_token = access_token
        return self

    def rpc(self, name: str, params: Optional[Dict[str, Any]] = None) -> Any:
        self.calls.append(("rpc", name, params or {}))
        if name not in self.rpc_responses:
            raise BackendRPCError(f"Could not find the function {name}", code="PGRST202", status=404)
        return self._resolve(self.rpc_responses[name], params or {})

    def select(self, table, columns="*", filters=None, order=None, limit=None):
        self.calls.append(("select", table, filters or {}))
        rows = self._resolve(self.tables.get(table, []), filters or {})
        return rows[:limit] if limit is not None else rows

    def select_one(self, table, columns="*", filters=None):
        rows = self.select(table, columns, filters)
        if not rows:
            raise NotFoundError(f"No {table} row matches {filters}")
        return rows[0]

    def select_maybe_one(self, table, columns="*", filters=None):
        rows = self.select(table, columns, filters, limit=1)
        return rows[0] if rows else None

    def count(self, table, filters=None):
        self.calls.append(("count", table, filters or {}))
        return self.counts.get(table, 0)

    def update(self, table, values, filters):
        self.updates.append((table, values, filters))
        result = self.tables.get(f"update:{table}")
        return self._resolve(result, values) if result is not None else [values]

    def get_user(self):
        user = self.users.get(self.access_token or "")
        if user is None:
            raise AuthenticationError("Invalid session")
        return user

    def admin_get_user(self, user_id):
        return self._resolve(self.admin_users.get(user_id), user_id)

    def upload_object(self, bucket, path, data, content_type, upsert=False, cache_control="3600"):
        self.uploads.append((bucket, path, len(data), content_type))
        return {"Key": f"{bucket}/{path}"}

    def create_signed_url(self, bucket, path, expires_in=3600):
        return f"https://files.test/{bucket}/{path}?expires={expires_in}"


class FakeRedis:
    """Async subset of ``redis.asyncio.Redis`` with a settable clock."""

    def __init__(self):
        self.now = 0.0
        self._data: Dict[str, tuple] = {}

    def _live(self, key):
        entry = self._data.get(key)
        if entry is None:
            return None
        value, expires = entry
        if expires is not None and expires <= self.now:
            del self._data[key]
            return None
        return entry

    async def get(self, key):
        entry = self._live(key)
        return entry[0] if entry else None

    async def set(self, key, value, ex=None):
        self._data[key] = (value, self.now + ex if ex else None)

    async def ttl(self, key):
        entry = self._live(key)
        if entry is None:
            return -2
        if entry[1] is None:
            return -1
        return int(entry[1] - self.now)

    async def delete(self, key):
        return 1 if self._data.pop(key, None) is not None else 0


class ManualClock:
    def __init__(self, start: float = 1000.0):
        self.value = start

    def __call__(self) -> float:
        return self.value

    def advance(self, seconds: float) -> None:
        self.value += seconds


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def settings():
    return Settings(
        backend_url="https://backend.test",
        backend_anon_key="anon",
        backend_service_key="service",
        resend_api_key="re_test",
        resend_from_email="notifications@omnipply.test",
        site_base_url="https://omnipply.test",
    )

