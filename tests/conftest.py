# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - A chainable fake Supabase client that records every query
# - TestClient fixtures with the admin/tenant clients patched out
# =============================================================================

import os

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("SUPABASE_URL", "https://admin-project.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "admin-anon-key")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "admin-service-key")
os.environ.setdefault("OPENAI_API_KEY", "test-openai-key")
os.environ.setdefault("ADMIN_EMAIL", "admin@bladex.test")
os.environ.setdefault("ADMIN_PASSWORD", "correct-horse")
os.environ.setdefault("SESSION_SECRET", "test-session-secret-0123456789")
os.environ.setdefault("ENCRYPTION_KEY", "test-encryption-key-for-bladex-32")
os.environ.setdefault("PUBLIC_BASE_URL", "https://bladex.test")
os.environ.setdefault("CORS_ORIGINS", "http://localhost:3000")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")

from collections import defaultdict, deque
from typing import Any
from unittest.mock import patch

import pytest

# Queue this to make execute() return None (maybe_single with no row)
NO_RESPONSE = object()


# =============================================================================
# Fake Supabase client
# =============================================================================

class FakeResponse:
    def __init__(self, data: Any):
        self.data = data


class FakeQuery:
    """
    Records one chained PostgREST query.

    Every builder method returns self; execute() hands back the next queued
    result for (table, action), or a sensible default.
    """

    def __init__(self, client: "FakeSupabase", name: str, action: str = "select", payload: Any = None):
        self.client = client
        self.name = name
        self.action = action
        self.payload = payload
        self.columns: str | None = None
        self.filters: list[tuple] = []
        self.modifiers: list[tuple] = []

    # -- actions ------------------------------------------------------------

    def select(self, columns: str = "*", **kwargs):
        self.columns = columns
        return self

    def insert(self, payload, **kwargs):
        self.action, self.payload = "insert", payload
        return self

    def update(self, payload, **kwargs):
        self.action, self.payload = "update", payload
        return self

    def delete(self, **kwargs):
        self.action = "delete"
        return self

    # -- filters ------------------------------------------------------------

    def eq(self, column, value):
        self.filters.append(("eq", column, value))
        return self

    def neq(self, column, value):
        self.filters.append(("neq", column, value))
        return self

    def in_(self, column, values):
        self.filters.append(("in", column, list(values)))
        return self

    def is_(self, column, value):
        self.filters.append(("is", column, value))
        return self

    @property
    def not_(self):
        self.filters.append(("not",))
        return self

    # -- modifiers ----------------------------------------------------------

    def order(self, column, desc=False, **kwargs):
        self.modifiers.append(("order", column, desc))
        return self

    def limit(self, count, **kwargs):
        self.modifiers.append(("limit", count))
        return self

    def single(self):
        self.modifiers.append(("single",))
        return self

    def maybe_single(self):
        self.modifiers.append(("maybe_single",))
        return self

    # -- execution ----------------------------------------------------------

    def filter_value(self, op: str, column: str):
        for f in self.filters:
            if f[0] == op and f[1] == column:
                return f[2]
        return None

    def execute(self):
        self.client.executed.append(self)
        outcome = self.client.next_result(self)
        if isinstance(outcome, BaseException):
            raise outcome
        if outcome is NO_RESPONSE:
            return None
        return FakeResponse(outcome)


class FakeSupabase:
    """
    Stand-in for supabase.Client.

    Queue results with `queue(name, action, result)`; `result` may be data,
    an exception to raise, or NO_RESPONSE. Unqueued inserts/updates echo
    their payload back as a one-row list; everything else returns [].
    """

    def __init__(self, label: str = "fake"):
        self.label = label
        self.results: dict[tuple[str, str], deque] = defaultdict(deque)
        self.executed: list[FakeQuery] = []

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def from_(self, name: str) -> FakeQuery:
        return self.table(name)

    def rpc(self, fn: str, params: dict | None = None) -> FakeQuery:
        return FakeQuery(self, fn, action="rpc", payload=params or {})

    def queue(self, name: str, action: str, *results: Any) -> "FakeSupabase":
        self.results[(name, action)].extend(results)
        return self

    def next_result(self, query: FakeQuery) -> Any:
        pending = self.results[(query.name, query.action)]
        if pending:
            return pending.popleft()
        if query.action in ("insert", "update"):
            payload = query.payload
            return list(payload) if isinstance(payload, list) else [dict(payload)]
        return []

    def queries(self, name: str, action: str | None = None) -> list[FakeQuery]:
        return [q for q in self.executed if q.name == name and (action is None or q.action == action)]

    def __repr__(self) -> str:
        return f"FakeSupabase({self.label})"


def api_error(message: str, code: str) -> Exception:
    """A PostgREST APIError like the ones supabase-py raises."""
    from postgrest.exceptions import APIError
    return APIError({"message": message, "code": code, "hint": None, "details": None})


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def admin_db():
    """Fake admin-project client, patched in as SupabaseClient.get_client()."""
    from lib.supabase_client import SupabaseClient

    fake = FakeSupabase("admin")
    with patch.object(SupabaseClient, "get_client", return_value=fake):
        yield fake


@pytest.fixture
def tenant_db():
    """Fake user-project client, patched in as SupabaseClient.create_tenant_client()."""
    from lib.supabase_client import SupabaseClient

    fake = FakeSupabase("tenant")
    with patch.object(SupabaseClient, "create_tenant_client", return_value=fake) as factory:
        fake.factory = factory
        yield fake


@pytest.fixture
def client(admin_db, tenant_db):
    """TestClient for the app with both Supabase clients faked."""
    from fastapi.testclient import TestClient
    from app.main import app

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def user_client(client):
    """TestClient carrying user-project credential cookies (USER mode)."""
    client.cookies.set("supabase_url", "https://user-project.supabase.co")
    client.cookies.set("supabase_anon_key", "user-anon-key")
    client.cookies.set("has_supabase_credentials", "true")
    return client


@pytest.fixture
def admin_client(client):
    """TestClient in admin mode."""
    client.cookies.set("admin_session", "true")
    client.cookies.set("admin_mode", "true")
    return client


@pytest.fixture
def telegram_update():
    """A Telegram update carrying a text message."""
    return {
        "update_id": 1001,
        "message": {
            "message_id": 55,
            "from": {"id": 777, "first_name": "Ada", "last_name": "Lovelace"},
            "chat": {"id": 777, "type": "private"},
            "date": 1700000000,
            "text": "Hi, is my order shipped?",
        },
    }


def parse_set_cookies(response) -> dict[str, dict]:
    """
    Set-Cookie headers keyed by cookie name.

    Works for both httpx responses (TestClient) and Starlette responses.
    """
    from http.cookies import SimpleCookie

    headers = response.headers
    raw = headers.get_list("set-cookie") if hasattr(headers, "get_list") else headers.getlist("set-cookie")

    result = {}
    for header in raw:
        jar = SimpleCookie()
        jar.load(header)
        for name, morsel in jar.items():
            result[name] = {
                "value": morsel.value,
                "max-age": morsel["max-age"],
                "httponly": bool(morsel["httponly"]),
                "samesite": morsel["samesite"],
                "path": morsel["path"],
            }
    return result
