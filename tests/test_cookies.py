# =============================================================================
# tests/test_cookies.py - Cookie Policy and Sync Middleware Tests
# =============================================================================

import pytest
from fastapi import Response

from app import cookies
from app.config import Settings, settings
from tests.conftest import parse_set_cookies as _parsed


class TestPolicies:
    """Tests for cookie lifetimes and flags."""

    def test_admin_cookies_last_one_day(self):
        assert cookies.policy_for(cookies.ADMIN_SESSION).max_age == 86400
        assert cookies.policy_for(cookies.ADMIN_SESSION).httponly
        assert not cookies.policy_for(cookies.ADMIN_MODE).httponly

    def test_session_token_follows_settings(self):
        policy = cookies.policy_for(cookies.SESSION_TOKEN)
        assert policy.max_age == settings.SESSION_TTL_DAYS * 86400
        assert policy.httponly

    def test_credentials_last_thirty_days(self):
        for name in cookies.CREDENTIAL_COOKIES:
            policy = cookies.policy_for(name)
            assert policy.max_age == 30 * 86400
            assert policy.httponly

    def test_set_cookie_attributes(self):
        response = Response()
        cookies.set_cookie(response, cookies.ADMIN_MODE, "true")

        cookie = _parsed(response)["admin_mode"]
        assert cookie["value"] == "true"
        assert cookie["max-age"] == "86400"
        assert cookie["path"] == "/"
        assert cookie["samesite"].lower() == "lax"
        assert not cookie["httponly"]

    def test_clear_cookie_expires(self):
        response = Response()
        cookies.clear_cookie(response, cookies.ADMIN_SESSION)
        assert _parsed(response)["admin_session"]["max-age"] == "0"

    @pytest.mark.parametrize("environment, development, secure", [
        ("development", True, False),
        ("staging", False, False),
        ("production", False, True),
    ])
    def test_environment_flags(self, environment, development, secure):
        configured = Settings(ENVIRONMENT=environment)

        assert configured.is_development is development
        assert configured.is_production is secure
        assert configured.cookie_secure is secure


class TestHelpers:
    def test_is_flag_set(self):
        assert cookies.is_flag_set({"admin_mode": "true"}, cookies.ADMIN_MODE)
        assert not cookies.is_flag_set({"admin_mode": "1"}, cookies.ADMIN_MODE)
        assert not cookies.is_flag_set({}, cookies.ADMIN_MODE)

    def test_read_credentials_only_present(self):
        creds = cookies.read_credentials({
            "supabase_url": "u",
            "supabase_anon_key": "k",
            "supabase_project_ref": "",
            "unrelated": "x",
        })
        assert creds == {"supabase_url": "u", "supabase_anon_key": "k"}

    def test_has_tenant_credentials(self):
        assert cookies.has_tenant_credentials({"supabase_url": "u", "supabase_anon_key": "k"})
        assert not cookies.has_tenant_credentials({"supabase_url": "u"})


class TestCookieSyncMiddleware:
    """Sliding expiry through the app's middleware."""

    def test_credentials_reissued_when_flag_set(self, user_client):
        response = user_client.get("/api/health")

        synced = _parsed(response)
        assert synced["supabase_url"]["value"] == "https://user-project.supabase.co"
        assert synced["supabase_anon_key"]["max-age"] == str(30 * 86400)

    def test_credentials_not_reissued_without_flag(self, client):
        client.cookies.set("supabase_url", "https://user-project.supabase.co")

        response = client.get("/api/health")

        assert "supabase_url" not in _parsed(response)

    def test_admin_cookies_always_reissued(self, admin_client):
        response = admin_client.get("/api/health")

        synced = _parsed(response)
        assert synced["admin_mode"]["value"] == "true"
        assert synced["admin_session"]["httponly"]

    def test_handler_cookie_not_overwritten(self, admin_client):
        """Logout clears admin_session; the middleware must not restore it."""
        response = admin_client.post("/api/admin/logout")

        assert _parsed(response)["admin_session"]["max-age"] == "0"

    def test_webhook_path_skipped(self, admin_client, admin_db):
        response = admin_client.post("/api/bots/telegram/webhook/123:abc", json={"update_id": 1})

        assert response.status_code == 200
        assert _parsed(response) == {}
