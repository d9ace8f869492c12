# =============================================================================
# tests/test_routes_admin.py - Admin, Session and Credential Route Tests
# =============================================================================

import base64
from unittest.mock import patch

from app.config import settings
from lib.encryption import decrypt_credentials
from lib.session_tokens import create_session_token
from tests.conftest import parse_set_cookies

USER_ID = "550e8400-e29b-41d4-a716-446655440000"


def login(client, email=None, password=None):
    return client.post("/api/admin/login", json={
        "email": email if email is not None else settings.ADMIN_EMAIL,
        "password": password if password is not None else settings.ADMIN_PASSWORD,
    })


class TestAdminLogin:
    """Tests for POST /api/admin/login."""

    def test_success_sets_flags(self, client):
        response = login(client)

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["isAdmin"] is True
        assert data["redirectTo"] == "/dashboard"

        decoded = base64.b64decode(data["adminToken"]).decode()
        assert decoded.startswith(f"{settings.ADMIN_EMAIL}:")

        set_cookies = parse_set_cookies(response)
        for name in (
            "admin_session",
            "admin_mode",
            "setup_complete",
            "schema_setup_completed",
            "has_supabase_credentials",
        ):
            assert set_cookies[name]["value"] == "true"
        assert set_cookies["admin_session"]["httponly"]

    def test_wrong_password(self, client):
        response = login(client, password="wrong")

        assert response.status_code == 401
        assert response.json()["error"] == "Invalid credentials"
        assert "admin_session" not in parse_set_cookies(response)

    def test_wrong_email(self, client):
        assert login(client, email="someone@else.test").status_code == 401

    def test_empty_body(self, client):
        response = client.post("/api/admin/login", json={})
        assert response.status_code == 401

    def test_not_configured(self, client):
        with patch.object(settings, "ADMIN_PASSWORD", ""):
            response = login(client, password="")

        assert response.status_code == 401
        assert response.json()["error"] == "Invalid credentials"


class TestAdminLogout:
    def test_clears_flags(self, admin_client):
        response = admin_client.post("/api/admin/logout")

        assert response.status_code == 200
        assert response.json()["clearAdminToken"] is True
        assert response.json()["redirectTo"] == "/"
        cleared = parse_set_cookies(response)
        assert cleared["admin_session"]["max-age"] == "0"
        assert cleared["admin_mode"]["max-age"] == "0"


class TestCheckSession:
    """Tests for GET /api/admin/check-session."""

    def test_without_session(self, client):
        response = client.get("/api/admin/check-session")

        assert response.status_code == 401
        assert response.json() == {"isAdmin": False, "message": "Admin session not found"}

    def test_stray_admin_mode_cleared(self, client):
        client.cookies.set("admin_mode", "true")

        response = client.get("/api/admin/check-session")

        assert response.status_code == 401
        assert parse_set_cookies(response)["admin_mode"]["max-age"] == "0"

    def test_valid_session_restores_flags(self, client):
        client.cookies.set("admin_session", "true")

        response = client.get("/api/admin/check-session")

        assert response.status_code == 200
        assert response.json()["isAdmin"] is True
        restored = parse_set_cookies(response)
        assert restored["admin_mode"]["value"] == "true"
        assert restored["setup_complete"]["value"] == "true"
        assert restored["schema_setup_completed"]["value"] == "true"
        assert restored["has_supabase_credentials"]["value"] == "true"


class TestSessionToken:
    """Tests for /api/auth/create-session and /api/auth/verify-session."""

    def test_create_session_sets_cookie(self, client, admin_db):
        admin_db.queue("users", "select", {"id": USER_ID, "email": "user@example.com", "role": "user"})

        response = client.post("/api/auth/create-session", json={"userId": USER_ID, "email": "user@example.com"})

        assert response.status_code == 200
        assert response.json() == {"success": True}
        cookie = parse_set_cookies(response)["session_token"]
        assert cookie["httponly"]
        assert cookie["max-age"] == str(settings.SESSION_TTL_DAYS * 86400)

    def test_create_session_missing_fields(self, client):
        response = client.post("/api/auth/create-session", json={"email": "user@example.com"})

        assert response.status_code == 400
        assert response.json()["error"] == "Missing required fields"
        assert response.json()["required"] == ["userId", "email"]

    def test_create_session_unknown_user(self, client):
        response = client.post("/api/auth/create-session", json={"userId": USER_ID, "email": "user@example.com"})

        assert response.status_code == 401
        assert response.json()["error"] == "Invalid user"

    def test_create_session_stores_role(self, client, admin_db):
        admin_db.queue("users", "select", {"id": USER_ID, "email": "user@example.com", "role": None})

        client.post("/api/auth/create-session", json={"userId": USER_ID, "email": "user@example.com", "role": "admin"})

        update = admin_db.queries("users", "update")[0]
        assert update.payload == {"role": "admin"}
        assert update.filter_value("eq", "id") == USER_ID

    def test_verify_without_cookie(self, client):
        response = client.get("/api/auth/verify-session")

        assert response.status_code == 401
        assert response.json()["error"] == "No session token found"

    def test_verify_garbage_token(self, client):
        client.cookies.set("session_token", "not-a-jwt")

        response = client.get("/api/auth/verify-session")

        assert response.status_code == 401
        assert response.json()["error"] == "Invalid token"

    def test_verify_deleted_user(self, client):
        client.cookies.set("session_token", create_session_token(USER_ID, "user@example.com"))

        response = client.get("/api/auth/verify-session")

        assert response.status_code == 401
        assert response.json()["error"] == "Invalid session"

    def test_verify_prefers_stored_role(self, client, admin_db):
        admin_db.queue("users", "select", {"id": USER_ID, "email": "user@example.com", "role": "admin"})
        client.cookies.set("session_token", create_session_token(USER_ID, "user@example.com", "user"))

        response = client.get("/api/auth/verify-session")

        assert response.status_code == 200
        assert response.json() == {"userId": USER_ID, "email": "user@example.com", "role": "admin"}


class TestStoreCredentials:
    """Tests for /api/auth/store-credentials and /api/users/store-credentials."""

    def test_sets_credential_cookies(self, client):
        response = client.post("/api/auth/store-credentials", json={
            "supabaseUrl": "https://user-project.supabase.co",
            "supabaseAnonKey": "user-anon-key",
            "projectRef": "user-project",
        })

        assert response.status_code == 200
        stored = parse_set_cookies(response)
        assert stored["supabase_url"]["value"] == "https://user-project.supabase.co"
        assert stored["supabase_anon_key"]["httponly"]
        assert stored["supabase_project_ref"]["value"] == "user-project"
        assert stored["has_supabase_credentials"]["value"] == "true"
        assert "supabase_service_role_key" not in stored

    def test_requires_url_and_key(self, client):
        response = client.post("/api/auth/store-credentials", json={"supabaseUrl": "https://x.supabase.co"})

        assert response.status_code == 400
        assert response.json()["error"] == "Missing required credentials"

    def test_user_credentials_require_email(self, user_client):
        response = user_client.post("/api/users/store-credentials", json={})

        assert response.status_code == 400
        assert response.json()["error"] == "Missing required field: email"

    def test_user_credentials_inserted_encrypted(self, user_client, admin_db):
        admin_db.queue("users", "select", None)
        admin_db.queue("users", "insert", [{"id": USER_ID}])

        response = user_client.post("/api/users/store-credentials", json={"email": "user@example.com"})

        assert response.status_code == 200
        assert response.json() == {"success": True, "userId": USER_ID}

        row = admin_db.queries("users", "insert")[0].payload
        assert row["email"] == "user@example.com"
        assert "user-anon-key" not in str(row["credentials"])
        credentials = decrypt_credentials(row["credentials"])
        assert credentials["supabase_url"] == "https://user-project.supabase.co"
        assert credentials["supabase_anon_key"] == "user-anon-key"

    def test_user_credentials_updated(self, user_client, admin_db):
        admin_db.queue("users", "select", {"id": USER_ID})
        admin_db.queue("users", "update", [{"credentials": {"_encrypted": True}}])

        response = user_client.post("/api/users/store-credentials", json={"email": "user@example.com"})

        assert response.status_code == 200
        assert response.json() == {"success": True, "userId": USER_ID}
        assert admin_db.queries("users", "update")[0].filter_value("eq", "id") == USER_ID
        assert admin_db.queries("users", "insert") == []

    def test_user_credentials_insert_without_returned_row(self, user_client, admin_db):
        admin_db.queue("users", "select", None)
        admin_db.queue("users", "insert", [])

        response = user_client.post("/api/users/store-credentials", json={"email": "user@example.com"})

        assert response.status_code == 200
        assert response.json() == {"success": True, "userId": None}

    def test_user_credentials_write_failure(self, user_client, admin_db):
        admin_db.queue("users", "select", None)
        admin_db.queue("users", "insert", RuntimeError("permission denied"))

        response = user_client.post("/api/users/store-credentials", json={"email": "user@example.com"})

        assert response.status_code == 500
        assert response.json()["error"] == "Failed to store user credentials"
