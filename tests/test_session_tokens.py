# =============================================================================
# tests/test_session_tokens.py - Session Token Tests
# =============================================================================

import time

from jose import jwt

from app.config import settings
from lib.session_tokens import ALGORITHM, create_session_token, verify_session_token


class TestSessionTokens:
    """Tests for signing and verifying session_token JWTs."""

    def test_claims(self):
        token = create_session_token("user-1", "user@example.com", "admin")
        claims = jwt.decode(token, settings.SESSION_SECRET, algorithms=[ALGORITHM])

        assert claims["userId"] == "user-1"
        assert claims["email"] == "user@example.com"
        assert claims["role"] == "admin"
        assert claims["exp"] - claims["iat"] == settings.SESSION_TTL_DAYS * 86400

    def test_verify_valid_token(self):
        user = verify_session_token(create_session_token("user-1", "user@example.com"))

        assert user is not None
        assert user.user_id == "user-1"
        assert user.role == "user"
        assert not user.is_admin

    def test_verify_missing_token(self):
        assert verify_session_token(None) is None
        assert verify_session_token("") is None

    def test_verify_garbage(self):
        assert verify_session_token("not-a-jwt") is None

    def test_verify_wrong_secret(self):
        token = jwt.encode(
            {"userId": "u", "email": "e", "exp": int(time.time()) + 60},
            "some-other-secret-value",
            algorithm=ALGORITHM,
        )
        assert verify_session_token(token) is None

    def test_verify_expired(self):
        now = int(time.time())
        token = jwt.encode(
            {"userId": "u", "email": "e", "iat": now - 120, "exp": now - 60},
            settings.SESSION_SECRET,
            algorithm=ALGORITHM,
        )
        assert verify_session_token(token) is None

    def test_verify_missing_claims(self):
        token = jwt.encode(
            {"email": "e", "exp": int(time.time()) + 60},
            settings.SESSION_SECRET,
            algorithm=ALGORITHM,
        )
        assert verify_session_token(token) is None

    def test_missing_role_defaults_to_user(self):
        token = jwt.encode(
            {"userId": 42, "email": "e", "exp": int(time.time()) + 60},
            settings.SESSION_SECRET,
            algorithm=ALGORITHM,
        )
        user = verify_session_token(token)
        assert user.user_id == "42"
        assert user.role == "user"
