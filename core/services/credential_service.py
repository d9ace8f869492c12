# =============================================================================
# core/services/credential_service.py - Sessions and Stored Credentials
# =============================================================================
# Admin-project side of the auth endpoints:
# - create_session / verify_session: signed session_token lifecycle
# - store_user_credentials: encrypt a visitor's project credentials (from
#   cookies) into users.credentials, keyed by email
# =============================================================================

import logging
from typing import Any, Mapping

from app import cookies
from app.exceptions import AuthenticationError, MissingFieldError, UpstreamServiceError
from core.models.auth import SessionRole
from lib.encryption import encrypt_credentials
from lib.session_tokens import create_session_token, verify_session_token
from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.utils import utc_now_iso

logger = logging.getLogger(__name__)


class CredentialService:
    """Service for session tokens and stored user credentials."""

    # -------------------------------------------------------------------------
    # Sessions
    # -------------------------------------------------------------------------

    @staticmethod
    def create_session(user_id: str | None, email: str | None, role: str | None = None) -> str:
        """
        Issue a session token for an existing admin-project user.

        Returns:
            The encoded session token

        Raises:
            MissingFieldError: user_id or email missing (400)
            AuthenticationError: No such user (401)
            UpstreamServiceError: The user lookup failed (500)
        """
        if not user_id or not email:
            raise MissingFieldError("Missing required fields", ["userId", "email"])

        try:
            user = SupabaseClient.fetch_user(user_id)
        except SupabaseClientError as e:
            logger.error(f"Database error verifying user {user_id}: {e.message}")
            raise UpstreamServiceError("Failed to verify user", service="supabase", error=e.message)

        if not user:
            raise AuthenticationError("Invalid user")

        token = create_session_token(user_id, email, role or SessionRole.USER.value)

        if role:
            try:
                SupabaseClient.get_client().table("users").update({"role": role}).eq("id", user_id).execute()
            except Exception as e:
                logger.warning(f"Could not update role for user {user_id}: {e}")

        logger.info(f"Created session for user {user_id}")
        return token

    @staticmethod
    def verify_session(token: str | None) -> dict[str, Any]:
        """
        Check a session token against the admin project.

        Returns:
            {userId, email, role}; the stored role wins over the token's

        Raises:
            AuthenticationError: Missing/invalid token, or user no longer exists (401)
        """
        if not token:
            raise AuthenticationError("No session token found")

        session_user = verify_session_token(token)
        if session_user is None:
            raise AuthenticationError("Invalid token")

        try:
            user = SupabaseClient.fetch_user(session_user.user_id)
        except SupabaseClientError as e:
            logger.error(f"Session user lookup failed: {e.message}")
            user = None

        if not user:
            raise AuthenticationError("Invalid session")

        return {
            "userId": user["id"],
            "email": user.get("email"),
            "role": user.get("role") or session_user.role or SessionRole.USER.value,
        }

    # -------------------------------------------------------------------------
    # Stored credentials
    # -------------------------------------------------------------------------

    @staticmethod
    def credentials_from_cookies(request_cookies: Mapping[str, str]) -> dict[str, Any]:
        """Credentials blob (clear text) built from the request's cookies."""
        present = cookies.read_credentials(request_cookies)
        return {
            "supabase_url": present.get(cookies.SUPABASE_URL),
            "supabase_anon_key": present.get(cookies.SUPABASE_ANON_KEY),
            "supabase_service_role_key": present.get(cookies.SUPABASE_SERVICE_ROLE_KEY),
            "project_ref": present.get(cookies.SUPABASE_PROJECT_REF),
            "project_name": present.get(cookies.SUPABASE_PROJECT_NAME),
            "has_session": bool(request_cookies.get(cookies.SESSION_TOKEN)),
            "stored_at": utc_now_iso(),
        }

    @staticmethod
    def store_user_credentials(email: str | None, request_cookies: Mapping[str, str]) -> str | None:
        """
        Encrypt the cookie credentials into users.credentials for `email`.

        Creates the user row when none exists.

        Returns:
            The user's id, or None when the insert returned no row
        """
        if not email:
            raise MissingFieldError("Missing required field: email", ["email"])

        encrypted = encrypt_credentials(CredentialService.credentials_from_cookies(request_cookies))
        client = SupabaseClient.get_client()

        try:
            existing = SupabaseClient.fetch_user_by_email(email)
        except SupabaseClientError as e:
            logger.error(f"Error checking if user exists: {e.message}")
            raise UpstreamServiceError("Failed to check if user exists", service="supabase", error=e.message)

        now = utc_now_iso()
        try:
            if existing:
                response = (
                    client.table("users")
                    .update({"credentials": encrypted, "updated_at": now})
                    .eq("id", existing["id"])
                    .execute()
                )
            else:
                response = (
                    client.table("users")
                    .insert({
                        "email": email,
                        "credentials": encrypted,
                        "created_at": now,
                        "updated_at": now,
                    })
                    .execute()
                )
        except Exception as e:
            verb = "update" if existing else "store"
            logger.error(f"Error saving user credentials: {e}")
            raise UpstreamServiceError(f"Failed to {verb} user credentials", service="supabase", error=str(e))

        if existing:
            user_id = existing["id"]
        else:
            row = response.data[0] if response.data else {}
            user_id = row.get("id")
            if user_id is None:
                logger.warning(f"Insert for {email} returned no user id")
                return None

        logger.info(f"Stored credentials for user {user_id}")
        return str(user_id)
