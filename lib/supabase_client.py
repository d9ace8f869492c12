# =============================================================================
# lib/supabase_client.py - Supabase Client Wrapper
# =============================================================================
# This module owns every Supabase client the API creates:
# - The admin client (singleton), built from SUPABASE_URL + SUPABASE_SERVICE_KEY
# - Tenant clients, built per request from a visitor's own project credentials
#
# It also provides typed lookups against the admin project's `users` table,
# which stores per-user (encrypted) project credentials, and helpers for
# recognizing PostgREST error codes.
#
# Usage:
#   from lib.supabase_client import SupabaseClient
#   admin = SupabaseClient.get_client()
#   tenant = SupabaseClient.create_tenant_client(url, anon_key)
# =============================================================================

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from supabase import Client, ClientOptions, create_client

from app.config import settings
from lib.utils import ApplicationError, normalize_uuid

# Set up logging for this module
logger = logging.getLogger(__name__)

# PostgREST / Postgres error codes
NO_ROWS_CODE = "PGRST116"
UNIQUE_VIOLATION_CODE = "23505"


class SupabaseClientError(ApplicationError):
    """Error during Supabase operations."""

    def __init__(
        self,
        message: str,
        code: str = "SUPABASE_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code=code, suggestion=suggestion, details=details)


def error_code(exc: BaseException) -> str | None:
    """Extract the PostgREST/Postgres code from an APIError, if any."""
    code = getattr(exc, "code", None)
    return str(code) if code else None


def is_not_found_error(exc: BaseException) -> bool:
    """True when a `.single()` query matched no rows."""
    return error_code(exc) == NO_ROWS_CODE or NO_ROWS_CODE in str(exc)


def is_unique_violation(exc: BaseException) -> bool:
    """True when an insert hit a unique constraint."""
    return error_code(exc) == UNIQUE_VIOLATION_CODE or UNIQUE_VIOLATION_CODE in str(exc)


class SupabaseClient:
    """
    Factory and typed helpers for Supabase clients.

    The admin client is a process-wide singleton. Tenant clients are never
    cached: each request builds its own from the credentials it carries.

    Example:
        admin = SupabaseClient.get_client()
        user = SupabaseClient.fetch_user(user_id)
        tenant = SupabaseClient.create_tenant_client(
            "https://abc.supabase.co", "eyJhbGciOi..."
        )
    """

    _instance: Client | None = None

    @classmethod
    def get_client(cls) -> Client:
        """
        Get or create the singleton admin Supabase client.

        Uses the service_role key, which bypasses Row Level Security (RLS).

        Raises:
            SupabaseClientError: If client creation fails
        """
        if cls._instance is None:
            try:
                cls._instance = create_client(
                    settings.SUPABASE_URL,
                    settings.SUPABASE_SERVICE_KEY
                )
                logger.info("Admin Supabase client initialized successfully")
            except Exception as e:
                raise SupabaseClientError(
                    message=f"Failed to create Supabase client: {e}",
                    code="CLIENT_INIT_FAILED",
                    suggestion="Check SUPABASE_URL and SUPABASE_SERVICE_KEY in your .env file"
                )
        return cls._instance

    @classmethod
    def create_tenant_client(cls, url: str, key: str) -> Client:
        """
        Create a client for a visitor's own Supabase project.

        Session persistence is disabled: the server never holds a user's
        auth session between requests.

        Raises:
            SupabaseClientError: If the URL/key are rejected by the SDK
        """
        try:
            return create_client(
                url,
                key,
                options=ClientOptions(
                    auto_refresh_token=False,
                    persist_session=False,
                ),
            )
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to create tenant Supabase client: {e}",
                code="TENANT_CLIENT_INIT_FAILED",
                suggestion="Check the project URL and anon key you connected",
                details={"url": url},
            )

    # -------------------------------------------------------------------------
    # Users (admin project)
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_user(cls, user_id: str | UUID) -> dict[str, Any] | None:
        """
        Fetch a user row (id, email, role) from the admin project.

        Returns:
            User dict, or None if not found

        Raises:
            SupabaseClientError: If the query fails for another reason
        """
        client = cls.get_client()
        user_id_str = normalize_uuid(user_id)

        try:
            response = (
                client.table("users")
                .select("id, email, role")
                .eq("id", user_id_str)
                .single()
                .execute()
            )
            return response.data

        except Exception as e:
            if is_not_found_error(e):
                return None
            raise SupabaseClientError(
                message=f"Failed to fetch user: {e}",
                code="FETCH_USER_FAILED",
                details={"user_id": user_id_str},
            )

    @classmethod
    def fetch_user_by_email(cls, email: str) -> dict[str, Any] | None:
        """Fetch a user's id by email, or None."""
        client = cls.get_client()

        try:
            response = (
                client.table("users")
                .select("id")
                .eq("email", email)
                .maybe_single()
                .execute()
            )
            return response.data if response else None

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to look up user by email: {e}",
                code="FETCH_USER_FAILED",
                details={"email": email},
            )

    @classmethod
    def fetch_user_credentials(cls, user_id: str | UUID) -> dict[str, Any] | None:
        """
        Fetch the stored (still encrypted) credentials blob for a user.

        Returns:
            The `credentials` JSON object, or None if the user or blob is missing
        """
        client = cls.get_client()
        user_id_str = normalize_uuid(user_id)

        try:
            response = (
                client.table("users")
                .select("credentials")
                .eq("id", user_id_str)
                .single()
                .execute()
            )
            if response.data:
                return response.data.get("credentials")
            return None

        except Exception as e:
            if is_not_found_error(e):
                return None
            raise SupabaseClientError(
                message=f"Failed to fetch user credentials: {e}",
                code="FETCH_CREDENTIALS_FAILED",
                details={"user_id": user_id_str},
            )

    @classmethod
    def find_user_by_project_url(cls, supabase_url: str, scan_limit: int = 10) -> dict[str, Any] | None:
        """
        Find a user whose stored credentials point at the given project URL.

        The URL is stored in clear text, so no decryption is needed.
        """
        client = cls.get_client()

        try:
            response = (
                client.table("users")
                .select("id, email, credentials")
                .not_.is_("credentials", "null")
                .limit(scan_limit)
                .execute()
            )
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to scan users: {e}",
                code="FETCH_USER_FAILED",
            )

        for user in response.data or []:
            credentials = user.get("credentials") or {}
            if credentials.get("supabase_url") == supabase_url:
                return user
        return None
