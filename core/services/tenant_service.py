# =============================================================================
# core/services/tenant_service.py - Per-Request Tenant Resolution
# =============================================================================
# Decides which Supabase project a request talks to.
#
# Resolution order:
# 1. Mode: ADMIN if forced, USER if forced, else USER when both credential
#    cookies are present, otherwise ADMIN
# 2. USER + credential cookies           -> tenant client   (source=cookies)
# 3. Valid session_token:
#      role admin or ADMIN mode          -> admin client    (source=session)
#      stored users.credentials          -> tenant client   (source=stored_credentials)
# 4. ADMIN mode                          -> admin client    (source=environment)
# 5. Otherwise                           -> TenantCredentialsError (401)
#
# Nothing is cached between requests except the admin client itself.
# =============================================================================

import logging
from dataclasses import dataclass
from typing import Any, Mapping

from supabase import Client

from app import cookies
from app.exceptions import TenantCredentialsError
from core.models.auth import ClientMode, SessionUser
from lib.encryption import decrypt_credentials
from lib.session_tokens import verify_session_token
from lib.supabase_client import SupabaseClient, SupabaseClientError

logger = logging.getLogger(__name__)


@dataclass
class ResolvedClient:
    """A Supabase client plus how it was chosen."""
    client: Client
    mode: ClientMode
    source: str

    @property
    def is_admin(self) -> bool:
        return self.mode == ClientMode.ADMIN


class TenantService:
    """
    Service for choosing the Supabase client of a request.

    Example:
        resolved = TenantService.resolve(request.cookies)
        resolved.client.table("contacts").select("*").execute()
    """

    @staticmethod
    def determine_mode(
        request_cookies: Mapping[str, str],
        force_admin: bool = False,
        force_user: bool = False,
    ) -> ClientMode:
        """Pick ADMIN or USER mode for a request."""
        if force_admin:
            return ClientMode.ADMIN
        if force_user:
            return ClientMode.USER
        if cookies.has_tenant_credentials(request_cookies):
            return ClientMode.USER
        return ClientMode.ADMIN

    @staticmethod
    def resolve(
        request_cookies: Mapping[str, str],
        force_admin: bool = False,
        force_user: bool = False,
    ) -> ResolvedClient:
        """
        Resolve the Supabase client for a request.

        Args:
            request_cookies: The request's cookies
            force_admin: Always use the admin project
            force_user: Never fall back to the admin project

        Returns:
            ResolvedClient with the client, mode and source

        Raises:
            TenantCredentialsError: USER mode with no usable credentials
        """
        mode = TenantService.determine_mode(request_cookies, force_admin, force_user)

        # Step 2: credentials carried in cookies
        if mode == ClientMode.USER and cookies.has_tenant_credentials(request_cookies):
            try:
                client = SupabaseClient.create_tenant_client(
                    request_cookies[cookies.SUPABASE_URL],
                    request_cookies[cookies.SUPABASE_ANON_KEY],
                )
                return ResolvedClient(client, mode, "cookies")
            except SupabaseClientError as e:
                logger.warning(f"Cookie credentials rejected, trying session: {e.message}")

        # Step 3: signed session
        session_user = verify_session_token(request_cookies.get(cookies.SESSION_TOKEN))
        if session_user:
            if session_user.is_admin or mode == ClientMode.ADMIN:
                return ResolvedClient(SupabaseClient.get_client(), ClientMode.ADMIN, "session")

            client = TenantService.client_from_stored_credentials(session_user)
            if client is not None:
                return ResolvedClient(client, ClientMode.USER, "stored_credentials")

        # Step 4: operator's project
        if mode == ClientMode.ADMIN:
            return ResolvedClient(SupabaseClient.get_client(), mode, "environment")

        raise TenantCredentialsError()

    @staticmethod
    def client_from_stored_credentials(session_user: SessionUser) -> Client | None:
        """
        Build a tenant client from the credentials stored for a session user.

        Returns None when nothing usable is stored or the lookup fails.
        """
        try:
            stored = SupabaseClient.fetch_user_credentials(session_user.user_id)
        except SupabaseClientError as e:
            logger.error(f"Failed to load stored credentials for {session_user.user_id}: {e.message}")
            return None

        credentials: dict[str, Any] = decrypt_credentials(stored) or {}
        url = credentials.get("supabase_url")
        key = credentials.get("supabase_anon_key")
        if not url or not key:
            logger.info(f"No usable stored credentials for user {session_user.user_id}")
            return None

        try:
            return SupabaseClient.create_tenant_client(url, key)
        except SupabaseClientError as e:
            logger.warning(f"Stored credentials rejected for {session_user.user_id}: {e.message}")
            return None
