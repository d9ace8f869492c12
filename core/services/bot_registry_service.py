# =============================================================================
# core/services/bot_registry_service.py - Bot Registry (admin project)
# =============================================================================
# The registry maps a bot token to the database that owns the bot, so a
# Telegram webhook (which carries nothing but the token) can find where to
# store incoming messages.
#
# Table: bot_registry (admin project)
#   token, owner_id, owner_email, database_url, database_key, is_admin_bot,
#   created_at, updated_at, last_used
#
# Optional RPC functions are tried first; every one has a direct-table
# fallback so the registry works on projects without them.
# =============================================================================

import logging
from typing import Any

from supabase import Client

from app.config import settings
from core.models.bot import BotDeletionResult, RegistryResult
from lib.encryption import decrypt_credentials
from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.utils import mask_secret, utc_now_iso

logger = logging.getLogger(__name__)

REGISTRY_TABLE = "bot_registry"


def _first_row(data: Any) -> dict[str, Any] | None:
    # RPCs may return a list of rows or a single object
    if isinstance(data, list):
        return data[0] if data else None
    if isinstance(data, dict) and data:
        return data
    return None


class BotRegistryService:
    """
    Service for the admin-project bot registry.

    Example:
        entry = BotRegistryService.lookup(token)
        client = BotRegistryService.client_for_entry(entry)
    """

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    @staticmethod
    def lookup(token: str) -> dict[str, Any] | None:
        """
        Find the registry entry for a bot token.

        Tries the `get_bot_credentials` RPC, then a direct query for the
        most recently used row.

        Returns:
            Registry entry dict, or None if the token is unknown
        """
        admin = SupabaseClient.get_client()

        try:
            response = admin.rpc("get_bot_credentials", {"bot_token": token}).execute()
            entry = _first_row(response.data)
            if entry:
                return entry
        except Exception as e:
            logger.warning(f"get_bot_credentials RPC failed, using direct query: {e}")

        try:
            response = (
                admin.table(REGISTRY_TABLE)
                .select("*")
                .eq("token", token)
                .order("last_used", desc=True)
                .limit(1)
                .execute()
            )
            return _first_row(response.data)
        except Exception as e:
            logger.error(f"Bot registry lookup failed for {mask_secret(token)}: {e}")
            return None

    @staticmethod
    def _exists(admin: Client, token: str) -> bool:
        response = (
            admin.table(REGISTRY_TABLE)
            .select("token")
            .eq("token", token)
            .maybe_single()
            .execute()
        )
        return bool(response and response.data)

    # -------------------------------------------------------------------------
    # Registration
    # -------------------------------------------------------------------------

    @staticmethod
    def register(
        token: str,
        owner_id: str,
        owner_email: str,
        database_url: str,
        database_key: str,
        is_admin_bot: bool = False,
    ) -> RegistryResult:
        """
        Create or update the registry entry for a bot.

        An existing entry is updated in place. A new one goes through the
        `register_bot_in_registry` RPC, falling back to a direct insert.
        """
        admin = SupabaseClient.get_client()
        mode = "ADMIN" if is_admin_bot else "USER"
        logger.info(f"Registering bot {mask_secret(token)} in registry ({mode} mode)")

        exists = False
        try:
            exists = BotRegistryService._exists(admin, token)
        except Exception as e:
            logger.error(f"Error checking bot registry, attempting insert: {e}")

        now = utc_now_iso()
        if exists:
            try:
                admin.table(REGISTRY_TABLE).update({
                    "owner_id": owner_id,
                    "owner_email": owner_email,
                    "database_url": database_url,
                    "database_key": database_key,
                    "is_admin_bot": is_admin_bot,
                    "updated_at": now,
                    "last_used": now,
                }).eq("token", token).execute()
                logger.info("Bot registry entry updated")
                return RegistryResult(success=True)
            except Exception as e:
                logger.error(f"Failed to update bot in registry: {e}")
                return RegistryResult(success=False, error=str(e))

        try:
            admin.rpc("register_bot_in_registry", {
                "p_token": token,
                "p_owner_id": owner_id,
                "p_owner_email": owner_email,
                "p_database_url": database_url,
                "p_database_key": database_key,
                "p_is_admin_bot": is_admin_bot,
            }).execute()
            logger.info("Bot registered via RPC")
            return RegistryResult(success=True)
        except Exception as e:
            logger.warning(f"register_bot_in_registry RPC failed, falling back to insert: {e}")

        try:
            admin.table(REGISTRY_TABLE).insert({
                "token": token,
                "owner_id": owner_id,
                "owner_email": owner_email,
                "database_url": database_url,
                "database_key": database_key,
                "is_admin_bot": is_admin_bot,
                "created_at": now,
                "updated_at": now,
                "last_used": now,
            }).execute()
            logger.info("Bot registered via direct insert")
            return RegistryResult(success=True)
        except Exception as e:
            logger.error(f"Failed to insert bot in registry: {e}")
            return RegistryResult(success=False, error=str(e))

    @staticmethod
    def register_user_bot(
        token: str,
        owner_id: str,
        owner_email: str,
        credentials: dict[str, Any] | None,
    ) -> RegistryResult:
        """Register a bot whose messages live in a user's own project."""
        if not token or not token.strip():
            return RegistryResult(success=False, error="Invalid bot token")
        if not owner_id or not str(owner_id).strip():
            return RegistryResult(success=False, error="Invalid owner ID")
        if not owner_email or not owner_email.strip():
            return RegistryResult(success=False, error="Missing owner email")
        if not credentials or not credentials.get("supabase_url") or not credentials.get("supabase_anon_key"):
            return RegistryResult(success=False, error="Invalid credentials")

        return BotRegistryService.register(
            token,
            str(owner_id),
            owner_email,
            credentials["supabase_url"],
            credentials["supabase_anon_key"],
            is_admin_bot=False,
        )

    @staticmethod
    def register_admin_bot(token: str, owner_id: str = "", owner_email: str = "") -> RegistryResult:
        """
        Register a bot whose messages live in the admin project.

        New entries are inserted without an owner first (owner rows may not
        exist in `users`), then retried with the owner when one is given.
        """
        if not token or not token.strip():
            return RegistryResult(success=False, error="Invalid bot token")

        database_url = settings.SUPABASE_URL
        database_key = settings.SUPABASE_ANON_KEY
        if not database_url or not database_key:
            return RegistryResult(
                success=False,
                error="Missing admin database credentials in environment variables",
            )

        admin = SupabaseClient.get_client()
        now = utc_now_iso()
        try:
            if BotRegistryService._exists(admin, token):
                admin.table(REGISTRY_TABLE).update({
                    "database_url": database_url,
                    "database_key": database_key,
                    "is_admin_bot": True,
                    "updated_at": now,
                    "last_used": now,
                }).eq("token", token).execute()
                logger.info("Updated admin bot in registry")
                return RegistryResult(success=True)
        except Exception as e:
            logger.error(f"Failed to update admin bot in registry: {e}")
            return RegistryResult(success=False, error=str(e))

        row = {
            "token": token,
            "database_url": database_url,
            "database_key": database_key,
            "is_admin_bot": True,
            "created_at": now,
            "updated_at": now,
            "last_used": now,
        }
        try:
            admin.table(REGISTRY_TABLE).insert(row).execute()
            logger.info("Registered admin bot in registry")
            return RegistryResult(success=True)
        except Exception as e:
            logger.error(f"Failed to insert admin bot in registry: {e}")
            if not (owner_id and owner_email):
                return RegistryResult(success=False, error=str(e))

        try:
            admin.table(REGISTRY_TABLE).insert(
                {**row, "owner_id": owner_id, "owner_email": owner_email}
            ).execute()
            logger.info("Registered admin bot in registry with owner details")
            return RegistryResult(success=True)
        except Exception as e:
            logger.error(f"Failed to insert admin bot with owner details: {e}")
            return RegistryResult(success=False, error=str(e))

    # -------------------------------------------------------------------------
    # Deletion
    # -------------------------------------------------------------------------

    @staticmethod
    def delete(
        token: str,
        user_client: Client | None = None,
        skip_registry: bool = False,
    ) -> BotDeletionResult:
        """
        Delete a bot from the owning database and from the registry.

        Args:
            token: Bot token
            user_client: Client for the owning database, when the caller has one
            skip_registry: Leave the registry alone (admin-mode bots)

        Returns:
            BotDeletionResult with one flag per path
        """
        admin = SupabaseClient.get_client()
        result = BotDeletionResult(registry_deleted=skip_registry)
        logger.info(f"Deleting bot {mask_secret(token, 5)} from registry and user DB")

        # 1. Owning database via the caller's client
        if user_client is not None:
            try:
                user_client.table("bots").delete().eq("token", token).execute()
                result.user_db_deleted = True
            except Exception as e:
                logger.error(f"Error deleting bot from user database: {e}")

        # 2. Owning database via the credentials stored in the registry
        if user_client is None and not skip_registry:
            try:
                response = (
                    admin.table(REGISTRY_TABLE)
                    .select("database_url, database_key, is_admin_bot")
                    .eq("token", token)
                    .maybe_single()
                    .execute()
                )
                entry = response.data if response else None
                if entry and not entry.get("is_admin_bot"):
                    temp_client = BotRegistryService.client_for_entry(entry, fallback_to_admin=False)
                    if temp_client is not None:
                        temp_client.table("bots").delete().eq("token", token).execute()
                        result.user_db_deleted = True
            except Exception as e:
                logger.error(f"Error deleting bot via registry credentials: {e}")

        if skip_registry:
            return result

        # 3. The registry entry itself
        try:
            if not BotRegistryService._exists(admin, token):
                logger.info("Bot not found in registry, nothing to delete")
                result.registry_deleted = True
                return result
        except Exception as e:
            logger.error(f"Error checking bot in registry: {e}")

        try:
            admin.rpc("delete_bot_from_registry", {"p_token": token}).execute()
            result.registry_deleted = True
            return result
        except Exception as e:
            logger.warning(f"delete_bot_from_registry RPC failed, using direct delete: {e}")

        try:
            admin.table(REGISTRY_TABLE).delete().eq("token", token).execute()
            result.registry_deleted = True
        except Exception as e:
            logger.error(f"Failed to delete bot from registry: {e}")

        return result

    # -------------------------------------------------------------------------
    # Client selection
    # -------------------------------------------------------------------------

    @staticmethod
    def client_for_entry(entry: dict[str, Any], fallback_to_admin: bool = True) -> Client | None:
        """
        Build the client for the database that owns a registered bot.

        Admin bots, and entries without a URL/key, use the admin client.
        Any failure building a tenant client also falls back to the admin
        client unless `fallback_to_admin` is False, in which case None is
        returned.
        """
        if entry.get("is_admin_bot") or not entry.get("database_url") or not entry.get("database_key"):
            return SupabaseClient.get_client() if fallback_to_admin else None

        try:
            credentials = decrypt_credentials({
                "database_url": entry["database_url"],
                "database_key": entry["database_key"],
                "_encrypted": True,
            }) or {}
            return SupabaseClient.create_tenant_client(
                credentials["supabase_url"],
                credentials["supabase_anon_key"],
            )
        except (SupabaseClientError, KeyError) as e:
            logger.error(f"Could not build client for registry entry, using admin: {e}")
            return SupabaseClient.get_client() if fallback_to_admin else None
