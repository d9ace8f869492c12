# =============================================================================
# core/services/bot_service.py - Bot Listing, Registration and Deletion
# =============================================================================
# Bots are rows in the `bots` table of whichever project the request
# resolves to. Registering a Telegram bot also:
# - validates the token with getMe
# - points the bot's webhook at this API and reads it back
# - records the bot in the admin-project registry so webhooks can find it
# =============================================================================

import logging
from dataclasses import dataclass
from typing import Any, Mapping

from supabase import Client

from app import cookies
from app.config import settings
from app.exceptions import InvalidRequestError, MissingFieldError, UpstreamServiceError
from core.models.bot import BOT_LIST_COLUMNS, BotDeletionResult, BotPlatform
from core.services.bot_registry_service import BotRegistryService
from lib.encryption import encrypt_credentials
from lib.session_tokens import verify_session_token
from lib.supabase_client import SupabaseClient, SupabaseClientError, error_code
from lib.telegram_client import TelegramClient, TelegramError
from lib.utils import mask_secret, utc_now_iso

logger = logging.getLogger(__name__)

# Registry owner used for admin bots registered without a session
ADMIN_OWNER_ID = "00000000-0000-0000-0000-000000000000"


@dataclass
class BotOwner:
    """Who a bot is registered to in the registry."""
    user_id: str | None = None
    email: str | None = None


def webhook_url_for(token: str) -> str:
    """Public URL Telegram should deliver a bot's updates to."""
    return f"{settings.webhook_base_url}/bots/telegram/webhook/{token}"


def mask_bot(bot: dict[str, Any]) -> dict[str, Any]:
    """Copy of a bot row with its token cut to the first 8 characters."""
    return {**bot, "token": mask_secret(bot.get("token"))}


class BotService:
    """Service for the bot endpoints."""

    # -------------------------------------------------------------------------
    # Listing
    # -------------------------------------------------------------------------

    @staticmethod
    def list_bots(
        client: Client,
        platform: str | None = None,
        active: str | None = None,
    ) -> list[dict[str, Any]]:
        """
        List bots with masked tokens.

        Args:
            platform: Only bots of this platform
            active: "true" / "false" to filter on is_active; anything else ignored

        Raises:
            UpstreamServiceError: If the query fails
        """
        try:
            query = client.table("bots").select(BOT_LIST_COLUMNS)
            if platform:
                query = query.eq("platform", platform)
            if active == "true":
                query = query.eq("is_active", True)
            elif active == "false":
                query = query.eq("is_active", False)
            response = query.execute()
        except Exception as e:
            logger.error(f"Error fetching bots: {e}")
            raise UpstreamServiceError(
                "Database error fetching bots",
                service="supabase",
                error=str(e),
                details={"code": error_code(e)},
            )

        return [mask_bot(bot) for bot in response.data or []]

    # -------------------------------------------------------------------------
    # Registration
    # -------------------------------------------------------------------------

    @staticmethod
    def simple_register(
        request_cookies: Mapping[str, str],
        token: str | None,
        name: str | None,
        platform: str | None,
        is_admin_mode: bool,
    ) -> dict[str, Any]:
        """
        Create or update a bot and register it for webhook routing.

        Returns:
            {success, bot, status} with status "created" or "updated"

        Raises:
            MissingFieldError: token, name or platform missing (400)
            InvalidRequestError: No user credentials, or Telegram rejected the token (400)
            UpstreamServiceError: setWebhook or the database write failed (500)
        """
        if not token or not name or not platform:
            raise MissingFieldError(
                "Missing required fields: token, name, or platform",
                ["token", "name", "platform"],
            )

        mode = "ADMIN" if is_admin_mode else "USER"
        logger.info(f"Registering bot {mask_secret(token)} in {mode} mode")

        credentials: dict[str, Any] | None = None
        if is_admin_mode:
            client = SupabaseClient.get_client()
        else:
            if not cookies.has_tenant_credentials(request_cookies):
                raise InvalidRequestError(
                    "Missing user credentials. Please set up your Supabase connection first."
                )
            credentials = {
                "supabase_url": request_cookies[cookies.SUPABASE_URL],
                "supabase_anon_key": request_cookies[cookies.SUPABASE_ANON_KEY],
                "stored_at": utc_now_iso(),
            }
            try:
                client = SupabaseClient.create_tenant_client(
                    credentials["supabase_url"], credentials["supabase_anon_key"]
                )
            except SupabaseClientError as e:
                raise InvalidRequestError(e.message, suggestion=e.suggestion)

        fields: dict[str, Any] = {"name": name, "platform": platform, "is_active": True}
        if platform == BotPlatform.TELEGRAM:
            fields.update(BotService._connect_telegram(token))
        if credentials:
            fields["user_credentials"] = encrypt_credentials(credentials)

        bot, status = BotService._upsert_bot(client, token, fields)

        owner = BotService.resolve_owner(request_cookies, is_admin_mode)
        if is_admin_mode:
            result = BotRegistryService.register_admin_bot(
                token, owner.user_id or ADMIN_OWNER_ID, owner.email or settings.ADMIN_EMAIL
            )
        elif owner.user_id and owner.email:
            result = BotRegistryService.register_user_bot(token, owner.user_id, owner.email, credentials)
        else:
            result = None
            logger.error("Missing user info for registry, bot not registered")

        if result is not None and not result.success:
            logger.error(f"Bot registry registration failed: {result.error}")

        return {"success": True, "bot": bot, "status": status}

    @staticmethod
    def register_telegram(
        request_cookies: Mapping[str, str],
        token: str | None,
        name: str | None,
        is_admin_mode: bool,
    ) -> dict[str, Any]:
        """Telegram-only registration; same flow as simple_register."""
        if not token:
            raise MissingFieldError("Telegram bot token is required", ["token"])
        if not name:
            raise MissingFieldError("Bot name is required", ["name"])
        return BotService.simple_register(
            request_cookies, token, name, BotPlatform.TELEGRAM, is_admin_mode
        )

    @staticmethod
    def _connect_telegram(token: str) -> dict[str, Any]:
        telegram = TelegramClient(token)
        try:
            me = telegram.get_me()
        except TelegramError as e:
            raise InvalidRequestError(
                "Invalid bot token",
                suggestion="Copy the token again from @BotFather",
                details={"telegram_error": e.message},
            )

        webhook_url = webhook_url_for(token)
        try:
            telegram.set_webhook(webhook_url, secret_token=settings.TELEGRAM_WEBHOOK_SECRET)
        except TelegramError as e:
            raise UpstreamServiceError("Failed to set webhook", service="telegram", error=e.message)

        logger.info(f"Webhook set for @{me.get('username')}")
        BotService._verify_webhook(telegram, webhook_url)
        return {
            "username": me.get("username"),
            "telegram_id": str(me.get("id")) if me.get("id") is not None else None,
            "webhook_url": webhook_url,
        }

    @staticmethod
    def _verify_webhook(telegram: TelegramClient, webhook_url: str) -> bool:
        """Read the webhook back; a mismatch is logged, not raised."""
        try:
            info = telegram.get_webhook_info() or {}
        except TelegramError as e:
            logger.warning(f"Could not verify webhook: {e.message}")
            return False

        actual = info.get("url")
        if actual != webhook_url:
            logger.warning(f"Webhook URL mismatch: expected {webhook_url}, got {actual}")
            return False
        return True

    @staticmethod
    def _upsert_bot(client: Client, token: str, fields: dict[str, Any]) -> tuple[dict[str, Any], str]:
        try:
            existing = (
                client.table("bots")
                .select("id, name")
                .eq("token", token)
                .maybe_single()
                .execute()
            )
            existing_bot = existing.data if existing else None

            if existing_bot:
                response = (
                    client.table("bots")
                    .update({**fields, "updated_at": utc_now_iso()})
                    .eq("id", existing_bot["id"])
                    .execute()
                )
                return response.data[0], "updated"

            response = client.table("bots").insert({**fields, "token": token}).execute()
            return response.data[0], "created"

        except Exception as e:
            logger.error(f"Error saving bot: {e}")
            raise UpstreamServiceError("Failed to save bot information", service="supabase", error=str(e))

    @staticmethod
    def resolve_owner(request_cookies: Mapping[str, str], is_admin_mode: bool) -> BotOwner:
        """
        Work out who owns a bot being registered.

        Order: signed session cookie, then (user mode only) the admin-project
        user whose stored credentials point at the connected project.
        """
        session_user = verify_session_token(request_cookies.get(cookies.SESSION_TOKEN))
        if session_user:
            return BotOwner(session_user.user_id, session_user.email)

        if is_admin_mode:
            return BotOwner()

        supabase_url = request_cookies.get(cookies.SUPABASE_URL)
        if supabase_url:
            try:
                user = SupabaseClient.find_user_by_project_url(supabase_url)
            except SupabaseClientError as e:
                logger.error(f"Owner lookup failed: {e.message}")
                user = None
            if user:
                return BotOwner(str(user["id"]), user.get("email"))

        return BotOwner()

    # -------------------------------------------------------------------------
    # Deletion
    # -------------------------------------------------------------------------

    @staticmethod
    def delete_bot(client: Client, token: str | None, is_admin_mode: bool) -> dict[str, Any]:
        """
        Delete a bot from the resolved project and from the registry.

        The Telegram webhook is removed first; a failure there is only logged.

        Returns:
            {success, userDbDeleted, registryDeleted, message}
        """
        if not token:
            raise MissingFieldError("Missing required field: token", ["token"])

        try:
            TelegramClient(token).delete_webhook()
        except TelegramError as e:
            logger.warning(f"Could not remove webhook for bot {mask_secret(token)}: {e.message}")

        user_db_deleted = False
        try:
            client.table("bots").delete().eq("token", token).execute()
            user_db_deleted = True
        except Exception as e:
            logger.error(f"Error deleting bot from database: {e}")

        result: BotDeletionResult = BotRegistryService.delete(
            token,
            user_client=None if user_db_deleted else client,
            skip_registry=is_admin_mode,
        )

        if not result.registry_deleted:
            try:
                SupabaseClient.get_client().table("bot_registry").delete().eq("token", token).execute()
                result.registry_deleted = True
            except Exception as e:
                logger.error(f"Direct registry deletion failed: {e}")

        result.user_db_deleted = result.user_db_deleted or user_db_deleted
        return {
            "success": result.success,
            "userDbDeleted": result.user_db_deleted,
            "registryDeleted": result.registry_deleted,
            "message": "Bot successfully deleted" if result.success else "Failed to delete bot completely",
        }
