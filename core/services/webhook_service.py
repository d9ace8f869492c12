# =============================================================================
# core/services/webhook_service.py - Telegram Update Processing
# =============================================================================
# Turns one Telegram update into stored rows:
# 1. Registry lookup by bot token -> owning database
# 2. Contact find-or-create keyed by chat id
# 3. Incoming message insert
#
# Never raises: every failure becomes WebhookResult(success=False, error),
# because Telegram retries any non-200 delivery.
# =============================================================================

import json
import logging
from typing import Any
from uuid import uuid4

from supabase import Client

from core.models.message import MessageDirection, WebhookResult
from core.services.bot_registry_service import BotRegistryService
from core.services.contact_service import ContactService
from lib.utils import mask_secret, utc_now_iso

logger = logging.getLogger(__name__)


def contact_name(sender: dict[str, Any] | None) -> str:
    """'first_name last_name' of a Telegram user, either part optional."""
    sender = sender or {}
    parts = [sender.get("first_name") or "", sender.get("last_name") or ""]
    return " ".join(p for p in parts if p).strip()


class WebhookService:
    """Service for inbound Telegram webhooks."""

    @staticmethod
    def handle_telegram_update(token: str, update: dict[str, Any]) -> WebhookResult:
        """
        Process a Telegram update for the bot identified by `token`.

        Updates other than message / edited_message are accepted and ignored.
        """
        logger.info(f"Processing webhook for bot {mask_secret(token, 5)}")

        entry = BotRegistryService.lookup(token)
        if entry is None:
            logger.error("Bot not found in registry")
            return WebhookResult(success=False, error="Bot not found in registry")

        owner = entry.get("owner_email") or "unknown"
        mode = "ADMIN" if entry.get("is_admin_bot") else "USER"
        logger.info(f"Bot owned by {owner} ({mode} mode)")

        try:
            client = BotRegistryService.client_for_entry(entry)
            message = update.get("message") or update.get("edited_message")
            if message:
                if WebhookService.store_incoming_message(client, message) is None:
                    return WebhookResult(success=False, error="Could not resolve contact")
            else:
                logger.debug(f"Ignoring update kinds: {sorted(k for k in update if k != 'update_id')}")
            return WebhookResult(success=True)

        except Exception as e:
            logger.error(f"Error processing webhook: {e}")
            return WebhookResult(success=False, error=str(e))

    @staticmethod
    def store_incoming_message(client: Client, message: dict[str, Any]) -> str | None:
        """
        Store a Telegram message from a customer.

        Returns:
            The new message id, or None if no contact could be resolved
        """
        raw_chat_id = (message.get("chat") or {}).get("id")
        chat_id = str(raw_chat_id) if raw_chat_id is not None else ""
        if not chat_id:
            raise ValueError("Telegram message has no chat id")

        name = contact_name(message.get("from"))
        text = message.get("text")
        logger.info(f"Message from {name or chat_id}: {text or '[non-text content]'}")

        contact_id = ContactService.find_or_create(client, chat_id, name)
        if not contact_id:
            logger.error(f"Could not resolve contact for chat {chat_id}")
            return None

        now = utc_now_iso()
        message_id = str(uuid4())
        client.table("messages").insert({
            "id": message_id,
            "contact_id": contact_id,
            "content": text or json.dumps(message),
            "timestamp": now,
            "is_from_customer": True,
            "direction": MessageDirection.INCOMING.value,
            "is_sent": True,
            "is_viewed": False,
            "is_delivered": True,
            "created_at": now,
        }).execute()
        return message_id
