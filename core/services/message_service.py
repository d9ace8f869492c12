# =============================================================================
# core/services/message_service.py - Message Operations
# =============================================================================
# Outbound Telegram delivery plus the message maintenance endpoints.
#
# Send flow:
# 1. Validate input, load the contact and its chat id
# 2. Store the outgoing message as pending
# 3. Try every active Telegram bot (newest first) until one delivers
# 4. Mark the message delivered, or failed when every bot failed
# =============================================================================

import logging
from typing import Any
from uuid import uuid4

from supabase import Client

from app.exceptions import (
    InvalidRequestError,
    MissingFieldError,
    NotFoundError,
    UpstreamServiceError,
)
from core.models.bot import BotPlatform
from core.models.message import MessageDirection, MessageStatus
from lib.telegram_client import TelegramClient, TelegramError
from lib.utils import utc_now_iso

logger = logging.getLogger(__name__)


class MessageService:
    """
    Service for message delivery and maintenance.

    Every method takes the tenant client resolved for the request.
    """

    # -------------------------------------------------------------------------
    # Sending
    # -------------------------------------------------------------------------

    @staticmethod
    def send_telegram_message(
        client: Client,
        contact_id: str | None,
        content: str | None,
        requested_message_id: str | None = None,
    ) -> dict[str, Any]:
        """
        Store and deliver an outgoing message to a contact over Telegram.

        Args:
            client: Tenant Supabase client
            contact_id: Contact to message
            content: Message text
            requested_message_id: Client-side id, echoed back as originalMessageId

        Returns:
            {success, messageId, originalMessageId, bot, result}

        Raises:
            MissingFieldError: contact_id or content missing (400)
            NotFoundError: Unknown contact, or no active bots (404)
            InvalidRequestError: Contact has no chat id (400)
            UpstreamServiceError: Storing or every delivery attempt failed (500)
        """
        if not contact_id or not content:
            raise MissingFieldError("Missing required fields", ["contactId", "content"])

        message_id = str(uuid4())
        logger.info(f"Sending message to contact {contact_id} with message id {message_id}")

        contact = MessageService._fetch_contact(client, contact_id)
        if not contact:
            raise NotFoundError("Contact not found", details={"contact_id": contact_id})

        chat_id = contact.get("contact_info")
        if not chat_id:
            raise InvalidRequestError("No chat ID found for this contact")

        now = utc_now_iso()
        try:
            client.table("messages").insert({
                "id": message_id,
                "contact_id": contact_id,
                "content": content,
                "timestamp": now,
                "is_from_customer": False,
                "direction": MessageDirection.OUTGOING.value,
                "is_sent": False,
                "is_viewed": True,
                "is_delivered": False,
                "is_processed": False,
                "is_ai_response": False,
                "message_status": MessageStatus.PENDING.value,
                "status": MessageStatus.PENDING.value,
                "created_at": now,
                "updated_at": now,
            }).execute()
        except Exception as e:
            logger.error(f"Failed to store outgoing message: {e}")
            raise UpstreamServiceError("Failed to store message", service="supabase", error=str(e))

        bots = MessageService._active_telegram_bots(client)
        if not bots:
            MessageService._mark_failed(client, message_id)
            raise NotFoundError("No active Telegram bots found")

        last_error: str | None = None
        for bot in bots:
            if not bot.get("token"):
                continue
            try:
                result = TelegramClient(bot["token"]).send_message(chat_id, content)
            except TelegramError as e:
                last_error = e.message
                logger.warning(f"Failed with bot {bot.get('name')}: {e.message}")
                continue

            MessageService._mark_delivered(client, message_id, contact_id)
            logger.info(f"Message {message_id} delivered via bot {bot.get('name')}")
            return {
                "success": True,
                "messageId": message_id,
                "originalMessageId": requested_message_id,
                "bot": {
                    "id": bot.get("id"),
                    "name": bot.get("name"),
                    "platform": bot.get("platform"),
                },
                "result": result,
            }

        MessageService._mark_failed(client, message_id)
        raise UpstreamServiceError(
            "Failed to send message with any Telegram bot",
            service="telegram",
            error=last_error or "Unknown error",
        )

    @staticmethod
    def _fetch_contact(client: Client, contact_id: str) -> dict[str, Any] | None:
        try:
            response = (
                client.table("contacts")
                .select("id, name, contact_info, last_contact")
                .eq("id", contact_id)
                .maybe_single()
                .execute()
            )
        except Exception as e:
            logger.error(f"Contact fetch error: {e}")
            return None
        return response.data if response else None

    @staticmethod
    def _active_telegram_bots(client: Client) -> list[dict[str, Any]]:
        try:
            response = (
                client.table("bots")
                .select("id, name, token, platform")
                .eq("platform", BotPlatform.TELEGRAM)
                .eq("is_active", True)
                .order("created_at", desc=True)
                .execute()
            )
        except Exception as e:
            logger.error(f"Failed to load Telegram bots: {e}")
            return []
        return response.data or []

    @staticmethod
    def _mark_delivered(client: Client, message_id: str, contact_id: str) -> None:
        # Telegram already accepted the message; failures here are only logged
        now = utc_now_iso()
        try:
            client.table("messages").update({
                "is_sent": True,
                "is_delivered": True,
                "message_status": MessageStatus.DELIVERED.value,
                "status": "sent",
                "updated_at": now,
            }).eq("id", message_id).execute()
        except Exception as e:
            logger.error(f"Failed to mark message {message_id} as delivered: {e}")

        try:
            client.table("contacts").update({"last_contact": now}).eq("id", contact_id).execute()
        except Exception as e:
            logger.error(f"Failed to update last_contact for contact {contact_id}: {e}")

    @staticmethod
    def _mark_failed(client: Client, message_id: str) -> None:
        try:
            client.table("messages").update({
                "is_sent": False,
                "is_delivered": False,
                "message_status": MessageStatus.FAILED.value,
                "status": MessageStatus.PENDING.value,
            }).eq("id", message_id).execute()
        except Exception as e:
            logger.error(f"Failed to mark message {message_id} as failed: {e}")

    # -------------------------------------------------------------------------
    # Maintenance
    # -------------------------------------------------------------------------

    @staticmethod
    def delete_messages(
        client: Client,
        message_ids: list[str] | None = None,
        contact_id: str | None = None,
    ) -> dict[str, Any]:
        """
        Delete messages by id, or every message of a contact.

        Memories referencing the messages are deleted first; a failure there
        is logged and does not stop the message delete.
        """
        if not message_ids and not contact_id:
            raise InvalidRequestError("No message IDs or contact ID provided")

        if not message_ids:
            try:
                response = (
                    client.table("messages")
                    .select("id")
                    .eq("contact_id", contact_id)
                    .execute()
                )
            except Exception as e:
                logger.error(f"Error fetching messages for contact {contact_id}: {e}")
                raise UpstreamServiceError("Failed to fetch messages", service="supabase", error=str(e))
            message_ids = [row["id"] for row in response.data or []]
            logger.info(f"Found {len(message_ids)} messages for contact {contact_id}")

        if not message_ids:
            return {"success": True, "message": "No messages to delete"}

        try:
            client.table("memories").delete().in_("message_id", message_ids).execute()
        except Exception as e:
            logger.warning(f"Failed to delete some associated memories: {e}")

        try:
            client.table("messages").delete().in_("id", message_ids).execute()
        except Exception as e:
            logger.error(f"Error deleting messages: {e}")
            raise UpstreamServiceError("Failed to delete messages", service="supabase", error=str(e))

        return {
            "success": True,
            "message": f"Successfully deleted {len(message_ids)} messages",
        }

    @staticmethod
    def mark_viewed(
        client: Client,
        message_ids: list[str] | None,
        contact_id: str | None = None,
    ) -> dict[str, Any]:
        """Set is_viewed on the given messages (optionally scoped to a contact)."""
        if not message_ids or not isinstance(message_ids, list):
            raise InvalidRequestError("Invalid input: messageIds array is required")

        try:
            query = client.table("messages").update({"is_viewed": True})
            if contact_id:
                query = query.eq("contact_id", contact_id)
            response = query.in_("id", message_ids).execute()
        except Exception as e:
            logger.error(f"Error marking messages viewed: {e}")
            raise UpstreamServiceError("Failed to update messages", service="supabase", error=str(e))

        data = response.data or []
        return {"success": True, "updatedCount": len(data), "data": data}

    @staticmethod
    def list_unseen(client: Client) -> dict[str, Any]:
        """Customer messages not yet viewed, newest first, with contact names."""
        try:
            response = (
                client.table("messages")
                .select("id, content, contact_id, timestamp, contacts:contact_id(id, name)")
                .eq("is_from_customer", True)
                .eq("is_viewed", False)
                .order("timestamp", desc=True)
                .execute()
            )
        except Exception as e:
            logger.error(f"Error fetching unseen messages: {e}")
            raise UpstreamServiceError("Failed to fetch unseen messages", service="supabase", error=str(e))

        messages = response.data or []
        return {"success": True, "messages": messages, "count": len(messages)}

    @staticmethod
    def view_status(client: Client, contact_id: str | None) -> dict[str, Any]:
        """Whether a contact has customer messages nobody has viewed yet."""
        if not contact_id:
            raise MissingFieldError("Contact ID is required", ["contactId"])

        try:
            response = (
                client.table("messages")
                .select("id, content, timestamp, is_viewed")
                .eq("contact_id", contact_id)
                .eq("is_from_customer", True)
                .eq("is_viewed", False)
                .execute()
            )
        except Exception as e:
            logger.error(f"Error checking message view status for contact {contact_id}: {e}")
            raise UpstreamServiceError("Failed to check message view status", service="supabase", error=str(e))

        unviewed = response.data or []
        return {
            "success": True,
            "hasUnviewedMessages": bool(unviewed),
            "unviewedCount": len(unviewed),
            "unviewedMessages": unviewed,
        }

    @staticmethod
    def stats(client: Client) -> dict[str, Any]:
        """Counts for the dashboard: AI replies, unread messages, customers replied to."""
        try:
            replied = (
                client.table("messages")
                .select("id, contact_id")
                .eq("is_ai_response", True)
                .execute()
            ).data or []
            unread = (
                client.table("messages")
                .select("id")
                .eq("is_from_customer", True)
                .eq("is_viewed", False)
                .execute()
            ).data or []
        except Exception as e:
            logger.error(f"Error fetching message stats: {e}")
            raise UpstreamServiceError(f"Database error: {e}", service="supabase")

        unique_customers = list(dict.fromkeys(row.get("contact_id") for row in replied))
        return {
            "success": True,
            "stats": {
                "repliesSent": len(replied),
                "unreadCount": len(unread),
                "uniqueCustomers": unique_customers,
                "uniqueCustomersCount": len(unique_customers),
            },
        }
