# =============================================================================
# core/services/contact_service.py - Contact Operations
# =============================================================================
# Contacts live in the tenant `contacts` table. A Telegram contact is keyed
# by its chat id, stored in `contact_info`.
# =============================================================================

import logging
from typing import Any
from uuid import uuid4

from supabase import Client

from app.exceptions import UpstreamServiceError
from lib.supabase_client import is_unique_violation
from lib.utils import utc_now_iso

logger = logging.getLogger(__name__)

CONTACT_LIST_COLUMNS = "id, name, contact_info, last_contact, created_at"


class ContactService:
    """Service for contact lookups and upserts."""

    @staticmethod
    def list_recent(client: Client, limit: int = 10) -> list[dict[str, Any]]:
        """
        Newest contacts first.

        Raises:
            UpstreamServiceError: If the query fails
        """
        try:
            response = (
                client.table("contacts")
                .select(CONTACT_LIST_COLUMNS)
                .order("created_at", desc=True)
                .limit(limit)
                .execute()
            )
        except Exception as e:
            logger.error(f"Failed to list contacts: {e}")
            raise UpstreamServiceError(
                "Database error fetching contacts",
                service="supabase",
                error=str(e),
            )
        return response.data or []

    @staticmethod
    def _find_id(client: Client, chat_id: str) -> str | None:
        response = (
            client.table("contacts")
            .select("id")
            .eq("contact_info", chat_id)
            .maybe_single()
            .execute()
        )
        if response and response.data:
            return response.data.get("id")
        return None

    @staticmethod
    def find_or_create(client: Client, chat_id: str, name: str) -> str | None:
        """
        Return the id of the contact for a chat, creating it if needed.

        An existing contact gets its name and last_contact refreshed. A
        concurrent insert of the same chat (unique violation) is resolved by
        selecting the row the other request created.

        Returns:
            Contact id, or None if the race re-select found nothing
        """
        now = utc_now_iso()
        contact_id = ContactService._find_id(client, chat_id)

        if contact_id:
            client.table("contacts").update({
                "name": name,
                "last_contact": now,
            }).eq("id", contact_id).execute()
            return contact_id

        try:
            response = client.table("contacts").insert({
                "id": str(uuid4()),
                "name": name,
                "contact_info": chat_id,
                "last_contact": now,
                "created_at": now,
            }).execute()
        except Exception as e:
            if not is_unique_violation(e):
                raise
            logger.info(f"Contact for chat {chat_id} created concurrently, re-selecting")
            return ContactService._find_id(client, chat_id)

        contact = response.data[0]
        logger.info(f"Created new contact: {name} {contact['id']}")
        return contact["id"]
