# =============================================================================
# core/models/message.py - Message and Contact Schemas
# =============================================================================
# Messages flow in two directions:
# - incoming: stored by the Telegram webhook (is_from_customer = true)
# - outgoing: stored by /bots/telegram/send, then marked delivered or failed
# =============================================================================

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class MessageDirection(str, Enum):
    """Which way a message travelled."""
    INCOMING = "incoming"
    OUTGOING = "outgoing"


class MessageStatus(str, Enum):
    """
    Delivery state of an outgoing message.

    State machine:
        pending -> delivered
                \\-> failed
    """
    PENDING = "pending"
    DELIVERED = "delivered"
    FAILED = "failed"


class MarkViewedRequest(BaseModel):
    """Body of POST /messages/mark-viewed."""
    message_ids: list[str] | None = Field(default=None, alias="messageIds")
    contact_id: str | None = Field(default=None, alias="contactId")

    model_config = ConfigDict(populate_by_name=True)


@dataclass
class WebhookResult:
    """Outcome of processing one Telegram update."""
    success: bool
    error: str | None = None

    def to_dict(self) -> dict:
        result = {"success": self.success}
        if self.error:
            result["error"] = self.error
        return result
