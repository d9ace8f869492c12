# =============================================================================
# core/models/bot.py - Bot and Bot Registry Schemas
# =============================================================================
# These models define:
# - Request bodies for the bot endpoints
# - Result objects returned by the bot registry service
# =============================================================================

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field

# Columns selected for bot listings (tokens are masked before returning)
BOT_LIST_COLUMNS = (
    "id, name, platform, token, username, telegram_id, webhook_url, "
    "is_active, created_at, updated_at, organization_id"
)


class BotPlatform:
    TELEGRAM = "telegram"


class SimpleRegisterRequest(BaseModel):
    """Body of POST /bots/simple-register."""
    token: str | None = None
    name: str | None = None
    platform: str | None = None


class TelegramRegisterRequest(BaseModel):
    """Body of POST /bots/telegram/register."""
    token: str | None = None
    name: str | None = None


class DeleteBotRequest(BaseModel):
    """Body of DELETE /bots/delete."""
    token: str | None = None


class TelegramSendRequest(BaseModel):
    """
    Body of POST /bots/telegram/send.

    `message_id` and `bot_id` are accepted for client compatibility; the
    stored message always gets a fresh id and every active bot is tried.
    """
    contact_id: str | None = Field(default=None, alias="contactId")
    content: str | None = None
    message_id: str | None = Field(default=None, alias="messageId")
    bot_id: str | None = Field(default=None, alias="botId")

    model_config = ConfigDict(populate_by_name=True)


@dataclass
class RegistryResult:
    """Outcome of a bot registry write."""
    success: bool
    error: str | None = None


@dataclass
class BotDeletionResult:
    """Outcome of the two-path bot deletion (tenant table + registry)."""
    user_db_deleted: bool = False
    registry_deleted: bool = False

    @property
    def success(self) -> bool:
        return self.user_db_deleted or self.registry_deleted
