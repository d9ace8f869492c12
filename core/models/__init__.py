# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas and small result types:
# - auth.py: Client mode, session user and credential request schemas
# - agent.py: Agent create/update schemas
# - bot.py: Bot request schemas and bot registry result types
# - message.py: Message enums, mark-viewed schema, webhook result
# - ai.py: Chat request schema, Sentiment enum, EmbeddingResult
# - tools.py: SQL passthrough, schema verification and Vapi schemas
#
# These models define the "contract" between API and clients.
# =============================================================================

# -----------------------------------------------------------------------------
# Auth Models - Client mode, sessions, stored credentials
# -----------------------------------------------------------------------------
from .auth import (
    AdminLoginRequest,
    ClientMode,
    CreateSessionRequest,
    SessionRole,
    SessionUser,
    StoreCredentialsRequest,
    StoreUserCredentialsRequest,
)

# -----------------------------------------------------------------------------
# Agent Models
# -----------------------------------------------------------------------------
from .agent import AgentCreate, AgentUpdate

# -----------------------------------------------------------------------------
# Bot Models - Bots and the bot registry
# -----------------------------------------------------------------------------
from .bot import (
    BOT_LIST_COLUMNS,
    BotDeletionResult,
    BotPlatform,
    DeleteBotRequest,
    RegistryResult,
    SimpleRegisterRequest,
    TelegramRegisterRequest,
    TelegramSendRequest,
)

# -----------------------------------------------------------------------------
# Message Models
# -----------------------------------------------------------------------------
from .message import (
    MarkViewedRequest,
    MessageDirection,
    MessageStatus,
    WebhookResult,
)

# -----------------------------------------------------------------------------
# AI Models
# -----------------------------------------------------------------------------
from .ai import ChatRelayRequest, EmbeddingResult, Sentiment

# -----------------------------------------------------------------------------
# Tool Models - SQL, schema verification, Vapi
# -----------------------------------------------------------------------------
from .tools import SqlRequest, ValidateVapiKeyRequest, VerifySchemaRequest

__all__ = [
    # Auth
    "AdminLoginRequest",
    "ClientMode",
    "CreateSessionRequest",
    "SessionRole",
    "SessionUser",
    "StoreCredentialsRequest",
    "StoreUserCredentialsRequest",
    # Agents
    "AgentCreate",
    "AgentUpdate",
    # Bots
    "BOT_LIST_COLUMNS",
    "BotDeletionResult",
    "BotPlatform",
    "DeleteBotRequest",
    "RegistryResult",
    "SimpleRegisterRequest",
    "TelegramRegisterRequest",
    "TelegramSendRequest",
    # Messages
    "MarkViewedRequest",
    "MessageDirection",
    "MessageStatus",
    "WebhookResult",
    # AI
    "ChatRelayRequest",
    "EmbeddingResult",
    "Sentiment",
    # Tools
    "SqlRequest",
    "ValidateVapiKeyRequest",
    "VerifySchemaRequest",
]
