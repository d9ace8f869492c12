# =============================================================================
# lib/utils.py - Shared Utilities
# =============================================================================
# Small helpers shared by the service wrappers in lib/ and core/services:
# - ApplicationError: base class for errors raised by lib/ wrappers
# - normalize_uuid / utc_now_iso: values in the shape Supabase stores
# - mask_secret / key_format: safe display of tokens and API keys
# =============================================================================

import re
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

# Vapi private keys are lowercase UUIDs
UUID_KEY_PATTERN = re.compile(r"^[a-f0-9-]{36}$")


# =============================================================================
# Errors
# =============================================================================

class ApplicationError(Exception):
    """
    Base class for errors raised by the external-service wrappers.

    These never reach the client directly: services catch them and raise
    the matching BladexException (app/exceptions.py) with a public message.
    `message` stays free of the code prefix so it can be echoed into API
    bodies; `str()` adds the code and suggestion for logs.

    Example:
        class TelegramError(ApplicationError):
            def __init__(self, message: str, **kwargs):
                super().__init__(message, code="TELEGRAM_ERROR", **kwargs)
    """

    def __init__(
        self,
        message: str,
        code: str = "APPLICATION_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        text = f"[{self.code}] {self.message}"
        if self.suggestion:
            text += f" ({self.suggestion})"
        return text


# =============================================================================
# Supabase values
# =============================================================================

def normalize_uuid(value: str | UUID) -> str:
    """Ids go to PostgREST as strings, whatever the caller holds."""
    return str(value) if isinstance(value, UUID) else value


def utc_now_iso() -> str:
    """Current UTC time as ISO-8601, the format timestamptz columns accept."""
    return datetime.now(timezone.utc).isoformat()


# =============================================================================
# Secrets
# =============================================================================

def mask_secret(value: str | None, visible: int = 8) -> str | None:
    """
    Keep the first `visible` characters of a bot token or API key.

    Example:
        mask_secret("123456789:AAE...")  # "12345678..."
    """
    if not value:
        return None
    return f"{value[:visible]}..."


def key_format(key: str) -> str:
    """Classify a key as "UUID" or "Other" for the key-check responses."""
    return "UUID" if UUID_KEY_PATTERN.match(key) else "Other"
