# =============================================================================
# lib/telegram_client.py - Telegram Bot API Client
# =============================================================================
# Thin httpx wrapper over https://api.telegram.org/bot<token>/<method>.
#
# Every call returns the `result` field of Telegram's response envelope:
#   {"ok": true, "result": {...}}
# and raises TelegramError when the envelope says `ok: false`, the HTTP
# status is not 2xx, or the request never reaches Telegram.
#
# Usage:
#   client = TelegramClient(token)
#   me = client.get_me()
#   client.send_message(chat_id, "Hello")
#   client.get_webhook_info()["url"]
# =============================================================================

import logging
from typing import Any

import httpx

from app.config import settings
from lib.utils import ApplicationError, mask_secret

logger = logging.getLogger(__name__)

WEBHOOK_MAX_CONNECTIONS = 100
WEBHOOK_ALLOWED_UPDATES = ["message", "edited_message"]


class TelegramError(ApplicationError):
    """Error returned by (or while calling) the Telegram Bot API."""

    def __init__(
        self,
        message: str,
        error_code: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(
            message,
            code="TELEGRAM_ERROR",
            suggestion="Check the bot token with @BotFather",
            details=details,
        )
        self.error_code = error_code


class TelegramClient:
    """
    Client for a single bot token.

    Example:
        client = TelegramClient("123456:ABC...")
        client.set_webhook("https://example.com/api/bots/telegram/webhook/123456:ABC...")
    """

    def __init__(self, token: str, timeout: float | None = None):
        self.token = token
        self.timeout = timeout or settings.HTTP_TIMEOUT_SECONDS
        self.base_url = f"{settings.TELEGRAM_API_URL.rstrip('/')}/bot{token}"

    def _call(self, method: str, payload: dict[str, Any] | None = None) -> Any:
        url = f"{self.base_url}/{method}"
        try:
            if payload is None:
                response = httpx.get(url, timeout=self.timeout)
            else:
                response = httpx.post(url, json=payload, timeout=self.timeout)
        except httpx.HTTPError as e:
            logger.warning(f"Telegram {method} failed for bot {mask_secret(self.token)}: {e}")
            raise TelegramError(f"Telegram request failed: {e}", details={"method": method})

        try:
            body = response.json()
        except ValueError:
            body = {}

        if response.status_code >= 400 or not body.get("ok"):
            description = body.get("description") or f"HTTP {response.status_code}"
            error_code = body.get("error_code") or response.status_code
            logger.warning(
                f"Telegram {method} rejected for bot {mask_secret(self.token)}: {description}"
            )
            raise TelegramError(
                description,
                error_code=error_code,
                details={"method": method, "error_code": error_code},
            )

        return body.get("result")

    # -------------------------------------------------------------------------
    # Bot API methods
    # -------------------------------------------------------------------------

    def get_me(self) -> dict[str, Any]:
        """Return the bot's own user object (id, username, first_name...)."""
        return self._call("getMe")

    def send_message(self, chat_id: str | int, text: str) -> dict[str, Any]:
        """Send a text message and return the sent Message object."""
        return self._call("sendMessage", {"chat_id": chat_id, "text": text})

    def set_webhook(self, url: str, secret_token: str | None = None) -> bool:
        """
        Point the bot's updates at `url`.

        Pending updates are dropped so a re-registered bot does not replay
        old messages.
        """
        payload: dict[str, Any] = {
            "url": url,
            "max_connections": WEBHOOK_MAX_CONNECTIONS,
            "drop_pending_updates": True,
            "allowed_updates": WEBHOOK_ALLOWED_UPDATES,
        }
        if secret_token:
            payload["secret_token"] = secret_token
        return self._call("setWebhook", payload)


    def get_webhook_info(self) -> dict[str, Any]:
        """Return the bot's WebhookInfo (url, pending_update_count, last_error_message...)."""
        return self._call("getWebhookInfo")

    def delete_webhook(self, drop_pending_updates: bool = True) -> bool:
        """Stop delivering updates to the current webhook URL."""
        return self._call("deleteWebhook", {"drop_pending_updates": drop_pending_updates})
