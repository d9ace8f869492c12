# =============================================================================
# lib/vapi_client.py - Vapi API Key Checks
# =============================================================================
# A key is checked by listing assistants with it. Vapi rejects a public key
# used for server calls (and vice versa) with a 401 whose message names the
# key kind, which lets us tell the user which key they pasted.
# =============================================================================

import logging
from typing import Any

import httpx

from app.config import settings
from lib.utils import ApplicationError, mask_secret

logger = logging.getLogger(__name__)


class VapiError(ApplicationError):
    """Vapi rejected the key, or could not be reached."""

    def __init__(self, message: str, status_code: int | None = None, body: dict[str, Any] | None = None):
        super().__init__(message, code="VAPI_ERROR", details={"status_code": status_code})
        self.status_code = status_code
        self.body = body or {}

    @property
    def upstream_message(self) -> str:
        message = self.body.get("message")
        if isinstance(message, list):
            return "; ".join(str(m) for m in message)
        return str(message or "")


def list_assistants(api_key: str) -> list[dict[str, Any]]:
    """
    List the assistants visible to `api_key`.

    Raises:
        VapiError: On a non-2xx response or transport failure
    """
    url = f"{settings.VAPI_API_URL.rstrip('/')}/assistant"
    try:
        response = httpx.get(
            url,
            headers={"Authorization": f"Bearer {api_key}"},
            timeout=settings.HTTP_TIMEOUT_SECONDS,
        )
    except httpx.HTTPError as e:
        logger.warning(f"Vapi unreachable: {e}")
        raise VapiError(str(e) or "API connection failed")

    if not response.is_success:
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        logger.info(f"Vapi rejected key {mask_secret(api_key)} with {response.status_code}")
        raise VapiError(
            body.get("error") or f"HTTP {response.status_code}",
            status_code=response.status_code,
            body=body,
        )

    data = response.json()
    return data if isinstance(data, list) else []


def classify_rejection(error: VapiError) -> tuple[str, str]:
    """
    Explain a failed key check.

    Returns:
        (error message, key type) where key type is public, private,
        invalid or unknown
    """
    if error.status_code == 401:
        upstream = error.upstream_message
        if "private key instead of the public key" in upstream:
            return "You are using a PUBLIC key, but need a PRIVATE key for server operations", "public"
        if "public key instead of the private key" in upstream:
            return "You are using a PRIVATE key, but this context needs a PUBLIC key", "private"
        return "Invalid API key", "invalid"
    return error.message or "API connection failed", "unknown"
