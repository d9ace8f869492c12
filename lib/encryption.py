# =============================================================================
# lib/encryption.py - Stored Credential Encryption
# =============================================================================
# AES-256-CBC encryption for the secret fields of a Supabase credentials blob
# before it is written to the admin project (users.credentials,
# bots.user_credentials, bot_registry.database_key).
#
# Wire format of an encrypted field: "<iv hex>:<ciphertext hex>"
# The key is ENCRYPTION_KEY right-padded with spaces/truncated to 32 bytes.
# =============================================================================

from __future__ import annotations

import logging
import os
from typing import Any

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from app.config import settings
from lib.utils import ApplicationError, utc_now_iso

logger = logging.getLogger(__name__)

# Fields of a credentials blob that are encrypted at rest
SECRET_FIELDS = ("supabase_anon_key", "supabase_service_role_key")

IV_SIZE = 16
BLOCK_SIZE_BITS = 128


class EncryptionError(ApplicationError):
    """Raised when a value cannot be encrypted or decrypted."""

    def __init__(self, message: str, **kwargs):
        super().__init__(message, code="ENCRYPTION_ERROR", **kwargs)


def _key(secret: str | None = None) -> bytes:
    raw = secret if secret is not None else settings.ENCRYPTION_KEY
    return raw.ljust(32)[:32].encode("utf-8")


def encrypt(text: str, secret: str | None = None) -> str:
    """Encrypt a string; returns "<iv hex>:<ciphertext hex>"."""
    iv = os.urandom(IV_SIZE)
    padder = padding.PKCS7(BLOCK_SIZE_BITS).padder()
    padded = padder.update(text.encode("utf-8")) + padder.finalize()

    encryptor = Cipher(algorithms.AES(_key(secret)), modes.CBC(iv)).encryptor()
    ciphertext = encryptor.update(padded) + encryptor.finalize()
    return f"{iv.hex()}:{ciphertext.hex()}"


def decrypt(token: str, secret: str | None = None) -> str:
    """
    Decrypt a value produced by `encrypt`.

    Raises:
        EncryptionError: On a malformed token, wrong key, or bad padding
    """
    parts = token.split(":")
    if len(parts) != 2:
        raise EncryptionError("Invalid encrypted text format")

    try:
        iv = bytes.fromhex(parts[0])
        ciphertext = bytes.fromhex(parts[1])
        decryptor = Cipher(algorithms.AES(_key(secret)), modes.CBC(iv)).decryptor()
        padded = decryptor.update(ciphertext) + decryptor.finalize()

        unpadder = padding.PKCS7(BLOCK_SIZE_BITS).unpadder()
        plain = unpadder.update(padded) + unpadder.finalize()
        return plain.decode("utf-8")
    except (ValueError, UnicodeDecodeError) as e:
        raise EncryptionError(
            f"Failed to decrypt value: {e}",
            suggestion="Check that ENCRYPTION_KEY matches the key used when the credentials were stored",
        )


def encrypt_credentials(credentials: dict[str, Any] | None) -> dict[str, Any] | None:
    """
    Encrypt the secret fields of a credentials blob.

    Returns a new dict marked with `_encrypted` and `_encrypted_at`.
    """
    if credentials is None:
        return None

    result = dict(credentials)
    for field in SECRET_FIELDS:
        if result.get(field):
            result[field] = encrypt(result[field])

    result["_encrypted"] = True
    result["_encrypted_at"] = utc_now_iso()
    return result


def _decrypt_field(value: Any, field: str) -> Any:
    # Values without the iv separator were stored in clear text
    if not isinstance(value, str) or ":" not in value:
        return value
    try:
        return decrypt(value)
    except EncryptionError as e:
        logger.warning(f"Could not decrypt credential field '{field}': {e.message}")
        return value


def decrypt_credentials(credentials: dict[str, Any] | None) -> dict[str, Any] | None:
    """
    Decrypt a credentials blob produced by `encrypt_credentials`.

    Blobs not marked `_encrypted` are returned unchanged. Legacy registry
    field names (`database_url`, `database_key`) are mapped onto
    `supabase_url` / `supabase_anon_key` when those are missing.
    """
    if credentials is None:
        return None
    if not credentials.get("_encrypted"):
        return credentials

    result = dict(credentials)
    for field in SECRET_FIELDS:
        if result.get(field):
            result[field] = _decrypt_field(result[field], field)

    if result.get("database_key") and not result.get("supabase_anon_key"):
        result["supabase_anon_key"] = _decrypt_field(result["database_key"], "database_key")
    if result.get("database_url") and not result.get("supabase_url"):
        result["supabase_url"] = result["database_url"]

    result.pop("_encrypted", None)
    result["_decrypted_at"] = utc_now_iso()
    return result
