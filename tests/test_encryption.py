# =============================================================================
# tests/test_encryption.py - Credential Encryption Tests
# =============================================================================

import re

import pytest

from lib.encryption import (
    EncryptionError,
    decrypt,
    decrypt_credentials,
    encrypt,
    encrypt_credentials,
)

TOKEN_FORMAT = re.compile(r"^[0-9a-f]{32}:[0-9a-f]+$")


class TestEncrypt:
    """Tests for single-value encryption."""

    def test_format_is_iv_and_ciphertext_hex(self):
        token = encrypt("secret-anon-key")
        assert TOKEN_FORMAT.match(token)

    def test_random_iv(self):
        """The same plaintext never encrypts to the same token."""
        assert encrypt("same") != encrypt("same")

    def test_decrypt_restores_plaintext(self):
        assert decrypt(encrypt("eyJhbGciOiJIUzI1NiJ9.payload")) == "eyJhbGciOiJIUzI1NiJ9.payload"

    def test_explicit_secret(self):
        token = encrypt("value", secret="another-key")
        assert decrypt(token, secret="another-key") == "value"

    @pytest.mark.parametrize("bad", ["no-separator", "a:b:c", "zz:zz"])
    def test_malformed_token_raises(self, bad):
        with pytest.raises(EncryptionError):
            decrypt(bad)


class TestCredentialBlobs:
    """Tests for encrypt_credentials / decrypt_credentials."""

    def test_none_passthrough(self):
        assert encrypt_credentials(None) is None
        assert decrypt_credentials(None) is None

    def test_only_secret_fields_are_encrypted(self):
        creds = {
            "supabase_url": "https://x.supabase.co",
            "supabase_anon_key": "anon",
            "supabase_service_role_key": "service",
        }

        encrypted = encrypt_credentials(creds)

        assert encrypted["supabase_url"] == "https://x.supabase.co"
        assert TOKEN_FORMAT.match(encrypted["supabase_anon_key"])
        assert TOKEN_FORMAT.match(encrypted["supabase_service_role_key"])
        assert encrypted["_encrypted"] is True
        assert "_encrypted_at" in encrypted
        # Input is not mutated
        assert creds["supabase_anon_key"] == "anon"

    def test_missing_service_key_is_skipped(self):
        encrypted = encrypt_credentials({"supabase_url": "u", "supabase_anon_key": "k"})
        assert "supabase_service_role_key" not in encrypted

    def test_round_trip_blob(self):
        decrypted = decrypt_credentials(encrypt_credentials({
            "supabase_url": "https://x.supabase.co",
            "supabase_anon_key": "anon",
        }))

        assert decrypted["supabase_anon_key"] == "anon"
        assert "_encrypted" not in decrypted
        assert "_decrypted_at" in decrypted

    def test_unmarked_blob_returned_as_is(self):
        creds = {"supabase_url": "u", "supabase_anon_key": "plain"}
        assert decrypt_credentials(creds) is creds

    def test_legacy_registry_fields_are_mapped(self):
        """bot_registry rows store database_url / database_key."""
        decrypted = decrypt_credentials({
            "database_url": "https://legacy.supabase.co",
            "database_key": encrypt("legacy-anon"),
            "_encrypted": True,
        })

        assert decrypted["supabase_url"] == "https://legacy.supabase.co"
        assert decrypted["supabase_anon_key"] == "legacy-anon"

    def test_clear_text_field_in_encrypted_blob_is_kept(self):
        decrypted = decrypt_credentials({
            "supabase_url": "u",
            "supabase_anon_key": "stored-in-clear",
            "_encrypted": True,
        })
        assert decrypted["supabase_anon_key"] == "stored-in-clear"

    def test_undecryptable_field_is_left_unchanged(self):
        decrypted = decrypt_credentials({
            "supabase_anon_key": "not:hex",
            "_encrypted": True,
        })
        assert decrypted["supabase_anon_key"] == "not:hex"
