# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package wraps the external services and holds shared helpers:
# - supabase_client.py: Admin/tenant Supabase clients and error helpers
# - telegram_client.py: Telegram Bot API over httpx
# - ai_client.py: OpenAI completions, sentiment and embeddings
# - management_api.py: Supabase Management API SQL passthrough
# - vapi_client.py: Vapi key validation
# - encryption.py: AES credential encryption
# - session_tokens.py: Signed session_token JWTs
# - utils.py: Shared utilities (error base class, masking, timestamps)
#
# These modules are self-contained and can be tested in isolation.
# =============================================================================

from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.utils import ApplicationError, mask_secret, normalize_uuid

__all__ = [
    # Supabase
    "SupabaseClient",
    "SupabaseClientError",
    # Utils
    "ApplicationError",
    "mask_secret",
    "normalize_uuid",
]
