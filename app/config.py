# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# This module loads configuration from environment variables using pydantic-settings.
# It provides a single Settings class with all configuration values.
#
# Usage:
#   from app.config import settings
#   print(settings.SUPABASE_URL)
#
# Environment variables are loaded from:
# 1. System environment variables
# 2. .env file in project root (if exists)
#
# The Settings class validates all values at startup, catching configuration
# errors early rather than at runtime.
# =============================================================================

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings are accessed via the global `settings` instance.
    """

    # -------------------------------------------------------------------------
    # Supabase Configuration (admin project)
    # -------------------------------------------------------------------------
    # The operator's own project. Used in ADMIN mode and for the bot registry.

    SUPABASE_URL: str = Field(
        ...,
        description="Admin Supabase project URL (e.g., https://xxx.supabase.co)"
    )

    SUPABASE_ANON_KEY: str = Field(
        ...,
        description="Admin Supabase anon/public API key"
    )

    SUPABASE_SERVICE_KEY: str = Field(
        ...,
        description="Admin Supabase service_role key (bypasses RLS)"
    )

    SUPABASE_MANAGEMENT_API_URL: str = Field(
        default="https://api.supabase.com",
        description="Supabase Management API base URL (SQL passthrough)"
    )

    SUPABASE_DASHBOARD_URL: str = Field(
        default="https://app.supabase.com",
        description="Dashboard base URL used for manual SQL editor links"
    )

    # -------------------------------------------------------------------------
    # OpenAI / LLM Configuration
    # -------------------------------------------------------------------------

    OPENAI_API_KEY: str = Field(
        ...,
        description="OpenAI API key for chat, sentiment and embeddings"
    )

    OPENAI_MODEL: str = Field(
        default="gpt-4o-mini",
        description="Default chat completion model"
    )

    OPENAI_EMBEDDING_MODEL: str = Field(
        default="text-embedding-3-small",
        description="Embedding model"
    )

    CHAT_TEMPERATURE: float = Field(
        default=0.7,
        ge=0.0,
        le=2.0,
        description="Temperature for the /chat relay"
    )

    CHAT_MAX_TOKENS: int = Field(
        default=1000,
        ge=1,
        le=16000,
        description="Max tokens for the /chat relay"
    )

    EMBEDDING_DIMENSIONS: int = Field(
        default=1536,
        ge=8,
        description="Vector size of the local fallback embedding"
    )

    # -------------------------------------------------------------------------
    # Messaging Platforms
    # -------------------------------------------------------------------------

    TELEGRAM_API_URL: str = Field(
        default="https://api.telegram.org",
        description="Telegram Bot API base URL"
    )

    TELEGRAM_WEBHOOK_SECRET: str | None = Field(
        default=None,
        description="Optional secret Telegram echoes in X-Telegram-Bot-Api-Secret-Token"
    )

    PUBLIC_BASE_URL: str = Field(
        default="http://localhost:8000",
        description="Public URL of this API, used to build webhook URLs"
    )

    VAPI_API_URL: str = Field(
        default="https://api.vapi.ai",
        description="Vapi API base URL"
    )

    VAPI_API_KEY: str | None = Field(
        default=None,
        description="Server-side Vapi key checked by GET /validate-vapi-key"
    )

    HTTP_TIMEOUT_SECONDS: float = Field(
        default=10.0,
        gt=0,
        description="Timeout for outbound httpx calls"
    )

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------

    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Current environment"
    )

    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode (verbose logging, auto-reload)"
    )

    API_HOST: str = Field(
        default="0.0.0.0",
        description="Host to bind the API server to"
    )

    API_PORT: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="Port for the API server"
    )

    API_PREFIX: str = Field(
        default="/api",
        description="Prefix for all JSON routes"
    )

    # -------------------------------------------------------------------------
    # Security
    # -------------------------------------------------------------------------

    ADMIN_EMAIL: str = Field(
        default="admin@example.com",
        description="Email accepted by POST /admin/login"
    )

    ADMIN_PASSWORD: str = Field(
        default="change-me",
        min_length=1,
        description="Password accepted by POST /admin/login"
    )

    SESSION_SECRET: str = Field(
        default="dev-secret-key-change-in-production",
        min_length=16,
        description="Secret key for signing session_token JWTs"
    )

    SESSION_TTL_DAYS: int = Field(
        default=7,
        ge=1,
        le=90,
        description="Lifetime of session_token cookies"
    )

    ENCRYPTION_KEY: str = Field(
        default="bladex-webhook-encryption-key-32chars",
        min_length=16,
        description="Key for stored credential encryption (padded/truncated to 32 bytes)"
    )

    COOKIE_DOMAIN: str | None = Field(
        default=None,
        description="Cookie domain (e.g. .example.com); host-only when unset"
    )

    # CORS origins (comma-separated string that gets parsed)
    CORS_ORIGINS: str = Field(
        default="http://localhost:3000",
        description="Allowed CORS origins (comma-separated)"
    )

    # -------------------------------------------------------------------------
    # Pydantic Settings Configuration
    # -------------------------------------------------------------------------

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=True,
    )

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def cors_origins_list(self) -> list[str]:
        """
        Parse CORS_ORIGINS string into a list.

        Example: "http://localhost:3000, https://myapp.com" -> ["http://localhost:3000", "https://myapp.com"]
        """
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"

    @property
    def cookie_secure(self) -> bool:
        """Cookies carry the Secure flag only in production."""
        return self.is_production

    @property
    def admin_credentials_configured(self) -> bool:
        """True when admin login has both an email and a password."""
        return bool(self.ADMIN_EMAIL and self.ADMIN_PASSWORD)

    @property
    def webhook_base_url(self) -> str:
        """Base URL Telegram should call back, without a trailing slash."""
        return f"{self.PUBLIC_BASE_URL.rstrip('/')}{self.API_PREFIX}"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached Settings instance.

    Using lru_cache ensures we only parse .env and validate once,
    not on every access.
    """
    return Settings()


# Global settings instance for easy importing
# Usage: from app.config import settings
settings = get_settings()
