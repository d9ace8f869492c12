# =============================================================================
# app/cookies.py - Cookie Names and Policies
# =============================================================================
# Every cookie the API reads or writes, with its lifetime and httponly flag.
# All cookies share: path=/, samesite=lax, secure in production, and
# domain=settings.COOKIE_DOMAIN when configured.
#
# Usage:
#   from app import cookies
#   cookies.set_cookie(response, cookies.ADMIN_MODE, "true")
#   if cookies.is_flag_set(request.cookies, cookies.ADMIN_MODE): ...
# =============================================================================

from dataclasses import dataclass
from typing import Mapping

from fastapi import Response

from app.config import settings

ONE_DAY = 60 * 60 * 24
THIRTY_DAYS = ONE_DAY * 30

# -----------------------------------------------------------------------------
# Cookie names
# -----------------------------------------------------------------------------

# Admin
ADMIN_SESSION = "admin_session"
ADMIN_MODE = "admin_mode"

# Setup flags
SETUP_COMPLETE = "setup_complete"
SCHEMA_SETUP_COMPLETED = "schema_setup_completed"
HAS_SUPABASE_CREDENTIALS = "has_supabase_credentials"

# Signed session
SESSION_TOKEN = "session_token"

# Tenant project credentials
SUPABASE_URL = "supabase_url"
SUPABASE_ANON_KEY = "supabase_anon_key"
SUPABASE_SERVICE_ROLE_KEY = "supabase_service_role_key"
SUPABASE_PROJECT_REF = "supabase_project_ref"
SUPABASE_PROJECT_NAME = "supabase_project_name"
SUPABASE_ACCESS_TOKEN = "supabase_access_token"

CREDENTIAL_COOKIES = (
    SUPABASE_URL,
    SUPABASE_ANON_KEY,
    SUPABASE_SERVICE_ROLE_KEY,
    SUPABASE_PROJECT_REF,
    SUPABASE_PROJECT_NAME,
    SUPABASE_ACCESS_TOKEN,
)

ADMIN_COOKIES = (ADMIN_MODE, ADMIN_SESSION)


@dataclass(frozen=True)
class CookiePolicy:
    max_age: int
    httponly: bool


POLICIES: dict[str, CookiePolicy] = {
    ADMIN_SESSION: CookiePolicy(ONE_DAY, httponly=True),
    ADMIN_MODE: CookiePolicy(ONE_DAY, httponly=False),
    SETUP_COMPLETE: CookiePolicy(THIRTY_DAYS, httponly=True),
    SCHEMA_SETUP_COMPLETED: CookiePolicy(THIRTY_DAYS, httponly=False),
    HAS_SUPABASE_CREDENTIALS: CookiePolicy(THIRTY_DAYS, httponly=False),
    **{name: CookiePolicy(THIRTY_DAYS, httponly=True) for name in CREDENTIAL_COOKIES},
}


def policy_for(name: str) -> CookiePolicy:
    """Policy for a cookie; session_token follows SESSION_TTL_DAYS."""
    if name == SESSION_TOKEN:
        return CookiePolicy(ONE_DAY * settings.SESSION_TTL_DAYS, httponly=True)
    return POLICIES.get(name, CookiePolicy(THIRTY_DAYS, httponly=True))


def set_cookie(response: Response, name: str, value: str) -> None:
    """Set a cookie with its registered policy."""
    policy = policy_for(name)
    response.set_cookie(
        key=name,
        value=value,
        max_age=policy.max_age,
        path="/",
        domain=settings.COOKIE_DOMAIN,
        secure=settings.cookie_secure,
        httponly=policy.httponly,
        samesite="lax",
    )


def clear_cookie(response: Response, name: str) -> None:
    """Expire a cookie on the client."""
    response.delete_cookie(
        key=name,
        path="/",
        domain=settings.COOKIE_DOMAIN,
        secure=settings.cookie_secure,
        httponly=policy_for(name).httponly,
        samesite="lax",
    )


def is_flag_set(cookies: Mapping[str, str], name: str) -> bool:
    """True when a flag cookie holds the string "true"."""
    return cookies.get(name) == "true"


def read_credentials(cookies: Mapping[str, str]) -> dict[str, str]:
    """
    Tenant project credentials carried in cookies.

    Returns a dict keyed by cookie name holding only the cookies present.
    """
    return {name: cookies[name] for name in CREDENTIAL_COOKIES if cookies.get(name)}


def has_tenant_credentials(cookies: Mapping[str, str]) -> bool:
    """True when both the project URL and anon key cookies are present."""
    return bool(cookies.get(SUPABASE_URL) and cookies.get(SUPABASE_ANON_KEY))
