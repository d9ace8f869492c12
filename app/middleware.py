# =============================================================================
# app/middleware.py - Cookie Sync Middleware
# =============================================================================
# Re-issues credential and admin cookies on every response so their expiry
# slides forward while the visitor is active.
#
# - Credential cookies (+ schema_setup_completed) only when
#   has_supabase_credentials == "true"
# - admin_mode / admin_session whenever present
# - A cookie the route handler already set (or cleared) is left alone
# - Telegram webhook calls carry no browser cookies and are skipped
#
# Registered in main.py with app.middleware("http").
# =============================================================================

import logging
from http.cookies import SimpleCookie
from typing import Awaitable, Callable

from fastapi import Request, Response

from app import cookies
from app.config import settings

logger = logging.getLogger(__name__)

SYNCED_CREDENTIAL_COOKIES = (
    cookies.SUPABASE_URL,
    cookies.SUPABASE_ANON_KEY,
    cookies.SUPABASE_PROJECT_REF,
    cookies.SUPABASE_ACCESS_TOKEN,
    cookies.SCHEMA_SETUP_COMPLETED,
)


def _webhook_path_prefix() -> str:
    return f"{settings.API_PREFIX}/bots/telegram/webhook/"


def cookies_set_by_handler(response: Response) -> set[str]:
    """Names of the cookies already present in the response's Set-Cookie headers."""
    names: set[str] = set()
    for header in response.headers.getlist("set-cookie"):
        parsed = SimpleCookie()
        parsed.load(header)
        names.update(parsed.keys())
    return names


def sync_cookies(request: Request, response: Response) -> list[str]:
    """
    Copy the request's credential/admin cookies onto the response.

    Returns:
        Names of the cookies re-issued
    """
    already_set = cookies_set_by_handler(response)
    candidates: list[str] = []

    if cookies.is_flag_set(request.cookies, cookies.HAS_SUPABASE_CREDENTIALS):
        candidates.extend(SYNCED_CREDENTIAL_COOKIES)
    candidates.extend(cookies.ADMIN_COOKIES)

    synced = []
    for name in candidates:
        value = request.cookies.get(name)
        if value and name not in already_set:
            cookies.set_cookie(response, name, value)
            synced.append(name)
    return synced


async def cookie_sync_middleware(
    request: Request,
    call_next: Callable[[Request], Awaitable[Response]],
) -> Response:
    """HTTP middleware wrapper around `sync_cookies`."""
    response = await call_next(request)

    if request.url.path.startswith(_webhook_path_prefix()):
        return response

    synced = sync_cookies(request, response)
    if synced:
        logger.debug(f"Synced cookies on {request.url.path}: {synced}")
    return response
