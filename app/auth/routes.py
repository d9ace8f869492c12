# =============================================================================
# app/auth/routes.py - Admin, Session and Credential Routes
# =============================================================================
# Cookie-based authentication for the dashboard:
# - /admin/*: operator login against ADMIN_EMAIL / ADMIN_PASSWORD
# - /auth/*: signed session_token cookie and tenant credential cookies
# - /users/store-credentials: persist the cookie credentials for a user
#
# Nothing here uses Supabase Auth; identities live in the admin project's
# `users` table.
# =============================================================================

import base64
import hmac
import logging
import time

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from app import cookies
from app.config import settings
from app.exceptions import AuthenticationError, MissingFieldError
from core.models.auth import (
    AdminLoginRequest,
    CreateSessionRequest,
    StoreCredentialsRequest,
    StoreUserCredentialsRequest,
)
from core.services.credential_service import CredentialService

logger = logging.getLogger(__name__)

router = APIRouter()

# Cookies set by a successful admin login and cleared by logout
ADMIN_LOGIN_FLAGS = (
    cookies.ADMIN_SESSION,
    cookies.ADMIN_MODE,
    cookies.SETUP_COMPLETE,
    cookies.SCHEMA_SETUP_COMPLETED,
    cookies.HAS_SUPABASE_CREDENTIALS,
)


def _matches(candidate: str | None, expected: str) -> bool:
    return hmac.compare_digest((candidate or "").encode(), expected.encode())


def admin_token_for(email: str) -> str:
    """Opaque token the dashboard keeps in local storage after login."""
    raw = f"{email}:{int(time.time() * 1000)}"
    return base64.b64encode(raw.encode()).decode()


# =============================================================================
# Admin
# =============================================================================

@router.post("/admin/login")
async def admin_login(body: AdminLoginRequest):
    """
    Log the operator in.

    Sets the admin cookies and the setup flags so the dashboard skips
    onboarding.
    """
    if not settings.admin_credentials_configured:
        logger.error("Admin login attempted but admin credentials are not configured")
        raise AuthenticationError("Invalid credentials")

    email_ok = _matches(body.email, settings.ADMIN_EMAIL)
    password_ok = _matches(body.password, settings.ADMIN_PASSWORD)
    if not (email_ok and password_ok):
        logger.warning("Failed admin login attempt")
        raise AuthenticationError("Invalid credentials")

    response = JSONResponse({
        "success": True,
        "message": "Admin login successful",
        "adminToken": admin_token_for(settings.ADMIN_EMAIL),
        "isAdmin": True,
        "redirectTo": "/dashboard",
    })
    for name in ADMIN_LOGIN_FLAGS:
        cookies.set_cookie(response, name, "true")

    logger.info("Admin logged in")
    return response


@router.post("/admin/logout")
async def admin_logout():
    """Clear every admin cookie."""
    response = JSONResponse({
        "success": True,
        "message": "Admin logged out successfully",
        "clearAdminToken": True,
        "redirectTo": "/",
    })
    for name in ADMIN_LOGIN_FLAGS:
        cookies.clear_cookie(response, name)
    return response


@router.get("/admin/check-session")
async def check_admin_session(request: Request):
    """
    Report whether the browser holds an admin session.

    A valid session gets its companion flags restored; an invalid one has
    any stray admin_mode cookie removed.
    """
    if not cookies.is_flag_set(request.cookies, cookies.ADMIN_SESSION):
        response = JSONResponse(
            status_code=401,
            content={"isAdmin": False, "message": "Admin session not found"},
        )
        if cookies.ADMIN_MODE in request.cookies:
            cookies.clear_cookie(response, cookies.ADMIN_MODE)
        return response

    response = JSONResponse({
        "isAdmin": True,
        "message": "Admin session valid",
        "redirectTo": "/dashboard",
    })
    for name in (cookies.ADMIN_MODE, cookies.SETUP_COMPLETE, cookies.SCHEMA_SETUP_COMPLETED):
        if not cookies.is_flag_set(request.cookies, name):
            cookies.set_cookie(response, name, "true")
    cookies.set_cookie(response, cookies.HAS_SUPABASE_CREDENTIALS, "true")
    return response


# =============================================================================
# Session token
# =============================================================================

@router.post("/auth/create-session")
async def create_session(body: CreateSessionRequest):
    """Issue a session_token cookie for a user of the admin project."""
    token = CredentialService.create_session(body.user_id, body.email, body.role)

    response = JSONResponse({"success": True})
    cookies.set_cookie(response, cookies.SESSION_TOKEN, token)
    return response


@router.get("/auth/verify-session")
async def verify_session(request: Request):
    """Decode the session_token cookie and confirm the user still exists."""
    return CredentialService.verify_session(request.cookies.get(cookies.SESSION_TOKEN))


# =============================================================================
# Tenant credentials
# =============================================================================

@router.post("/auth/store-credentials")
async def store_credentials(body: StoreCredentialsRequest):
    """
    Save the visitor's Supabase project credentials as cookies.

    Subsequent requests resolve to that project (USER mode).
    """
    if not body.supabase_url or not body.supabase_anon_key:
        raise MissingFieldError(
            "Missing required credentials",
            ["supabaseUrl", "supabaseAnonKey"],
        )

    response = JSONResponse({"success": True})
    values = {
        cookies.SUPABASE_URL: body.supabase_url,
        cookies.SUPABASE_ANON_KEY: body.supabase_anon_key,
        cookies.SUPABASE_SERVICE_ROLE_KEY: body.supabase_service_role_key,
        cookies.SUPABASE_PROJECT_REF: body.project_ref,
        cookies.SUPABASE_PROJECT_NAME: body.project_name,
        cookies.SUPABASE_ACCESS_TOKEN: body.access_token,
    }
    for name, value in values.items():
        if value:
            cookies.set_cookie(response, name, value)
    cookies.set_cookie(response, cookies.HAS_SUPABASE_CREDENTIALS, "true")

    logger.info("Stored Supabase credentials in cookies")
    return response


@router.post("/users/store-credentials")
async def store_user_credentials(body: StoreUserCredentialsRequest, request: Request):
    """Encrypt the cookie credentials into the admin project for `email`."""
    user_id = CredentialService.store_user_credentials(body.email, request.cookies)
    return {"success": True, "userId": user_id}
