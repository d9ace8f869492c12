# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for shared resources.
# These are injected into route handlers using Depends().
# =============================================================================

from typing import Annotated

from fastapi import Depends, Request

from app import cookies
from core.services.tenant_service import ResolvedClient, TenantService

USER_MODE_HEADER = "x-bladex-user-mode"


def get_tenant(request: Request) -> ResolvedClient:
    """
    Resolve the Supabase client for this request from its cookies.

    Raises TenantCredentialsError (401) when USER mode has no credentials.
    """
    return TenantService.resolve(request.cookies)


def get_admin_mode(request: Request) -> bool:
    """
    Whether the request runs in admin mode.

    An `x-bladex-user-mode` header, when sent, overrides the admin_mode
    cookie: "true" means user mode, anything else admin mode.
    """
    header = request.headers.get(USER_MODE_HEADER)
    if header is not None:
        return header.lower() != "true"
    return cookies.is_flag_set(request.cookies, cookies.ADMIN_MODE)


# Type aliases for dependency injection
TenantDep = Annotated[ResolvedClient, Depends(get_tenant)]
AdminModeDep = Annotated[bool, Depends(get_admin_mode)]
