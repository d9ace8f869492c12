# =============================================================================
# app/auth/__init__.py - Authentication Module
# =============================================================================
# Cookie-based admin login, signed session tokens and tenant credential
# storage.
#
# Usage:
#   from app.auth import routes as auth_routes
#   app.include_router(auth_routes.router, prefix=settings.API_PREFIX)
# =============================================================================

from app.auth import routes

__all__ = ["routes"]
