# =============================================================================
# app/ - FastAPI Application Package
# =============================================================================
# This package contains the FastAPI web application:
# - main.py: App entry point, middleware setup, error handlers
# - config.py: Environment variable loading and settings
# - cookies.py / middleware.py: Cookie policies and sliding-expiry sync
# - dependencies.py: Per-request tenant resolution and admin mode
# - auth/: Admin login, session tokens, credential cookies
# - routers/: API endpoint definitions organized by feature
#
# The app layer is thin - it handles HTTP concerns and delegates
# business logic to the core/ package.
# =============================================================================
