# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the BladeX API:
# - test_models.py, test_encryption.py, test_session_tokens.py: unit tests
# - test_tenant.py, test_bot_registry.py, test_*_service.py: services
#   against a fake Supabase client
# - test_routes_*.py: endpoints through FastAPI's TestClient
#
# Run tests with: pytest
# =============================================================================
