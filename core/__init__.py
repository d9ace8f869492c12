# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains the request-independent logic:
# - models/: Pydantic schemas, enums and small result types
# - services/: Tenant resolution, bots, messages, contacts, webhooks
#
# Services take a Supabase client and plain values, never a FastAPI
# Request, so they can be tested with a fake client.
# =============================================================================
