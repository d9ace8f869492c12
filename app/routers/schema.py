# =============================================================================
# app/routers/schema.py - Schema Verification Endpoint
# =============================================================================
# Confirms the tables the dashboard needs exist in the visitor's project by
# selecting one row from each with the cookie credentials.
# =============================================================================

import logging

from fastapi import APIRouter, Request

from app import cookies
from app.exceptions import InvalidRequestError, MissingFieldError
from core.models.tools import VerifySchemaRequest
from lib.supabase_client import SupabaseClient, SupabaseClientError, is_not_found_error

logger = logging.getLogger(__name__)

router = APIRouter()

REQUIRED_TABLES = ("contacts", "messages")
OPTIONAL_EMPTY_TABLES = ("agents",)


def _probe(client, table: str) -> Exception | None:
    try:
        client.table(table).select("id").limit(1).execute()
    except Exception as e:
        return e
    return None


@router.post("/verify-schema")
async def verify_schema(body: VerifySchemaRequest, request: Request):
    """
    Check the contacts, messages and agents tables.

    A failed probe is reported with 200 and success=false so the setup
    wizard can show it inline.
    """
    if not body.project_ref:
        raise MissingFieldError("Missing projectRef parameter", ["projectRef"])
    if not cookies.has_tenant_credentials(request.cookies):
        raise InvalidRequestError("Missing Supabase credentials")

    try:
        client = SupabaseClient.create_tenant_client(
            request.cookies[cookies.SUPABASE_URL],
            request.cookies[cookies.SUPABASE_ANON_KEY],
        )
    except SupabaseClientError as e:
        raise InvalidRequestError(e.message, suggestion=e.suggestion)

    tables: dict[str, bool] = {}
    for table in REQUIRED_TABLES + OPTIONAL_EMPTY_TABLES:
        error = _probe(client, table)
        if error is not None and table in OPTIONAL_EMPTY_TABLES and is_not_found_error(error):
            tables[table] = False
            continue
        if error is not None:
            logger.error(f"Error querying {table} table: {error}")
            return {
                "success": False,
                "error": getattr(error, "message", None) or str(error),
                "details": f"Could not verify {table} table",
            }
        tables[table] = True

    logger.info(f"Schema verified for project {body.project_ref}")
    return {
        "success": True,
        "message": "Schema verification successful",
        "tables": tables,
    }
