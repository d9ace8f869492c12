# =============================================================================
# lib/management_api.py - Supabase Management API (SQL passthrough)
# =============================================================================
# Runs raw SQL against a project through
#   POST {SUPABASE_MANAGEMENT_API_URL}/v1/projects/{ref}/sql
# authenticated with the caller's personal access token.
#
# Three outcomes:
# - 2xx: upstream JSON is returned verbatim
# - non-2xx: ManagementAPIError carrying the upstream status and body
# - transport failure: ManagementAPIUnavailable, so the caller can hand the
#   user a manual "paste this into the SQL editor" document instead
# =============================================================================

import logging
from typing import Any

import httpx

from app.config import settings
from lib.utils import ApplicationError

logger = logging.getLogger(__name__)

MANUAL_SQL_INSTRUCTIONS = [
    "1. Click the 'Open SQL Editor' button below",
    "2. Copy the SQL code using the copy button",
    "3. Paste the SQL into the Supabase SQL Editor",
    "4. Click 'Run' in the Supabase interface to execute the SQL",
]


class ManagementAPIError(ApplicationError):
    """The Management API answered with a non-2xx status."""

    def __init__(self, status_code: int, body: Any, raw_text: str = ""):
        super().__init__(
            "SQL execution failed",
            code="MANAGEMENT_API_ERROR",
            details={"status_code": status_code},
        )
        self.status_code = status_code
        # Parsed JSON error body, or None when upstream sent plain text
        self.body = body
        self.raw_text = raw_text


class ManagementAPIUnavailable(ApplicationError):
    """The Management API could not be reached."""

    def __init__(self, message: str):
        super().__init__(message, code="MANAGEMENT_API_UNAVAILABLE")


def run_sql(project_ref: str, access_token: str, query: str) -> Any:
    """
    Execute `query` on a project via the Management API.

    Raises:
        ManagementAPIError: Upstream rejected the query
        ManagementAPIUnavailable: Upstream could not be reached
    """
    url = f"{settings.SUPABASE_MANAGEMENT_API_URL.rstrip('/')}/v1/projects/{project_ref}/sql"
    preview = query[:100] + ("..." if len(query) > 100 else "")
    logger.info(f"SQL request for project {project_ref}: {preview}")

    try:
        response = httpx.post(
            url,
            json={"query": query},
            headers={"Authorization": f"Bearer {access_token}"},
            timeout=settings.HTTP_TIMEOUT_SECONDS,
        )
    except httpx.HTTPError as e:
        logger.error(f"Management API unreachable: {e}")
        raise ManagementAPIUnavailable(str(e) or "Unknown error occurred while executing SQL")

    if response.is_success:
        return response.json()

    text = response.text
    logger.error(f"SQL execution failed ({response.status_code}): {text[:200]}")
    try:
        body = response.json()
    except ValueError:
        body = None
    raise ManagementAPIError(response.status_code, body, text)


def manual_sql_document(project_ref: str, query: str, error: str) -> dict[str, Any]:
    """Instructions for running `query` by hand in the dashboard SQL editor."""
    dashboard = settings.SUPABASE_DASHBOARD_URL.rstrip("/")
    return {
        "sql_editor_link": f"{dashboard}/project/{project_ref}/sql" if project_ref else dashboard,
        "formatted_sql": query,
        "instructions": MANUAL_SQL_INSTRUCTIONS,
        "message": "For security reasons, SQL needs to be executed directly in Supabase",
        "error": error,
    }
