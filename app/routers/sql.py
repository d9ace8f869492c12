# =============================================================================
# app/routers/sql.py - SQL Passthrough Endpoint
# =============================================================================
# Forwards raw SQL to the Supabase Management API with the caller's own
# access token. Used by the onboarding flow to create the schema.
# =============================================================================

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from app.exceptions import MissingFieldError
from core.models.tools import SqlRequest
from lib.management_api import (
    ManagementAPIError,
    ManagementAPIUnavailable,
    manual_sql_document,
    run_sql,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/sql")
async def execute_sql(body: SqlRequest):
    """
    Run SQL on a project.

    - Upstream success: upstream JSON as is
    - Upstream rejection: same status with {error, details|message}
    - Upstream unreachable: 200 with instructions for the SQL editor
    """
    if not body.query:
        raise MissingFieldError("No SQL query provided", ["query"])
    if not body.token:
        raise MissingFieldError("No access token provided", ["token"])
    if not body.project_ref:
        raise MissingFieldError("No project reference provided", ["projectRef"])

    try:
        return run_sql(body.project_ref, body.token, body.query)

    except ManagementAPIError as e:
        content = {"error": e.message}
        if e.body is not None:
            content["details"] = e.body
        else:
            content["message"] = e.raw_text
        return JSONResponse(status_code=e.status_code, content=content)

    except ManagementAPIUnavailable as e:
        logger.warning(f"Returning manual SQL instructions for {body.project_ref}")
        return manual_sql_document(body.project_ref, body.query, e.message)
