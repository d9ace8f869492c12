# =============================================================================
# app/routers/health.py - Health Check Endpoints
# =============================================================================
# Probes for load balancers and the dashboard status badge:
# - /health: process is up, with environment and version
# - /health/ready: admin project reachable, OpenAI and webhook URL configured
# - /health/live: bare liveness
# =============================================================================

import logging
from datetime import datetime, timezone

from fastapi import APIRouter
from pydantic import BaseModel

from app.config import settings
from lib.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)

router = APIRouter()

VERSION = "1.0.0"

# Longest probe error echoed back in a readiness response
MAX_PROBE_ERROR = 50


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class HealthResponse(BaseModel):
    status: str
    timestamp: str
    environment: str
    version: str


class ReadinessChecks(BaseModel):
    """One entry per dependency the API needs to serve traffic."""
    database: str
    ai: str
    webhooks: str


class ReadinessResponse(BaseModel):
    status: str
    checks: ReadinessChecks
    timestamp: str


class LivenessResponse(BaseModel):
    status: str
    timestamp: str


def probe_admin_project() -> str:
    """Read one bot_registry row from the admin project."""
    try:
        SupabaseClient.get_client().table("bot_registry").select("token").limit(1).execute()
    except Exception as e:
        logger.warning(f"Readiness probe failed: {e}")
        return f"unhealthy: {str(e)[:MAX_PROBE_ERROR]}"
    return "healthy"


@router.get("/health", response_model=HealthResponse)
async def health_check():
    return HealthResponse(
        status="healthy",
        timestamp=_now(),
        environment=settings.ENVIRONMENT,
        version=VERSION,
    )


@router.get("/health/ready", response_model=ReadinessResponse)
async def readiness_check():
    """
    Readiness check.

    "ready" only when the admin project answers and an OpenAI key is set;
    a missing PUBLIC_BASE_URL is reported but does not degrade the status
    since only bot registration needs it.
    """
    checks = ReadinessChecks(
        database=probe_admin_project(),
        ai="configured" if settings.OPENAI_API_KEY else "not configured",
        webhooks="configured" if settings.PUBLIC_BASE_URL else "not configured",
    )
    ready = checks.database == "healthy" and checks.ai == "configured"

    return ReadinessResponse(
        status="ready" if ready else "degraded",
        checks=checks,
        timestamp=_now(),
    )


@router.get("/health/live", response_model=LivenessResponse)
async def liveness_check():
    return LivenessResponse(status="alive", timestamp=_now())
