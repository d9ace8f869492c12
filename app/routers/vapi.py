# =============================================================================
# app/routers/vapi.py - Vapi Key Validation Endpoints
# =============================================================================

import logging

from fastapi import APIRouter

from app.config import settings
from app.exceptions import MissingFieldError
from core.models.tools import ValidateVapiKeyRequest
from lib.utils import key_format
from lib.vapi_client import VapiError, classify_rejection, list_assistants

logger = logging.getLogger(__name__)

router = APIRouter()

PLACEHOLDER_KEY = "demo-key"


@router.post("/validate-vapi-key")
async def validate_vapi_key(body: ValidateVapiKeyRequest):
    """
    Check a Vapi key by listing assistants with it.

    A key that works for server calls is a private key. A rejected key is
    reported with 200 and valid=false, with the detected key type.
    """
    if not body.api_key:
        raise MissingFieldError("API key is required", ["apiKey"])

    try:
        assistants = list_assistants(body.api_key)
    except VapiError as e:
        message, key_type = classify_rejection(e)
        return {
            "valid": False,
            "error": message,
            "keyType": key_type,
            "statusCode": e.status_code,
            "keyFormat": key_format(body.api_key),
        }

    return {
        "valid": True,
        "message": "API key is valid and working",
        "assistantCount": len(assistants),
        "keyType": "private",
        "keyFormat": key_format(body.api_key),
    }


@router.get("/validate-vapi-key")
async def check_configured_vapi_key():
    """Status of the server's own VAPI_API_KEY."""
    current = settings.VAPI_API_KEY
    if not current or current == PLACEHOLDER_KEY:
        return {"hasKey": False, "message": "No VAPI API key configured"}

    try:
        assistants = list_assistants(current)
    except VapiError as e:
        return {
            "hasKey": True,
            "valid": False,
            "error": e.upstream_message or e.message or "Unknown error",
            "statusCode": e.status_code,
            "keyLength": len(current),
            "keyFormat": key_format(current),
        }

    return {
        "hasKey": True,
        "valid": True,
        "message": "Current API key is valid",
        "assistantCount": len(assistants),
        "keyLength": len(current),
        "keyFormat": key_format(current),
    }
