# =============================================================================
# app/exceptions.py - Custom Exception Handlers
# =============================================================================
# Centralized exception handling for the API.
# Every error body has the same shape:
#   {"success": false, "error": "...", "code": "...", "suggestion"?, "details"?}
# =============================================================================

from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


class BladexException(Exception):
    """
    Base exception for the BladeX API.

    All custom HTTP-mappable exceptions inherit from this class.
    """

    def __init__(
        self,
        message: str,
        code: str = "BLADEX_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
        extra: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}
        # Top-level keys some clients read directly (e.g. "required")
        self.extra = extra or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result: dict[str, Any] = {
            "success": False,
            "error": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        result.update(self.extra)
        return result


# =============================================================================
# Request Exceptions (400)
# =============================================================================

class MissingFieldError(BladexException):
    """Raised when a required request field is absent or empty."""

    def __init__(self, message: str, fields: list[str] | None = None):
        super().__init__(
            message=message,
            code="MISSING_FIELD",
            status_code=400,
            extra={"required": fields} if fields else None,
        )


class InvalidRequestError(BladexException):
    """Raised when a request is well-formed but semantically unusable."""

    def __init__(self, message: str, suggestion: str | None = None, details: dict[str, Any] | None = None):
        super().__init__(
            message=message,
            code="INVALID_REQUEST",
            status_code=400,
            suggestion=suggestion,
            details=details,
        )


# =============================================================================
# Auth Exceptions (401)
# =============================================================================

class AuthenticationError(BladexException):
    """Raised when credentials or a session are missing or wrong."""

    def __init__(self, message: str = "Authentication required", extra: dict[str, Any] | None = None):
        super().__init__(
            message=message,
            code="AUTHENTICATION_FAILED",
            status_code=401,
            extra=extra,
        )


class TenantCredentialsError(BladexException):
    """Raised when USER mode is requested but no project credentials are available."""

    def __init__(self):
        super().__init__(
            message="User credentials not found",
            code="TENANT_CREDENTIALS_MISSING",
            status_code=401,
            suggestion="Connect your Supabase project (POST /auth/store-credentials) or sign in again",
        )


# =============================================================================
# Lookup Exceptions (404)
# =============================================================================

class NotFoundError(BladexException):
    """Raised when a referenced row does not exist."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            message=message,
            code="NOT_FOUND",
            status_code=404,
            details=details,
        )


# =============================================================================
# Upstream Exceptions (5xx)
# =============================================================================

class UpstreamServiceError(BladexException):
    """Raised when an external service call fails."""

    def __init__(
        self,
        message: str,
        service: str,
        error: str | None = None,
        status_code: int = 500,
        details: dict[str, Any] | None = None,
    ):
        merged = {"service": service}
        if error:
            merged["error"] = error
        merged.update(details or {})
        super().__init__(
            message=message,
            code="UPSTREAM_ERROR",
            status_code=status_code,
            suggestion="Try again later or contact support if the issue persists",
            details=merged,
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def bladex_exception_handler(
    request: Request,
    exc: BladexException
) -> JSONResponse:
    """Convert BladexException to JSON response."""
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    """
    Handle Pydantic validation errors.

    Missing or malformed input is a 400 in this API.
    """
    errors = exc.errors()
    missing = [
        ".".join(str(part) for part in err.get("loc", ())[1:]) or "body"
        for err in errors
        if err.get("type") == "missing"
    ]
    message = (
        f"Missing required field: {', '.join(missing)}" if missing else "Invalid request body"
    )
    return JSONResponse(
        status_code=400,
        content={
            "success": False,
            "error": message,
            "code": "MISSING_FIELD" if missing else "VALIDATION_ERROR",
            "details": {"errors": [
                {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
                for err in errors
            ]},
        }
    )
