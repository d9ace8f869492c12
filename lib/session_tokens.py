# =============================================================================
# lib/session_tokens.py - Signed Session Tokens
# =============================================================================
# Issues and verifies the HS256 JWT stored in the `session_token` cookie.
#
# Claims: userId, email, role, iat, exp
#
# Usage:
#   token = create_session_token(user_id, email, "admin")
#   user = verify_session_token(token)  # SessionUser or None
# =============================================================================

import logging
from datetime import datetime, timedelta, timezone

from jose import ExpiredSignatureError, JWTError, jwt

from app.config import settings
from core.models.auth import SessionRole, SessionUser

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"


def create_session_token(
    user_id: str,
    email: str,
    role: str = SessionRole.USER.value,
    ttl_days: int | None = None,
) -> str:
    """
    Create a signed session token.

    Args:
        user_id: Admin-project users.id
        email: User email
        role: "user" or "admin"
        ttl_days: Lifetime (default: settings.SESSION_TTL_DAYS)

    Returns:
        Encoded JWT string
    """
    now = datetime.now(timezone.utc)
    expires = now + timedelta(days=ttl_days or settings.SESSION_TTL_DAYS)
    payload = {
        "userId": user_id,
        "email": email,
        "role": role,
        "iat": int(now.timestamp()),
        "exp": int(expires.timestamp()),
    }
    return jwt.encode(payload, settings.SESSION_SECRET, algorithm=ALGORITHM)


def verify_session_token(token: str | None) -> SessionUser | None:
    """
    Verify a session token and return the user it carries.

    Returns None when the token is missing, expired, tampered with, or
    lacks the userId/email claims.
    """
    if not token:
        return None

    try:
        payload = jwt.decode(token, settings.SESSION_SECRET, algorithms=[ALGORITHM])
    except ExpiredSignatureError:
        logger.debug("Session token has expired")
        return None
    except JWTError as e:
        logger.warning(f"Session token validation failed: {e}")
        return None

    user_id = payload.get("userId")
    email = payload.get("email")
    if not user_id or not email:
        logger.warning("Session token missing userId/email claims")
        return None

    return SessionUser(
        user_id=str(user_id),
        email=email,
        role=payload.get("role") or SessionRole.USER.value,
    )
