"""
Password hashing and JWT helpers.

Passwords are hashed with ``bcrypt`` directly and access tokens are signed
with ``python-jose``. Secrets and lifetimes come from the settings singleton.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any

import bcrypt
from jose import JWTError, jwt

from app.config import get_settings

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Password helpers
# ---------------------------------------------------------------------------


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False


# ---------------------------------------------------------------------------
# JWT helpers
# ---------------------------------------------------------------------------


def create_access_token(user_id: int, extra_claims: dict[str, Any] | None = None) -> str:
    """Create a signed JWT whose ``sub`` claim is the user's primary key.

    Args:
        user_id: Primary key of the authenticated ``User``.
        extra_claims: Additional non-reserved claims (e.g. ``email``).

    Returns:
        A compact JWT string valid for ``JWT_EXPIRATION_MINUTES``.
    """
    settings = get_settings()
    now = datetime.now(timezone.utc)
    payload: dict[str, Any] = dict(extra_claims or {})
    payload["sub"] = str(user_id)
    payload["iat"] = now
    payload["exp"] = now + timedelta(minutes=settings.JWT_EXPIRATION_MINUTES)

    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def verify_token(token: str) -> dict[str, Any]:
    """Decode and verify a JWT access token.

    Raises:
        ValueError: If the signature is wrong, the token expired, or it
            cannot be decoded. The auth dependency maps this to HTTP 401.
    """
    settings = get_settings()
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
        )
    except JWTError as exc:
        logger.debug("JWT verification failed: %s", exc)
        raise ValueError("Token inválido o expirado") from exc
