"""Security utilities: JWT tokens and password hashing."""

from __future__ import annotations

import secrets
from datetime import datetime, timedelta, timezone
from typing import Any
import logging

import jwt
from jwt.exceptions import PyJWTError
import bcrypt

from gymaccess.core.config import settings

logger = logging.getLogger(__name__)

# Token audiences: staff consoles and the member portal get distinct tokens
STAFF_AUDIENCE = "staff"
MEMBER_AUDIENCE = "member"
AUDIENCES = (STAFF_AUDIENCE, MEMBER_AUDIENCE)


def verify_password(plain_password: str, hashed_password: str | None) -> bool:
    """Verify a plain password against a hash.

    Uses bcrypt's built-in timing-safe comparison. Members registered by
    staff have no password hash and can never log in with a password.
    """
    if not hashed_password:
        return False
    try:
        return bcrypt.checkpw(
            plain_password.encode('utf-8'),
            hashed_password.encode('utf-8')
        )
    except Exception as e:
        logger.warning(f"Password verification error: {e}")
        return False


def get_password_hash(password: str) -> str:
    """Hash a password using bcrypt."""
    return bcrypt.hashpw(
        password.encode('utf-8'),
        bcrypt.gensalt()
    ).decode('utf-8')


def create_access_token(
    data: dict[str, Any],
    audience: str,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a JWT access token for the given audience."""
    if audience not in AUDIENCES:
        raise ValueError(f"Unknown token audience: {audience}")
    to_encode = data.copy()
    now = datetime.now(timezone.utc)

    if expires_delta:
        expire = now + expires_delta
    else:
        expire = now + timedelta(minutes=settings.access_token_expire_minutes)

    to_encode.update({
        "exp": expire,
        "iat": now,
        "aud": audience,
        "jti": secrets.token_urlsafe(16),
    })
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str) -> dict[str, Any] | None:
    """Decode and validate a JWT token. Returns None when invalid or expired."""
    try:
        return jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.algorithm],
            audience=list(AUDIENCES),
            options={"require": ["exp", "aud", "sub"]},
        )
    except PyJWTError as e:
        logger.debug(f"JWT decode error: {e}")
        return None
