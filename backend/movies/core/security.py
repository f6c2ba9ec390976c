"""
Movies Catalog - Security Module
================================

JWT helpers for the HTTP layer. Tokens are issued by an external identity
service; the catalog only verifies them and reads the acting user and the
role claims. ``create_access_token`` exists for tooling and tests.

Usage:
    from movies.core.security import create_access_token, verify_token

    token = create_access_token(user_id, admin=True)
    payload = verify_token(token)
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any

import jwt

from movies.core.config import settings
from movies.core.logging import get_logger

logger = get_logger(__name__)

USER_ID_CLAIM = "userid"
ADMIN_CLAIM = "admin"
TRUSTED_MEMBER_CLAIM = "trusted_member"


def create_access_token(
    user_id: uuid.UUID,
    admin: bool = False,
    trusted_member: bool = False,
    expires_delta: Optional[timedelta] = None
) -> str:
    """Create JWT access token"""

    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))

    to_encode = {
        "sub": str(user_id),
        USER_ID_CLAIM: str(user_id),
        ADMIN_CLAIM: admin,
        TRUSTED_MEMBER_CLAIM: trusted_member,
        "exp": expire,
        "iat": now,
        "type": "access",
    }

    encoded_jwt = jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    logger.debug("Access token created", user_id=str(user_id))
    return encoded_jwt


def verify_token(token: str, token_type: str = "access") -> Optional[Dict[str, Any]]:
    """Verify and decode JWT token, returning None when it is not acceptable"""

    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except jwt.ExpiredSignatureError:
        logger.debug("Token expired")
        return None
    except jwt.InvalidTokenError as e:
        logger.warning(f"Token validation failed: {e}")
        return None

    if payload.get("type") != token_type:
        logger.warning(f"Invalid token type: expected {token_type}, got {payload.get('type')}")
        return None

    return payload


def get_user_id(payload: Dict[str, Any]) -> Optional[uuid.UUID]:
    """Read the acting user from a verified token payload"""
    raw = payload.get(USER_ID_CLAIM)
    if raw is None:
        return None
    try:
        return uuid.UUID(str(raw))
    except ValueError:
        logger.warning("Token carries a malformed user id", user_id=raw)
        return None


def has_claim(payload: Dict[str, Any], claim: str) -> bool:
    value = payload.get(claim)
    return value is True or str(value).lower() == "true"


__all__ = [
    "create_access_token",
    "verify_token",
    "get_user_id",
    "has_claim",
    "USER_ID_CLAIM",
    "ADMIN_CLAIM",
    "TRUSTED_MEMBER_CLAIM",
]
