"""
API Dependencies
"""

import uuid
from typing import Optional, Dict, Any

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from movies.core.database import get_session_factory
from movies.core.logging import get_logger, user_id_var
from movies.core.security import (
    verify_token, get_user_id, has_claim, ADMIN_CLAIM, TRUSTED_MEMBER_CLAIM,
)
from movies.repositories import UnitOfWorkFactory, sqlalchemy_uow_factory
from movies.services import MovieService, RatingService

logger = get_logger(__name__)
security = HTTPBearer(auto_error=False)

# ==========================================
# SERVICE DEPENDENCIES
# ==========================================

def get_uow_factory() -> UnitOfWorkFactory:
    """Unit-of-work factory bound to the application's session factory"""
    return sqlalchemy_uow_factory(get_session_factory())


def get_movie_service(uow_factory: UnitOfWorkFactory = Depends(get_uow_factory)) -> MovieService:
    return MovieService(uow_factory)


def get_rating_service(uow_factory: UnitOfWorkFactory = Depends(get_uow_factory)) -> RatingService:
    return RatingService(uow_factory)

# ==========================================
# AUTHENTICATION DEPENDENCIES
# ==========================================

async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> Optional[Dict[str, Any]]:
    """
    Get current user from JWT token.
    Returns None if no token provided (for optional auth).
    """
    if not credentials:
        return None

    payload = verify_token(credentials.credentials)
    user_id = get_user_id(payload) if payload else None

    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user_id_var.set(str(user_id))

    return {
        "user_id": user_id,
        "admin": has_claim(payload, ADMIN_CLAIM),
        "trusted_member": has_claim(payload, TRUSTED_MEMBER_CLAIM),
    }


async def get_current_user_id(
    current_user: Optional[Dict[str, Any]] = Depends(get_current_user)
) -> Optional[uuid.UUID]:
    """Acting user for viewer ratings; None for anonymous reads"""
    return current_user["user_id"] if current_user else None


async def require_auth(
    current_user: Optional[Dict[str, Any]] = Depends(get_current_user)
) -> Dict[str, Any]:
    """Require authentication (user must be logged in)"""
    if not current_user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return current_user

# ==========================================
# PERMISSION DEPENDENCIES
# ==========================================

def require_permission(*claims: str):
    """Create dependency that requires any of the given claims"""

    async def check_permission(
        current_user: Dict[str, Any] = Depends(require_auth)
    ) -> Dict[str, Any]:
        if not any(current_user.get(claim) for claim in claims):
            logger.warning("Permission denied", required=list(claims))
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Permission required: {' or '.join(claims)}"
            )

        return current_user

    return check_permission


require_admin = require_permission(ADMIN_CLAIM)
require_trusted_member = require_permission(TRUSTED_MEMBER_CLAIM, ADMIN_CLAIM)
