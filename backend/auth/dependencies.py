"""
FastAPI dependencies for identifying the caller.

This module provides dependency functions that can be used in route handlers to:
- Extract and validate the current user from a JWT bearer token
- Enforce role-based access for administrative endpoints
"""

import logging
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from database import get_db
from models import User, UserRole
from auth.security import verify_token

logger = logging.getLogger(__name__)

# HTTP Bearer token scheme for JWT authentication
security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """
    Extract and validate the current user from a JWT bearer token.

    The returned user is the actor recorded on activities and the creator
    of dependencies.

    Raises:
        HTTPException: 401 if the token is missing or invalid,
                       403 if the account is not active

    Example:
        @app.get("/api/protected")
        def protected_route(user: User = Depends(get_current_user)):
            return {"user_id": user.id}
    """
    if not credentials or not credentials.credentials:
        logger.info("No authentication credentials provided")
        raise _unauthorized("Not authenticated")

    payload = verify_token(credentials.credentials)
    if payload is None:
        raise _unauthorized("Invalid or expired token")

    if payload.get("type") != "access":
        logger.info(f"Invalid token type: {payload.get('type')}")
        raise _unauthorized("Invalid token type. Use access token for API requests.")

    user_id = payload.get("sub")
    # Malformed subjects are a 401, not a 500
    try:
        user_id_int = int(user_id)
    except (TypeError, ValueError):
        logger.info(f"Invalid user_id format in token: {user_id}")
        raise _unauthorized("Invalid token payload")

    user = db.query(User).filter(User.id == user_id_int).first()
    if user is None:
        logger.info(f"User not found for id: {user_id}")
        raise _unauthorized("User not found")

    if not user.is_active:
        logger.info(f"Inactive user attempted access: {user_id}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is inactive",
        )

    logger.debug(f"User authenticated via JWT: {user.email}")
    return user


def require_role(*allowed_roles: UserRole):
    """
    Create a dependency that requires one of the given user roles.

    Example:
        @app.delete("/api/users/{user_id}")
        def delete_user(user_id: int, current_user: User = Depends(require_role(UserRole.admin))):
            ...
    """
    logger.debug(f"Creating role requirement dependency for roles: {[r.value for r in allowed_roles]}")

    def role_checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in allowed_roles:
            logger.info(f"User {current_user.id} with role {current_user.role.value} denied")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return current_user

    return role_checker
