import logging
from typing import Callable, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

import db_models
from core.exceptions import AccessDeniedError
from core.security import verify_access_token
from db_config import get_db

logger = logging.getLogger(__name__)

ROLE_USER = "ROLE_USER"
ROLE_ADMIN = "ROLE_ADMIN"


# Custom HTTPBearer that raises 401 instead of 403
class HTTPBearerAuth(HTTPBearer):
    async def __call__(
        self, request: Request
    ) -> Optional[HTTPAuthorizationCredentials]:
        try:
            return await super().__call__(request)
        except HTTPException:
            # Override the default 403 with 401
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Not authenticated",
                headers={"WWW-Authenticate": "Bearer"},
            )


# This tells FastAPI to look for "Authorization: Bearer <token>" header
security = HTTPBearerAuth()


def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db_session: Session = Depends(get_db),
) -> db_models.User:
    """
    Dependency that extracts and verifies JWT token from request
    Returns the authenticated User object.
    Raises 401 if token is missing, invalid, or user not found.
    Also stores user in request.state for rate limiting.
    """
    payload = verify_access_token(credentials.credentials)
    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    username: str | None = payload.get("sub")
    if username is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = (
        db_session.query(db_models.User)
        .filter(db_models.User.username == username)
        .first()
    )

    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )

    request.state.user = user

    return user


def require_role(role: str) -> Callable[..., db_models.User]:
    """
    Build a dependency that only lets through users holding role.

    Usage:
        current_user: db_models.User = Depends(require_role(ROLE_ADMIN))
    """

    def dependency(
        current_user: db_models.User = Depends(get_current_user),
    ) -> db_models.User:
        if role not in current_user.roles:
            logger.warning(
                f"Access denied: user_id={current_user.id} lacks {role}"
            )
            raise AccessDeniedError(user_id=current_user.id, role=role)  # type: ignore
        return current_user

    return dependency
