"""
Dependency Injection
FastAPI dependencies for database sessions, authentication and services.
"""

import logging
from typing import Callable, Generator, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from ..db.enums import UserRole
from ..db.models import User
from ..db.session import get_session_factory
from .security import ACCESS_TOKEN, verify_token
from .services.cache_service import CacheService, get_cache_service

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def get_db() -> Generator[Session, None, None]:
    """
    Get database session.

    Use as FastAPI dependency:
        @app.get("/endpoint")
        def endpoint(db: Session = Depends(get_db)):
            ...
    """
    SessionLocal = get_session_factory()
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_cache() -> CacheService:
    """Get the response cache service."""
    return get_cache_service()


def _credentials_exception(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _user_from_token(token: str, db: Session) -> Optional[User]:
    payload = verify_token(token, expected_type=ACCESS_TOKEN)
    if not payload:
        return None

    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        return None

    user = db.query(User).filter(User.id == user_id).first()
    if user is None or payload.get("ver") != user.token_version:
        return None
    return user


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    """
    Get current authenticated user from the bearer access token.

    Use as FastAPI dependency to protect routes:
        @app.get("/endpoint")
        def endpoint(current_user: User = Depends(get_current_user)):
            ...

    Raises:
        HTTPException: 401 if not authenticated or token invalid, 403 if disabled
    """
    if credentials is None or not credentials.credentials:
        raise _credentials_exception("Not authenticated")

    user = _user_from_token(credentials.credentials, db)
    if user is None:
        raise _credentials_exception("Invalid or expired token")

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is disabled",
        )

    return user


def get_current_user_optional(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> Optional[User]:
    """
    Get current authenticated user, but don't raise error if not authenticated.
    Returns None if no valid token.

    Use for endpoints that work for both authenticated and anonymous users.
    """
    if credentials is None or not credentials.credentials:
        return None

    user = _user_from_token(credentials.credentials, db)
    if user is None or not user.is_active:
        return None
    return user


def require_roles(*roles: UserRole) -> Callable[..., User]:
    """
    Build a dependency that only admits users with one of the given roles.

    Use as FastAPI dependency:
        @app.get("/endpoint")
        def endpoint(user: User = Depends(require_roles(UserRole.ADMIN))):
            ...
    """
    allowed = {role.value for role in roles}

    def dependency(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return current_user

    return dependency


require_admin = require_roles(UserRole.ADMIN)
