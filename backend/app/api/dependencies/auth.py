# backend/app/api/dependencies/auth.py
"""
Authentication and authorization dependencies.

Tokens are HS256 JWTs carrying the user's email in "sub".
"""

import logging

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from ...auth import decode_access_token
from ...core.exceptions import ForbiddenException, UnauthorizedException
from ...models.user import User
from ...repositories import RepositoryFactory
from .database import get_db

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    """
    Resolve the bearer token to an active user.

    Raises:
        UnauthorizedException: missing, invalid or expired token, or unknown user
    """
    if credentials is None:
        raise UnauthorizedException("Not authenticated", code="NOT_AUTHENTICATED")

    payload = decode_access_token(credentials.credentials)
    email = payload.get("sub") if payload else None
    if not email:
        raise UnauthorizedException("Could not validate credentials", code="INVALID_TOKEN")

    user = RepositoryFactory.create_user_repository(db).get_by_email(email)
    if user is None or not user.is_active:
        raise UnauthorizedException("Could not validate credentials", code="INVALID_TOKEN")
    return user


def require_admin(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.is_admin:
        logger.warning(f"Non-admin user {current_user.id} attempted an admin operation")
        raise ForbiddenException("Admin access required", code="ADMIN_REQUIRED")
    return current_user
