"""Shared route dependencies: current user and role gates."""
from typing import Optional

from fastapi import Depends, Query
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.exceptions import AuthenticationError
from app.models.base import get_db
from app.models.user import User, ROLE_ADMIN, ROLE_CUSTOMER
from app.services import auth_service
from app.utils.pagination import PageParams

bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    """Dependency: resolve ``Authorization: Bearer <token>`` or raise 401."""
    if not credentials or not credentials.credentials:
        raise AuthenticationError("You are not logged in. Please log in to get access.")
    return auth_service.resolve_token(db, credentials.credentials)


def require_roles(*roles: str):
    """Build a dependency that lets only ``roles`` through (403 otherwise)."""

    def _check(user: User = Depends(get_current_user)) -> User:
        return auth_service.authorize(user, roles)

    return _check


# Module-level so FastAPI caches one resolution per request
admin_only = require_roles(ROLE_ADMIN)
customer_only = require_roles(ROLE_CUSTOMER)


def page_params(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
) -> PageParams:
    """Dependency: ``?page=&limit=`` for list endpoints."""
    return PageParams(page=page, limit=limit)
