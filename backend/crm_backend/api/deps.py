"""Reusable FastAPI dependencies for auth and priority services.

Routes compose these instead of building services inline so tests can swap
any layer through `app.dependency_overrides`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import Depends, HTTPException, Request, status

from crm_backend.core.auth import (
    AuthContext,
    extract_bearer_token,
    get_auth_context,
    tokens_match,
)
from crm_backend.core.config import settings
from crm_backend.core.logging import get_logger
from crm_backend.db.session import get_session
from crm_backend.services.priority.accessor import SqlPriorityDataAccessor

if TYPE_CHECKING:
    from sqlmodel.ext.asyncio.session import AsyncSession

    from crm_backend.models.users import User

logger = get_logger(__name__)

AUTH_DEP = Depends(get_auth_context)
SESSION_DEP = Depends(get_session)


def require_user(auth: AuthContext = AUTH_DEP) -> User:
    """Require an authenticated user and return it."""
    if auth.user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    return auth.user


def get_priority_accessor(session: AsyncSession = SESSION_DEP) -> SqlPriorityDataAccessor:
    """Build the SQL-backed priority accessor for the request session."""
    return SqlPriorityDataAccessor(session)


def require_cron_secret(request: Request) -> None:
    """Authorize scheduler calls presenting `Authorization: Bearer <CRON_SECRET>`."""
    if not settings.cron_secret.strip():
        logger.error("cron.auth.secret_not_configured")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Cron secret is not configured",
        )
    token = extract_bearer_token(request.headers.get("Authorization"))
    if not tokens_match(token, settings.cron_secret):
        logger.warning("cron.auth.rejected", extra={"path": request.url.path})
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


USER_DEP = Depends(require_user)
PRIORITY_ACCESSOR_DEP = Depends(get_priority_accessor)
CRON_SECRET_DEP = Depends(require_cron_secret)
