"""Bearer-token authentication for user-facing API routes.

A single shared token (`LOCAL_AUTH_TOKEN`) resolves to the local operator
account, which is created on first use.
"""

from __future__ import annotations

from dataclasses import dataclass
from hmac import compare_digest
from typing import TYPE_CHECKING, Literal

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from crm_backend.core.config import settings
from crm_backend.core.logging import get_logger
from crm_backend.db import crud
from crm_backend.db.session import get_session
from crm_backend.models.users import User

if TYPE_CHECKING:
    from sqlmodel.ext.asyncio.session import AsyncSession

logger = get_logger(__name__)
security = HTTPBearer(auto_error=False)
SECURITY_DEP = Depends(security)
SESSION_DEP = Depends(get_session)
LOCAL_AUTH_USER_ID = "local-auth-user"
LOCAL_AUTH_EMAIL = "admin@home.local"
LOCAL_AUTH_NAME = "Local User"


@dataclass
class AuthContext:
    """Authenticated user context resolved from inbound auth headers."""

    actor_type: Literal["user"]
    user: User | None = None


def extract_bearer_token(authorization: str | None) -> str | None:
    """Return the token of an `Authorization: Bearer <token>` header, if any."""
    if not authorization:
        return None
    value = authorization.strip()
    if not value:
        return None
    if not value.lower().startswith("bearer "):
        return None
    token = value.split(" ", maxsplit=1)[1].strip()
    return token or None


def tokens_match(presented: str | None, expected: str) -> bool:
    """Constant-time comparison that never matches an empty expected token."""
    expected = expected.strip()
    if not presented or not expected:
        return False
    return compare_digest(presented.encode("utf-8"), expected.encode("utf-8"))


async def _get_or_create_local_user(session: AsyncSession) -> User:
    user, created = await crud.get_or_create(
        session,
        User,
        external_id=LOCAL_AUTH_USER_ID,
        defaults={"email": LOCAL_AUTH_EMAIL, "name": LOCAL_AUTH_NAME},
    )
    if created:
        logger.info("auth.local_user.created", extra={"user_id": str(user.id)})
    return user


async def get_auth_context(
    credentials: HTTPAuthorizationCredentials | None = SECURITY_DEP,
    session: AsyncSession = SESSION_DEP,
) -> AuthContext:
    """Resolve the authenticated user or raise HTTP 401."""
    token = credentials.credentials if credentials is not None else None
    if not tokens_match(token, settings.local_auth_token):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    user = await _get_or_create_local_user(session)
    return AuthContext(actor_type="user", user=user)
