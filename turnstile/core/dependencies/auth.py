from __future__ import annotations

from functools import lru_cache
from typing import Annotated, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession

from turnstile.core.config.settings import settings
from turnstile.domain.entities.user import User
from turnstile.domain.services.auth.revocation import TokenRevocationService
from turnstile.domain.services.auth.session import SessionStateManager
from turnstile.domain.services.auth.token import TokenService
from turnstile.domain.services.auth.two_factor import TwoFactorService
from turnstile.domain.services.authentication.auth_orchestrator import AuthOrchestrator
from turnstile.infrastructure.database import get_async_db
from turnstile.infrastructure.redis import get_redis
from turnstile.infrastructure.repositories.revocation_registry import RedisRevocationRegistry
from turnstile.infrastructure.repositories.session_store import RedisSessionStore
from turnstile.infrastructure.repositories.user_repository import CredentialRepository

__all__ = [
    "get_token_service",
    "get_two_factor_service",
    "get_auth_orchestrator",
    "get_session_id",
    "get_bearer_token",
    "get_current_user",
]


# ---------------------------------------------------------------------------
# Type-annotated dependency shortcuts
# ---------------------------------------------------------------------------


DBSession = Annotated[AsyncSession, Depends(get_async_db)]
RedisClient = Annotated[Redis, Depends(get_redis)]

_bearer_scheme = HTTPBearer(auto_error=False)


# ---------------------------------------------------------------------------
# Stateless services, built once
# ---------------------------------------------------------------------------


@lru_cache(maxsize=1)
def get_token_service() -> TokenService:
    return TokenService()


@lru_cache(maxsize=1)
def get_two_factor_service() -> TwoFactorService:
    return TwoFactorService()


# ---------------------------------------------------------------------------
# Public dependencies
# ---------------------------------------------------------------------------


async def get_auth_orchestrator(
    db_session: DBSession,
    redis_client: RedisClient,
    token_service: Annotated[TokenService, Depends(get_token_service)],
    two_factor: Annotated[TwoFactorService, Depends(get_two_factor_service)],
) -> AuthOrchestrator:
    """Wire the orchestrator to the request's database session and Redis client."""
    return AuthOrchestrator(
        credentials=CredentialRepository(db_session),
        token_service=token_service,
        two_factor=two_factor,
        revocations=TokenRevocationService(RedisRevocationRegistry(redis_client), token_service),
        sessions=SessionStateManager(RedisSessionStore(redis_client)),
    )


def get_session_id(request: Request) -> Optional[str]:
    """The opaque session id from the session cookie, if the client sent one."""
    return request.cookies.get(settings.SESSION_COOKIE_NAME) or None


def get_bearer_token(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(_bearer_scheme)],
) -> Optional[str]:
    return credentials.credentials if credentials else None


async def get_current_user(
    orchestrator: Annotated[AuthOrchestrator, Depends(get_auth_orchestrator)],
    session_id: Annotated[Optional[str], Depends(get_session_id)],
    bearer_token: Annotated[Optional[str], Depends(get_bearer_token)],
) -> User:
    """Return the authenticated :class:`~turnstile.domain.entities.user.User`.

    An authenticated session cookie wins; otherwise a non-revoked Bearer
    access token is required. Failures raise ``AuthenticationError``
    subclasses, rendered as 401 by the exception handlers.
    """
    return await orchestrator.resolve_current_user(session_id, bearer_token)
