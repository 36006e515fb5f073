from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Request, Response, status

from turnstile.adapters.api.v1.auth.schemas import AuthResponse, ProviderLoginRequest
from turnstile.adapters.api.v1.auth.session_cookie import set_session_cookie
from turnstile.core.config.settings import settings
from turnstile.core.dependencies.auth import get_auth_orchestrator, get_session_id
from turnstile.core.ratelimiter import limiter
from turnstile.domain.services.authentication.auth_orchestrator import AuthOrchestrator
from turnstile.domain.value_objects.auth_result import ProviderProfile

router = APIRouter()


@router.post(
    "",
    response_model=AuthResponse,
    status_code=status.HTTP_200_OK,
    tags=["auth"],
    summary="Log in with an OAuth provider identity",
    responses={409: {"description": "Email already registered with a different provider"}},
)
@limiter.limit(settings.RATE_LIMIT_AUTH)
async def provider_login(
    request: Request,
    payload: ProviderLoginRequest,
    response: Response,
    orchestrator: Annotated[AuthOrchestrator, Depends(get_auth_orchestrator)],
    session_id: Annotated[Optional[str], Depends(get_session_id)],
) -> AuthResponse:
    profile = ProviderProfile(
        provider=payload.provider,
        provider_id=payload.provider_id,
        email=payload.email,
        name=payload.name,
        access_token=payload.access_token,
        avatar_url=str(payload.avatar_url) if payload.avatar_url else None,
    )
    result = await orchestrator.provider_login(session_id, profile)
    set_session_cookie(response, result.session_id)
    return AuthResponse.from_result(result)
