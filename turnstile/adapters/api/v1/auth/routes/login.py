from typing import Annotated, Optional, Union

from fastapi import APIRouter, Depends, Request, Response, status

from turnstile.adapters.api.v1.auth.schemas import (
    AuthResponse,
    LoginRequest,
    TwoFactorCodeRequest,
    TwoFactorRequiredResponse,
)
from turnstile.adapters.api.v1.auth.session_cookie import set_session_cookie
from turnstile.core.config.settings import settings
from turnstile.core.dependencies.auth import get_auth_orchestrator, get_session_id
from turnstile.core.ratelimiter import limiter
from turnstile.domain.services.authentication.auth_orchestrator import AuthOrchestrator
from turnstile.domain.value_objects.auth_result import TwoFactorChallenge

router = APIRouter()


@router.post(
    "",
    response_model=Union[AuthResponse, TwoFactorRequiredResponse],
    status_code=status.HTTP_200_OK,
    tags=["auth"],
    summary="Log in with email or phone and password",
    responses={401: {"description": "Invalid credentials"}},
)
@limiter.limit(settings.RATE_LIMIT_AUTH)
async def login_user(
    request: Request,
    payload: LoginRequest,
    response: Response,
    orchestrator: Annotated[AuthOrchestrator, Depends(get_auth_orchestrator)],
    session_id: Annotated[Optional[str], Depends(get_session_id)],
) -> Union[AuthResponse, TwoFactorRequiredResponse]:
    """Returns tokens, or a two-factor challenge when the account has 2FA enabled."""
    result = await orchestrator.login(session_id, payload.identifier, payload.password)
    set_session_cookie(response, result.session_id)
    if isinstance(result, TwoFactorChallenge):
        return TwoFactorRequiredResponse(message=result.message)
    return AuthResponse.from_result(result)


@router.post(
    "/verify-2fa",
    response_model=AuthResponse,
    status_code=status.HTTP_200_OK,
    tags=["auth"],
    summary="Complete a login with a TOTP or backup code",
    responses={401: {"description": "Session expired or invalid code"}},
)
@limiter.limit(settings.RATE_LIMIT_AUTH)
async def verify_two_factor_login(
    request: Request,
    payload: TwoFactorCodeRequest,
    response: Response,
    orchestrator: Annotated[AuthOrchestrator, Depends(get_auth_orchestrator)],
    session_id: Annotated[Optional[str], Depends(get_session_id)],
) -> AuthResponse:
    result = await orchestrator.verify_two_factor_login(session_id, payload.code)
    set_session_cookie(response, result.session_id)
    return AuthResponse.from_result(result)
