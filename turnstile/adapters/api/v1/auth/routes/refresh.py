from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Request, Response, status

from turnstile.adapters.api.v1.auth.schemas import AuthResponse, RefreshRequest
from turnstile.adapters.api.v1.auth.session_cookie import set_session_cookie
from turnstile.core.config.settings import settings
from turnstile.core.dependencies.auth import get_auth_orchestrator, get_session_id
from turnstile.core.ratelimiter import limiter
from turnstile.domain.services.authentication.auth_orchestrator import AuthOrchestrator

router = APIRouter()


@router.post(
    "",
    response_model=AuthResponse,
    status_code=status.HTTP_200_OK,
    tags=["auth"],
    summary="Rotate a refresh token",
    responses={401: {"description": "Invalid refresh token"}},
)
@limiter.limit(settings.RATE_LIMIT_AUTH)
async def refresh_tokens(
    request: Request,
    payload: RefreshRequest,
    response: Response,
    orchestrator: Annotated[AuthOrchestrator, Depends(get_auth_orchestrator)],
    session_id: Annotated[Optional[str], Depends(get_session_id)],
) -> AuthResponse:
    """Each refresh token works once; the response carries its replacement."""
    result = await orchestrator.refresh(session_id, payload.refresh_token)
    set_session_cookie(response, result.session_id)
    return AuthResponse.from_result(result)
