from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Request, Response, status
from structlog import get_logger

from turnstile.adapters.api.v1.auth.schemas import AuthResponse, RegisterRequest
from turnstile.adapters.api.v1.auth.session_cookie import set_session_cookie
from turnstile.core.config.settings import settings
from turnstile.core.dependencies.auth import get_auth_orchestrator, get_session_id
from turnstile.core.ratelimiter import limiter
from turnstile.domain.entities.user import Role
from turnstile.domain.services.authentication.auth_orchestrator import AuthOrchestrator

logger = get_logger(__name__)
router = APIRouter()


@router.post(
    "",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["auth"],
    summary="Register a password account",
    responses={
        409: {"description": "Email or phone already registered"},
        422: {"description": "Validation error"},
    },
)
@limiter.limit(settings.RATE_LIMIT_AUTH)
async def register_user(
    request: Request,
    payload: RegisterRequest,
    response: Response,
    orchestrator: Annotated[AuthOrchestrator, Depends(get_auth_orchestrator)],
    session_id: Annotated[Optional[str], Depends(get_session_id)],
) -> AuthResponse:
    """Create the account and authenticate it immediately."""
    result = await orchestrator.register(
        session_id,
        name=payload.name,
        email=payload.email,
        password=payload.password,
        role=Role(payload.role),
        phone=payload.phone,
    )
    set_session_cookie(response, result.session_id)
    return AuthResponse.from_result(result)
