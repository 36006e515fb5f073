from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Response, status

from turnstile.adapters.api.v1.auth.schemas import MessageResponse
from turnstile.adapters.api.v1.auth.session_cookie import clear_session_cookie
from turnstile.core.dependencies.auth import (
    get_auth_orchestrator,
    get_bearer_token,
    get_current_user,
    get_session_id,
)
from turnstile.domain.entities.user import User
from turnstile.domain.services.authentication.auth_orchestrator import AuthOrchestrator

router = APIRouter()


@router.post(
    "",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    tags=["auth"],
    summary="Log out the current session",
    responses={401: {"description": "Authentication required"}},
)
async def logout_user(
    response: Response,
    current_user: Annotated[User, Depends(get_current_user)],
    orchestrator: Annotated[AuthOrchestrator, Depends(get_auth_orchestrator)],
    session_id: Annotated[Optional[str], Depends(get_session_id)],
    bearer_token: Annotated[Optional[str], Depends(get_bearer_token)],
) -> MessageResponse:
    """Revokes the session's tokens and the presented bearer token, then ends the session."""
    extra = [bearer_token] if bearer_token else []
    await orchestrator.logout(session_id, extra_tokens=extra)
    clear_session_cookie(response)
    return MessageResponse(message="Logged out successfully")
