from typing import Annotated

from fastapi import APIRouter, Depends, status

from turnstile.adapters.api.v1.auth.schemas import (
    DisableTwoFactorRequest,
    TwoFactorCodeRequest,
    TwoFactorSetupResponse,
    TwoFactorStatusResponse,
)
from turnstile.core.dependencies.auth import get_auth_orchestrator, get_current_user
from turnstile.domain.entities.user import User
from turnstile.domain.services.authentication.auth_orchestrator import AuthOrchestrator

router = APIRouter()

CurrentUser = Annotated[User, Depends(get_current_user)]
Orchestrator = Annotated[AuthOrchestrator, Depends(get_auth_orchestrator)]


@router.post(
    "/setup",
    response_model=TwoFactorSetupResponse,
    status_code=status.HTTP_200_OK,
    tags=["two-factor"],
    summary="Start two-factor enrollment",
)
async def setup_two_factor(
    current_user: CurrentUser, orchestrator: Orchestrator
) -> TwoFactorSetupResponse:
    """Returns the secret, a QR code and the plaintext backup codes, once."""
    setup = await orchestrator.setup_two_factor(current_user.id)
    return TwoFactorSetupResponse(
        secret=setup.secret,
        qr_code_url=setup.qr_code_url,
        backup_codes=setup.backup_codes,
    )


@router.post(
    "/verify",
    response_model=TwoFactorStatusResponse,
    status_code=status.HTTP_200_OK,
    tags=["two-factor"],
    summary="Confirm enrollment with a live code",
    responses={400: {"description": "Setup not initiated or invalid code"}},
)
async def verify_two_factor_setup(
    payload: TwoFactorCodeRequest, current_user: CurrentUser, orchestrator: Orchestrator
) -> TwoFactorStatusResponse:
    await orchestrator.verify_two_factor_setup(current_user.id, payload.code)
    return TwoFactorStatusResponse(
        message="Two-factor authentication enabled", two_factor_enabled=True
    )


@router.post(
    "/disable",
    response_model=TwoFactorStatusResponse,
    status_code=status.HTTP_200_OK,
    tags=["two-factor"],
    summary="Disable two-factor authentication",
    responses={401: {"description": "Invalid password"}},
)
async def disable_two_factor(
    payload: DisableTwoFactorRequest, current_user: CurrentUser, orchestrator: Orchestrator
) -> TwoFactorStatusResponse:
    await orchestrator.disable_two_factor(current_user.id, payload.password)
    return TwoFactorStatusResponse(
        message="Two-factor authentication disabled", two_factor_enabled=False
    )
