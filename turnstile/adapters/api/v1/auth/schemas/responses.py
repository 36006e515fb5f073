"""Response Pydantic models for authentication endpoints."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from turnstile.domain.entities.user import User
from turnstile.domain.value_objects.auth_result import AuthResult


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    phone: Optional[str] = None
    role: str
    provider: Optional[str] = None
    avatar_url: Optional[str] = None
    two_factor_enabled: bool = False

    @classmethod
    def from_entity(cls, user: User) -> "UserOut":
        role = user.role.value if hasattr(user.role, "value") else str(user.role)
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            phone=user.phone,
            role=role,
            provider=user.provider,
            avatar_url=user.avatar_url,
            two_factor_enabled=user.two_factor_enabled,
        )


class TokenPairResponse(BaseModel):
    """JWT access & refresh tokens with expiry metadata."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int
    expires_at: datetime


class AuthResponse(BaseModel):
    user: UserOut
    tokens: TokenPairResponse
    used_backup_code: bool = False

    @classmethod
    def from_result(cls, result: AuthResult) -> "AuthResponse":
        pair = result.tokens
        return cls(
            user=UserOut.from_entity(result.user),
            tokens=TokenPairResponse(
                access_token=pair.access_token,
                refresh_token=pair.refresh_token,
                token_type=pair.token_type,
                expires_in=pair.expires_in,
                expires_at=pair.expires_at,
            ),
            used_backup_code=result.used_backup_code,
        )


class TwoFactorRequiredResponse(BaseModel):
    requires_two_factor: bool = True
    message: str


class TwoFactorSetupResponse(BaseModel):
    secret: str
    qr_code_url: str
    backup_codes: List[str]


class TwoFactorStatusResponse(BaseModel):
    message: str
    two_factor_enabled: bool


class MessageResponse(BaseModel):
    message: str
