"""Request-payload Pydantic models for authentication endpoints."""

from typing import Literal, Optional

from pydantic import BaseModel, EmailStr, Field, HttpUrl, field_validator

from turnstile.utils.security import validate_password_strength

ProviderName = Literal["google", "facebook", "github", "microsoft"]


class RegisterRequest(BaseModel):
    """Payload expected by ``POST /auth/register``."""

    name: str = Field(..., min_length=2, max_length=100, examples=["Ada Lovelace"])
    email: EmailStr = Field(..., examples=["ada@example.com"])
    password: str = Field(..., min_length=8, max_length=128, examples=["Str0ngPassw0rd"])
    phone: Optional[str] = Field(default=None, max_length=32, examples=["+1 (555) 123-4567"])
    role: Literal["user"] = "user"

    @field_validator("password")
    @classmethod
    def check_password_policy(cls, value: str) -> str:
        if not validate_password_strength(value):
            raise ValueError(
                "Password must contain at least one uppercase letter, one lowercase letter and one digit"
            )
        return value


class LoginRequest(BaseModel):
    """Payload expected by ``POST /auth/login``; ``identifier`` is an email or phone."""

    identifier: str = Field(..., min_length=1, max_length=254, examples=["ada@example.com"])
    password: str = Field(..., min_length=1, max_length=128)


class TwoFactorCodeRequest(BaseModel):
    """A 6-digit TOTP code or an 8-character backup code."""

    code: str = Field(..., min_length=6, max_length=16, examples=["123456"])


class DisableTwoFactorRequest(BaseModel):
    password: str = Field(..., min_length=1, max_length=128)


class RefreshRequest(BaseModel):
    refresh_token: str = Field(..., min_length=10)


class ProviderLoginRequest(BaseModel):
    """Payload expected by ``POST /auth/login/oauth``."""

    provider: ProviderName = Field(..., examples=["google"])
    provider_id: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    name: str = Field(..., min_length=1, max_length=100)
    access_token: str = Field(..., min_length=1)
    avatar_url: Optional[HttpUrl] = None
