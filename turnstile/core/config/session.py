"""
Session cookie and server-side session record settings.
"""
from typing import Literal, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings

from turnstile.domain.value_objects.duration import parse_duration


class SessionSettings(BaseSettings):
    """
    Defines how the opaque session id is delivered and how long records live.

    The cookie is always ``httpOnly``. ``secure`` and ``SameSite`` follow the
    environment unless set explicitly.
    """
    SESSION_COOKIE_NAME: str = "sessionId"
    SESSION_TTL: str = "7d"
    SESSION_COOKIE_SECURE: Optional[bool] = None
    SESSION_COOKIE_SAMESITE: Optional[Literal["lax", "strict", "none"]] = None
    SESSION_KEY_PREFIX: str = "session:"

    @field_validator("SESSION_TTL")
    @classmethod
    def validate_session_ttl(cls, value: str) -> str:
        parse_duration(value)
        return value
