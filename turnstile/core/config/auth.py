"""Token, password-hashing and two-factor settings.
"""

import logging

from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings

from turnstile.domain.value_objects.duration import parse_duration

logger = logging.getLogger(__name__)

MIN_JWT_SECRET_LENGTH = 10


class AuthSettings(BaseSettings):
    """Defines settings for token signing, password hashing and TOTP.

    Access and refresh tokens are signed with two independent secrets so that a
    leaked token of one kind can never be replayed as the other.

    Security Note:
        - Both secrets must be long random strings, stored outside version control
          and rotated together with a forced logout of all sessions.
    """

    JWT_ACCESS_SECRET: SecretStr
    JWT_REFRESH_SECRET: SecretStr
    JWT_ALGORITHM: str = Field(default="HS256", pattern="^HS(256|384|512)$")
    JWT_ACCESS_EXPIRES_IN: str = "15m"
    JWT_REFRESH_EXPIRES_IN: str = "7d"

    BCRYPT_WORK_FACTOR: int = Field(ge=4, le=31, default=12)

    TWO_FACTOR_ISSUER: str = "Turnstile"
    TOTP_VALID_WINDOW: int = Field(ge=0, le=10, default=2)
    BACKUP_CODE_COUNT: int = Field(ge=1, le=50, default=10)
    PENDING_TWO_FACTOR_TTL: str = "10m"

    REVOCATION_FALLBACK_TTL: str = "24h"

    @field_validator(
        "JWT_ACCESS_EXPIRES_IN",
        "JWT_REFRESH_EXPIRES_IN",
        "PENDING_TWO_FACTOR_TTL",
        "REVOCATION_FALLBACK_TTL",
    )
    @classmethod
    def validate_duration(cls, value: str) -> str:
        """Rejects durations the token and store layers could not interpret."""
        parse_duration(value)
        return value

    @field_validator("JWT_ACCESS_SECRET", "JWT_REFRESH_SECRET")
    @classmethod
    def validate_secret_length(cls, value: SecretStr) -> SecretStr:
        if len(value.get_secret_value()) < MIN_JWT_SECRET_LENGTH:
            raise ValueError(
                f"JWT secrets must be at least {MIN_JWT_SECRET_LENGTH} characters long"
            )
        return value

    @model_validator(mode="after")
    def _validate_distinct_secrets(self) -> "AuthSettings":
        """Access and refresh tokens must not share a signing secret."""
        if self.JWT_ACCESS_SECRET.get_secret_value() == self.JWT_REFRESH_SECRET.get_secret_value():
            error_msg = "JWT_ACCESS_SECRET and JWT_REFRESH_SECRET must be different."
            logger.error(error_msg)
            raise ValueError(error_msg)
        return self
