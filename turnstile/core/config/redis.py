"""
Redis settings for the revocation registry, the session store and the
rate-limit counters.
"""
import logging

from pydantic import Field, SecretStr, ValidationInfo, field_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class RedisSettings(BaseSettings):
    """
    Defines settings for the Redis connection.

    Security Note:
        - REDIS_PASSWORD must be set in production; the store holds live session
          records and the revoked-token set.
    """
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = Field(ge=1, le=65535, default=6379)
    REDIS_PASSWORD: SecretStr = SecretStr("")
    REDIS_SSL: bool = False
    REDIS_DB: int = Field(ge=0, default=0)
    REDIS_URL: str = Field(default="", validate_default=True)

    # Rate limiting on the anonymous auth routes
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_AUTH: str = "20/minute"
    RATE_LIMIT_STORAGE_URL: str = Field(default="", validate_default=True)
    RATE_LIMIT_STRATEGY: str = Field(default="fixed-window", pattern="^(fixed-window|moving-window)$")

    @field_validator("REDIS_URL", mode="before")
    @classmethod
    def assemble_redis_url(cls, v: str | None, info: ValidationInfo) -> str:
        """
        Assembles the Redis connection URL if not provided explicitly.

        Args:
            v: Explicitly provided URL or None.
            info: Validation context with other field values.

        Returns:
            Assembled or provided Redis URL.
        """
        if v:
            return v

        values = info.data
        protocol = "rediss" if values.get("REDIS_SSL") else "redis"
        redis_password = values.get("REDIS_PASSWORD")
        secret = redis_password.get_secret_value() if redis_password else ""
        password = f":{secret}@" if secret else ""

        url = f"{protocol}://{password}{values.get('REDIS_HOST')}:{values.get('REDIS_PORT')}/{values.get('REDIS_DB', 0)}"
        logger.debug("Assembled REDIS_URL (password masked for security).")
        return url

    @field_validator("RATE_LIMIT_STORAGE_URL", mode="before")
    @classmethod
    def assemble_rate_limit_storage_url(cls, v: str | None, info: ValidationInfo) -> str:
        """Uses the main Redis URL unless a storage URL (e.g. ``memory://``) is given."""
        if v:
            return v
        return info.data.get("REDIS_URL", "")

    @field_validator("RATE_LIMIT_AUTH")
    @classmethod
    def validate_rate_limit_format(cls, value: str) -> str:
        """Validates the format of rate limit strings (e.g. ``20/minute``)."""
        count, _, period = value.partition("/")
        if not count.isdigit() or int(count) <= 0:
            raise ValueError(f"Invalid rate limit format: {value}. Must be 'count/period'.")
        if period not in ("second", "minute", "hour", "day"):
            raise ValueError(f"Invalid rate limit format: {value}. Must be 'count/period'.")
        return value
