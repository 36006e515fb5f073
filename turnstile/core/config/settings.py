"""Main application settings and configuration management.

This module composes the settings from the different modules (app, database,
redis, auth, session) into a single ``Settings`` class, loads them from
environment variables and .env files, validates them, and exposes a single
``settings`` object for use throughout the application.

Environment Support:
- Development: Uses .env
- Test: Uses .env.test when present
- Staging: Uses .env.staging
- Production: Uses .env.production
"""

import logging
import os
from pathlib import Path
from typing import Literal

from pydantic import model_validator
from pydantic_settings import SettingsConfigDict

from .app import AppSettings
from .auth import AuthSettings
from .database import DatabaseSettings
from .redis import RedisSettings
from .session import SessionSettings

logger = logging.getLogger(__name__)
logging.getLogger("passlib").setLevel(logging.ERROR)


class Settings(AppSettings, DatabaseSettings, RedisSettings, AuthSettings, SessionSettings):
    """The main settings class that aggregates all application configurations.

    Security Note:
        - Signing secrets and store passwords are ``SecretStr`` and are never
          logged.
        - Production refuses to start without a Redis password, since Redis holds
          live session records.
    Usage:
        - Access settings via the singleton instance ``settings``.
    """

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=True, extra="ignore"
    )

    @model_validator(mode="after")
    def _validate_production_requirements(self) -> "Settings":
        if self.is_production and not self.REDIS_PASSWORD.get_secret_value():
            error_msg = "REDIS_PASSWORD must be set in production."
            logger.error(error_msg)
            raise ValueError(error_msg)
        return self

    @property
    def session_cookie_secure(self) -> bool:
        if self.SESSION_COOKIE_SECURE is not None:
            return self.SESSION_COOKIE_SECURE
        return self.is_production

    @property
    def session_cookie_samesite(self) -> Literal["lax", "strict", "none"]:
        if self.SESSION_COOKIE_SAMESITE is not None:
            return self.SESSION_COOKIE_SAMESITE
        return "strict" if self.is_production else "lax"

    def validate_required_fields(self) -> None:
        """Validates that the fields the service cannot run without are set.

        Raises:
            ValueError: If a required field is missing or empty.
        """
        required_fields = [
            "PROJECT_NAME",
            "DATABASE_URL",
            "REDIS_URL",
            "JWT_ACCESS_SECRET",
            "JWT_REFRESH_SECRET",
        ]

        missing_fields = []
        for field in required_fields:
            value = getattr(self, field, None)
            if hasattr(value, "get_secret_value"):
                value = value.get_secret_value()
            if not value:
                missing_fields.append(field)

        if missing_fields:
            error_msg = f"Missing required environment variables: {', '.join(missing_fields)}"
            logger.error(error_msg)
            raise ValueError(error_msg)
        logger.info("All required environment variables are set.")


def create_settings() -> Settings:
    """Create settings instance with environment-specific configuration.

    Returns:
        Settings: Configured settings instance
    """
    env = os.getenv("APP_ENV", "development")

    env_files = {
        "development": ".env",
        "test": ".env.test",
        "staging": ".env.staging",
        "production": ".env.production",
    }
    env_file = env_files.get(env, ".env")

    if env != "development" and Path(env_file).exists():
        logger.info(f"Loading environment configuration from {env_file}")
        return Settings(_env_file=env_file)
    if Path(".env").exists():
        logger.info(f"Loading environment configuration from .env (environment: {env})")
    else:
        logger.info(f"No .env file found, using environment variables only (environment: {env})")
    return Settings()


settings = create_settings()
settings.validate_required_fields()
