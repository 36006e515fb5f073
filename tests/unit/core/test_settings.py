import pytest
from pydantic import ValidationError

from turnstile.core.config.auth import AuthSettings
from turnstile.core.config.redis import RedisSettings
from turnstile.core.config.settings import Settings, settings


def test_settings_singleton_uses_test_environment():
    assert settings.APP_ENV == "test"
    assert settings.JWT_ACCESS_SECRET.get_secret_value() != settings.JWT_REFRESH_SECRET.get_secret_value()


def test_identical_signing_secrets_are_rejected():
    with pytest.raises(ValidationError):
        AuthSettings(
            JWT_ACCESS_SECRET="same-secret-value-123",
            JWT_REFRESH_SECRET="same-secret-value-123",
        )


def test_short_signing_secret_is_rejected():
    with pytest.raises(ValidationError):
        AuthSettings(JWT_ACCESS_SECRET="short", JWT_REFRESH_SECRET="another-long-secret")


def test_malformed_duration_is_rejected():
    with pytest.raises(ValidationError):
        AuthSettings(
            JWT_ACCESS_SECRET="access-secret-123456",
            JWT_REFRESH_SECRET="refresh-secret-123456",
            JWT_ACCESS_EXPIRES_IN="fifteen minutes",
        )


def test_cookie_flags_follow_environment():
    production = Settings(APP_ENV="production", REDIS_PASSWORD="redis-pass")
    development = Settings(APP_ENV="development")

    assert production.session_cookie_secure is True
    assert production.session_cookie_samesite == "strict"
    assert development.session_cookie_secure is False
    assert development.session_cookie_samesite == "lax"


def test_production_requires_redis_password():
    with pytest.raises(ValidationError):
        Settings(APP_ENV="production", REDIS_PASSWORD="")


def test_database_url_is_assembled_for_asyncpg():
    assembled = Settings(POSTGRES_USER="svc", POSTGRES_PASSWORD="pw", POSTGRES_HOST="db", DATABASE_URL="")

    assert assembled.DATABASE_URL == "postgresql+asyncpg://svc:pw@db:5432/turnstile"


def test_rate_limit_storage_defaults_to_redis_url():
    configured = RedisSettings(REDIS_URL="redis://cache:6379/2", RATE_LIMIT_STORAGE_URL="")

    assert configured.RATE_LIMIT_STORAGE_URL == "redis://cache:6379/2"


def test_malformed_rate_limit_is_rejected():
    with pytest.raises(ValidationError):
        RedisSettings(RATE_LIMIT_AUTH="twenty per minute")
