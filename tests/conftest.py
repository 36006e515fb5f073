import os

# Settings are read at import time; these must be in place first.
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("JWT_ACCESS_SECRET", "test-access-secret-0123456789abcdef")
os.environ.setdefault("JWT_REFRESH_SECRET", "test-refresh-secret-fedcba9876543210")
os.environ.setdefault("BCRYPT_WORK_FACTOR", "4")
os.environ.setdefault("LOG_JSON", "false")
os.environ.setdefault("DATABASE_AUTO_CREATE", "false")
os.environ.setdefault("RATE_LIMIT_STORAGE_URL", "memory://")

import httpx
import pyotp
import pytest
import pytest_asyncio

from tests.utils.in_memory import (
    InMemoryCredentialRepository,
    InMemoryRevocationRegistry,
    InMemorySessionStore,
)
from turnstile.core.dependencies.auth import get_auth_orchestrator
from turnstile.core.ratelimiter import limiter
from turnstile.domain.services.auth.revocation import TokenRevocationService
from turnstile.domain.services.auth.session import SessionStateManager
from turnstile.domain.services.auth.token import TokenService
from turnstile.domain.services.auth.two_factor import TwoFactorService
from turnstile.domain.services.authentication.auth_orchestrator import AuthOrchestrator
from turnstile.main import app


@pytest.fixture
def credential_repository():
    return InMemoryCredentialRepository()


@pytest.fixture
def revocation_registry():
    return InMemoryRevocationRegistry()


@pytest.fixture
def session_store():
    return InMemorySessionStore()


@pytest.fixture
def token_service():
    return TokenService()


@pytest.fixture
def two_factor_service():
    return TwoFactorService()


@pytest.fixture
def session_manager(session_store):
    return SessionStateManager(session_store)


@pytest.fixture
def revocation_service(revocation_registry, token_service):
    return TokenRevocationService(revocation_registry, token_service)


@pytest.fixture
def orchestrator(
    credential_repository, token_service, two_factor_service, revocation_service, session_manager
):
    return AuthOrchestrator(
        credentials=credential_repository,
        token_service=token_service,
        two_factor=two_factor_service,
        revocations=revocation_service,
        sessions=session_manager,
    )


@pytest.fixture
def session_id(session_manager):
    return session_manager.new_session_id()


@pytest.fixture
def totp_code():
    """Current TOTP code for a secret."""

    def _code(secret: str) -> str:
        return pyotp.TOTP(secret).now()

    return _code


@pytest_asyncio.fixture
async def async_client(orchestrator):
    """HTTP client against the app, with the orchestrator backed by in-memory stores."""
    app.dependency_overrides[get_auth_orchestrator] = lambda: orchestrator
    limiter.reset()
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
