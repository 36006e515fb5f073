"""Rate limiting for the anonymous authentication routes.

Login, 2FA verification, provider login, refresh and registration are the
routes an unauthenticated client can hammer; each carries
``@limiter.limit(settings.RATE_LIMIT_AUTH)``. Counters live in Redis (or any
``limits`` storage URI, ``memory://`` in tests) so every worker shares them.
"""

from typing import Optional

from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.requests import Request

from turnstile.core.config.settings import settings

# Targeted authentication routes; anything else is not limited by key_func.
AUTH_ROUTES = {
    "/api/v1/auth/register",
    "/api/v1/auth/login",
    "/api/v1/auth/login/verify-2fa",
    "/api/v1/auth/login/oauth",
    "/api/v1/auth/refresh",
}


def key_func(request: Request) -> Optional[str]:
    """Determines the rate-limiting key for a given request.

    Requests to the targeted authentication routes are keyed on the client's
    address. Other routes return ``None`` and are left to their own limits.
    """
    if request.url.path.rstrip("/") in AUTH_ROUTES:
        return get_remote_address(request)
    return None


def get_limiter() -> Limiter:
    """Factory function for the rate limiter, configured from settings."""
    return Limiter(
        key_func=key_func,
        enabled=settings.RATE_LIMIT_ENABLED,
        storage_uri=settings.RATE_LIMIT_STORAGE_URL,
        strategy=settings.RATE_LIMIT_STRATEGY,
    )


limiter = get_limiter()
