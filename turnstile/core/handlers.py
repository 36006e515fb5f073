"""
Global exception handlers for the FastAPI application.

Every ``TurnstileError`` carries its own status code, so a single handler
renders the whole taxonomy; authentication failures additionally get the
``WWW-Authenticate`` challenge header.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette import status
from structlog import get_logger

from turnstile.core.exceptions import AuthenticationError, TurnstileError

__all__ = [
    "authentication_error_handler",
    "turnstile_error_handler",
    "rate_limit_exception_handler",
    "unhandled_error_handler",
    "register_exception_handlers",
]

logger = get_logger(__name__)


def _client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


async def authentication_error_handler(request: Request, exc: AuthenticationError) -> JSONResponse:
    """Handles `AuthenticationError`, returning a `401 Unauthorized`."""
    logger.warning(
        "Authentication failure",
        error=exc.code,
        client_ip=_client_ip(request),
        path=request.url.path,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code},
        headers={"WWW-Authenticate": "Bearer"},
    )


async def turnstile_error_handler(request: Request, exc: TurnstileError) -> JSONResponse:
    """Handles every other `TurnstileError` using the status code it declares."""
    log = logger.error if exc.status_code >= 500 else logger.info
    log("Request rejected", error=exc.code, status_code=exc.status_code, path=request.url.path)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code},
    )


async def rate_limit_exception_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Handles exceptions raised by slowapi when a rate limit is exceeded."""
    logger.warning(
        "Rate limit exceeded",
        client_ip=_client_ip(request),
        path=request.url.path,
        limit=exc.detail,
    )
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content={"detail": "Too many requests", "code": "rate_limited"},
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handles anything outside the taxonomy as an opaque `500`."""
    logger.exception("Unhandled error", path=request.url.path, error_type=type(exc).__name__)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error", "code": "internal_failure"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Registers all custom exception handlers with the FastAPI application.

    More specific exceptions are registered before more general ones.
    """
    app.add_exception_handler(RateLimitExceeded, rate_limit_exception_handler)
    app.add_exception_handler(AuthenticationError, authentication_error_handler)
    app.add_exception_handler(TurnstileError, turnstile_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
