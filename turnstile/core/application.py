"""Application factory for creating and configuring the FastAPI application."""

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from turnstile.adapters.api.v1 import api_router
from turnstile.core.config.settings import settings
from turnstile.core.handlers import register_exception_handlers
from turnstile.core.lifecycle import create_lifespan_manager
from turnstile.core.middleware import configure_middleware
from turnstile.core.ratelimiter import limiter


def create_application() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        FastAPI: The configured FastAPI application instance
    """
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        description="Credential and session lifecycle service.",
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url=None,
        openapi_url="/openapi.json" if settings.DEBUG else None,
        lifespan=create_lifespan_manager(),
        default_response_class=JSONResponse,
    )

    app.state.limiter = limiter
    configure_middleware(app)
    register_exception_handlers(app)
    app.include_router(api_router, prefix="/api/v1")

    return app
