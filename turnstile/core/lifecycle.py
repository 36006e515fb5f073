"""Application lifecycle management.

Creates the credential tables on startup (when enabled) and disposes of the
database engine on shutdown.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from turnstile.core.config.settings import settings
from turnstile.core.logging import logger
from turnstile.infrastructure.database import create_async_db_and_tables, dispose_engine


def create_lifespan_manager():
    """Create the application lifespan manager."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.DATABASE_AUTO_CREATE:
            await create_async_db_and_tables()
        logger.info("application_startup", env=settings.APP_ENV, version=settings.VERSION)

        yield

        await dispose_engine()
        logger.info("application_shutdown", env=settings.APP_ENV)

    return lifespan
