"""Async database engine and session dependency for the credential store."""

from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel
from structlog import get_logger

from turnstile.core.config.settings import settings

logger = get_logger(__name__)

engine = create_async_engine(
    settings.DATABASE_URL,
    echo=False,
    pool_pre_ping=True,
    pool_size=settings.POSTGRES_POOL_SIZE,
    max_overflow=settings.POSTGRES_MAX_OVERFLOW,
    pool_timeout=settings.POSTGRES_POOL_TIMEOUT,
)

AsyncSessionFactory = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


async def get_async_db() -> AsyncIterator[AsyncSession]:
    """
    FastAPI dependency that yields an AsyncSession.

    The transaction is rolled back if the request raises, and the session is
    always closed.
    """
    async with AsyncSessionFactory() as session:
        logger.debug("Async database session created")
        try:
            yield session
        except Exception:
            await session.rollback()
            logger.error("Async database session rollback due to error")
            raise
        finally:
            await session.close()
            logger.debug("Async database session closed")


async def create_async_db_and_tables() -> None:
    """Create the credential tables if they do not exist."""
    # Registers the users table on SQLModel.metadata.
    from turnstile.domain.entities import user  # noqa: F401

    logger.info("Creating async database tables")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    logger.info("Async database tables created")


async def dispose_engine() -> None:
    await engine.dispose()
