"""
Redis Connection Module

Provides the asynchronous Redis client backing the revocation registry and
the session store. The client is a FastAPI dependency and is closed after the
request that opened it.

**Security Note**: Use a ``rediss://`` URL when Redis is reached over an
untrusted network; the store holds live session records and revoked tokens.
"""

from typing import AsyncIterator

from redis.asyncio import Redis
from structlog import get_logger

from turnstile.core.config.settings import settings

logger = get_logger(__name__)


def create_redis_client() -> Redis:
    return Redis.from_url(settings.REDIS_URL, encoding="utf-8", decode_responses=True)


async def get_redis() -> AsyncIterator[Redis]:
    """
    Provides an asynchronous Redis client.

    Yields:
        Redis: An asynchronous Redis client instance.
    """
    redis = create_redis_client()
    logger.debug("Redis connection created")
    try:
        yield redis
    finally:
        await redis.aclose()
        logger.debug("Redis connection closed")
