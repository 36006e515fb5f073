"""Redis-backed session store.

A session record is a single JSON value under ``session:<id>`` written with
one ``SET ... EX``, so readers see either the old shape or the new one and
never a mix.
"""

from datetime import timedelta
from typing import Optional

from pydantic import ValidationError as PydanticValidationError
from redis.asyncio import Redis
from redis.exceptions import RedisError
from structlog import get_logger

from turnstile.core.config.settings import settings
from turnstile.core.exceptions import SessionStoreError
from turnstile.domain.entities.session import SessionState, session_state_adapter
from turnstile.domain.interfaces.repositories import ISessionStore

logger = get_logger(__name__)


class RedisSessionStore(ISessionStore):
    def __init__(self, redis_client: Redis, key_prefix: Optional[str] = None):
        self.redis_client = redis_client
        self.key_prefix = key_prefix or settings.SESSION_KEY_PREFIX

    def _key(self, session_id: str) -> str:
        return f"{self.key_prefix}{session_id}"

    async def load(self, session_id: str) -> Optional[SessionState]:
        try:
            raw = await self.redis_client.get(self._key(session_id))
        except RedisError as exc:
            logger.error("Session read failed", error_type=type(exc).__name__)
            raise SessionStoreError() from exc
        if raw is None:
            return None
        try:
            return session_state_adapter.validate_json(raw)
        except PydanticValidationError:
            # Unreadable records are treated as absent.
            logger.warning("Discarding unreadable session record")
            return None

    async def save(self, session_id: str, state: SessionState, ttl: timedelta) -> None:
        payload = session_state_adapter.dump_json(state)
        try:
            await self.redis_client.set(
                self._key(session_id), payload, ex=max(1, int(ttl.total_seconds()))
            )
        except RedisError as exc:
            logger.error("Session write failed", error_type=type(exc).__name__)
            raise SessionStoreError() from exc

    async def delete(self, session_id: str) -> None:
        try:
            await self.redis_client.delete(self._key(session_id))
        except RedisError as exc:
            logger.error("Session delete failed", error_type=type(exc).__name__)
            raise SessionStoreError() from exc
