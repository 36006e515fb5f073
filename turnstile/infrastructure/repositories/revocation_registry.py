"""Redis-backed revocation registry.

Each revoked token is one key, ``revoked_token:<sha256>``, written with
``SET NX`` and an expiry equal to the token's remaining lifetime. ``NX`` makes
the insert atomic: of two concurrent revocations of the same string exactly
one succeeds, and the other raises ``TokenAlreadyRevokedError``. Redis
removes the key once it expires; until then the token is rejected.
"""

from datetime import datetime

from redis.asyncio import Redis
from redis.exceptions import RedisError
from structlog import get_logger

from turnstile.core.exceptions import RevocationStoreError, TokenAlreadyRevokedError
from turnstile.domain.entities.revoked_token import RevokedToken, token_fingerprint
from turnstile.domain.interfaces.repositories import IRevocationRegistry

logger = get_logger(__name__)

KEY_PREFIX = "revoked_token:"


class RedisRevocationRegistry(IRevocationRegistry):
    def __init__(self, redis_client: Redis, key_prefix: str = KEY_PREFIX):
        self.redis_client = redis_client
        self.key_prefix = key_prefix

    def _key(self, fingerprint: str) -> str:
        return f"{self.key_prefix}{fingerprint}"

    async def revoke(self, token: str, expires_at: datetime) -> None:
        record = RevokedToken(token=token, expires_at=expires_at)
        key = self._key(record.fingerprint)
        try:
            created = await self.redis_client.set(
                key, record.expires_at.isoformat(), ex=record.ttl_seconds(), nx=True
            )
        except RedisError as exc:
            logger.error("Revocation write failed", error_type=type(exc).__name__)
            raise RevocationStoreError() from exc

        if not created:
            raise TokenAlreadyRevokedError()
        logger.debug("Token added to revocation registry", token_digest=record.fingerprint[:12])

    async def is_revoked(self, token: str) -> bool:
        key = self._key(token_fingerprint(token))
        try:
            return bool(await self.redis_client.exists(key))
        except RedisError as exc:
            logger.error("Revocation lookup failed", error_type=type(exc).__name__)
            raise RevocationStoreError() from exc
