"""Token revocation on top of the revocation registry.

``revoke_consumed`` is the strict path used by refresh rotation: a second
revocation of the same string raises ``TokenAlreadyRevokedError`` and the
caller must reject. ``best_effort_revoke`` is the lenient path used by logout:
it reads the token's own expiry when it can (as an access token, then as a
refresh token) and falls back to a fixed TTL when it cannot, so a malformed
or expired token never makes logout fail.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from structlog import get_logger

from turnstile.core.config.settings import settings
from turnstile.core.exceptions import TokenAlreadyRevokedError, TokenInvalidError
from turnstile.domain.entities.revoked_token import token_fingerprint
from turnstile.domain.interfaces.repositories import IRevocationRegistry
from turnstile.domain.services.auth.token import TokenService
from turnstile.domain.value_objects.duration import parse_duration

logger = get_logger(__name__)


class TokenRevocationService:
    def __init__(
        self,
        registry: IRevocationRegistry,
        token_service: TokenService,
        fallback_ttl: Optional[timedelta] = None,
    ):
        self.registry = registry
        self.token_service = token_service
        self.fallback_ttl = fallback_ttl or parse_duration(settings.REVOCATION_FALLBACK_TTL)

    async def is_revoked(self, token: str) -> bool:
        return await self.registry.is_revoked(token)

    async def revoke_consumed(self, token: str, expires_at: datetime) -> None:
        """Revoke a token that is being spent; raises if it was already spent."""
        await self.registry.revoke(token, expires_at)
        logger.debug("Token revoked", token_digest=token_fingerprint(token)[:12])

    async def best_effort_revoke(self, token: str) -> bool:
        """Revoke ``token`` whatever its shape.

        Returns:
            ``True`` if this call added the token, ``False`` if it was already
            revoked. Store failures propagate as ``RevocationStoreError``.
        """
        expires_at = self.readable_expiry(token)
        try:
            await self.registry.revoke(token, expires_at)
        except TokenAlreadyRevokedError:
            logger.debug("Token already revoked", token_digest=token_fingerprint(token)[:12])
            return False
        return True

    def readable_expiry(self, token: str) -> datetime:
        """The token's ``exp`` if it verifies as either kind, else now plus the fallback TTL."""
        for verify in (self.token_service.verify_access, self.token_service.verify_refresh):
            try:
                return verify(token).expires_at
            except TokenInvalidError:
                continue
        return datetime.now(timezone.utc) + self.fallback_ttl
