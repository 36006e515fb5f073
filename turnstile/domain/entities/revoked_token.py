"""Revoked-token record."""

import hashlib
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict


class RevokedToken(BaseModel):
    """A token string that must be rejected until ``expires_at``.

    Stores keep it only until ``expires_at``; by then the token would fail
    verification on its own.
    """

    model_config = ConfigDict(frozen=True)

    token: str
    expires_at: datetime

    @property
    def fingerprint(self) -> str:
        return token_fingerprint(self.token)

    def ttl_seconds(self, now: datetime | None = None) -> int:
        """Seconds left until expiry, never less than one."""
        now = now or datetime.now(timezone.utc)
        return max(1, int((self.expires_at - now).total_seconds()))


def token_fingerprint(token: str) -> str:
    """SHA-256 digest used as the store key so raw tokens are never persisted."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()
