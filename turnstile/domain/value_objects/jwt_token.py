"""Token value objects.

``TokenClaims`` is what the caller supplies for signing, ``TokenPayload`` is
what a verified token decodes to and ``TokenPair`` is what issuance returns.
Access and refresh tokens share the payload shape; only their secrets and
lifetimes differ.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class TokenClaims(BaseModel):
    """Identity claims embedded in every token."""

    model_config = ConfigDict(frozen=True)

    sub: str = Field(min_length=1)
    email: str
    role: str


class TokenPayload(TokenClaims):
    """A decoded, signature-checked token payload."""

    iat: int
    exp: int
    jti: Optional[str] = None

    @property
    def user_id(self) -> int:
        return int(self.sub)

    @property
    def expires_at(self) -> datetime:
        return datetime.fromtimestamp(self.exp, tz=timezone.utc)


class TokenPair(BaseModel):
    """An access/refresh token pair with the access token's expiry."""

    model_config = ConfigDict(frozen=True)

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_at: datetime
    expires_in: int
