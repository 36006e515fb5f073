import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt
from pydantic import ValidationError as PydanticValidationError
from structlog import get_logger

from turnstile.core.config.settings import settings
from turnstile.core.exceptions import ConfigurationError, TokenInvalidError
from turnstile.domain.value_objects.duration import parse_duration
from turnstile.domain.value_objects.jwt_token import TokenClaims, TokenPair, TokenPayload

logger = get_logger(__name__)


class TokenService:
    """Signs and verifies access and refresh tokens.

    Both token kinds carry the same payload (``sub``, ``email``, ``role``,
    ``iat``, ``exp`` and a random ``jti``) but are signed with independent
    secrets and lifetimes, so an access token never verifies as a refresh
    token and vice versa. The service is pure: no I/O, no state beyond its
    configuration.

    Attributes:
        access_ttl (timedelta): Lifetime of access tokens.
        refresh_ttl (timedelta): Lifetime of refresh tokens.
        algorithm (str): HMAC algorithm used for both kinds.
    """

    def __init__(
        self,
        access_secret: Optional[str] = None,
        refresh_secret: Optional[str] = None,
        access_expires_in: Optional[str] = None,
        refresh_expires_in: Optional[str] = None,
        algorithm: Optional[str] = None,
    ):
        self._access_secret = (
            access_secret
            if access_secret is not None
            else settings.JWT_ACCESS_SECRET.get_secret_value()
        )
        self._refresh_secret = (
            refresh_secret
            if refresh_secret is not None
            else settings.JWT_REFRESH_SECRET.get_secret_value()
        )
        if not self._access_secret or not self._refresh_secret:
            raise ConfigurationError("Access and refresh token secrets must both be configured")
        if self._access_secret == self._refresh_secret:
            raise ConfigurationError("Access and refresh token secrets must differ")

        self.access_ttl: timedelta = parse_duration(
            access_expires_in or settings.JWT_ACCESS_EXPIRES_IN
        )
        self.refresh_ttl: timedelta = parse_duration(
            refresh_expires_in or settings.JWT_REFRESH_EXPIRES_IN
        )
        self.algorithm = algorithm or settings.JWT_ALGORITHM

    # ------------------------------------------------------------------
    # Signing
    # ------------------------------------------------------------------

    def sign_access(self, claims: TokenClaims, issued_at: Optional[datetime] = None) -> str:
        return self._sign(claims, self._access_secret, self.access_ttl, issued_at)

    def sign_refresh(self, claims: TokenClaims, issued_at: Optional[datetime] = None) -> str:
        return self._sign(claims, self._refresh_secret, self.refresh_ttl, issued_at)

    def access_expiry(self, issued_at: datetime) -> datetime:
        """The ``exp`` an access token signed at ``issued_at`` carries."""
        return _whole_seconds(issued_at) + self.access_ttl

    def issue_pair(self, claims: TokenClaims) -> TokenPair:
        """Mint an access/refresh pair from one clock reading.

        ``expires_at`` equals the access token's ``exp`` claim exactly, since
        both are derived from the same instant and the same parsed duration.
        """
        issued_at = _whole_seconds(datetime.now(timezone.utc))
        access_token = self.sign_access(claims, issued_at)
        refresh_token = self.sign_refresh(claims, issued_at)
        expires_at = self.access_expiry(issued_at)
        logger.debug("Token pair issued", user_id=claims.sub)
        return TokenPair(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_at=expires_at,
            expires_in=int(self.access_ttl.total_seconds()),
        )

    # ------------------------------------------------------------------
    # Verification
    # ------------------------------------------------------------------

    def verify_access(self, token: str) -> TokenPayload:
        """Check signature and expiry of an access token.

        Raises:
            TokenInvalidError: On any signature, expiry or payload failure.
        """
        return self._verify(token, self._access_secret, "access")

    def verify_refresh(self, token: str) -> TokenPayload:
        """Check signature and expiry of a refresh token.

        Raises:
            TokenInvalidError: On any signature, expiry or payload failure.
        """
        return self._verify(token, self._refresh_secret, "refresh")

    def _sign(
        self,
        claims: TokenClaims,
        secret: str,
        ttl: timedelta,
        issued_at: Optional[datetime],
    ) -> str:
        issued_at = _whole_seconds(issued_at or datetime.now(timezone.utc))
        payload: Dict[str, Any] = {
            **claims.model_dump(),
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + ttl).timestamp()),
            "jti": secrets.token_urlsafe(16),
        }
        return jwt.encode(payload, secret, algorithm=self.algorithm)

    def _verify(self, token: str, secret: str, kind: str) -> TokenPayload:
        try:
            raw = jwt.decode(token, secret, algorithms=[self.algorithm])
            return TokenPayload.model_validate(raw)
        except (JWTError, PydanticValidationError) as exc:
            logger.debug("Token verification failed", kind=kind, error_type=type(exc).__name__)
            raise TokenInvalidError() from exc


def _whole_seconds(moment: datetime) -> datetime:
    return moment.replace(microsecond=0)
