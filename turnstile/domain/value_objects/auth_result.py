"""Outcomes returned by the auth orchestrator.

Each successful operation returns the new session state, and the freshly
minted id it is stored under, alongside whatever the caller needs to answer
the request. The HTTP layer sets the cookie from that id and never reaches
into a shared mutable session object.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from turnstile.domain.entities.session import AuthenticatedSession, PendingTwoFactor
from turnstile.domain.entities.user import User
from turnstile.domain.value_objects.jwt_token import TokenPair


@dataclass(frozen=True)
class AuthResult:
    """The ``Authenticated`` terminal state: tokens minted and cached in the session."""

    user: User
    tokens: TokenPair
    session_id: str
    session: AuthenticatedSession
    used_backup_code: bool = False


@dataclass(frozen=True)
class TwoFactorChallenge:
    """The ``TwoFactorRequired`` state: credentials verified, no tokens issued."""

    session_id: str
    session: PendingTwoFactor
    requires_two_factor: bool = True
    message: str = "Two-factor authentication required"


@dataclass(frozen=True)
class TwoFactorSetup:
    """Enrollment material. The only time plaintext backup codes leave the service."""

    secret: str
    provisioning_uri: str
    qr_code_url: str
    backup_codes: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class ProviderProfile:
    """Identity asserted by an OAuth provider for ``provider_login``."""

    provider: str
    provider_id: str
    email: str
    name: str
    access_token: str = ""
    avatar_url: Optional[str] = None
