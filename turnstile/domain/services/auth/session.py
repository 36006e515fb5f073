import secrets
from datetime import datetime, timedelta
from typing import Optional

from structlog import get_logger

from turnstile.core.config.settings import settings
from turnstile.core.exceptions import NoPendingSessionError
from turnstile.domain.entities.session import AuthenticatedSession, PendingTwoFactor, SessionState
from turnstile.domain.interfaces.repositories import ISessionStore
from turnstile.domain.value_objects.duration import parse_duration
from turnstile.domain.value_objects.jwt_token import TokenPair

logger = get_logger(__name__)


class SessionStateManager:
    """Owns the per-browser session record.

    Every transition writes a complete record of one shape, replacing whatever
    was stored before, so pending-2FA fields and cached tokens never coexist.
    Pending records live for ``pending_ttl``; authenticated records for
    ``session_ttl``.

    Attributes:
        store (ISessionStore): Backing key/value store.
        session_ttl (timedelta): Lifetime of authenticated records.
        pending_ttl (timedelta): Lifetime of pending-2FA records.
    """

    def __init__(
        self,
        store: ISessionStore,
        session_ttl: Optional[timedelta] = None,
        pending_ttl: Optional[timedelta] = None,
    ):
        self.store = store
        self.session_ttl = session_ttl or parse_duration(settings.SESSION_TTL)
        self.pending_ttl = pending_ttl or parse_duration(settings.PENDING_TWO_FACTOR_TTL)

    @staticmethod
    def new_session_id() -> str:
        return secrets.token_urlsafe(32)

    async def rotate(self, previous_session_id: Optional[str]) -> str:
        """Discard the caller's record and return a freshly minted id.

        Every transition into ``PendingTwoFactor`` or ``AuthenticatedSession``
        goes through here, so a state is only ever written under an id the
        server generated itself.
        """
        await self.destroy(previous_session_id)
        return self.new_session_id()

    async def begin_pending_2fa(self, session_id: str, user_id: int, email: str) -> PendingTwoFactor:
        state = PendingTwoFactor(temp_user_id=user_id, temp_email=email)
        await self.store.save(session_id, state, self.pending_ttl)
        logger.debug("Pending two-factor session started", user_id=user_id)
        return state

    async def complete_authentication(
        self,
        session_id: str,
        user_id: int,
        email: str,
        role: str,
        tokens: TokenPair,
        expires_at: datetime,
    ) -> AuthenticatedSession:
        state = AuthenticatedSession(
            user_id=user_id,
            email=email,
            role=role,
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
            token_expires_at=expires_at,
        )
        await self.store.save(session_id, state, self.session_ttl)
        logger.debug("Session authenticated", user_id=user_id)
        return state

    async def read(self, session_id: Optional[str]) -> Optional[SessionState]:
        if not session_id:
            return None
        return await self.store.load(session_id)

    async def read_pending_2fa(self, session_id: Optional[str]) -> PendingTwoFactor:
        """Return the pending-2FA record.

        Raises:
            NoPendingSessionError: If there is no record or it is not pending.
        """
        state = await self.read(session_id)
        if not isinstance(state, PendingTwoFactor):
            raise NoPendingSessionError()
        return state

    async def destroy(self, session_id: Optional[str]) -> None:
        """Remove the record; a missing session is indistinguishable from success."""
        if not session_id:
            return
        await self.store.delete(session_id)
