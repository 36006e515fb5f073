"""In-memory implementations of the store interfaces for tests."""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Tuple

from turnstile.core.exceptions import (
    DuplicateUserError,
    RevocationStoreError,
    TokenAlreadyRevokedError,
)
from turnstile.domain.entities.revoked_token import RevokedToken, token_fingerprint
from turnstile.domain.entities.session import SessionState
from turnstile.domain.entities.user import User
from turnstile.domain.interfaces.repositories import (
    ICredentialRepository,
    IRevocationRegistry,
    ISessionStore,
)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryCredentialRepository(ICredentialRepository):
    def __init__(self):
        self.users: Dict[int, User] = {}
        self._next_id = 1

    async def find_by_email_or_phone(self, email: str, phone: Optional[str]) -> Optional[User]:
        for user in self.users.values():
            if user.email.lower() == email.lower() or (phone and user.phone == phone):
                return user
        return None

    async def find_by_id(self, user_id: int) -> Optional[User]:
        return self.users.get(user_id)

    async def find_by_email(self, email: str) -> Optional[User]:
        return next((u for u in self.users.values() if u.email.lower() == email.lower()), None)

    async def find_by_provider(self, provider: str, provider_id: str) -> Optional[User]:
        return next(
            (
                u
                for u in self.users.values()
                if u.provider == provider and u.provider_id == provider_id
            ),
            None,
        )

    async def create(self, user: User) -> User:
        for existing in self.users.values():
            if existing.email.lower() == user.email.lower():
                raise DuplicateUserError()
            if user.phone and existing.phone == user.phone:
                raise DuplicateUserError()
        user.id = self._next_id
        self._next_id += 1
        self.users[user.id] = user
        return user

    async def update_by_id(self, user_id: int, **fields: Any) -> Optional[User]:
        user = self.users.get(user_id)
        if user is None:
            return None
        for name, value in fields.items():
            setattr(user, name, value)
        user.updated_at = _now()
        return user

    async def consume_backup_code(self, user_id: int, code_hash: str) -> bool:
        user = self.users.get(user_id)
        if user is None or code_hash not in user.two_factor_backup_codes:
            return False
        user.two_factor_backup_codes = [h for h in user.two_factor_backup_codes if h != code_hash]
        return True


class InMemoryRevocationRegistry(IRevocationRegistry):
    """Mirrors the Redis registry: one entry per fingerprint, evicted after its TTL."""

    def __init__(self):
        self.entries: Dict[str, Tuple[RevokedToken, datetime]] = {}
        self.fail_with: Optional[Exception] = None

    def _evict_expired(self) -> None:
        now = _now()
        for key in [k for k, (_, evict_at) in self.entries.items() if evict_at <= now]:
            del self.entries[key]

    async def revoke(self, token: str, expires_at: datetime) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        self._evict_expired()
        record = RevokedToken(token=token, expires_at=expires_at)
        if record.fingerprint in self.entries:
            raise TokenAlreadyRevokedError()
        evict_at = _now() + timedelta(seconds=record.ttl_seconds())
        self.entries[record.fingerprint] = (record, evict_at)

    async def is_revoked(self, token: str) -> bool:
        if self.fail_with is not None:
            raise RevocationStoreError()
        self._evict_expired()
        return token_fingerprint(token) in self.entries

    def expiry_of(self, token: str) -> Optional[datetime]:
        entry = self.entries.get(token_fingerprint(token))
        return entry[0].expires_at if entry else None

    def expire(self, token: str) -> None:
        record, _ = self.entries[token_fingerprint(token)]
        self.entries[record.fingerprint] = (record, _now() - timedelta(seconds=1))


class InMemorySessionStore(ISessionStore):
    def __init__(self):
        self.records: Dict[str, Tuple[SessionState, datetime]] = {}

    async def load(self, session_id: str) -> Optional[SessionState]:
        record = self.records.get(session_id)
        if record is None:
            return None
        state, expires_at = record
        if expires_at <= _now():
            del self.records[session_id]
            return None
        return state

    async def save(self, session_id: str, state: SessionState, ttl: timedelta) -> None:
        self.records[session_id] = (state, _now() + ttl)

    async def delete(self, session_id: str) -> None:
        self.records.pop(session_id, None)

    def expire(self, session_id: str) -> None:
        state, _ = self.records[session_id]
        self.records[session_id] = (state, _now() - timedelta(seconds=1))
