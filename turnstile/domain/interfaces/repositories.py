"""Repository interfaces for the stores the auth core depends on.

These abstract base classes are the "ports" of the domain layer. The
orchestrator only ever talks to these contracts; concrete adapters (SQLModel,
Redis) live in the infrastructure layer and in-memory versions back the tests.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Any, Optional

from turnstile.domain.entities.session import SessionState
from turnstile.domain.entities.user import User


class ICredentialRepository(ABC):
    """Persistence contract for credential records."""

    @abstractmethod
    async def find_by_email_or_phone(self, email: str, phone: Optional[str]) -> Optional[User]:
        """Retrieves a user whose email matches ``email`` or whose phone matches ``phone``.

        Args:
            email: Lower-cased email candidate.
            phone: Normalized phone candidate, or ``None`` to match by email only.
        """
        raise NotImplementedError

    @abstractmethod
    async def find_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    @abstractmethod
    async def find_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    @abstractmethod
    async def find_by_provider(self, provider: str, provider_id: str) -> Optional[User]:
        """Retrieves the account linked to a provider identity."""
        raise NotImplementedError

    @abstractmethod
    async def create(self, user: User) -> User:
        """Persists a new credential and returns it with its id assigned.

        Raises:
            DuplicateUserError: If the email, phone or provider identity is taken.
        """
        raise NotImplementedError

    @abstractmethod
    async def update_by_id(self, user_id: int, **fields: Any) -> Optional[User]:
        """Updates the given fields and returns the updated record, or ``None`` if absent."""
        raise NotImplementedError

    @abstractmethod
    async def consume_backup_code(self, user_id: int, code_hash: str) -> bool:
        """Atomically removes one backup-code hash from the stored set.

        Returns:
            ``True`` if the hash was present and removed, ``False`` if it was
            already gone (used concurrently) or the user does not exist.
        """
        raise NotImplementedError


class IRevocationRegistry(ABC):
    """Durable set of revoked token strings with TTL-based expiry."""

    @abstractmethod
    async def revoke(self, token: str, expires_at: datetime) -> None:
        """Inserts ``token`` with a lifetime ending at ``expires_at``.

        Raises:
            TokenAlreadyRevokedError: If the token string is already registered.
            RevocationStoreError: If the store cannot be written.
        """
        raise NotImplementedError

    @abstractmethod
    async def is_revoked(self, token: str) -> bool:
        raise NotImplementedError


class ISessionStore(ABC):
    """Keyed storage for session records with single-key atomic writes."""

    @abstractmethod
    async def load(self, session_id: str) -> Optional[SessionState]:
        raise NotImplementedError

    @abstractmethod
    async def save(self, session_id: str, state: SessionState, ttl: timedelta) -> None:
        raise NotImplementedError

    @abstractmethod
    async def delete(self, session_id: str) -> None:
        """Removes the record. Deleting a missing record is not an error."""
        raise NotImplementedError
