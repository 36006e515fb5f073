"""SQLModel implementation of the credential repository.

Lookups are case-insensitive on email and exact on the normalized phone.
Updates go through an allow-list of mutable fields so callers cannot rewrite
ids or hashes they do not own.
"""

from datetime import datetime, timezone
from typing import Any, FrozenSet, Optional

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select
from structlog import get_logger

from turnstile.core.exceptions import DuplicateUserError
from turnstile.domain.entities.user import User
from turnstile.domain.interfaces.repositories import ICredentialRepository

logger = get_logger(__name__)

UPDATABLE_FIELDS: FrozenSet[str] = frozenset(
    {
        "name",
        "phone",
        "hashed_password",
        "provider",
        "provider_id",
        "avatar_url",
        "two_factor_enabled",
        "two_factor_secret",
        "two_factor_backup_codes",
    }
)


class CredentialRepository(ICredentialRepository):
    def __init__(self, db_session: AsyncSession):
        self.db_session = db_session

    async def find_by_email_or_phone(self, email: str, phone: Optional[str]) -> Optional[User]:
        conditions = [func.lower(User.email) == email.lower()]
        if phone:
            conditions.append(User.phone == phone)
        statement = select(User).where(or_(*conditions))
        return await self._first(statement)

    async def find_by_id(self, user_id: int) -> Optional[User]:
        if user_id <= 0:
            logger.warning("Invalid user ID provided", user_id=user_id)
            return None
        return await self._first(select(User).where(User.id == user_id))

    async def find_by_email(self, email: str) -> Optional[User]:
        return await self._first(select(User).where(func.lower(User.email) == email.lower()))

    async def find_by_provider(self, provider: str, provider_id: str) -> Optional[User]:
        statement = select(User).where(User.provider == provider, User.provider_id == provider_id)
        return await self._first(statement)

    async def create(self, user: User) -> User:
        self.db_session.add(user)
        try:
            await self.db_session.commit()
        except IntegrityError as exc:
            await self.db_session.rollback()
            logger.info("User creation rejected by unique constraint")
            raise DuplicateUserError() from exc
        await self.db_session.refresh(user)
        logger.debug("User created", user_id=user.id)
        return user

    async def update_by_id(self, user_id: int, **fields: Any) -> Optional[User]:
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")

        user = await self.find_by_id(user_id)
        if user is None:
            return None
        for name, value in fields.items():
            setattr(user, name, value)
        user.updated_at = datetime.now(timezone.utc)

        self.db_session.add(user)
        try:
            await self.db_session.commit()
        except IntegrityError as exc:
            await self.db_session.rollback()
            logger.info("User update rejected by unique constraint", user_id=user_id)
            raise DuplicateUserError() from exc
        await self.db_session.refresh(user)
        logger.debug("User updated", user_id=user_id, fields=sorted(fields))
        return user

    async def consume_backup_code(self, user_id: int, code_hash: str) -> bool:
        statement = (
            select(User)
            .where(User.id == user_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        user = await self._first(statement)
        if user is None or code_hash not in (user.two_factor_backup_codes or []):
            await self.db_session.rollback()
            return False

        user.two_factor_backup_codes = [h for h in user.two_factor_backup_codes if h != code_hash]
        user.updated_at = datetime.now(timezone.utc)
        self.db_session.add(user)
        await self.db_session.commit()
        return True

    async def _first(self, statement) -> Optional[User]:
        try:
            result = await self.db_session.execute(statement)
            return result.scalars().first()
        except Exception as exc:
            logger.error("Credential lookup failed", error_type=type(exc).__name__)
            raise
