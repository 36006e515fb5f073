from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from sqlalchemy import JSON, DateTime, UniqueConstraint
from sqlalchemy import Enum as SAEnum
from sqlmodel import Column, Field, SQLModel, String


class Role(str, Enum):
    """The role claim carried in tokens.

    Attributes:
        ADMIN: Administrative account.
        USER: Standard account; the only role open to self-registration.
    """

    ADMIN = "admin"
    USER = "user"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(SQLModel, table=True):
    """The credential record.

    A credential is password-based, provider-based, or both once a provider
    has been linked to a password account; it is never neither.
    ``two_factor_enabled`` is only ever true when ``two_factor_secret`` is set
    and has been confirmed with a valid code.

    Attributes:
        id: Primary key.
        name: Display name.
        email: Unique, lower-cased email address.
        phone: Optional unique phone number, stored normalized.
        hashed_password: Bcrypt hash; null for provider-only accounts.
        role: Role claim embedded in tokens.
        provider: OAuth provider name once linked (e.g. ``google``).
        provider_id: The provider's subject identifier.
        avatar_url: Optional avatar, refreshed from the provider on login.
        two_factor_enabled: Whether login requires a second factor.
        two_factor_secret: Base32 TOTP secret.
        two_factor_backup_codes: Bcrypt hashes of the unused backup codes.
    """

    __tablename__ = "users"
    __table_args__ = (
        UniqueConstraint("provider", "provider_id", name="uq_users_provider_identity"),
        {"extend_existing": True},
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=100)
    email: str = Field(sa_column=Column(String, unique=True, index=True, nullable=False))
    phone: Optional[str] = Field(
        default=None, sa_column=Column(String, unique=True, index=True, nullable=True)
    )
    hashed_password: Optional[str] = Field(default=None, max_length=255)
    role: Role = Field(
        default=Role.USER,
        sa_column=Column(SAEnum(Role, name="role"), nullable=False, default=Role.USER),
    )
    provider: Optional[str] = Field(default=None, max_length=32)
    provider_id: Optional[str] = Field(default=None, max_length=255)
    avatar_url: Optional[str] = Field(default=None, max_length=2048)
    two_factor_enabled: bool = Field(default=False)
    two_factor_secret: Optional[str] = Field(default=None, max_length=64)
    two_factor_backup_codes: List[str] = Field(
        default_factory=list, sa_column=Column(JSON, nullable=False, default=list)
    )
    created_at: datetime = Field(
        default_factory=_utcnow, sa_column=Column(DateTime(timezone=True), nullable=False)
    )
    updated_at: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime(timezone=True), nullable=True)
    )

    @property
    def has_password(self) -> bool:
        return bool(self.hashed_password)

    @property
    def is_provider_linked(self) -> bool:
        return self.provider is not None
