"""Security utilities for password and backup-code hashing.

Passwords and backup codes are hashed with the same bcrypt context: a backup
code is a credential of the same strength as a password. bcrypt is CPU-bound,
so the async helpers run it in the default executor instead of on the event
loop.
"""

import asyncio
import re

from passlib.context import CryptContext

from turnstile.core.config.settings import settings

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_WORK_FACTOR,
)


def hash_password(password: str) -> str:
    """Hash a password using bcrypt.

    Args:
        password: Plain text password to hash

    Returns:
        str: Bcrypt-hashed password
    """
    return pwd_context.hash(password)


def verify_password(password: str, hashed_password: str) -> bool:
    """Verify a password against its hash in constant time.

    Malformed hashes verify as ``False`` rather than raising.
    """
    try:
        return pwd_context.verify(password, hashed_password)
    except (ValueError, TypeError):
        return False


async def hash_password_async(password: str) -> str:
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, hash_password, password)


async def verify_password_async(password: str, hashed_password: str) -> bool:
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, verify_password, password, hashed_password)


async def dummy_verify_async() -> None:
    """Spend the time of one verification when there is no hash to check."""
    loop = asyncio.get_running_loop()
    await loop.run_in_executor(None, pwd_context.dummy_verify)


def validate_password_strength(password: str, min_length: int = 8) -> bool:
    """At least ``min_length`` characters with an uppercase, a lowercase and a digit."""
    if len(password) < min_length:
        return False
    return all(
        re.search(pattern, password)
        for pattern in (r"[A-Z]", r"[a-z]", r"\d")
    )
