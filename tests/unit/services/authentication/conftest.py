import pyotp
import pytest
import pytest_asyncio

from tests.factories import create_fake_user
from turnstile.utils.security import hash_password


@pytest_asyncio.fixture
async def password_user(credential_repository):
    """A stored password account without two-factor authentication."""
    return await credential_repository.create(create_fake_user(email="ada@example.com", phone="5551234567"))


@pytest.fixture
def backup_codes():
    return ["ABCD2345", "EFGH6789", "JKLM2345"]


@pytest_asyncio.fixture
async def two_factor_user(credential_repository, backup_codes):
    """A stored password account with two-factor authentication enabled."""
    user = create_fake_user(
        email="grace@example.com",
        two_factor_enabled=True,
        two_factor_secret=pyotp.random_base32(),
        two_factor_backup_codes=[hash_password(code) for code in backup_codes],
    )
    return await credential_repository.create(user)
