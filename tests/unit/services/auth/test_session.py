from datetime import timedelta
from unittest.mock import AsyncMock

import pytest

from turnstile.core.exceptions import NoPendingSessionError, TwoFactorSessionExpiredError
from turnstile.domain.entities.session import AuthenticatedSession, PendingTwoFactor
from turnstile.domain.interfaces.repositories import ISessionStore
from turnstile.domain.services.auth.session import SessionStateManager
from turnstile.domain.value_objects.jwt_token import TokenClaims


@pytest.fixture
def token_pair(token_service):
    return token_service.issue_pair(TokenClaims(sub="7", email="ada@example.com", role="user"))


@pytest.mark.asyncio
async def test_begin_pending_2fa_stores_pending_shape(session_manager, session_store, session_id):
    state = await session_manager.begin_pending_2fa(session_id, 7, "ada@example.com")

    assert state == PendingTwoFactor(temp_user_id=7, temp_email="ada@example.com")
    assert await session_store.load(session_id) == state


@pytest.mark.asyncio
async def test_complete_authentication_replaces_pending_shape(
    session_manager, session_store, session_id, token_pair
):
    await session_manager.begin_pending_2fa(session_id, 7, "ada@example.com")

    state = await session_manager.complete_authentication(
        session_id, 7, "ada@example.com", "user", token_pair, token_pair.expires_at
    )

    stored = await session_store.load(session_id)
    assert isinstance(stored, AuthenticatedSession)
    assert stored == state
    assert stored.access_token == token_pair.access_token
    assert stored.refresh_token == token_pair.refresh_token
    assert stored.token_expires_at == token_pair.expires_at
    assert not hasattr(stored, "temp_user_id")


@pytest.mark.asyncio
async def test_begin_pending_2fa_replaces_authenticated_shape(
    session_manager, session_store, session_id, token_pair
):
    await session_manager.complete_authentication(
        session_id, 7, "ada@example.com", "user", token_pair, token_pair.expires_at
    )

    await session_manager.begin_pending_2fa(session_id, 7, "ada@example.com")

    stored = await session_store.load(session_id)
    assert isinstance(stored, PendingTwoFactor)
    assert not hasattr(stored, "access_token")


@pytest.mark.asyncio
async def test_read_pending_2fa_returns_pending_state(session_manager, session_id):
    await session_manager.begin_pending_2fa(session_id, 7, "ada@example.com")

    pending = await session_manager.read_pending_2fa(session_id)

    assert pending.temp_user_id == 7
    assert pending.two_factor_required is True


@pytest.mark.asyncio
async def test_read_pending_2fa_without_session_raises(session_manager, session_id):
    with pytest.raises(NoPendingSessionError):
        await session_manager.read_pending_2fa(session_id)

    with pytest.raises(TwoFactorSessionExpiredError):
        await session_manager.read_pending_2fa(None)


@pytest.mark.asyncio
async def test_read_pending_2fa_on_authenticated_session_raises(
    session_manager, session_id, token_pair
):
    await session_manager.complete_authentication(
        session_id, 7, "ada@example.com", "user", token_pair, token_pair.expires_at
    )

    with pytest.raises(NoPendingSessionError):
        await session_manager.read_pending_2fa(session_id)


@pytest.mark.asyncio
async def test_expired_pending_session_raises(session_manager, session_store, session_id):
    await session_manager.begin_pending_2fa(session_id, 7, "ada@example.com")
    session_store.expire(session_id)

    with pytest.raises(NoPendingSessionError):
        await session_manager.read_pending_2fa(session_id)


@pytest.mark.asyncio
async def test_destroy_is_idempotent(session_manager, session_store, session_id):
    await session_manager.begin_pending_2fa(session_id, 7, "ada@example.com")

    await session_manager.destroy(session_id)
    await session_manager.destroy(session_id)
    await session_manager.destroy(None)

    assert await session_store.load(session_id) is None


@pytest.mark.asyncio
async def test_ttls_are_passed_to_the_store(token_pair):
    store = AsyncMock(spec=ISessionStore)
    manager = SessionStateManager(
        store, session_ttl=timedelta(days=7), pending_ttl=timedelta(minutes=10)
    )

    await manager.begin_pending_2fa("sid", 7, "ada@example.com")
    await manager.complete_authentication(
        "sid", 7, "ada@example.com", "user", token_pair, token_pair.expires_at
    )

    pending_call, authenticated_call = store.save.await_args_list
    assert pending_call.args[2] == timedelta(minutes=10)
    assert authenticated_call.args[2] == timedelta(days=7)


def test_new_session_ids_are_opaque_and_unique():
    first = SessionStateManager.new_session_id()
    second = SessionStateManager.new_session_id()

    assert first != second
    assert len(first) >= 40


@pytest.mark.asyncio
async def test_rotate_discards_presented_record_and_mints_new_id(
    session_manager, session_store, session_id
):
    await session_manager.begin_pending_2fa(session_id, 7, "ada@example.com")

    rotated = await session_manager.rotate(session_id)

    assert rotated != session_id
    assert await session_store.load(session_id) is None
    assert await session_store.load(rotated) is None


@pytest.mark.asyncio
async def test_rotate_without_presented_id(session_manager):
    first = await session_manager.rotate(None)
    second = await session_manager.rotate(None)

    assert first and second and first != second
