"""
Feature tests for refresh rotation, logout and bearer authentication.
"""

import pytest
import pytest_asyncio

BASE = "/api/v1/auth"


@pytest_asyncio.fixture
async def tokens(async_client):
    response = await async_client.post(
        f"{BASE}/register",
        json={"name": "Ada Lovelace", "email": "a@x.com", "password": "Abc12345"},
    )
    return response.json()["tokens"]


@pytest.mark.asyncio
async def test_refresh_token_can_be_used_once(async_client, tokens):
    first = await async_client.post(f"{BASE}/refresh", json={"refresh_token": tokens["refresh_token"]})
    second = await async_client.post(f"{BASE}/refresh", json={"refresh_token": tokens["refresh_token"]})

    assert first.status_code == 200
    assert first.json()["tokens"]["refresh_token"] != tokens["refresh_token"]
    assert second.status_code == 401
    assert second.json() == {"detail": "Invalid refresh token", "code": "invalid_refresh_token"}


@pytest.mark.asyncio
async def test_access_token_is_not_accepted_for_refresh(async_client, tokens):
    response = await async_client.post(f"{BASE}/refresh", json={"refresh_token": tokens["access_token"]})

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_logout_revokes_tokens_and_clears_cookie(async_client, tokens):
    response = await async_client.post(f"{BASE}/logout")

    assert response.status_code == 200
    assert response.json() == {"message": "Logged out successfully"}
    assert "sessionId=" in response.headers["set-cookie"]
    assert "sessionId" not in async_client.cookies

    refresh = await async_client.post(f"{BASE}/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert refresh.status_code == 401

    bearer = await async_client.post(
        f"{BASE}/2fa/setup", headers={"Authorization": f"Bearer {tokens['access_token']}"}
    )
    assert bearer.status_code == 401
    assert bearer.json()["code"] == "token_revoked"


@pytest.mark.asyncio
async def test_bearer_token_authenticates_without_cookie(async_client, tokens):
    async_client.cookies.clear()

    response = await async_client.post(
        f"{BASE}/2fa/setup", headers={"Authorization": f"Bearer {tokens['access_token']}"}
    )

    assert response.status_code == 200


@pytest.mark.asyncio
async def test_logout_requires_authentication(async_client):
    response = await async_client.post(f"{BASE}/logout")

    assert response.status_code == 401
    assert response.json()["code"] == "authentication_required"


@pytest.mark.asyncio
async def test_bearer_logout_revokes_presented_token(async_client, tokens):
    async_client.cookies.clear()
    headers = {"Authorization": f"Bearer {tokens['access_token']}"}

    response = await async_client.post(f"{BASE}/logout", headers=headers)
    again = await async_client.post(f"{BASE}/logout", headers=headers)

    assert response.status_code == 200
    assert again.status_code == 401


@pytest.mark.asyncio
async def test_health(async_client):
    response = await async_client.get("/api/v1/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert response.headers["x-request-id"]
