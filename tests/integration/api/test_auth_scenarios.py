"""
End-to-end account journeys across several endpoints.
"""
import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_register_login_refresh(client: AsyncClient):
    """Register, login, rotate, and confirm the old refresh token is dead"""
    registered = await client.post("/auth/register", json={
        "email": "alice@example.com",
        "password": "Secr3t!pass",
        "first_name": "Alice",
        "last_name": "Smith",
        "country": "Romania",
        "role": "participant",
    })
    assert registered.status_code == 201

    login = await client.post("/auth/login", json={
        "email": "alice@example.com",
        "password": "Secr3t!pass",
    })
    assert login.status_code == 200
    access_token = login.json()["access_token"]
    refresh_token = login.json()["refresh_token"]
    assert access_token and refresh_token

    rotated = await client.post("/auth/refresh", json={"refresh_token": refresh_token})
    assert rotated.status_code == 200
    assert rotated.json()["refresh_token"] != refresh_token

    replay = await client.post("/auth/refresh", json={"refresh_token": refresh_token})
    assert replay.status_code == 401
    assert replay.json()["error"]["code"] == "INVALID_REFRESH_TOKEN"


@pytest.mark.asyncio
async def test_change_password_wrong_then_right(client: AsyncClient, register, login):
    """Wrong current password keeps sessions; the right one ends them all"""
    await register()
    first = (await login()).json()
    second = (await login()).json()
    headers = {"Authorization": f"Bearer {first['access_token']}"}

    wrong = await client.post(
        "/auth/change-password",
        json={"current_password": "NotMyPass1!", "new_password": "NewSecure456!"},
        headers=headers,
    )
    assert wrong.status_code == 401
    assert wrong.json()["error"]["code"] == "INVALID_CREDENTIALS"

    # Still alive; rotating keeps the newest token for the next check
    rotated = await client.post("/auth/refresh", json={"refresh_token": first["refresh_token"]})
    assert rotated.status_code == 200
    live_tokens = [rotated.json()["refresh_token"], second["refresh_token"]]

    right = await client.post(
        "/auth/change-password",
        json={"current_password": "SecurePass123!", "new_password": "NewSecure456!"},
        headers=headers,
    )
    assert right.status_code == 200

    for token in live_tokens:
        refresh = await client.post("/auth/refresh", json={"refresh_token": token})
        assert refresh.status_code == 401
        assert refresh.json()["error"]["code"] == "INVALID_REFRESH_TOKEN"
