import pytest
from httpx import AsyncClient
from sqlmodel import select

from src.domain.entities import AccountStatus, Session


@pytest.mark.asyncio
async def test_successful_login(client: AsyncClient, register, login, db_session):
    """Successful Login

    Given an account exists
    When I log in with the correct email and password
    Then I receive an access token and a refresh token
    And exactly one session is recorded with my device metadata
    """
    await register()

    response = await client.post(
        "/auth/login",
        json={"email": "ALICE@example.com", "password": "SecurePass123!"},
        headers={"User-Agent": "integration-test"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["token_type"] == "bearer"
    assert isinstance(data["access_token"], str)
    assert isinstance(data["refresh_token"], str)
    assert data["user"]["email"] == "alice@example.com"

    result = await db_session.execute(select(Session))
    sessions = list(result.scalars().all())
    assert len(sessions) == 1
    assert sessions[0].user_agent == "integration-test"
    assert sessions[0].revoked is False
    # Only the digest is stored
    assert sessions[0].refresh_token_hash != data["refresh_token"]


@pytest.mark.asyncio
async def test_each_login_opens_a_new_session(client: AsyncClient, register, login, db_session):
    await register()

    first = await login()
    second = await login()

    assert first.json()["refresh_token"] != second.json()["refresh_token"]
    result = await db_session.execute(select(Session))
    assert len(result.scalars().all()) == 2


@pytest.mark.asyncio
async def test_wrong_password(client: AsyncClient, register, login):
    """Invalid Credentials

    Given an account exists
    When I log in with an incorrect password
    Then the request fails with 401 Unauthorized
    And error code is INVALID_CREDENTIALS
    """
    await register()

    response = await login(password="WrongPassword1!")

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "INVALID_CREDENTIALS"


@pytest.mark.asyncio
async def test_login_failures_are_indistinguishable(client: AsyncClient, register, login, create_account):
    """Unknown email, wrong password and disabled account return identical errors"""
    await register()
    await create_account(email="disabled@example.com", status=AccountStatus.disabled)

    unknown = await login(email="ghost@example.com")
    wrong = await login(password="WrongPassword1!")
    disabled = await login(email="disabled@example.com")

    assert unknown.status_code == wrong.status_code == disabled.status_code == 401
    assert unknown.json() == wrong.json() == disabled.json()


@pytest.mark.asyncio
async def test_overlong_password_indistinguishable_for_unknown_email(client: AsyncClient, register, login):
    """A password past bcrypt's limit fails the same way whether or not the account exists"""
    await register()

    known = await login(password="x" * 100)
    unknown = await login(email="nobody@example.com", password="x" * 100)
    multibyte = await login(email="nobody@example.com", password="Aa1" + "é" * 40)

    assert known.status_code == unknown.status_code == multibyte.status_code == 401
    assert known.json() == unknown.json() == multibyte.json()
    assert known.json()["error"]["code"] == "INVALID_CREDENTIALS"
