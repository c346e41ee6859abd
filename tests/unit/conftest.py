from datetime import datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.app.services.token_issuer import TokenIssuer, TokenIssuerConfig
from tests.fixtures.fakes import PlainPasswordHasher, RecordingNotificationSender

FIXED_NOW = datetime(2026, 1, 15, 12, 0, 0)


@pytest.fixture
def now():
    return FIXED_NOW


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


@pytest.fixture
def mock_uow():
    """Mock UnitOfWork with all repositories"""
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=False)  # Must return False to not suppress exceptions
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()

    uow.accounts = MagicMock()
    uow.accounts.get_by_email = AsyncMock(return_value=None)
    uow.accounts.get_by_id = AsyncMock(return_value=None)
    uow.accounts.create = AsyncMock(side_effect=lambda account: account)
    uow.accounts.update = AsyncMock(side_effect=lambda account: account)
    uow.accounts.get_by_verification_token_hash = AsyncMock(return_value=None)
    uow.accounts.get_by_reset_token_hash = AsyncMock(return_value=None)
    uow.accounts.consume_reset_token = AsyncMock(return_value=True)

    uow.sessions = MagicMock()
    uow.sessions.create = AsyncMock(side_effect=lambda session: session)
    uow.sessions.get_by_refresh_token_hash = AsyncMock(return_value=None)
    uow.sessions.revoke_if_active = AsyncMock(return_value=True)
    uow.sessions.revoke_by_refresh_token_hash = AsyncMock(return_value=True)
    uow.sessions.revoke_all_by_account_id = AsyncMock(return_value=0)
    uow.sessions.revoke_expired = AsyncMock(return_value=0)

    return uow


@pytest.fixture
def password_hasher():
    return PlainPasswordHasher()


@pytest.fixture
def notifier():
    return RecordingNotificationSender()


@pytest.fixture
def token_issuer():
    return TokenIssuer(
        TokenIssuerConfig(
            signing_key="unit-test-signing-key",
            access_token_ttl=timedelta(minutes=15),
            refresh_token_ttl=timedelta(days=7),
        )
    )
