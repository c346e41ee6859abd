"""
Races against the SQLite store.

Each contender gets its own AsyncSession (its own connection), so the
conditional UPDATEs in the repositories are what decides the winner.
"""
import asyncio
from datetime import timedelta

import pytest
import pytest_asyncio
from sqlalchemy.orm import sessionmaker
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.adapter.services.bcrypt_password_hasher import BcryptPasswordHasher
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.services.token_issuer import TokenIssuer, TokenIssuerConfig
from src.app.use_cases.auth import (
    AccountLifecycleManager,
    AuthErrorCode,
    RegisterCommand,
    SessionManager,
)
from src.domain.entities import Account, Session

hasher = BcryptPasswordHasher(rounds=4)
token_issuer = TokenIssuer(
    TokenIssuerConfig(signing_key="race-test-key", refresh_token_ttl=timedelta(days=7))
)


def outcome(result):
    return "ok" if result.is_ok() else result.error.code


@pytest_asyncio.fixture
async def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def registered(session_factory, notifier):
    async with session_factory() as session:
        manager = AccountLifecycleManager(SqlAlchemyUnitOfWork(session), hasher, notifier)
        result = await manager.register(
            RegisterCommand(
                email="alice@example.com",
                password="Secr3t!pass",
                first_name="Alice",
                last_name="Smith",
                country="Romania",
            )
        )
    assert result.is_ok()
    return result.value.account


@pytest.mark.asyncio
async def test_concurrent_refresh_exactly_one_rotation(session_factory, registered):
    async with session_factory() as session:
        login = await SessionManager(SqlAlchemyUnitOfWork(session), hasher, token_issuer).login(
            "alice@example.com", "Secr3t!pass"
        )
    refresh_token = login.value.refresh_token

    async def refresh_in_own_session():
        async with session_factory() as session:
            manager = SessionManager(SqlAlchemyUnitOfWork(session), hasher, token_issuer)
            return await manager.refresh(refresh_token)

    results = await asyncio.gather(refresh_in_own_session(), refresh_in_own_session())

    assert sorted(outcome(r) for r in results) == sorted(
        ["ok", AuthErrorCode.INVALID_REFRESH_TOKEN.value]
    )

    async with session_factory() as session:
        rows = (await session.execute(select(Session))).scalars().all()
    assert len(rows) == 2
    active = [s for s in rows if not s.revoked]
    consumed = [s for s in rows if s.revoked]
    assert len(active) == 1
    assert consumed[0].replaced_by_id == active[0].id


@pytest.mark.asyncio
async def test_concurrent_password_reset_single_use(session_factory, registered, notifier):
    async with session_factory() as session:
        manager = AccountLifecycleManager(SqlAlchemyUnitOfWork(session), hasher, notifier)
        await manager.forgot_password("alice@example.com")
    token = notifier.last_reset_token("alice@example.com")

    async def reset_in_own_session(new_password):
        async with session_factory() as session:
            manager = AccountLifecycleManager(SqlAlchemyUnitOfWork(session), hasher, notifier)
            return await manager.reset_password(token, new_password)

    results = await asyncio.gather(
        reset_in_own_session("FirstNew1!"), reset_in_own_session("SecondNew2!")
    )

    assert sorted(outcome(r) for r in results) == sorted(
        ["ok", AuthErrorCode.INVALID_OR_EXPIRED_TOKEN.value]
    )

    winner = "FirstNew1!" if results[0].is_ok() else "SecondNew2!"
    loser = "SecondNew2!" if winner == "FirstNew1!" else "FirstNew1!"
    async with session_factory() as session:
        account = (await session.execute(select(Account))).scalar_one()
    assert hasher.verify(winner, account.password_hash)
    assert not hasher.verify(loser, account.password_hash)
    assert account.password_reset_token_hash is None
