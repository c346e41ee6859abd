import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.adapter.services.bcrypt_password_hasher import BcryptPasswordHasher
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.api.app import create_app
from src.depends import get_notification_sender, get_password_hasher, get_unit_of_work
from src.domain.entities import Account, AccountRole, AccountStatus
from tests.fixtures.fakes import RecordingNotificationSender

DEFAULT_PASSWORD = "SecurePass123!"

# Low cost factor keeps the suite fast; the algorithm is unchanged
fast_hasher = BcryptPasswordHasher(rounds=4)


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(engine):
    Session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with Session() as session:
        yield session


@pytest.fixture
def notifier():
    return RecordingNotificationSender()


@pytest_asyncio.fixture
async def client(db_session, notifier):
    app = create_app(ApplicationConfig)

    async def override_get_unit_of_work():
        yield SqlAlchemyUnitOfWork(db_session)

    app.dependency_overrides[get_unit_of_work] = override_get_unit_of_work
    app.dependency_overrides[get_notification_sender] = lambda: notifier
    app.dependency_overrides[get_password_hasher] = lambda: fast_hasher

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def register(client):
    async def _register(email="alice@example.com", password=DEFAULT_PASSWORD, role="organizer"):
        return await client.post(
            "/auth/register",
            json={
                "email": email,
                "password": password,
                "first_name": "Alice",
                "last_name": "Smith",
                "country": "Romania",
                "role": role,
            },
        )

    return _register


@pytest.fixture
def login(client):
    async def _login(email="alice@example.com", password=DEFAULT_PASSWORD):
        return await client.post("/auth/login", json={"email": email, "password": password})

    return _login


@pytest.fixture
def create_account(db_session):
    """Insert an account directly, for roles and states registration can't produce"""

    async def _create_account(
        email="admin@example.com",
        password=DEFAULT_PASSWORD,
        role=AccountRole.admin,
        status=AccountStatus.active,
    ) -> Account:
        account = Account(
            email=email,
            password_hash=fast_hasher.hash(password),
            first_name="Root",
            last_name="Admin",
            country="Romania",
            role=role,
            status=status,
            email_verified=True,
        )
        db_session.add(account)
        await db_session.commit()
        return account

    return _create_account
