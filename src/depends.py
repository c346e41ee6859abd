from datetime import timedelta

from fastapi import Depends, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from libs.result import Error
from src.adapter.services.bcrypt_password_hasher import BcryptPasswordHasher
from src.adapter.services.logging_notification_sender import LoggingNotificationSender
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.api.error import ClientError
from src.app.services.notification_sender import INotificationSender
from src.app.services.password_hasher import IPasswordHasher
from src.app.services.token_issuer import AccessTokenClaims, TokenIssuer, TokenIssuerConfig
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.auth import AccountLifecycleManager, AuthFacade, SessionManager

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)

security = HTTPBearer(auto_error=False)

token_issuer = TokenIssuer(
    TokenIssuerConfig(
        signing_key=ApplicationConfig.JWT_SECRET,
        algorithm=ApplicationConfig.JWT_ALGORITHM,
        access_token_ttl=timedelta(minutes=ApplicationConfig.ACCESS_TOKEN_TTL_MINUTES),
        refresh_token_ttl=timedelta(days=ApplicationConfig.REFRESH_TOKEN_TTL_DAYS),
    )
)

password_hasher = BcryptPasswordHasher(rounds=ApplicationConfig.BCRYPT_ROUNDS)

notification_sender = LoggingNotificationSender(base_url=ApplicationConfig.FRONTEND_URL)


async def get_unit_of_work():
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session)


def get_token_issuer() -> TokenIssuer:
    return token_issuer


def get_password_hasher() -> IPasswordHasher:
    return password_hasher


def get_notification_sender() -> INotificationSender:
    return notification_sender


def build_auth_facade(
    uow: UnitOfWork,
    hasher: IPasswordHasher,
    issuer: TokenIssuer,
    notifier: INotificationSender,
) -> AuthFacade:
    accounts = AccountLifecycleManager(
        uow,
        hasher,
        notifier,
        reset_token_ttl=timedelta(minutes=ApplicationConfig.PASSWORD_RESET_TTL_MINUTES),
        verification_token_ttl=timedelta(hours=ApplicationConfig.EMAIL_VERIFICATION_TTL_HOURS),
    )
    sessions = SessionManager(
        uow,
        hasher,
        issuer,
        revoke_all_on_reuse=ApplicationConfig.REVOKE_ALL_ON_REFRESH_REUSE,
    )
    return AuthFacade(accounts, sessions, issuer)


async def get_auth_facade(
    uow: UnitOfWork = Depends(get_unit_of_work),
    hasher: IPasswordHasher = Depends(get_password_hasher),
    issuer: TokenIssuer = Depends(get_token_issuer),
    notifier: INotificationSender = Depends(get_notification_sender),
) -> AuthFacade:
    return build_auth_facade(uow, hasher, issuer, notifier)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    facade: AuthFacade = Depends(get_auth_facade),
) -> AccessTokenClaims:
    """
    Dependency to extract and verify JWT token from Authorization header.

    Args:
        credentials: Bearer token from Authorization header

    Returns:
        Verified access token claims (sub, email, role)

    Raises:
        ClientError: 401 UNAUTHORIZED if token is missing, invalid or expired
    """
    if credentials is None:
        raise ClientError(
            Error("UNAUTHORIZED", "Missing bearer token"),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    result = facade.verify_access_token(credentials.credentials)
    if result.is_err():
        raise ClientError(result.error, status_code=status.HTTP_401_UNAUTHORIZED)

    return result.value
