"""
Auth Facade

Single entry point for callers. Routes each operation to the account
lifecycle or session manager and shapes results into response DTOs that
never carry password digests, verification tokens or session ids.
"""

import logging
from functools import wraps
from typing import Optional
from uuid import UUID

from sqlalchemy.exc import InterfaceError, OperationalError

from libs.result import Result, Return
from src.app.services.token_issuer import AccessTokenClaims, TokenIssuer
from . import errors
from .account_lifecycle_manager import AccountLifecycleManager
from .dtos import (
    AccountSummary,
    LoginResponse,
    LogoutResponse,
    RefreshTokenResponse,
    RegisterCommand,
    RegisterResponse,
    StatusResponse,
    SweepResponse,
)
from .session_manager import SessionManager

logger = logging.getLogger(__name__)


def store_guard(func):
    """Surface an unreachable store as SERVICE_UNAVAILABLE, never retried"""

    @wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except (OperationalError, InterfaceError) as exc:
            logger.error(f"Store unavailable during {func.__name__}: {exc.__class__.__name__}")
            return Return.err(errors.service_unavailable())

    return wrapper


class AuthFacade:
    """Composes the managers into the public auth operations"""

    def __init__(
        self,
        accounts: AccountLifecycleManager,
        sessions: SessionManager,
        token_issuer: TokenIssuer,
    ):
        self.accounts = accounts
        self.sessions = sessions
        self.token_issuer = token_issuer

    @store_guard
    async def register(self, command: RegisterCommand) -> Result[RegisterResponse]:
        result = await self.accounts.register(command)
        if result.is_err():
            return Return.err(result.error)

        # verification_token went out through the notification sender only
        return Return.ok(
            RegisterResponse(
                user=AccountSummary.from_account(result.value.account),
                message="Registration successful. Please check your email to verify your account.",
            )
        )

    @store_guard
    async def login(
        self,
        email: str,
        password: str,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> Result[LoginResponse]:
        result = await self.sessions.login(email, password, ip_address, user_agent)
        if result.is_err():
            return Return.err(result.error)

        login = result.value
        return Return.ok(
            LoginResponse(
                access_token=login.access_token,
                refresh_token=login.refresh_token,
                user=AccountSummary.from_account(login.account),
            )
        )

    @store_guard
    async def refresh(
        self,
        refresh_token: str,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> Result[RefreshTokenResponse]:
        result = await self.sessions.refresh(refresh_token, ip_address, user_agent)
        if result.is_err():
            return Return.err(result.error)

        return Return.ok(
            RefreshTokenResponse(
                access_token=result.value.access_token,
                refresh_token=result.value.refresh_token,
            )
        )

    @store_guard
    async def logout(
        self, account_id: UUID, refresh_token: Optional[str] = None
    ) -> Result[LogoutResponse]:
        result = await self.sessions.logout(account_id, refresh_token)
        if result.is_err():
            return Return.err(result.error)

        return Return.ok(
            LogoutResponse(message="Logged out successfully", revoked_count=result.value)
        )

    @store_guard
    async def verify_email(self, token: str) -> Result[StatusResponse]:
        result = await self.accounts.verify_email(token)
        if result.is_err():
            return Return.err(result.error)

        return Return.ok(
            StatusResponse(status="verified", message="Email successfully verified")
        )

    @store_guard
    async def resend_verification(self, email: str) -> Result[StatusResponse]:
        result = await self.accounts.resend_verification(email)
        if result.is_err():
            return Return.err(result.error)

        return Return.ok(
            StatusResponse(
                status="sent",
                message="If the email exists and is unverified, a verification link has been sent",
            )
        )

    @store_guard
    async def forgot_password(self, email: str) -> Result[StatusResponse]:
        result = await self.accounts.forgot_password(email)
        if result.is_err():
            return Return.err(result.error)

        return Return.ok(
            StatusResponse(
                status="sent",
                message="If the email exists, a password reset link has been sent",
            )
        )

    @store_guard
    async def reset_password(self, token: str, new_password: str) -> Result[StatusResponse]:
        result = await self.accounts.reset_password(token, new_password)
        if result.is_err():
            return Return.err(result.error)

        return Return.ok(
            StatusResponse(status="success", message="Password has been reset successfully")
        )

    @store_guard
    async def change_password(
        self, account_id: UUID, current_password: str, new_password: str
    ) -> Result[StatusResponse]:
        result = await self.accounts.change_password(account_id, current_password, new_password)
        if result.is_err():
            return Return.err(result.error)

        return Return.ok(
            StatusResponse(
                status="success",
                message="Password changed successfully. Please log in again.",
            )
        )

    def verify_access_token(self, token: str) -> Result[AccessTokenClaims]:
        """Stateless check used by the routing layer to authenticate callers"""
        claims = self.token_issuer.verify_access_token(token)
        if claims is None:
            return Return.err(errors.unauthorized())
        return Return.ok(claims)

    @store_guard
    async def sweep_expired_sessions(self) -> Result[SweepResponse]:
        result = await self.sessions.sweep_expired_sessions()
        if result.is_err():
            return Return.err(result.error)

        return Return.ok(SweepResponse(revoked_count=result.value))
