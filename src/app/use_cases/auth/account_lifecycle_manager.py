"""
Account Lifecycle Manager

Registration, email verification and password reset/change against the
credential store.
"""

import logging
from datetime import datetime, timedelta
from typing import Callable
from uuid import UUID

from sqlalchemy.exc import IntegrityError

from libs.result import Result, Return
from src.app.services.notification_sender import INotificationSender
from src.app.services.password_hasher import IPasswordHasher, UnhashablePasswordError
from src.app.services.token_issuer import TokenIssuer
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import Account, AccountStatus
from . import errors
from .dtos import RegisterCommand, RegistrationResult

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


class AccountLifecycleManager:
    """
    Account lifecycle use cases.

    Business Rules:
    - Email uniqueness is case-insensitive (stored normalized)
    - Verification and reset tokens are single-use, stored as SHA-256 digests
    - forgot_password never reveals whether an account exists
    - A reset token is cleared after its first use attempt, success or expiry
    - Password reset and password change revoke every active session
    """

    def __init__(
        self,
        uow: UnitOfWork,
        password_hasher: IPasswordHasher,
        notifier: INotificationSender,
        reset_token_ttl: timedelta = timedelta(hours=1),
        verification_token_ttl: timedelta = timedelta(hours=24),
        clock: Callable[[], datetime] = utcnow,
    ):
        self.uow = uow
        self.password_hasher = password_hasher
        self.notifier = notifier
        self.reset_token_ttl = reset_token_ttl
        self.verification_token_ttl = verification_token_ttl
        self.clock = clock

    async def register(self, command: RegisterCommand) -> Result[RegistrationResult]:
        """
        Register a new, unverified and active account.

        Returns:
            Result[RegistrationResult] with the account and the plaintext
            verification token, or Error(CONFLICT) if the email exists
        """
        email = normalize_email(command.email)
        now = self.clock()

        try:
            password_hash = self.password_hasher.hash(command.password)
        except UnhashablePasswordError:
            return Return.err(errors.invalid_password())

        async with self.uow:
            existing = await self.uow.accounts.get_by_email(email)
            if existing is not None:
                return Return.err(errors.conflict())

            verification_token = TokenIssuer.generate_token()
            account = Account(
                email=email,
                password_hash=password_hash,
                first_name=command.first_name,
                last_name=command.last_name,
                country=command.country,
                phone=command.phone,
                role=command.role,
                status=AccountStatus.active,
                email_verified=False,
                email_verification_token_hash=TokenIssuer.hash_token(verification_token),
                email_verification_expires_at=now + self.verification_token_ttl,
                created_at=now,
                updated_at=now,
            )

            try:
                account = await self.uow.accounts.create(account)
                await self.uow.commit()
            except IntegrityError:
                # Lost a race against a concurrent registration of the same email
                await self.uow.rollback()
                return Return.err(errors.conflict())

        logger.info(f"Account registered: {account.id}")
        await self.notifier.send_email_verification(account.email, verification_token)

        return Return.ok(
            RegistrationResult(account=account, verification_token=verification_token)
        )

    async def verify_email(self, token: str) -> Result[Account]:
        """
        Confirm an email address with its single-use token.

        Errors:
            - INVALID_TOKEN: no account holds a matching, unexpired token
        """
        now = self.clock()

        async with self.uow:
            account = await self.uow.accounts.get_by_verification_token_hash(
                TokenIssuer.hash_token(token)
            )
            if account is None:
                return Return.err(errors.invalid_token())

            expires_at = account.email_verification_expires_at
            if expires_at is not None and expires_at <= now:
                return Return.err(errors.invalid_token())

            account.email_verified = True
            account.email_verification_token_hash = None
            account.email_verification_expires_at = None
            account.updated_at = now
            account = await self.uow.accounts.update(account)

            await self.uow.commit()

        logger.info(f"Email verified for account {account.id}")
        return Return.ok(account)

    async def resend_verification(self, email: str) -> Result[None]:
        """
        Issue a fresh verification token, replacing the previous one.

        Always returns success so callers can't discover which emails have accounts.
        """
        now = self.clock()

        async with self.uow:
            account = await self.uow.accounts.get_by_email(normalize_email(email))
            if account is None or account.email_verified:
                return Return.ok(None)

            verification_token = TokenIssuer.generate_token()
            account.email_verification_token_hash = TokenIssuer.hash_token(verification_token)
            account.email_verification_expires_at = now + self.verification_token_ttl
            account.updated_at = now
            await self.uow.accounts.update(account)

            await self.uow.commit()

        await self.notifier.send_email_verification(account.email, verification_token)
        return Return.ok(None)

    async def forgot_password(self, email: str) -> Result[None]:
        """
        Start a password reset.

        Always returns success so callers can't discover which emails have accounts. If the
        account exists, a new reset token replaces any unconsumed one.
        """
        now = self.clock()

        async with self.uow:
            account = await self.uow.accounts.get_by_email(normalize_email(email))
            if account is None:
                return Return.ok(None)

            reset_token = TokenIssuer.generate_token()
            account.password_reset_token_hash = TokenIssuer.hash_token(reset_token)
            account.password_reset_expires_at = now + self.reset_token_ttl
            account.updated_at = now
            await self.uow.accounts.update(account)

            await self.uow.commit()

        logger.info(f"Password reset requested for account {account.id}")
        await self.notifier.send_password_reset(account.email, reset_token)
        return Return.ok(None)

    async def reset_password(self, token: str, new_password: str) -> Result[None]:
        """
        Complete a password reset and force re-login everywhere.

        The token is consumed with a conditional update, so of two concurrent
        resets with the same token only one writes a password.

        Errors:
            - INVALID_OR_EXPIRED_TOKEN: token unknown, already used or expired
            - INVALID_PASSWORD: new password can't be hashed
        """
        now = self.clock()
        token_hash = TokenIssuer.hash_token(token)

        async with self.uow:
            account = await self.uow.accounts.get_by_reset_token_hash(token_hash)
            if account is None:
                return Return.err(errors.invalid_or_expired_token())

            if not account.has_live_reset_token(now):
                # An expired token is spent by the attempt, same as a used one
                account.clear_reset_token()
                account.updated_at = now
                await self.uow.accounts.update(account)
                await self.uow.commit()
                return Return.err(errors.invalid_or_expired_token())

            try:
                password_hash = self.password_hasher.hash(new_password)
            except UnhashablePasswordError:
                return Return.err(errors.invalid_password())

            consumed = await self.uow.accounts.consume_reset_token(account.id, token_hash, now)
            if not consumed:
                logger.info(f"Password reset token for account {account.id} already consumed")
                return Return.err(errors.invalid_or_expired_token())

            account.password_hash = password_hash
            account.clear_reset_token()
            account.updated_at = now
            await self.uow.accounts.update(account)

            revoked_count = await self.uow.sessions.revoke_all_by_account_id(account.id, now)

            await self.uow.commit()

        logger.info(
            f"Password reset for account {account.id}, {revoked_count} session(s) revoked"
        )
        return Return.ok(None)

    async def change_password(
        self, account_id: UUID, current_password: str, new_password: str
    ) -> Result[None]:
        """
        Change password for an authenticated account.

        All sessions are revoked on success, including the caller's own.

        Errors:
            - INVALID_CREDENTIALS: account missing or current password wrong;
              sessions are left untouched
            - INVALID_PASSWORD: new password can't be hashed
        """
        now = self.clock()

        async with self.uow:
            account = await self.uow.accounts.get_by_id(account_id)
            if account is None or not self.password_hasher.verify(
                current_password, account.password_hash
            ):
                return Return.err(errors.invalid_credentials())

            try:
                account.password_hash = self.password_hasher.hash(new_password)
            except UnhashablePasswordError:
                return Return.err(errors.invalid_password())

            account.updated_at = now
            await self.uow.accounts.update(account)

            revoked_count = await self.uow.sessions.revoke_all_by_account_id(account.id, now)

            await self.uow.commit()

        logger.info(
            f"Password changed for account {account.id}, {revoked_count} session(s) revoked"
        )
        return Return.ok(None)
