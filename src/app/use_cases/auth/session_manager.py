"""
Session Manager

Login, refresh-token rotation and revocation against the session store.
"""

import logging
from datetime import datetime
from typing import Callable, Optional
from uuid import UUID, uuid4

from libs.result import Result, Return
from src.app.services.password_hasher import IPasswordHasher
from src.app.services.token_issuer import TokenIssuer
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import Session
from . import errors
from .account_lifecycle_manager import normalize_email
from .dtos import LoginResult, TokenPair

logger = logging.getLogger(__name__)


class SessionManager:
    """
    Session use cases.

    Business Rules:
    - Absent account, wrong password and disabled account all fail the
      same way (INVALID_CREDENTIALS)
    - Each login creates exactly one session row
    - Refresh rotates: the consumed row is revoked by a conditional update
      and its successor is inserted in the same transaction
    - Of two concurrent refreshes with one token, exactly one wins
    - Logout is idempotent and never fails on an unknown token
    """

    def __init__(
        self,
        uow: UnitOfWork,
        password_hasher: IPasswordHasher,
        token_issuer: TokenIssuer,
        revoke_all_on_reuse: bool = False,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.uow = uow
        self.password_hasher = password_hasher
        self.token_issuer = token_issuer
        self.revoke_all_on_reuse = revoke_all_on_reuse
        self.clock = clock

    async def login(
        self,
        email: str,
        password: str,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> Result[LoginResult]:
        """
        Authenticate and open a new session.

        Returns:
            Result with LoginResult containing both tokens, or
            Error(INVALID_CREDENTIALS)
        """
        now = self.clock()

        async with self.uow:
            account = await self.uow.accounts.get_by_email(normalize_email(email))

            if account is None:
                # Equalize timing with the wrong-password path
                self.password_hasher.dummy_verify(password)
                return Return.err(errors.invalid_credentials())

            if not self.password_hasher.verify(password, account.password_hash):
                return Return.err(errors.invalid_credentials())

            if not account.is_active:
                return Return.err(errors.invalid_credentials())

            refresh = self.token_issuer.issue_refresh_token(now)
            session = Session(
                account_id=account.id,
                refresh_token_hash=refresh.token_hash,
                ip_address=ip_address,
                user_agent=user_agent,
                created_at=now,
                expires_at=refresh.expires_at,
            )
            await self.uow.sessions.create(session)

            account.last_login_at = now
            account = await self.uow.accounts.update(account)

            await self.uow.commit()

        logger.info(f"Login succeeded for account {account.id}")

        return Return.ok(
            LoginResult(
                account=account,
                access_token=self.token_issuer.issue_access_token(account),
                refresh_token=refresh.token,
            )
        )

    async def refresh(
        self,
        refresh_token: str,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> Result[TokenPair]:
        """
        Exchange a refresh token for a new access/refresh pair.

        Errors:
            - INVALID_REFRESH_TOKEN: unknown, revoked, expired, owner
              disabled, or another caller rotated it first
        """
        now = self.clock()

        async with self.uow:
            current = await self.uow.sessions.get_by_refresh_token_hash(
                TokenIssuer.hash_token(refresh_token)
            )

            if current is None:
                return Return.err(errors.invalid_refresh_token())

            if current.was_rotated:
                return await self._handle_reuse(current, now)

            if not current.is_active(now):
                return Return.err(errors.invalid_refresh_token())

            account = await self.uow.accounts.get_by_id(current.account_id)
            if account is None or not account.is_active:
                return Return.err(errors.invalid_refresh_token())

            successor_id = uuid4()
            won = await self.uow.sessions.revoke_if_active(
                current.id, now, replaced_by_id=successor_id
            )
            if not won:
                logger.info(f"Refresh lost rotation race for session {current.id}")
                return Return.err(errors.invalid_refresh_token())

            refresh = self.token_issuer.issue_refresh_token(now)
            successor = Session(
                id=successor_id,
                account_id=account.id,
                refresh_token_hash=refresh.token_hash,
                ip_address=ip_address,
                user_agent=user_agent,
                created_at=now,
                expires_at=refresh.expires_at,
            )
            await self.uow.sessions.create(successor)

            await self.uow.commit()

        logger.info(f"Session {current.id} rotated to {successor_id}")

        return Return.ok(
            TokenPair(
                access_token=self.token_issuer.issue_access_token(account),
                refresh_token=refresh.token,
            )
        )

    async def _handle_reuse(self, session: Session, now: datetime) -> Result[TokenPair]:
        logger.warning(
            f"Rotated refresh token replayed for session {session.id} "
            f"(account {session.account_id})"
        )
        if self.revoke_all_on_reuse:
            count = await self.uow.sessions.revoke_all_by_account_id(session.account_id, now)
            await self.uow.commit()
            logger.warning(
                f"Revoked {count} session(s) for account {session.account_id} after token reuse"
            )
        return Return.err(errors.invalid_refresh_token())

    async def logout(self, account_id: UUID, refresh_token: Optional[str] = None) -> Result[int]:
        """
        Revoke one session (token given) or every session of the account.

        Returns:
            Result with the number of sessions revoked; never an error
        """
        now = self.clock()

        async with self.uow:
            if refresh_token:
                revoked = await self.uow.sessions.revoke_by_refresh_token_hash(
                    account_id, TokenIssuer.hash_token(refresh_token), now
                )
                count = 1 if revoked else 0
            else:
                count = await self.uow.sessions.revoke_all_by_account_id(account_id, now)

            await self.uow.commit()

        logger.info(f"Logout for account {account_id}, {count} session(s) revoked")
        return Return.ok(count)

    async def sweep_expired_sessions(self) -> Result[int]:
        """Flag sessions past expiry as revoked. Advisory cleanup only."""
        now = self.clock()

        async with self.uow:
            count = await self.uow.sessions.revoke_expired(now)
            await self.uow.commit()

        if count:
            logger.info(f"Swept {count} expired session(s)")
        return Return.ok(count)
