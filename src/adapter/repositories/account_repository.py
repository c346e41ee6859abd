from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlmodel import select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.account_repository import IAccountRepository
from src.domain.entities import Account


class AccountRepository(IAccountRepository):
    """Account repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_email(self, email: str) -> Optional[Account]:
        """Get account by normalized email address"""
        stmt = select(Account).where(Account.email == email.strip().lower())
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_by_id(self, account_id: UUID) -> Optional[Account]:
        """Get account by ID"""
        stmt = select(Account).where(Account.id == account_id)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def create(self, account: Account) -> Account:
        """Create a new account"""
        self.session.add(account)
        await self.session.flush()
        await self.session.refresh(account)
        return account

    async def update(self, account: Account) -> Account:
        """Update existing account"""
        self.session.add(account)
        await self.session.flush()
        await self.session.refresh(account)
        return account

    async def get_by_verification_token_hash(self, token_hash: str) -> Optional[Account]:
        """Get account by email verification token digest"""
        stmt = select(Account).where(Account.email_verification_token_hash == token_hash)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_by_reset_token_hash(self, token_hash: str) -> Optional[Account]:
        """Get account by password reset token digest"""
        stmt = select(Account).where(Account.password_reset_token_hash == token_hash)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def consume_reset_token(self, account_id: UUID, token_hash: str, now: datetime) -> bool:
        """Compare-and-swap clear: only one concurrent caller sees rowcount 1"""
        stmt = (
            update(Account)
            .where(
                Account.id == account_id,
                Account.password_reset_token_hash == token_hash,
                Account.password_reset_expires_at > now,
            )
            .values(password_reset_token_hash=None, password_reset_expires_at=None)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount == 1
