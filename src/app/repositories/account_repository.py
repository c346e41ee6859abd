from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional
from uuid import UUID

from src.domain.entities import Account


class IAccountRepository(ABC):
    """Account repository interface - application layer"""

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[Account]:
        """Get account by normalized (lowercase) email address"""
        pass

    @abstractmethod
    async def get_by_id(self, account_id: UUID) -> Optional[Account]:
        """Get account by ID"""
        pass

    @abstractmethod
    async def create(self, account: Account) -> Account:
        """Create a new account"""
        pass

    @abstractmethod
    async def update(self, account: Account) -> Account:
        """Update existing account"""
        pass

    @abstractmethod
    async def get_by_verification_token_hash(self, token_hash: str) -> Optional[Account]:
        """Get account by email verification token digest"""
        pass

    @abstractmethod
    async def get_by_reset_token_hash(self, token_hash: str) -> Optional[Account]:
        """Get account by password reset token digest"""
        pass

    @abstractmethod
    async def consume_reset_token(self, account_id: UUID, token_hash: str, now: datetime) -> bool:
        """
        Conditionally clear a live reset token.

        Returns True only for the caller whose update cleared it.
        """
        pass
