from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional
from uuid import UUID

from src.domain.entities import Session


class ISessionRepository(ABC):
    """Session repository interface - application layer"""

    @abstractmethod
    async def create(self, session: Session) -> Session:
        """Create a new session"""
        pass

    @abstractmethod
    async def get_by_refresh_token_hash(self, token_hash: str) -> Optional[Session]:
        """Find session by refresh token digest, regardless of state"""
        pass

    @abstractmethod
    async def revoke_if_active(
        self, session_id: UUID, now: datetime, replaced_by_id: Optional[UUID] = None
    ) -> bool:
        """
        Conditionally revoke a session that is still active at ``now``.

        Returns True only for the caller whose update flipped the row.
        """
        pass

    @abstractmethod
    async def revoke_by_refresh_token_hash(
        self, account_id: UUID, token_hash: str, now: datetime
    ) -> bool:
        """Revoke the matching active session owned by the account"""
        pass

    @abstractmethod
    async def revoke_all_by_account_id(self, account_id: UUID, now: datetime) -> int:
        """Revoke all active sessions for an account. Returns count revoked."""
        pass

    @abstractmethod
    async def revoke_expired(self, now: datetime) -> int:
        """Flag sessions past expiry as revoked. Returns count flagged."""
        pass
