from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlmodel import select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.session_repository import ISessionRepository
from src.domain.entities import Session


class SessionRepository(ISessionRepository):
    """Session repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, session_obj: Session) -> Session:
        """Create a new session"""
        self.session.add(session_obj)
        await self.session.flush()
        await self.session.refresh(session_obj)
        return session_obj

    async def get_by_refresh_token_hash(self, token_hash: str) -> Optional[Session]:
        """
        Find session by refresh token digest.

        We don't filter by revoked/expired here - that's checked in the
        session manager, which also needs to see rotated rows to detect reuse.
        """
        stmt = select(Session).where(Session.refresh_token_hash == token_hash)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def revoke_if_active(
        self, session_id: UUID, now: datetime, replaced_by_id: Optional[UUID] = None
    ) -> bool:
        """Compare-and-swap revoke: only one concurrent caller sees rowcount 1"""
        stmt = (
            update(Session)
            .where(
                Session.id == session_id,
                Session.revoked == False,  # noqa: E712
                Session.expires_at > now,
            )
            .values(revoked=True, revoked_at=now, replaced_by_id=replaced_by_id)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount == 1

    async def revoke_by_refresh_token_hash(
        self, account_id: UUID, token_hash: str, now: datetime
    ) -> bool:
        """Revoke the matching active session owned by the account"""
        stmt = (
            update(Session)
            .where(
                Session.account_id == account_id,
                Session.refresh_token_hash == token_hash,
                Session.revoked == False,  # noqa: E712
            )
            .values(revoked=True, revoked_at=now)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount > 0

    async def revoke_all_by_account_id(self, account_id: UUID, now: datetime) -> int:
        """Revoke all active sessions for an account"""
        stmt = (
            update(Session)
            .where(Session.account_id == account_id, Session.revoked == False)  # noqa: E712
            .values(revoked=True, revoked_at=now)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount

    async def revoke_expired(self, now: datetime) -> int:
        """Flag sessions past expiry as revoked"""
        stmt = (
            update(Session)
            .where(Session.revoked == False, Session.expires_at <= now)  # noqa: E712
            .values(revoked=True, revoked_at=now)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount
