"""
Session Entity

Stores refresh tokens for authentication.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow


class Session(SQLModel, table=True):
    """
    Session entity - one row per issued refresh token.

    Business Rules:
    - Refresh tokens are stored as SHA-256 digests, looked up by exact match
    - Tokens rotate on each refresh; the consumed row points at its successor
    - Revocation is monotonic, a revoked row never becomes active again
    - A row past expires_at is inactive regardless of the revoked flag
    - ip_address / user_agent are recorded for audit only, never enforced
    """

    __tablename__ = "sessions"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    account_id: UUID = Field(foreign_key="accounts.id", nullable=False, index=True)

    refresh_token_hash: str = Field(unique=True, index=True, max_length=64)
    ip_address: Optional[str] = Field(default=None, max_length=64)
    user_agent: Optional[str] = Field(default=None, max_length=512)

    revoked: bool = Field(default=False)
    revoked_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
    replaced_by_id: Optional[UUID] = Field(default=None)

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    expires_at: datetime = Field(sa_column=Column(DateTime, nullable=False))

    __table_args__ = (
        Index("idx_session_expires_at", "expires_at"),
        Index("idx_session_account_revoked", "account_id", "revoked"),
    )

    def is_active(self, now: datetime) -> bool:
        return not self.revoked and self.expires_at > now

    @property
    def was_rotated(self) -> bool:
        return self.revoked and self.replaced_by_id is not None
