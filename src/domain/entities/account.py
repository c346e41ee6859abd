"""
Account Entity

Credential store record for a person who can authenticate.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow
from .enums import AccountRole, AccountStatus


class Account(SQLModel, table=True):
    """
    Account entity - credentials, verification and reset state.

    Business Rules:
    - Email is stored lowercase and is unique across all accounts
    - Password stored as bcrypt hash, never plaintext
    - Verification and reset tokens are stored as SHA-256 digests
    - An expired reset token is treated exactly like an absent one
    - Accounts are never hard-deleted
    """

    __tablename__ = "accounts"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    email: str = Field(unique=True, index=True, max_length=255)
    password_hash: str = Field(max_length=60)  # Bcrypt output is 60 chars

    status: AccountStatus = Field(default=AccountStatus.active)
    role: AccountRole = Field(default=AccountRole.participant)

    # Profile
    first_name: str = Field(max_length=50)
    last_name: str = Field(max_length=50)
    country: str = Field(max_length=100)
    phone: Optional[str] = Field(default=None, max_length=32)

    # Email verification
    email_verified: bool = Field(default=False)
    email_verification_token_hash: Optional[str] = Field(
        default=None, unique=True, index=True, max_length=64
    )
    email_verification_expires_at: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime)
    )

    # Password reset
    password_reset_token_hash: Optional[str] = Field(
        default=None, unique=True, index=True, max_length=64
    )
    password_reset_expires_at: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime)
    )

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    updated_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    last_login_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    __table_args__ = (Index("idx_account_email_verified", "email_verified"),)

    @property
    def is_active(self) -> bool:
        return self.status == AccountStatus.active

    def has_live_reset_token(self, now: datetime) -> bool:
        return (
            self.password_reset_token_hash is not None
            and self.password_reset_expires_at is not None
            and self.password_reset_expires_at > now
        )

    def clear_reset_token(self) -> None:
        self.password_reset_token_hash = None
        self.password_reset_expires_at = None
