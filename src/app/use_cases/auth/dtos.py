"""
Authentication Use Case DTOs (Data Transfer Objects)

All Command and Response classes for auth domain.
Provides type safety and clear contracts between layers.
"""

from typing import Optional

from pydantic import BaseModel

from src.domain.entities import Account, AccountRole


# ============================================================================
# Command DTOs
# ============================================================================


class RegisterCommand(BaseModel):
    """
    Register command - represents validated registration intent

    Created by API layer after request validation passes.
    """

    email: str
    password: str
    first_name: str
    last_name: str
    country: str
    phone: Optional[str] = None
    role: AccountRole = AccountRole.participant


# ============================================================================
# Internal results (never serialized to callers as-is)
# ============================================================================


class RegistrationResult(BaseModel):
    """Account plus the plaintext verification token for out-of-band delivery"""

    account: Account
    verification_token: str


class LoginResult(BaseModel):
    account: Account
    access_token: str
    refresh_token: str


class TokenPair(BaseModel):
    access_token: str
    refresh_token: str


# ============================================================================
# Response DTOs
# ============================================================================


class AccountSummary(BaseModel):
    """Account information safe to return to callers"""

    id: str
    email: str
    first_name: str
    last_name: str
    role: str
    email_verified: bool

    @classmethod
    def from_account(cls, account: Account) -> "AccountSummary":
        return cls(
            id=str(account.id),
            email=account.email,
            first_name=account.first_name,
            last_name=account.last_name,
            role=AccountRole(account.role).value,
            email_verified=account.email_verified,
        )


class RegisterResponse(BaseModel):
    """Response for account registration"""

    user: AccountSummary
    message: str


class LoginResponse(BaseModel):
    """Response for login"""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    user: AccountSummary


class RefreshTokenResponse(BaseModel):
    """Response for refresh token rotation"""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class StatusResponse(BaseModel):
    """Generic status/message response"""

    status: str
    message: str


class LogoutResponse(BaseModel):
    """Response for logout"""

    message: str
    revoked_count: int


class SweepResponse(BaseModel):
    """Response for expired session sweep"""

    revoked_count: int
