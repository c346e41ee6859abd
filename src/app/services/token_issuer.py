"""
Token Issuer

Produces the two credential kinds handed to clients:
- access tokens: short-lived HS256 JWTs, verified without any store lookup
- refresh tokens: opaque random strings, meaningless without a Session row
"""

import hashlib
import secrets
from datetime import UTC, datetime, timedelta
from typing import Optional
from uuid import UUID, uuid4

from jose import JWTError, jwt
from pydantic import BaseModel, Field

from src.domain.entities import Account, AccountRole

ACCESS_TOKEN_TYPE = "access"


class TokenIssuerConfig(BaseModel):
    """Explicit issuer settings, built once from application config"""

    signing_key: str = Field(..., min_length=1)
    algorithm: str = "HS256"
    access_token_ttl: timedelta = timedelta(minutes=15)
    refresh_token_ttl: timedelta = timedelta(days=7)


class AccessTokenClaims(BaseModel):
    """Verified claims carried by an access token"""

    sub: UUID
    email: str
    role: AccountRole
    exp: datetime
    iat: datetime
    jti: str


class IssuedRefreshToken(BaseModel):
    """Plain refresh token for the client plus what gets persisted"""

    token: str
    token_hash: str
    expires_at: datetime


class TokenIssuer:
    """Stateless issuer; holds configuration only"""

    def __init__(self, config: TokenIssuerConfig):
        self.config = config

    @staticmethod
    def hash_token(token: str) -> str:
        """SHA-256 digest used to store and look up single-use secrets"""
        return hashlib.sha256(token.encode()).hexdigest()

    @staticmethod
    def generate_token(nbytes: int = 32) -> str:
        return secrets.token_urlsafe(nbytes)

    def issue_access_token(self, account: Account) -> str:
        """
        Generate JWT access token

        Args:
            account: Authenticated account

        Returns:
            JWT token string carrying sub, email, role, iat, exp and jti
        """
        now = datetime.now(UTC)
        role = account.role.value if isinstance(account.role, AccountRole) else account.role
        payload = {
            "sub": str(account.id),
            "email": account.email,
            "role": role,
            "type": ACCESS_TOKEN_TYPE,
            "iat": now,
            "exp": now + self.config.access_token_ttl,
            "jti": uuid4().hex,
        }
        return jwt.encode(payload, self.config.signing_key, algorithm=self.config.algorithm)

    def verify_access_token(self, token: str) -> Optional[AccessTokenClaims]:
        """
        Verify and decode an access token

        Returns:
            AccessTokenClaims or None if the signature, expiry or shape is invalid
        """
        try:
            payload = jwt.decode(
                token, self.config.signing_key, algorithms=[self.config.algorithm]
            )
        except JWTError:
            return None

        if payload.get("type") != ACCESS_TOKEN_TYPE:
            return None

        try:
            return AccessTokenClaims(
                sub=payload["sub"],
                email=payload["email"],
                role=payload["role"],
                exp=datetime.fromtimestamp(payload["exp"], UTC),
                iat=datetime.fromtimestamp(payload["iat"], UTC),
                jti=payload["jti"],
            )
        except (KeyError, ValueError):
            return None

    def issue_refresh_token(self, now: datetime) -> IssuedRefreshToken:
        """New opaque refresh token expiring refresh_token_ttl after ``now``"""
        token = self.generate_token(48)
        return IssuedRefreshToken(
            token=token,
            token_hash=self.hash_token(token),
            expires_at=now + self.config.refresh_token_ttl,
        )
