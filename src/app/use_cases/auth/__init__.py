"""
Authentication Use Cases

All authentication-related business logic.
"""

from .account_lifecycle_manager import AccountLifecycleManager
from .session_manager import SessionManager
from .auth_facade import AuthFacade
from .errors import AuthErrorCode
from .dtos import (
    RegisterCommand,
    RegistrationResult,
    LoginResult,
    TokenPair,
    AccountSummary,
    RegisterResponse,
    LoginResponse,
    RefreshTokenResponse,
    StatusResponse,
    LogoutResponse,
    SweepResponse,
)

__all__ = [
    # Components
    "AccountLifecycleManager",
    "SessionManager",
    "AuthFacade",
    # Errors
    "AuthErrorCode",
    # DTOs - Commands
    "RegisterCommand",
    # DTOs - Internal results
    "RegistrationResult",
    "LoginResult",
    "TokenPair",
    # DTOs - Responses
    "AccountSummary",
    "RegisterResponse",
    "LoginResponse",
    "RefreshTokenResponse",
    "StatusResponse",
    "LogoutResponse",
    "SweepResponse",
]
