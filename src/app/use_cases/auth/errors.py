"""
Auth error taxonomy.

Codes are stable and coarse: credential failures never say which
precondition failed.
"""

from enum import Enum

from libs.result import Error
from src.app.services.password_hasher import MAX_PASSWORD_BYTES


class AuthErrorCode(str, Enum):
    CONFLICT = "CONFLICT"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    INVALID_TOKEN = "INVALID_TOKEN"
    INVALID_OR_EXPIRED_TOKEN = "INVALID_OR_EXPIRED_TOKEN"
    INVALID_REFRESH_TOKEN = "INVALID_REFRESH_TOKEN"
    INVALID_PASSWORD = "INVALID_PASSWORD"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"


def conflict() -> Error:
    return Error(AuthErrorCode.CONFLICT.value, "Email already registered")


def invalid_credentials() -> Error:
    return Error(AuthErrorCode.INVALID_CREDENTIALS.value, "Invalid email or password")


def invalid_token() -> Error:
    return Error(AuthErrorCode.INVALID_TOKEN.value, "Invalid or non-existent verification token")


def invalid_or_expired_token() -> Error:
    return Error(
        AuthErrorCode.INVALID_OR_EXPIRED_TOKEN.value, "Invalid or expired password reset token"
    )


def invalid_refresh_token() -> Error:
    return Error(AuthErrorCode.INVALID_REFRESH_TOKEN.value, "Invalid refresh token")


def invalid_password() -> Error:
    return Error(
        AuthErrorCode.INVALID_PASSWORD.value,
        f"Password must be at most {MAX_PASSWORD_BYTES} bytes when UTF-8 encoded",
    )


def unauthorized() -> Error:
    return Error(AuthErrorCode.UNAUTHORIZED.value, "Invalid or expired token")


def forbidden() -> Error:
    return Error(AuthErrorCode.FORBIDDEN.value, "Insufficient role for this operation")


def service_unavailable() -> Error:
    return Error(
        AuthErrorCode.SERVICE_UNAVAILABLE.value, "Authentication store is unavailable"
    )
