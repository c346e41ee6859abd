import re
from typing import Optional

from fastapi import APIRouter, Depends, Header, Request, status
from pydantic import BaseModel, EmailStr, Field, field_validator

from libs.result import Error
from src.api.error import ClientError, ServerError
from src.app.services.password_hasher import MAX_PASSWORD_BYTES
from src.app.services.token_issuer import AccessTokenClaims
from src.app.use_cases.auth import (
    AuthErrorCode,
    AuthFacade,
    LoginResponse,
    LogoutResponse,
    RefreshTokenResponse,
    RegisterCommand,
    RegisterResponse,
    StatusResponse,
)
from src.depends import get_auth_facade, get_current_user
from src.domain.entities import AccountRole, SELF_ASSIGNABLE_ROLES

router = APIRouter(prefix="/auth", tags=["Authentication"])

# Error code -> HTTP status for the auth taxonomy
ERROR_STATUS = {
    AuthErrorCode.CONFLICT.value: status.HTTP_409_CONFLICT,
    AuthErrorCode.INVALID_CREDENTIALS.value: status.HTTP_401_UNAUTHORIZED,
    AuthErrorCode.INVALID_TOKEN.value: status.HTTP_400_BAD_REQUEST,
    AuthErrorCode.INVALID_OR_EXPIRED_TOKEN.value: status.HTTP_400_BAD_REQUEST,
    AuthErrorCode.INVALID_REFRESH_TOKEN.value: status.HTTP_401_UNAUTHORIZED,
    AuthErrorCode.INVALID_PASSWORD.value: status.HTTP_400_BAD_REQUEST,
    AuthErrorCode.UNAUTHORIZED.value: status.HTTP_401_UNAUTHORIZED,
    AuthErrorCode.FORBIDDEN.value: status.HTTP_403_FORBIDDEN,
}

_UPPER = re.compile(r"[A-Z]")
_LOWER = re.compile(r"[a-z]")
_DIGIT_OR_SPECIAL = re.compile(r"[\d\W]")


def raise_for_error(error: Error):
    """Map a use case error onto the HTTP error envelope"""
    if error.code == AuthErrorCode.SERVICE_UNAVAILABLE:
        raise ServerError(error, status_code=status.HTTP_503_SERVICE_UNAVAILABLE)
    if error.code in ERROR_STATUS:
        raise ClientError(error, status_code=ERROR_STATUS[error.code])
    raise ServerError(error)


def check_password_strength(value: str) -> str:
    """
    At least one uppercase, one lowercase and one digit or special character,
    and no more than MAX_PASSWORD_BYTES once UTF-8 encoded
    """
    if len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValueError(
            f"Password must be at most {MAX_PASSWORD_BYTES} bytes when UTF-8 encoded"
        )
    if not (_UPPER.search(value) and _LOWER.search(value) and _DIGIT_OR_SPECIAL.search(value)):
        raise ValueError(
            "Password must contain at least 1 uppercase letter, 1 lowercase letter, "
            "and 1 number or special character"
        )
    return value


def client_ip(request: Request) -> Optional[str]:
    return request.client.host if request.client else None


class RegisterRequest(BaseModel):
    """
    Register HTTP request payload

    Validates incoming HTTP request before converting to RegisterCommand.
    """

    email: EmailStr = Field(..., description="Account email address")
    password: str = Field(..., min_length=8, max_length=50, description="Password (8-50 chars)")
    first_name: str = Field(..., min_length=2, max_length=50)
    last_name: str = Field(..., min_length=2, max_length=50)
    country: str = Field(..., min_length=2, max_length=100)
    phone: Optional[str] = Field(None, max_length=32)
    role: AccountRole = Field(AccountRole.participant, description="organizer or participant")

    check_password = field_validator("password")(check_password_strength)

    @field_validator("role")
    @classmethod
    def role_is_self_assignable(cls, value: AccountRole) -> AccountRole:
        if value not in SELF_ASSIGNABLE_ROLES:
            raise ValueError("Role must be organizer or participant")
        return value


@router.post(
    "/register", status_code=status.HTTP_201_CREATED, response_model=RegisterResponse
)
async def register(request: RegisterRequest, facade: AuthFacade = Depends(get_auth_facade)):
    """
    Register a new account.

    The account starts unverified and active; the verification token is
    delivered out of band and never returned here.

    Raises:
        - 409 Conflict: Email already registered (any casing)
        - 422 Unprocessable Entity: Invalid input
        - 503 Service Unavailable: Store unreachable
    """
    command = RegisterCommand(
        email=request.email,
        password=request.password,
        first_name=request.first_name,
        last_name=request.last_name,
        country=request.country,
        phone=request.phone,
        role=request.role,
    )

    result = await facade.register(command)
    if result.is_err():
        raise_for_error(result.error)

    return result.value


class LoginRequest(BaseModel):
    """Login HTTP request payload"""

    email: EmailStr = Field(..., description="Account email address")
    password: str = Field(..., min_length=1, max_length=128, description="Account password")


@router.post("/login", status_code=status.HTTP_200_OK, response_model=LoginResponse)
async def login(
    request: LoginRequest,
    http_request: Request,
    user_agent: Optional[str] = Header(None),
    facade: AuthFacade = Depends(get_auth_facade),
):
    """
    Login with email and password.

    Raises:
        - 401 Unauthorized: INVALID_CREDENTIALS (unknown email, wrong
          password or disabled account, indistinguishable)
    """
    result = await facade.login(
        request.email, request.password, client_ip(http_request), user_agent
    )
    if result.is_err():
        raise_for_error(result.error)

    return result.value


class RefreshRequest(BaseModel):
    """Refresh token HTTP request payload"""

    refresh_token: str = Field(..., min_length=1, description="Refresh token")


@router.post("/refresh", status_code=status.HTTP_200_OK, response_model=RefreshTokenResponse)
async def refresh(
    request: RefreshRequest,
    http_request: Request,
    user_agent: Optional[str] = Header(None),
    facade: AuthFacade = Depends(get_auth_facade),
):
    """
    Rotate a refresh token into a new access/refresh pair.

    The presented token is revoked; presenting it again fails.

    Raises:
        - 401 Unauthorized: INVALID_REFRESH_TOKEN
    """
    result = await facade.refresh(request.refresh_token, client_ip(http_request), user_agent)
    if result.is_err():
        raise_for_error(result.error)

    return result.value


class VerifyEmailRequest(BaseModel):
    """Verify email HTTP request payload"""

    token: str = Field(..., min_length=1, description="Email verification token")


@router.post("/verify-email", status_code=status.HTTP_200_OK, response_model=StatusResponse)
async def verify_email(request: VerifyEmailRequest, facade: AuthFacade = Depends(get_auth_facade)):
    """
    Confirm an email address with its single-use token.

    Raises:
        - 400 Bad Request: INVALID_TOKEN (unknown, expired or already used)
    """
    result = await facade.verify_email(request.token)
    if result.is_err():
        raise_for_error(result.error)

    return result.value


class EmailRequest(BaseModel):
    """Payload carrying only an email address"""

    email: EmailStr = Field(..., description="Account email address")


@router.post(
    "/resend-verification", status_code=status.HTTP_200_OK, response_model=StatusResponse
)
async def resend_verification(request: EmailRequest, facade: AuthFacade = Depends(get_auth_facade)):
    """
    Resend the verification email with a fresh token.

    Always 200 regardless of whether the email exists.
    """
    result = await facade.resend_verification(request.email)
    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.post("/forgot-password", status_code=status.HTTP_200_OK, response_model=StatusResponse)
async def forgot_password(request: EmailRequest, facade: AuthFacade = Depends(get_auth_facade)):
    """
    Request a password reset email.

    Always 200 regardless of whether the email exists.
    """
    result = await facade.forgot_password(request.email)
    if result.is_err():
        raise_for_error(result.error)

    return result.value


class ResetPasswordRequest(BaseModel):
    """Reset password HTTP request payload"""

    token: str = Field(..., min_length=1, description="Password reset token from email")
    new_password: str = Field(..., min_length=8, max_length=50)

    check_password = field_validator("new_password")(check_password_strength)


@router.post("/reset-password", status_code=status.HTTP_200_OK, response_model=StatusResponse)
async def reset_password(
    request: ResetPasswordRequest, facade: AuthFacade = Depends(get_auth_facade)
):
    """
    Reset password with a token; all sessions are revoked.

    Raises:
        - 400 Bad Request: INVALID_OR_EXPIRED_TOKEN
    """
    result = await facade.reset_password(request.token, request.new_password)
    if result.is_err():
        raise_for_error(result.error)

    return result.value


class ChangePasswordRequest(BaseModel):
    """Change password HTTP request payload"""

    current_password: str = Field(..., description="Current password")
    new_password: str = Field(..., min_length=8, max_length=50)

    check_password = field_validator("new_password")(check_password_strength)


@router.post("/change-password", status_code=status.HTTP_200_OK, response_model=StatusResponse)
async def change_password(
    request: ChangePasswordRequest,
    current_user: AccessTokenClaims = Depends(get_current_user),
    facade: AuthFacade = Depends(get_auth_facade),
):
    """
    Change password for the authenticated account; all sessions are revoked.

    Raises:
        - 401 Unauthorized: missing/invalid access token, or
          INVALID_CREDENTIALS when the current password is wrong
    """
    result = await facade.change_password(
        current_user.sub, request.current_password, request.new_password
    )
    if result.is_err():
        raise_for_error(result.error)

    return result.value


class LogoutRequest(BaseModel):
    """Logout payload; omit refresh_token to log out everywhere"""

    refresh_token: Optional[str] = Field(None, description="Session to end")


@router.post("/logout", status_code=status.HTTP_200_OK, response_model=LogoutResponse)
async def logout(
    request: Optional[LogoutRequest] = None,
    current_user: AccessTokenClaims = Depends(get_current_user),
    facade: AuthFacade = Depends(get_auth_facade),
):
    """
    Logout.

    With refresh_token, ends that session only; without, ends all of the
    account's sessions. Unknown tokens are ignored.
    """
    refresh_token = request.refresh_token if request else None
    result = await facade.logout(current_user.sub, refresh_token)
    if result.is_err():
        raise_for_error(result.error)

    return result.value


class MeResponse(BaseModel):
    """Claims of the presented access token"""

    id: str
    email: str
    role: str


@router.get("/me", status_code=status.HTTP_200_OK, response_model=MeResponse)
async def get_me(current_user: AccessTokenClaims = Depends(get_current_user)):
    """Current account as asserted by the access token; no store lookup"""
    return MeResponse(
        id=str(current_user.sub), email=current_user.email, role=current_user.role.value
    )
