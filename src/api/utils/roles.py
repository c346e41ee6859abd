"""
Role guard for routes.

Applies the pure is_authorized policy to verified access token claims
before a protected route reaches the auth facade.
"""

from fastapi import Depends, status
from src.api.error import ClientError
from src.app.services.token_issuer import AccessTokenClaims
from src.app.use_cases.auth import errors
from src.depends import get_current_user
from src.domain.entities import AccountRole
from src.domain.policies import is_authorized


def require_roles(*roles: AccountRole):
    """
    Build a dependency that admits only callers holding one of ``roles``.

    Raises:
        ClientError: 401 if unauthenticated (via get_current_user),
                     403 FORBIDDEN if the role is not allowed
    """

    async def dependency(
        current_user: AccessTokenClaims = Depends(get_current_user),
    ) -> AccessTokenClaims:
        if not is_authorized(current_user.role, roles):
            raise ClientError(errors.forbidden(), status_code=status.HTTP_403_FORBIDDEN)
        return current_user

    return dependency
