from fastapi import APIRouter, Depends, status

from src.api.routes.auth import raise_for_error
from src.api.utils.roles import require_roles
from src.app.services.token_issuer import AccessTokenClaims
from src.app.use_cases.auth import AuthFacade, SweepResponse
from src.depends import get_auth_facade
from src.domain.entities import AccountRole

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.post(
    "/sessions/sweep", status_code=status.HTTP_200_OK, response_model=SweepResponse
)
async def sweep_expired_sessions(
    current_user: AccessTokenClaims = Depends(require_roles(AccountRole.admin)),
    facade: AuthFacade = Depends(get_auth_facade),
):
    """
    Flag every expired session as revoked.

    Advisory cleanup; expired sessions are already rejected at refresh time.

    Raises:
        - 401 Unauthorized: Missing or invalid access token
        - 403 Forbidden: Caller is not an admin
    """
    result = await facade.sweep_expired_sessions()
    if result.is_err():
        raise_for_error(result.error)

    return result.value
