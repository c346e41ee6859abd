"""
Role-based access policy.

Evaluated by the routing layer before a protected call reaches the
auth facade; the core never dispatches on role.
"""

from typing import Iterable, Union

from src.domain.entities.enums import AccountRole


def is_authorized(
    role: Union[AccountRole, str, None], required_roles: Iterable[Union[AccountRole, str]]
) -> bool:
    """
    Check a caller's role against the roles a resource requires.

    An empty ``required_roles`` admits any authenticated role. An unknown
    or missing role is never authorized.
    """
    if role is None:
        return False
    try:
        role = AccountRole(role)
    except ValueError:
        return False

    required = {AccountRole(r) for r in required_roles}
    if not required:
        return True
    return role in required
