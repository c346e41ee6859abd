"""
Auth Domain Enums

All enumeration types used across domain entities.
"""

from enum import Enum


class AccountStatus(str, Enum):
    """Account activity flag"""

    active = "active"
    disabled = "disabled"


class AccountRole(str, Enum):
    """Fixed role enumeration carried in access tokens"""

    admin = "admin"
    organizer = "organizer"
    participant = "participant"
    user = "user"


# Roles a caller may pick for themselves at registration
SELF_ASSIGNABLE_ROLES = frozenset({AccountRole.organizer, AccountRole.participant})
