"""
Auth Domain Entities

All domain entities organized by model.
Each entity in its own file for better maintainability.
"""

from .enums import AccountRole, AccountStatus, SELF_ASSIGNABLE_ROLES
from .account import Account
from .session import Session

__all__ = [
    # Enums
    "AccountRole",
    "AccountStatus",
    "SELF_ASSIGNABLE_ROLES",
    # Entities
    "Account",
    "Session",
]
