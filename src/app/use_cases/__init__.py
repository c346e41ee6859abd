"""
Use Cases

- auth/: Authentication and session lifecycle
"""

from .auth import AccountLifecycleManager, AuthFacade, SessionManager

__all__ = [
    "AccountLifecycleManager",
    "AuthFacade",
    "SessionManager",
]
