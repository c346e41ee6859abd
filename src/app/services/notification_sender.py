from abc import ABC, abstractmethod


class INotificationSender(ABC):
    """Out-of-band delivery of single-use account tokens"""

    @abstractmethod
    async def send_email_verification(self, email: str, token: str) -> None:
        """Deliver an email verification token"""
        pass

    @abstractmethod
    async def send_password_reset(self, email: str, token: str) -> None:
        """Deliver a password reset token"""
        pass
