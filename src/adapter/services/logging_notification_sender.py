"""
Notification sender that only logs.

Actual email delivery is an external collaborator; this adapter stands in
for development and records that a link was dispatched.
"""

import logging

from src.app.services.notification_sender import INotificationSender

logger = logging.getLogger(__name__)


class LoggingNotificationSender(INotificationSender):
    def __init__(self, base_url: str):
        self.base_url = base_url.rstrip("/")

    async def send_email_verification(self, email: str, token: str) -> None:
        link = f"{self.base_url}/verify-email?token={token}"
        logger.info(f"Verification email dispatched to {email}")
        logger.debug(f"Verification link: {link}")

    async def send_password_reset(self, email: str, token: str) -> None:
        link = f"{self.base_url}/reset-password?token={token}"
        logger.info(f"Password reset email dispatched to {email}")
        logger.debug(f"Password reset link: {link}")
