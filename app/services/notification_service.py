"""Account notifications.

Notifications are fire-and-forget: a delivery failure is logged and never
propagated to the operation that triggered it.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models import User
from app.services.email_service import EmailService, get_email_service, load_smtp_config

logger = logging.getLogger(__name__)

VERIFY_EMAIL = "verify_email"
PASSWORD_RESET = "password_reset"

SUBJECTS = {
    VERIFY_EMAIL: "Verify your email address",
    PASSWORD_RESET: "Reset your password",
}


class Notifier(ABC):
    """Capability for sending a templated notification to an account."""

    @abstractmethod
    async def notify(
        self,
        db: AsyncSession,
        user: User,
        template: str,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Send ``template`` to ``user``. Must not raise on delivery failure."""


class EmailNotifier(Notifier):
    """Delivers notifications as HTML email."""

    def __init__(self, email_service: EmailService):
        self.email_service = email_service

    async def notify(
        self,
        db: AsyncSession,
        user: User,
        template: str,
        context: dict[str, Any] | None = None,
    ) -> None:
        try:
            config = await load_smtp_config(db)
            if not config.enabled:
                logger.warning(f"Email notifications disabled, skipping {template} for user {user.id}")
                return
            if not config.host:
                logger.warning(f"SMTP host not configured, skipping {template} for user {user.id}")
                return

            html_body = self.email_service.render(
                f"{template}.html",
                {
                    "app_name": config.from_name,
                    "app_url": settings.app_base_url,
                    "user_name": user.name,
                    **(context or {}),
                },
            )
            subject = SUBJECTS.get(template, config.from_name)
            await self.email_service.send(config, user.email, subject, html_body)
        except Exception:
            logger.exception(f"Failed to send {template} notification to user {user.id}")


# Singleton instance
_notifier: Notifier | None = None


def get_notifier() -> Notifier:
    """Get the notifier singleton."""
    global _notifier
    if _notifier is None:
        _notifier = EmailNotifier(get_email_service())
    return _notifier
