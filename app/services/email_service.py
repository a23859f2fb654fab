"""SMTP email delivery.

Mail server settings live in the settings table (email group) and can be
changed at runtime from the admin settings screen.
"""

import logging
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from pathlib import Path
from typing import Any

import aiosmtplib
from jinja2 import Environment, FileSystemLoader, select_autoescape
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.services.setting_service import get_setting_service

logger = logging.getLogger(__name__)
settings = get_settings()

EMAIL_SETTING_DEFAULTS = {
    "smtp_host": "",
    "smtp_port": 587,
    "smtp_username": "",
    "smtp_password": "",
    "smtp_encryption": True,
    "from_email": None,
    "from_name": None,
    "email_notifications": True,
}


@dataclass
class SmtpConfig:
    """Mail server settings resolved at send time."""

    host: str
    port: int
    username: str | None
    password: str | None
    encryption: bool
    from_email: str
    from_name: str
    enabled: bool

    @property
    def from_address(self) -> str:
        return f"{self.from_name} <{self.from_email}>"


async def load_smtp_config(db: AsyncSession) -> SmtpConfig:
    """Read mail server settings from the settings table."""
    values = await get_setting_service().get_many(db, EMAIL_SETTING_DEFAULTS)
    return SmtpConfig(
        host=values["smtp_host"] or "",
        port=int(values["smtp_port"] or 587),
        username=values["smtp_username"] or None,
        password=values["smtp_password"] or None,
        encryption=bool(values["smtp_encryption"]),
        from_email=values["from_email"] or settings.email_from_address,
        from_name=values["from_name"] or settings.email_from_name,
        enabled=bool(values["email_notifications"]),
    )


class EmailService:
    """Service for sending templated emails over SMTP."""

    def __init__(self):
        """Initialize the template environment."""
        templates_path = Path(__file__).parent.parent / "templates" / "emails"
        self.jinja_env = Environment(
            loader=FileSystemLoader(str(templates_path)),
            autoescape=select_autoescape(["html", "xml"]),
        )

    def render(self, template_name: str, context: dict[str, Any]) -> str:
        """Render an email template with the given context."""
        template = self.jinja_env.get_template(template_name)
        return template.render(**context)

    async def send(
        self,
        config: SmtpConfig,
        to: str | list[str],
        subject: str,
        html_body: str,
    ) -> str:
        """Send a rendered message.

        Raises:
            aiosmtplib.SMTPException: If the server rejects the message
        """
        recipients = to if isinstance(to, list) else [to]

        msg = MIMEMultipart("alternative")
        msg["From"] = config.from_address
        msg["To"] = ", ".join(recipients)
        msg["Subject"] = subject
        msg.attach(MIMEText(html_body, "html", "utf-8"))

        # Port 465 = implicit SSL, otherwise STARTTLS when encryption is on
        if config.port == 465:
            tls_kwargs = {"use_tls": True, "start_tls": False}
        else:
            tls_kwargs = {"use_tls": False, "start_tls": config.encryption}

        await aiosmtplib.send(
            msg,
            hostname=config.host,
            port=config.port,
            username=config.username,
            password=config.password,
            recipients=recipients,
            timeout=30,
            **tls_kwargs,
        )

        message_id = f"smtp-{id(msg)}"
        logger.info(f"Email sent to {recipients}: {message_id}")
        return message_id


# Singleton instance
_email_service: EmailService | None = None


def get_email_service() -> EmailService:
    """Get the email service singleton."""
    global _email_service
    if _email_service is None:
        _email_service = EmailService()
    return _email_service
