"""TOTP two-factor authentication setup."""

import logging

import pyotp
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.exceptions import InvalidCurrentPasswordException, TwoFactorException
from app.models import User
from app.models.base import utcnow
from app.schemas.auth import TwoFactorSetupResponse, TwoFactorStatus
from app.services.activity_service import get_activity_service
from app.utils.security import verify_password

logger = logging.getLogger(__name__)


class TwoFactorService:
    """Service for enabling, confirming and disabling two-factor authentication.

    Setup has two steps: ``enable`` stores a secret, ``confirm`` proves the
    authenticator app has it. Only a confirmed setup counts as enabled.
    """

    def status(self, user: User) -> TwoFactorStatus:
        return TwoFactorStatus(
            enabled=user.has_two_factor_enabled,
            confirmed=user.two_factor_confirmed_at is not None,
            pending_confirmation=user.two_factor_enabled and user.two_factor_confirmed_at is None,
        )

    def _setup(self, user: User) -> TwoFactorSetupResponse:
        totp = pyotp.TOTP(user.two_factor_secret)
        return TwoFactorSetupResponse(
            secret=user.two_factor_secret,
            provisioning_uri=totp.provisioning_uri(
                name=user.email,
                issuer_name=settings.effective_two_factor_issuer,
            ),
        )

    async def enable(self, db: AsyncSession, user: User) -> TwoFactorSetupResponse:
        """Start setup with a fresh secret.

        Raises:
            TwoFactorException: If two-factor is already confirmed
        """
        if user.has_two_factor_enabled:
            raise TwoFactorException("Two-factor authentication is already enabled.")

        user.two_factor_secret = pyotp.random_base32()
        user.two_factor_enabled = True
        user.two_factor_confirmed_at = None
        await db.commit()
        return self._setup(user)

    def provisioning(self, user: User) -> TwoFactorSetupResponse:
        """Secret and URI of a pending setup.

        Raises:
            TwoFactorException: If there is no pending setup
        """
        if not user.two_factor_enabled or not user.two_factor_secret or user.has_two_factor_enabled:
            raise TwoFactorException("Two-factor authentication setup has not been started.")
        return self._setup(user)

    async def confirm(self, db: AsyncSession, user: User, code: str) -> TwoFactorStatus:
        """Finish setup with a code from the authenticator app.

        Raises:
            TwoFactorException: If there is no pending setup or the code is wrong
        """
        if not user.two_factor_enabled or not user.two_factor_secret:
            raise TwoFactorException("Two-factor authentication setup has not been started.")
        if user.has_two_factor_enabled:
            raise TwoFactorException("Two-factor authentication is already confirmed.")

        if not pyotp.TOTP(user.two_factor_secret).verify(code.strip(), valid_window=1):
            raise TwoFactorException("The provided two factor authentication code was invalid.")

        user.two_factor_confirmed_at = utcnow()
        await get_activity_service().log(db, user, "two_factor_enabled")
        await db.commit()
        logger.info(f"Two-factor confirmed for user {user.id}")
        return self.status(user)

    async def cancel(self, db: AsyncSession, user: User) -> TwoFactorStatus:
        """Abandon an unconfirmed setup.

        Raises:
            TwoFactorException: If the setup is already confirmed
        """
        if user.has_two_factor_enabled:
            raise TwoFactorException("Two-factor authentication is already confirmed; disable it instead.")

        self._clear(user)
        await db.commit()
        return self.status(user)

    async def disable(self, db: AsyncSession, user: User, password: str) -> TwoFactorStatus:
        """Switch two-factor off after re-checking the password.

        Raises:
            InvalidCurrentPasswordException: If the password is wrong
        """
        if not verify_password(password, user.password_hash):
            raise InvalidCurrentPasswordException()

        was_enabled = user.has_two_factor_enabled
        self._clear(user)
        if was_enabled:
            await get_activity_service().log(db, user, "two_factor_disabled")
        await db.commit()
        logger.info(f"Two-factor disabled for user {user.id}")
        return self.status(user)

    @staticmethod
    def _clear(user: User) -> None:
        user.two_factor_enabled = False
        user.two_factor_secret = None
        user.two_factor_confirmed_at = None


# Singleton instance
_two_factor_service: TwoFactorService | None = None


def get_two_factor_service() -> TwoFactorService:
    """Get the two-factor service singleton."""
    global _two_factor_service
    if _two_factor_service is None:
        _two_factor_service = TwoFactorService()
    return _two_factor_service
