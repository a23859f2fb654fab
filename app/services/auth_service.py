"""Authentication service: registration, login, sessions and password recovery."""

import logging
from dataclasses import dataclass
from urllib.parse import urlencode

from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.exceptions import (
    EmailNotVerifiedException,
    RegistrationDisabledException,
    ValidationException,
)
from app.models import User
from app.models.base import utcnow
from app.schemas.auth import ChangePasswordRequest, RegisterRequest, ResetPasswordRequest
from app.services.account_service import AccountService, get_account_service
from app.services.activity_service import ActivityService, get_activity_service
from app.services.notification_service import PASSWORD_RESET, VERIFY_EMAIL, Notifier
from app.services.password_policy import load_password_policy
from app.services.setting_service import get_setting_service
from app.services.token_store import IssuedToken, ResolvedToken, TokenStore, get_token_store
from app.utils.security import (
    create_email_verification_token,
    create_password_reset_token,
    decode_email_verification_token,
    decode_password_reset_token,
    parse_subject,
    password_fingerprint,
)

logger = logging.getLogger(__name__)

INVALID_VERIFICATION_LINK = "Invalid or expired verification link."
INVALID_RESET_TOKEN = "This password reset token is invalid or has expired."


@dataclass
class RegistrationResult:
    """Outcome of a registration; ``token`` is None while verification is pending."""

    user: User
    token: IssuedToken | None
    verification_required: bool


class AuthService:
    """Service for handling authentication operations.

    The acting account and the notifier are passed to each call; nothing is
    read from ambient request state.
    """

    def __init__(
        self,
        accounts: AccountService,
        token_store: TokenStore,
        activity: ActivityService,
    ):
        self.accounts = accounts
        self.token_store = token_store
        self.activity = activity

    async def _flag(self, db: AsyncSession, key: str, default: bool) -> bool:
        return bool(await get_setting_service().get(db, key, default))

    async def verification_required(self, db: AsyncSession) -> bool:
        """Whether new and changed email addresses must be verified."""
        return await self._flag(db, "email_verification", True)

    async def register(
        self,
        db: AsyncSession,
        request: RegisterRequest,
        notifier: Notifier,
        ip_address: str | None = None,
    ) -> RegistrationResult:
        """Register a new account.

        Raises:
            RegistrationDisabledException: If registration is switched off
            ValidationException: If the password violates the policy
            DuplicateEmailException: If the email is already registered
        """
        if not await self._flag(db, "registration_enabled", True):
            raise RegistrationDisabledException()

        policy = await load_password_policy(db)
        policy.enforce(request.password, request.password_confirmation)

        user = await self.accounts.register(db, request.name, request.email, request.password)
        await self.activity.log(db, user, "register", ip_address=ip_address)

        verification_required = await self.verification_required(db)
        token = None
        if verification_required:
            await db.commit()
            await self.send_verification(db, user, notifier)
        else:
            user.email_verified_at = utcnow()
            token = await self.token_store.issue(db, user)
            await db.commit()

        logger.info(f"User registered: {user.id} (verification_required={verification_required})")
        return RegistrationResult(user=user, token=token, verification_required=verification_required)

    async def login(
        self,
        db: AsyncSession,
        email: str,
        password: str,
        ip_address: str | None = None,
    ) -> tuple[User, IssuedToken]:
        """Authenticate and issue a new token.

        Raises:
            InvalidCredentialsException: Unknown email or wrong password
            EmailNotVerifiedException: Verification required but still pending
        """
        user = await self.accounts.authenticate(db, email, password)

        if not user.has_verified_email and await self.verification_required(db):
            raise EmailNotVerifiedException()

        token = await self.token_store.issue(db, user)
        await self.activity.log(db, user, "login", ip_address=ip_address)
        await db.commit()

        logger.info(f"User logged in: {user.id}")
        return user, token

    async def logout(self, db: AsyncSession, auth: ResolvedToken, ip_address: str | None = None) -> None:
        """Revoke only the token used for this call."""
        await self.token_store.revoke(db, auth.token_id)
        await self.activity.log(db, auth.user, "logout", ip_address=ip_address)
        await db.commit()

    async def refresh(self, db: AsyncSession, user: User) -> IssuedToken:
        """Revoke every token of the account and issue exactly one new one."""
        token = await self.token_store.replace_all(db, user)
        await db.commit()
        return token

    async def change_password(
        self,
        db: AsyncSession,
        user: User,
        request: ChangePasswordRequest,
        ip_address: str | None = None,
    ) -> None:
        """Change the password of the acting account and revoke all its tokens.

        Raises:
            ValidationException: If the new password violates the policy
            InvalidCurrentPasswordException: If the current password is wrong
        """
        policy = await load_password_policy(db)
        policy.enforce(request.password, request.password_confirmation)

        await self.accounts.change_password(db, user, request.current_password, request.password)
        await self.activity.log(db, user, "password_changed", ip_address=ip_address)
        await db.commit()

    async def send_verification(self, db: AsyncSession, user: User, notifier: Notifier) -> None:
        """Send the verification link for the account's current email."""
        token = create_email_verification_token(user.id, user.email)
        await notifier.notify(
            db,
            user,
            VERIFY_EMAIL,
            {
                "action_url": f"{settings.app_base_url}/verify-email?{urlencode({'token': token})}",
                "expire_hours": settings.email_verification_expire_hours,
            },
        )

    async def verify_email(self, db: AsyncSession, token: str) -> User:
        """Mark the account named by a verification token as verified.

        Verifying an already verified account is a no-op.

        Raises:
            ValidationException: If the token is invalid, expired or for an old email
        """
        payload = decode_email_verification_token(token)
        user_id = parse_subject(payload) if payload else None
        user = await self.accounts.get_by_id(db, user_id) if user_id else None

        if user is None or payload.get("email") != user.email:
            raise ValidationException([{"field": "token", "message": INVALID_VERIFICATION_LINK}])

        if not user.has_verified_email:
            user.email_verified_at = utcnow()
            await self.activity.log(db, user, "email_verified")
            await db.commit()
            logger.info(f"Email verified for user {user.id}")

        return user

    async def resend_verification(self, db: AsyncSession, email: str, notifier: Notifier) -> None:
        """Resend the verification link; silent when there is nothing to send."""
        user = await self.accounts.get_by_email(db, email)
        if user is None or user.has_verified_email:
            return
        await self.send_verification(db, user, notifier)

    async def forgot_password(self, db: AsyncSession, email: str, notifier: Notifier) -> None:
        """Send a password reset link; silent for unknown emails."""
        user = await self.accounts.get_by_email(db, email)
        if user is None:
            logger.info("Password reset requested for unknown email")
            return

        token = create_password_reset_token(user.id, user.password_hash)
        await notifier.notify(
            db,
            user,
            PASSWORD_RESET,
            {
                "action_url": f"{settings.app_base_url}/reset-password?{urlencode({'token': token})}",
                "expire_hours": settings.password_reset_expire_hours,
            },
        )

    async def reset_password(self, db: AsyncSession, request: ResetPasswordRequest) -> User:
        """Set a new password from a reset token and revoke every token.

        Raises:
            ValidationException: If the token is invalid or the password violates the policy
        """
        payload = decode_password_reset_token(request.token)
        user_id = parse_subject(payload) if payload else None
        user = await self.accounts.get_by_id(db, user_id) if user_id else None

        # A reset token dies as soon as the password it was issued against changes
        if user is None or payload.get("pwd") != password_fingerprint(user.password_hash):
            raise ValidationException([{"field": "token", "message": INVALID_RESET_TOKEN}])

        policy = await load_password_policy(db)
        policy.enforce(request.password, request.password_confirmation)

        await self.accounts.set_password(db, user, request.password)
        await self.activity.log(db, user, "password_reset")
        await db.commit()
        return user


# Singleton instance
_auth_service: AuthService | None = None


def get_auth_service() -> AuthService:
    """Get the auth service singleton."""
    global _auth_service
    if _auth_service is None:
        _auth_service = AuthService(get_account_service(), get_token_store(), get_activity_service())
    return _auth_service
