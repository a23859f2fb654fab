"""Self-service profile management."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.models import User
from app.schemas.auth import UpdateProfileRequest
from app.services.account_service import AccountService, get_account_service
from app.services.activity_service import get_activity_service
from app.services.auth_service import AuthService, get_auth_service
from app.services.notification_service import Notifier
from app.services.storage_service import StorageService

logger = logging.getLogger(__name__)


class ProfileService:
    """Service for the acting account's own profile."""

    def __init__(self, accounts: AccountService, auth: AuthService):
        self.accounts = accounts
        self.auth = auth

    async def update(
        self,
        db: AsyncSession,
        user: User,
        request: UpdateProfileRequest,
        notifier: Notifier,
        ip_address: str | None = None,
    ) -> User:
        """Apply a profile patch.

        A changed email goes back to unverified and receives a new
        verification link when verification is required.

        Raises:
            DuplicateEmailException: If the new email belongs to another account
        """
        email_changed = await self.accounts.update_profile(
            db,
            user,
            name=request.name,
            email=request.email,
            phone=request.phone,
            bio=request.bio,
        )

        reverify = email_changed and await self.auth.verification_required(db)
        if reverify:
            user.email_verified_at = None

        await get_activity_service().log(db, user, "profile_updated", ip_address=ip_address)
        await db.commit()

        if reverify:
            await self.auth.send_verification(db, user, notifier)
        return user

    async def delete_image(self, db: AsyncSession, user: User, storage: StorageService) -> User:
        """Remove the stored profile image, falling back to the default avatar."""
        image = user.profile_image
        if image:
            user.profile_image = None
            await db.commit()
            await storage.delete(image)
            logger.info(f"Profile image removed for user {user.id}")
        return user


# Singleton instance
_profile_service: ProfileService | None = None


def get_profile_service() -> ProfileService:
    """Get the profile service singleton."""
    global _profile_service
    if _profile_service is None:
        _profile_service = ProfileService(get_account_service(), get_auth_service())
    return _profile_service
