"""Account registry: creation, lookup, credential checks and profile edits."""

import logging
import uuid

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import (
    DuplicateEmailException,
    InvalidCredentialsException,
    InvalidCurrentPasswordException,
)
from app.models import Role, User
from app.services.token_store import TokenStore, get_token_store
from app.utils.security import hash_password, verify_password

logger = logging.getLogger(__name__)

# Verified against when the email is unknown, so both failure paths cost one hash check
_DUMMY_HASH = hash_password("not-a-real-password")


def normalize_email(email: str) -> str:
    """Canonical form used for every email lookup and write."""
    return email.strip().lower()


class AccountService:
    """Service for account records."""

    def __init__(self, token_store: TokenStore):
        self.token_store = token_store

    async def get_by_email(self, db: AsyncSession, email: str) -> User | None:
        result = await db.execute(select(User).where(User.email == normalize_email(email)))
        return result.scalar_one_or_none()

    async def get_by_id(self, db: AsyncSession, user_id: uuid.UUID) -> User | None:
        return await db.get(User, user_id)

    async def email_taken(
        self,
        db: AsyncSession,
        email: str,
        exclude_id: uuid.UUID | None = None,
    ) -> bool:
        """Check whether another account already owns ``email``."""
        stmt = select(func.count()).select_from(User).where(User.email == normalize_email(email))
        if exclude_id is not None:
            stmt = stmt.where(User.id != exclude_id)
        result = await db.execute(stmt)
        return result.scalar_one() > 0

    async def register(
        self,
        db: AsyncSession,
        name: str,
        email: str,
        password: str,
        role: Role = Role.USER,
        phone: str | None = None,
        bio: str | None = None,
    ) -> User:
        """Create an account with a hashed password and an unverified email.

        Raises:
            DuplicateEmailException: If the normalized email already exists
        """
        email = normalize_email(email)
        if await self.email_taken(db, email):
            raise DuplicateEmailException()

        user = User(
            name=name,
            email=email,
            password_hash=hash_password(password),
            role=role.value,
            phone=phone,
            bio=bio,
            email_verified_at=None,
        )
        db.add(user)
        try:
            await db.flush()
        except IntegrityError as e:
            # Lost a race with a concurrent registration for the same email
            await db.rollback()
            raise DuplicateEmailException() from e

        logger.info(f"Account created: {user.id} ({user.role})")
        return user

    async def authenticate(self, db: AsyncSession, email: str, password: str) -> User:
        """Return the account matching the credentials.

        Raises:
            InvalidCredentialsException: Unknown email or wrong password
        """
        user = await self.get_by_email(db, email)
        if user is None:
            verify_password(password, _DUMMY_HASH)
            raise InvalidCredentialsException()

        if not verify_password(password, user.password_hash):
            raise InvalidCredentialsException()

        return user

    async def update_profile(
        self,
        db: AsyncSession,
        user: User,
        name: str | None = None,
        email: str | None = None,
        phone: str | None = None,
        bio: str | None = None,
    ) -> bool:
        """Apply a profile patch.

        Returns:
            True when the email address changed

        Raises:
            DuplicateEmailException: If the new email belongs to another account
        """
        email_changed = False
        if email is not None:
            email = normalize_email(email)
            if email != user.email:
                if await self.email_taken(db, email, exclude_id=user.id):
                    raise DuplicateEmailException()
                user.email = email
                email_changed = True

        if name is not None:
            user.name = name
        if phone is not None:
            user.phone = phone
        if bio is not None:
            user.bio = bio

        await db.flush()
        return email_changed

    async def change_password(
        self,
        db: AsyncSession,
        user: User,
        current_password: str,
        new_password: str,
    ) -> None:
        """Replace the password after checking the current one; revokes every token.

        Raises:
            InvalidCurrentPasswordException: If ``current_password`` does not match
        """
        if not verify_password(current_password, user.password_hash):
            raise InvalidCurrentPasswordException()

        await self.set_password(db, user, new_password)

    async def set_password(self, db: AsyncSession, user: User, new_password: str) -> None:
        """Store a new password hash and revoke every token of the account."""
        user.password_hash = hash_password(new_password)
        await db.flush()
        await self.token_store.revoke_all(db, user)
        logger.info(f"Password changed for user {user.id}")


# Singleton instance
_account_service: AccountService | None = None


def get_account_service() -> AccountService:
    """Get the account service singleton."""
    global _account_service
    if _account_service is None:
        _account_service = AccountService(get_token_store())
    return _account_service
