"""Access token storage.

Tokens are JWTs whose ``jti`` names a row in ``access_tokens``. Deleting the
row revokes the token as soon as the transaction commits.
"""

import logging
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import timedelta

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models import AccessToken, User
from app.models.base import utcnow
from app.services.setting_service import get_setting_service
from app.utils.security import create_access_token, decode_access_token, parse_subject

logger = logging.getLogger(__name__)


@dataclass
class IssuedToken:
    """A freshly issued bearer token."""

    token: str
    token_id: uuid.UUID
    expires_in: int


@dataclass
class ResolvedToken:
    """The account and token row behind a presented bearer token."""

    user: User
    token_id: uuid.UUID


class TokenStore(ABC):
    """Capability for issuing and revoking access tokens."""

    @abstractmethod
    async def issue(self, db: AsyncSession, user: User, name: str = "auth_token") -> IssuedToken:
        """Issue a new token for the account."""

    @abstractmethod
    async def resolve(self, db: AsyncSession, token: str) -> ResolvedToken | None:
        """Return the owner of a live token, or None when it is invalid or revoked."""

    @abstractmethod
    async def revoke(self, db: AsyncSession, token_id: uuid.UUID) -> None:
        """Revoke one token."""

    @abstractmethod
    async def revoke_all(self, db: AsyncSession, user: User) -> int:
        """Revoke every token of the account; returns how many were removed."""

    @abstractmethod
    async def replace_all(self, db: AsyncSession, user: User, name: str = "auth_token") -> IssuedToken:
        """Revoke every token of the account and issue exactly one new token."""


class DatabaseTokenStore(TokenStore):
    """Token store backed by the ``access_tokens`` table."""

    async def _lifetime(self, db: AsyncSession) -> timedelta:
        minutes = await get_setting_service().get(
            db, "session_timeout", settings.jwt_access_token_expire_minutes
        )
        try:
            minutes = int(minutes)
        except (TypeError, ValueError):
            minutes = settings.jwt_access_token_expire_minutes
        if minutes <= 0:
            minutes = settings.jwt_access_token_expire_minutes
        return timedelta(minutes=minutes)

    async def issue(self, db: AsyncSession, user: User, name: str = "auth_token") -> IssuedToken:
        lifetime = await self._lifetime(db)
        row = AccessToken(
            user_id=user.id,
            name=name,
            expires_at=utcnow() + lifetime,
        )
        db.add(row)
        await db.flush()

        token = create_access_token(user.id, row.id, lifetime)
        return IssuedToken(token=token, token_id=row.id, expires_in=int(lifetime.total_seconds()))

    async def resolve(self, db: AsyncSession, token: str) -> ResolvedToken | None:
        payload = decode_access_token(token)
        if payload is None:
            return None

        user_id = parse_subject(payload, "sub")
        token_id = parse_subject(payload, "jti")
        if user_id is None or token_id is None:
            return None

        result = await db.execute(
            select(AccessToken).where(
                AccessToken.id == token_id,
                AccessToken.user_id == user_id,
            )
        )
        row = result.scalar_one_or_none()
        if row is None:
            return None

        now = utcnow()
        if row.is_expired(now):
            await db.delete(row)
            await db.flush()
            return None

        user = await db.get(User, user_id)
        if user is None:
            return None

        row.last_used_at = now
        await db.flush()
        return ResolvedToken(user=user, token_id=row.id)

    async def revoke(self, db: AsyncSession, token_id: uuid.UUID) -> None:
        await db.execute(delete(AccessToken).where(AccessToken.id == token_id))
        await db.flush()

    async def revoke_all(self, db: AsyncSession, user: User) -> int:
        result = await db.execute(delete(AccessToken).where(AccessToken.user_id == user.id))
        await db.flush()
        logger.info(f"Revoked {result.rowcount} tokens for user {user.id}")
        return result.rowcount

    async def replace_all(self, db: AsyncSession, user: User, name: str = "auth_token") -> IssuedToken:
        # Lock the account row so concurrent refreshes for one account serialise
        await db.execute(select(User.id).where(User.id == user.id).with_for_update())
        await db.execute(delete(AccessToken).where(AccessToken.user_id == user.id))
        return await self.issue(db, user, name)


# Singleton instance
_token_store: TokenStore | None = None


def get_token_store() -> TokenStore:
    """Get the token store singleton."""
    global _token_store
    if _token_store is None:
        _token_store = DatabaseTokenStore()
    return _token_store
