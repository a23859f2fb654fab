"""Activity log for account events."""

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import ActivityLog, User

logger = logging.getLogger(__name__)

MAX_ACTIVITY_LIMIT = 50

# action -> (title, icon)
ACTIVITY_TYPES = {
    "register": ("Account created", "user-plus"),
    "login": ("Logged in", "log-in"),
    "logout": ("Logged out", "log-out"),
    "password_changed": ("Password changed", "key"),
    "password_reset": ("Password reset", "key"),
    "email_verified": ("Email verified", "mail-check"),
    "profile_updated": ("Profile updated", "user"),
    "two_factor_enabled": ("Two-factor authentication enabled", "shield-check"),
    "two_factor_disabled": ("Two-factor authentication disabled", "shield-off"),
    "admin_action": ("Account changed by an administrator", "shield"),
}


class ActivityService:
    """Service for recording and reading account activity."""

    async def log(
        self,
        db: AsyncSession,
        user: User | uuid.UUID,
        action: str,
        description: str | None = None,
        ip_address: str | None = None,
    ) -> ActivityLog:
        """Append an activity entry for an account."""
        title, icon = ACTIVITY_TYPES.get(action, (action.replace("_", " ").capitalize(), None))
        user_id = user.id if isinstance(user, User) else user

        entry = ActivityLog(
            user_id=user_id,
            action=action,
            title=title,
            description=description,
            icon=icon,
            ip_address=ip_address,
        )
        db.add(entry)
        await db.flush()
        return entry

    async def recent(self, db: AsyncSession, user: User, limit: int = 10) -> list[ActivityLog]:
        """Latest entries for an account, newest first."""
        limit = max(1, min(limit, MAX_ACTIVITY_LIMIT))
        result = await db.execute(
            select(ActivityLog)
            .where(ActivityLog.user_id == user.id)
            .order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc())
            .limit(limit)
        )
        return list(result.scalars().all())


# Singleton instance
_activity_service: ActivityService | None = None


def get_activity_service() -> ActivityService:
    """Get the activity service singleton."""
    global _activity_service
    if _activity_service is None:
        _activity_service = ActivityService()
    return _activity_service
