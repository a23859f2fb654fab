"""Admin user management: listing, CRUD, stats, export and bulk actions."""

import csv
import io
import logging
import uuid
from collections.abc import Iterator
from datetime import datetime, time, timedelta, timezone

from sqlalchemy import Select, and_, delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import NotFoundException, SelfActionException, ValidationException
from app.models import Role, User
from app.models.base import utcnow
from app.schemas.user import (
    AdminUserCreate,
    AdminUserUpdate,
    BulkAction,
    BulkActionRequest,
    UserFilters,
    UserStats,
)
from app.services.account_service import AccountService, get_account_service
from app.services.activity_service import get_activity_service
from app.services.auth_service import get_auth_service
from app.services.notification_service import Notifier
from app.services.password_policy import load_password_policy
from app.services.storage_service import StorageService

logger = logging.getLogger(__name__)

SORTABLE_COLUMNS = {
    "name": User.name,
    "email": User.email,
    "role": User.role,
    "created_at": User.created_at,
    "updated_at": User.updated_at,
    "email_verified_at": User.email_verified_at,
}

EXPORT_HEADERS = [
    "ID",
    "Name",
    "Email",
    "Role",
    "Email Verified",
    "Two Factor",
    "Phone",
    "Created At",
]

FORMULA_PREFIXES = ("=", "+", "-", "@")


def sanitize_csv_cell(value) -> str:
    """Neutralise spreadsheet formulas in a cell value."""
    text = "" if value is None else str(value)
    if text.startswith(FORMULA_PREFIXES):
        return "'" + text
    return text


def _start_of_day(day) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


class UserService:
    """Service for managing users from the admin area."""

    def __init__(self, accounts: AccountService):
        self.accounts = accounts

    def _filtered(self, stmt: Select, filters: UserFilters) -> Select:
        conditions = []

        if filters.search:
            term = f"%{filters.search.strip()}%"
            conditions.append(or_(User.name.ilike(term), User.email.ilike(term)))
        if filters.role:
            conditions.append(User.role == filters.role)
        if filters.status == "verified":
            conditions.append(User.email_verified_at.is_not(None))
        elif filters.status == "unverified":
            conditions.append(User.email_verified_at.is_(None))
        if filters.two_factor == "enabled":
            conditions.append(and_(User.two_factor_enabled.is_(True), User.two_factor_confirmed_at.is_not(None)))
        elif filters.two_factor == "disabled":
            conditions.append(or_(User.two_factor_enabled.is_(False), User.two_factor_confirmed_at.is_(None)))
        if filters.date_from:
            conditions.append(User.created_at >= _start_of_day(filters.date_from))
        if filters.date_to:
            conditions.append(User.created_at < _start_of_day(filters.date_to + timedelta(days=1)))

        return stmt.where(*conditions) if conditions else stmt

    def _ordered(self, stmt: Select, sort_by: str, sort_direction: str) -> Select:
        column = SORTABLE_COLUMNS.get(sort_by, User.created_at)
        if sort_direction == "asc":
            return stmt.order_by(column.asc(), User.id.asc())
        return stmt.order_by(column.desc(), User.id.desc())

    async def list_users(
        self,
        db: AsyncSession,
        filters: UserFilters,
        sort_by: str = "created_at",
        sort_direction: str = "desc",
        page: int = 1,
        per_page: int = 10,
    ) -> tuple[list[User], int]:
        """Get a filtered, sorted page of users and the total match count."""
        count_query = self._filtered(select(func.count(User.id)), filters)
        total = (await db.execute(count_query)).scalar() or 0

        query = self._ordered(self._filtered(select(User), filters), sort_by, sort_direction)
        query = query.offset((page - 1) * per_page).limit(per_page)
        result = await db.execute(query)

        return list(result.scalars().all()), total

    async def get_user(self, db: AsyncSession, user_id: uuid.UUID) -> User:
        """Get a user by ID.

        Raises:
            NotFoundException: If user not found
        """
        user = await self.accounts.get_by_id(db, user_id)
        if user is None:
            raise NotFoundException("User")
        return user

    async def create_user(
        self,
        db: AsyncSession,
        admin: User,
        data: AdminUserCreate,
        notifier: Notifier,
    ) -> User:
        """Create an account on behalf of an admin.

        While email verification is required the account starts unverified
        and is sent a verification link; otherwise it starts verified.
        """
        policy = await load_password_policy(db)
        policy.enforce(data.password)

        user = await self.accounts.register(
            db,
            name=data.name,
            email=data.email,
            password=data.password,
            role=Role(data.role),
            phone=data.phone,
            bio=data.bio,
        )
        auth = get_auth_service()
        verification_required = await auth.verification_required(db)
        if not verification_required:
            user.email_verified_at = utcnow()
        await get_activity_service().log(db, admin, "admin_action", f"Created user {user.email}")
        await db.commit()

        if verification_required:
            await auth.send_verification(db, user, notifier)

        logger.info(f"Admin {admin.id} created user {user.id}")
        return user

    async def update_user(
        self,
        db: AsyncSession,
        admin: User,
        user_id: uuid.UUID,
        data: AdminUserUpdate,
    ) -> User:
        """Apply an admin edit; a new password revokes the user's tokens."""
        user = await self.get_user(db, user_id)

        if data.password:
            policy = await load_password_policy(db)
            policy.enforce(data.password)

        await self.accounts.update_profile(
            db, user, name=data.name, email=data.email, phone=data.phone, bio=data.bio
        )
        user.phone = data.phone
        user.bio = data.bio
        user.role = data.role

        if data.password:
            await self.accounts.set_password(db, user, data.password)

        await get_activity_service().log(db, admin, "admin_action", f"Updated user {user.email}")
        await db.commit()

        logger.info(f"Admin {admin.id} updated user {user.id}")
        return user

    async def delete_user(
        self,
        db: AsyncSession,
        admin: User,
        user_id: uuid.UUID,
        storage: StorageService,
    ) -> None:
        """Delete a user and their stored profile image.

        Raises:
            SelfActionException: If the admin targets their own account
        """
        if user_id == admin.id:
            raise SelfActionException("You cannot delete your own account")

        user = await self.get_user(db, user_id)
        image = user.profile_image
        email = user.email

        await db.delete(user)
        await get_activity_service().log(db, admin, "admin_action", f"Deleted user {email}")
        await db.commit()

        await storage.delete(image)
        logger.info(f"Admin {admin.id} deleted user {user_id}")

    async def stats(self, db: AsyncSession) -> UserStats:
        """Account counts for the admin dashboard."""
        now = utcnow()
        month_start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
        week_start = (now - timedelta(days=now.weekday())).replace(hour=0, minute=0, second=0, microsecond=0)

        async def count(*conditions) -> int:
            result = await db.execute(select(func.count(User.id)).where(*conditions))
            return result.scalar() or 0

        total = await count()
        verified = await count(User.email_verified_at.is_not(None))
        super_admins = await count(User.role == Role.SUPER_ADMIN.value)

        return UserStats(
            total_users=total,
            verified_users=verified,
            unverified_users=total - verified,
            two_factor_users=await count(
                User.two_factor_enabled.is_(True), User.two_factor_confirmed_at.is_not(None)
            ),
            super_admins=super_admins,
            regular_users=await count(User.role == Role.USER.value),
            new_users_this_month=await count(User.created_at >= month_start),
            new_users_this_week=await count(User.created_at >= week_start),
        )

    async def export_rows(
        self,
        db: AsyncSession,
        filters: UserFilters,
        sort_by: str = "created_at",
        sort_direction: str = "desc",
    ) -> list[list[str]]:
        """Sanitised CSV rows for every user matching the filters."""
        query = self._ordered(self._filtered(select(User), filters), sort_by, sort_direction)
        result = await db.execute(query)

        rows = []
        for user in result.scalars().all():
            rows.append([
                sanitize_csv_cell(value)
                for value in (
                    user.id,
                    user.name,
                    user.email,
                    user.role,
                    "Yes" if user.has_verified_email else "No",
                    "Enabled" if user.has_two_factor_enabled else "Disabled",
                    user.phone or "",
                    user.created_at.strftime("%Y-%m-%d %H:%M:%S") if user.created_at else "",
                )
            ])
        return rows

    @staticmethod
    def iter_csv(rows: list[list[str]]) -> Iterator[str]:
        """Yield the header and each row as CSV text."""
        for row in [EXPORT_HEADERS, *rows]:
            buf = io.StringIO()
            csv.writer(buf).writerow(row)
            yield buf.getvalue()

    async def bulk_action(
        self,
        db: AsyncSession,
        admin: User,
        request: BulkActionRequest,
        storage: StorageService,
    ) -> int:
        """Apply one action to many users.

        Raises:
            SelfActionException: If the admin's own id is in the list
            ValidationException: If an id is unknown or change_role has no role
        """
        user_ids = list(dict.fromkeys(request.user_ids))

        if admin.id in user_ids:
            raise SelfActionException()
        if request.action == BulkAction.CHANGE_ROLE and not request.role:
            raise ValidationException([{"field": "role", "message": "The role field is required for change_role."}])

        result = await db.execute(select(User).where(User.id.in_(user_ids)))
        users = list(result.scalars().all())
        if len(users) != len(user_ids):
            found = {user.id for user in users}
            missing = [str(user_id) for user_id in user_ids if user_id not in found]
            raise ValidationException([
                {"field": "user_ids", "message": f"The selected user id {user_id} is invalid."}
                for user_id in missing
            ])

        images: list[str] = []
        if request.action == BulkAction.DELETE:
            images = [user.profile_image for user in users if user.profile_image]
            await db.execute(delete(User).where(User.id.in_(user_ids)))
        else:
            await db.execute(
                update(User).where(User.id.in_(user_ids)).values(**self._bulk_values(request))
            )

        await get_activity_service().log(
            db, admin, "admin_action", f"Bulk {request.action.value} on {len(user_ids)} users"
        )
        await db.commit()

        for image in images:
            await storage.delete(image)

        logger.info(f"Admin {admin.id} applied {request.action.value} to {len(user_ids)} users")
        return len(user_ids)

    @staticmethod
    def _bulk_values(request: BulkActionRequest) -> dict:
        now = utcnow()
        if request.action == BulkAction.VERIFY:
            return {"email_verified_at": now}
        if request.action == BulkAction.UNVERIFY:
            return {"email_verified_at": None}
        if request.action == BulkAction.ENABLE_2FA:
            return {"two_factor_enabled": True}
        if request.action == BulkAction.DISABLE_2FA:
            return {"two_factor_enabled": False, "two_factor_secret": None, "two_factor_confirmed_at": None}
        return {"role": request.role}


# Singleton instance
_user_service: UserService | None = None


def get_user_service() -> UserService:
    """Get the user service singleton."""
    global _user_service
    if _user_service is None:
        _user_service = UserService(get_account_service())
    return _user_service
