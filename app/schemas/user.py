"""User-related Pydantic schemas."""

import uuid
from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, EmailStr, Field, computed_field

from app.config import settings

DEFAULT_AVATAR_PATH = "/images/default-avatar.svg"


class UserResponse(BaseModel):
    """Public view of an account. Password and 2FA secret are never included."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    email: str
    role: str
    email_verified_at: datetime | None
    two_factor_enabled: bool
    two_factor_confirmed_at: datetime | None
    phone: str | None
    bio: str | None
    profile_image: str | None
    created_at: datetime
    updated_at: datetime

    @computed_field
    @property
    def profile_image_url(self) -> str:
        """Public URL of the profile image, or the default avatar."""
        if self.profile_image:
            return f"{settings.app_base_url}/storage/{self.profile_image}"
        return f"{settings.app_base_url}{DEFAULT_AVATAR_PATH}"


class AdminUserCreate(BaseModel):
    """Fields an admin may set when creating an account."""

    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr = Field(..., max_length=255)
    password: str = Field(..., min_length=1)
    role: str = Field(..., pattern="^(user|super-admin)$")
    phone: str | None = Field(None, max_length=20)
    bio: str | None = Field(None, max_length=1000)


class AdminUserUpdate(BaseModel):
    """Fields an admin may change on an existing account."""

    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr = Field(..., max_length=255)
    password: str | None = None
    role: str = Field(..., pattern="^(user|super-admin)$")
    phone: str | None = Field(None, max_length=20)
    bio: str | None = Field(None, max_length=1000)


class UserFilters(BaseModel):
    """Filters shared by the admin list and the CSV export."""

    search: str | None = None
    role: str | None = None
    status: str | None = Field(None, pattern="^(verified|unverified)$")
    two_factor: str | None = Field(None, pattern="^(enabled|disabled)$")
    date_from: date | None = None
    date_to: date | None = None


class BulkAction(str, Enum):
    """Actions applicable to many accounts at once."""

    DELETE = "delete"
    VERIFY = "verify"
    UNVERIFY = "unverify"
    ENABLE_2FA = "enable_2fa"
    DISABLE_2FA = "disable_2fa"
    CHANGE_ROLE = "change_role"


class BulkActionRequest(BaseModel):
    """Bulk action request."""

    action: BulkAction
    user_ids: list[uuid.UUID] = Field(..., min_length=1)
    role: str | None = Field(None, pattern="^(user|super-admin)$")


class UserStats(BaseModel):
    """Account counts for the admin dashboard."""

    total_users: int
    verified_users: int
    unverified_users: int
    two_factor_users: int
    super_admins: int
    regular_users: int
    new_users_this_month: int
    new_users_this_week: int


class ActivityItem(BaseModel):
    """One entry of the user's activity feed."""

    id: uuid.UUID
    action: str
    title: str
    description: str | None
    icon: str | None
    timestamp: datetime
