"""SQLAlchemy models."""

from app.models.base import Base, BaseModel, TimestampMixin
from app.models.user import User, Role
from app.models.setting import Setting, SettingGroup, SettingType
from app.models.access_token import AccessToken
from app.models.activity_log import ActivityLog

__all__ = [
    # Base
    "Base",
    "BaseModel",
    "TimestampMixin",
    # User
    "User",
    "Role",
    # Setting
    "Setting",
    "SettingGroup",
    "SettingType",
    # Tokens
    "AccessToken",
    # Activity
    "ActivityLog",
]
