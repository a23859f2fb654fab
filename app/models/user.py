"""User account model with role-based access control."""

from datetime import datetime
from enum import Enum

from sqlalchemy import Boolean, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import BaseModel


class Role(str, Enum):
    """User roles."""

    USER = "user"
    SUPER_ADMIN = "super-admin"  # Full access to user and settings administration


class User(BaseModel):
    """Registered account.

    ``password_hash`` and ``two_factor_secret`` never leave the service
    layer; response schemas list the fields they expose explicitly.
    """

    __tablename__ = "users"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default=Role.USER.value, index=True)
    email_verified_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    phone: Mapped[str | None] = mapped_column(String(20), nullable=True)
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)
    profile_image: Mapped[str | None] = mapped_column(String(500), nullable=True)

    two_factor_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    two_factor_secret: Mapped[str | None] = mapped_column(String(64), nullable=True)
    two_factor_confirmed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Relationships
    tokens = relationship(
        "AccessToken",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    activities = relationship(
        "ActivityLog",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def is_super_admin(self) -> bool:
        """Check if user is a super admin."""
        return self.role == Role.SUPER_ADMIN.value

    @property
    def has_verified_email(self) -> bool:
        """Check if the email address has been verified."""
        return self.email_verified_at is not None

    @property
    def has_two_factor_enabled(self) -> bool:
        """True only once two-factor setup has been confirmed, not merely started."""
        return bool(self.two_factor_enabled and self.two_factor_confirmed_at is not None)
