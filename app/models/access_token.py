"""Persisted access tokens; a token is valid only while its row exists."""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import BaseModel, as_utc


class AccessToken(BaseModel):
    """Server-side record of an issued bearer token.

    The row id is the token's ``jti`` claim.
    """

    __tablename__ = "access_tokens"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False, default="auth_token")
    expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    last_used_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    user = relationship("User", back_populates="tokens")

    def is_expired(self, now: datetime) -> bool:
        """Check whether the token has passed its expiry time."""
        expires_at = as_utc(self.expires_at)
        return expires_at is not None and expires_at <= now
