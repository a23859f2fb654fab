"""Setting-related Pydantic schemas."""

from typing import Any

from pydantic import BaseModel, Field

from app.models.setting import SettingGroup, SettingType


class SettingEntry(BaseModel):
    """One key/value patch in a bulk settings update."""

    key: str = Field(..., min_length=1, max_length=100)
    value: Any = None
    type: SettingType | None = None
    group: SettingGroup | None = None


class SettingsUpdateRequest(BaseModel):
    """Bulk settings update."""

    settings: list[SettingEntry]


class UpdatedSetting(BaseModel):
    """A setting as persisted by a bulk update."""

    key: str
    value: Any
    type: str
    group: str


class SettingsUpdateResult(BaseModel):
    """Outcome of a bulk update; ``errors`` holds one message per failed entry."""

    updated: list[UpdatedSetting] = []
    errors: list[str] = []

    @property
    def is_partial_failure(self) -> bool:
        """True when at least one entry failed."""
        return bool(self.errors)
