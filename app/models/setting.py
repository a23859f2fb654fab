"""Setting model for typed, grouped application configuration."""

import json
from enum import Enum
from typing import Any

from sqlalchemy import Boolean, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import BaseModel


class SettingType(str, Enum):
    """Declared type of a setting's stored text."""

    STRING = "string"
    BOOLEAN = "boolean"
    INTEGER = "integer"
    JSON = "json"


class SettingGroup(str, Enum):
    """Categories used to group settings in the admin UI."""

    GENERAL = "general"
    SECURITY = "security"
    EMAIL = "email"
    NOTIFICATIONS = "notifications"
    ADVANCED = "advanced"


_TRUE_STRINGS = {"1", "true", "yes", "on"}
_FALSE_STRINGS = {"0", "false", "no", "off", ""}


def _to_bool(value: Any) -> bool:
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
        raise ValueError(f"'{value}' is not a boolean")
    return bool(value)


def _to_int(value: Any) -> int:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"'{value}' is not an integer")
        return int(value)
    if isinstance(value, str):
        return int(value.strip(), 10)
    return int(value)


def serialize_value(setting_type: SettingType | str, value: Any) -> str | None:
    """Convert a typed value into the canonical stored text for its type.

    Raises:
        ValueError: If the value cannot be represented as the given type
    """
    setting_type = SettingType(setting_type)

    if value is None:
        return None
    if setting_type == SettingType.BOOLEAN:
        return "1" if _to_bool(value) else "0"
    if setting_type == SettingType.INTEGER:
        return str(_to_int(value))
    if setting_type == SettingType.JSON:
        return json.dumps(value)
    return value if isinstance(value, str) else str(value)


def deserialize_value(setting_type: SettingType | str, raw: str | None) -> Any:
    """Convert stored text into the typed value for its type."""
    setting_type = SettingType(setting_type)

    if setting_type == SettingType.BOOLEAN:
        return raw == "1"
    if raw is None:
        return None
    if setting_type == SettingType.INTEGER:
        return int(raw, 10)
    if setting_type == SettingType.JSON:
        return json.loads(raw)
    return raw


class Setting(BaseModel):
    """A single key/value configuration entry.

    ``value`` always holds text; ``typed_value`` is the view coerced through
    ``type``. Assigning ``typed_value`` re-serialises to canonical text.
    """

    __tablename__ = "settings"

    key: Mapped[str] = mapped_column(
        String(100),
        unique=True,
        nullable=False,
        index=True,
    )
    value: Mapped[str | None] = mapped_column(Text, nullable=True)
    type: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=SettingType.STRING.value,
    )
    group: Mapped[str] = mapped_column(
        String(30),
        nullable=False,
        default=SettingGroup.GENERAL.value,
        index=True,
    )
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_public: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    @property
    def typed_value(self) -> Any:
        """The stored value coerced to the declared type."""
        return deserialize_value(self.type, self.value)

    @typed_value.setter
    def typed_value(self, value: Any) -> None:
        self.value = serialize_value(self.type, value)

    def to_dict(self) -> dict[str, Any]:
        """Admin view of the setting with its typed value."""
        return {
            "key": self.key,
            "value": self.typed_value,
            "type": self.type,
            "group": self.group,
            "description": self.description,
        }
