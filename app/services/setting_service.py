"""Setting store: typed reads, grouped and public views, bulk updates, reset."""

import logging
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import StorageFailureException
from app.models.setting import Setting, SettingGroup, SettingType, serialize_value
from app.schemas.setting import SettingEntry, SettingsUpdateResult, UpdatedSetting
from app.utils.default_settings import get_default_settings

logger = logging.getLogger(__name__)


def _storage_error_cause(exc: SQLAlchemyError) -> str:
    """Driver-level cause of a storage error, without SQL text or parameters."""
    orig = getattr(exc, "orig", None)
    return str(orig) if orig is not None else type(exc).__name__


class SettingService:
    """Service for reading and writing application settings.

    Reads always hit the database, so a write is visible to the very next
    read in the same or any later request.
    """

    async def get_setting(self, db: AsyncSession, key: str) -> Setting | None:
        """Get the setting row for a key."""
        result = await db.execute(select(Setting).where(Setting.key == key))
        return result.scalar_one_or_none()

    async def get(self, db: AsyncSession, key: str, default: Any = None) -> Any:
        """Get a setting's typed value, or ``default`` when the key is absent."""
        setting = await self.get_setting(db, key)
        if setting is None:
            return default
        return setting.typed_value

    async def get_many(self, db: AsyncSession, defaults: dict[str, Any]) -> dict[str, Any]:
        """Get several typed values in one query.

        Keys that are absent or store no value keep their default.

        Args:
            db: Database session
            defaults: Mapping of key to the value used when the key is absent

        Returns:
            Mapping of every requested key to its typed value or default
        """
        result = await db.execute(select(Setting).where(Setting.key.in_(defaults.keys())))
        values = dict(defaults)
        for setting in result.scalars().all():
            if setting.value is not None:
                values[setting.key] = setting.typed_value
        return values

    async def get_by_group(self, db: AsyncSession, group: SettingGroup | str) -> list[dict[str, Any]]:
        """Get all settings in a group, ordered by key, with typed values."""
        group_value = group.value if isinstance(group, SettingGroup) else group
        result = await db.execute(
            select(Setting).where(Setting.group == group_value).order_by(Setting.key)
        )
        return [setting.to_dict() for setting in result.scalars().all()]

    async def get_all_grouped(self, db: AsyncSession) -> dict[str, list[dict[str, Any]]]:
        """Get every group's settings, keyed by group name."""
        return {group.value: await self.get_by_group(db, group) for group in SettingGroup}

    async def get_public(self, db: AsyncSession) -> dict[str, Any]:
        """Get the key/value map of settings that are safe for anonymous callers."""
        result = await db.execute(
            select(Setting).where(Setting.is_public.is_(True)).order_by(Setting.key)
        )
        return {setting.key: setting.typed_value for setting in result.scalars().all()}

    async def set_many(self, db: AsyncSession, entries: list[SettingEntry]) -> SettingsUpdateResult:
        """Apply a batch of key/value patches.

        A missing key or an uncoercible value is recorded as a per-entry error
        and the remaining entries still apply. All applied entries commit
        together, so readers see either none or all of them.

        Raises:
            StorageFailureException: If the batch cannot be committed
        """
        applied: list[Setting] = []
        errors: list[str] = []

        for entry in entries:
            # Row lock serialises concurrent batches touching the same key
            result = await db.execute(
                select(Setting).where(Setting.key == entry.key).with_for_update()
            )
            setting = result.scalar_one_or_none()

            if setting is None:
                errors.append(f"Setting '{entry.key}' not found")
                continue

            setting_type = entry.type.value if entry.type else setting.type
            try:
                raw_value = serialize_value(setting_type, entry.value)
            except (ValueError, TypeError) as e:
                errors.append(f"Failed to update setting '{entry.key}': {e}")
                continue

            setting.type = setting_type
            setting.value = raw_value
            if entry.group:
                setting.group = entry.group.value
            applied.append(setting)

        try:
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.exception("Failed to commit settings update")
            raise StorageFailureException(f"Failed to update settings: {_storage_error_cause(e)}") from e

        if errors:
            logger.warning(f"Settings update finished with {len(errors)} failed entries: {errors}")

        return SettingsUpdateResult(
            updated=[
                UpdatedSetting(
                    key=setting.key,
                    value=setting.typed_value,
                    type=setting.type,
                    group=setting.group,
                )
                for setting in applied
            ],
            errors=errors,
        )

    async def create(
        self,
        db: AsyncSession,
        key: str,
        value: Any,
        setting_type: SettingType = SettingType.STRING,
        group: SettingGroup = SettingGroup.GENERAL,
        description: str | None = None,
        is_public: bool = False,
    ) -> Setting:
        """Create a setting outside the default catalog."""
        setting = Setting(
            key=key,
            value=serialize_value(setting_type, value),
            type=setting_type.value,
            group=group.value,
            description=description,
            is_public=is_public,
        )
        db.add(setting)
        await db.flush()
        return setting

    async def reset_to_defaults(self, db: AsyncSession) -> int:
        """Replace the whole table with the built-in catalog in one transaction.

        Returns:
            Number of settings written

        Raises:
            StorageFailureException: If the reset fails; the old rows are kept
        """
        defaults = get_default_settings()
        try:
            await db.execute(delete(Setting))
            db.add_all([Setting(**entry) for entry in defaults])
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.exception("Failed to reset settings to defaults")
            raise StorageFailureException(f"Failed to reset settings: {_storage_error_cause(e)}") from e

        logger.info(f"Settings reset to defaults ({len(defaults)} entries)")
        return len(defaults)


# Singleton instance
_setting_service: SettingService | None = None


def get_setting_service() -> SettingService:
    """Get the setting service singleton."""
    global _setting_service
    if _setting_service is None:
        _setting_service = SettingService()
    return _setting_service
