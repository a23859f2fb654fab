"""Tests for setting coercion and the setting store service."""

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from app.exceptions import StorageFailureException
from app.models import Setting
from app.models.setting import SettingGroup, SettingType, deserialize_value, serialize_value
from app.schemas.setting import SettingEntry
from app.services import setting_service
from app.services.setting_service import get_setting_service
from app.utils.default_settings import DEFAULT_SETTINGS_BY_GROUP, get_default_settings


class TestCoercion:
    @pytest.mark.parametrize(
        "setting_type, value",
        [
            (SettingType.BOOLEAN, True),
            (SettingType.BOOLEAN, False),
            (SettingType.INTEGER, 0),
            (SettingType.INTEGER, -42),
            (SettingType.JSON, {"theme": "dark", "items": [1, 2, 3]}),
            (SettingType.STRING, "hello"),
        ],
    )
    def test_typed_value_survives_storage(self, setting_type, value):
        assert deserialize_value(setting_type, serialize_value(setting_type, value)) == value

    def test_boolean_canonical_text(self):
        assert serialize_value(SettingType.BOOLEAN, True) == "1"
        assert serialize_value(SettingType.BOOLEAN, "false") == "0"
        assert serialize_value(SettingType.BOOLEAN, "on") == "1"

    def test_boolean_reads_only_one_as_true(self):
        assert deserialize_value(SettingType.BOOLEAN, "1") is True
        assert deserialize_value(SettingType.BOOLEAN, "true") is False
        assert deserialize_value(SettingType.BOOLEAN, None) is False

    def test_integer_from_decimal_string(self):
        assert serialize_value(SettingType.INTEGER, " 10 ") == "10"
        assert deserialize_value(SettingType.INTEGER, "010") == 10

    def test_integer_rejects_garbage(self):
        with pytest.raises(ValueError):
            serialize_value(SettingType.INTEGER, "ten")
        with pytest.raises(ValueError):
            serialize_value(SettingType.INTEGER, 1.5)

    def test_boolean_rejects_unknown_word(self):
        with pytest.raises(ValueError):
            serialize_value(SettingType.BOOLEAN, "maybe")

    def test_none_stays_none(self):
        assert serialize_value(SettingType.STRING, None) is None
        assert deserialize_value(SettingType.INTEGER, None) is None

    def test_typed_value_setter_reserializes(self):
        setting = Setting(key="flag", type=SettingType.BOOLEAN.value, value="0")
        setting.typed_value = True
        assert setting.value == "1"
        assert setting.typed_value is True


class TestSettingService:
    async def test_get_returns_typed_value(self, db):
        service = get_setting_service()
        assert await service.get(db, "min_password_length") == 8
        assert await service.get(db, "registration_enabled") is True
        assert await service.get(db, "app_name") == "Boilerplate"

    async def test_get_missing_key_uses_default(self, db):
        service = get_setting_service()
        assert await service.get(db, "does_not_exist") is None
        assert await service.get(db, "does_not_exist", "fallback") == "fallback"

    async def test_get_by_group_is_ordered_and_typed(self, db):
        rows = await get_setting_service().get_by_group(db, SettingGroup.SECURITY)

        keys = [row["key"] for row in rows]
        assert keys == sorted(keys)
        assert len(rows) == len(DEFAULT_SETTINGS_BY_GROUP["security"])
        by_key = {row["key"]: row for row in rows}
        assert by_key["session_timeout"]["value"] == 120
        assert by_key["require_symbols"]["value"] is False
        assert set(rows[0]) == {"key", "value", "type", "group", "description"}

    async def test_public_subset_only_has_public_keys(self, db):
        public = await get_setting_service().get_public(db)

        assert set(public) == {"app_name", "app_url", "maintenance_mode", "registration_enabled"}
        assert "smtp_password" not in public
        result = await db.execute(select(Setting.key).where(Setting.is_public.is_(False)))
        assert not set(result.scalars().all()) & set(public)

    async def test_set_many_partial_failure(self, db):
        result = await get_setting_service().set_many(
            db,
            [
                SettingEntry(key="min_password_length", value="10"),
                SettingEntry(key="does_not_exist", value="x"),
            ],
        )

        assert result.is_partial_failure
        assert [item.key for item in result.updated] == ["min_password_length"]
        assert result.updated[0].value == 10
        assert result.errors == ["Setting 'does_not_exist' not found"]
        assert await get_setting_service().get(db, "min_password_length") == 10

    async def test_set_many_reports_uncoercible_value(self, db):
        result = await get_setting_service().set_many(
            db,
            [
                SettingEntry(key="session_timeout", value="soon"),
                SettingEntry(key="app_name", value="Renamed"),
            ],
        )

        assert len(result.errors) == 1
        assert result.errors[0].startswith("Failed to update setting 'session_timeout'")
        assert await get_setting_service().get(db, "session_timeout") == 120
        assert await get_setting_service().get(db, "app_name") == "Renamed"

    async def test_set_many_uses_entry_type_and_group(self, db):
        result = await get_setting_service().set_many(
            db,
            [SettingEntry(key="backup_frequency", value={"every": "day"}, type="json", group="general")],
        )

        assert not result.errors
        setting = await get_setting_service().get_setting(db, "backup_frequency")
        assert setting.type == "json"
        assert setting.group == "general"
        assert setting.typed_value == {"every": "day"}

    async def test_reset_restores_catalog_regardless_of_prior_state(self, db):
        service = get_setting_service()
        await service.set_many(db, [SettingEntry(key="app_name", value="Changed")])
        await service.create(db, "custom_key", "x")
        await db.commit()

        count = await service.reset_to_defaults(db)

        assert count == len(get_default_settings()) == 35
        total = (await db.execute(select(func.count(Setting.id)))).scalar()
        assert total == 35
        for group, entries in DEFAULT_SETTINGS_BY_GROUP.items():
            group_count = (
                await db.execute(select(func.count(Setting.id)).where(Setting.group == group))
            ).scalar()
            assert group_count == len(entries)
        assert await service.get(db, "app_name") == "Boilerplate"
        assert await service.get(db, "custom_key") is None


async def count_settings(db) -> int:
    return (await db.execute(select(func.count(Setting.id)))).scalar()


class TestStorageFailure:
    async def test_failed_reset_keeps_previous_rows(self, db, monkeypatch):
        service = get_setting_service()
        await service.set_many(db, [SettingEntry(key="app_name", value="Kept")])
        defaults = get_default_settings()
        # Duplicate key violates the unique index when the reseed is committed
        monkeypatch.setattr(setting_service, "get_default_settings", lambda: [*defaults, dict(defaults[0])])

        with pytest.raises(StorageFailureException, match="Failed to reset settings"):
            await service.reset_to_defaults(db)

        assert await count_settings(db) == 35
        assert await service.get(db, "app_name") == "Kept"

    async def test_failed_commit_discards_whole_batch(self, db, monkeypatch):
        service = get_setting_service()

        async def failing_commit():
            raise OperationalError("COMMIT", {}, Exception("database is locked"))

        monkeypatch.setattr(db, "commit", failing_commit)

        with pytest.raises(StorageFailureException, match="database is locked"):
            await service.set_many(
                db,
                [
                    SettingEntry(key="app_name", value="Lost"),
                    SettingEntry(key="min_password_length", value=12),
                ],
            )

        monkeypatch.undo()
        assert await service.get(db, "app_name") == "Boilerplate"
        assert await service.get(db, "min_password_length") == 8
        assert await count_settings(db) == 35

    async def test_null_value_reads_as_default_in_bulk(self, db):
        service = get_setting_service()
        await service.set_many(db, [SettingEntry(key="require_numbers", value=None)])

        values = await service.get_many(db, {"require_numbers": True, "missing_key": "x"})

        assert values == {"require_numbers": True, "missing_key": "x"}
