"""Tests for the password policy."""

from app.schemas.setting import SettingEntry
from app.services.password_policy import PasswordPolicy, load_password_policy
from app.services.setting_service import get_setting_service


def messages(errors):
    return [error["message"] for error in errors]


def test_symbol_rule_rejects_and_accepts():
    policy = PasswordPolicy(min_length=8, require_numbers=True, require_symbols=True)

    errors = policy.validate("Abcdefg1")
    assert messages(errors) == ["The password must contain at least one symbol."]
    assert policy.validate("Abcdefg1!") == []


def test_rules_are_ordered_and_conditional():
    policy = PasswordPolicy(min_length=12, require_uppercase=False, require_symbols=True)
    assert [rule.name for rule in policy.rules()] == ["min_length", "lowercase", "numbers", "symbols"]


def test_reports_every_violation():
    errors = PasswordPolicy().validate("abc")

    assert messages(errors) == [
        "The password must be at least 8 characters.",
        "The password must contain at least one uppercase letter.",
        "The password must contain at least one number.",
    ]
    assert {error["field"] for error in errors} == {"password"}


def test_empty_password_only_reports_required():
    assert messages(PasswordPolicy().validate("", "")) == ["The password field is required."]


def test_confirmation_must_match_exactly():
    errors = PasswordPolicy().validate("Password1", "password1")
    assert messages(errors) == ["The password confirmation does not match."]


async def test_policy_follows_settings(db):
    await get_setting_service().set_many(
        db,
        [
            SettingEntry(key="min_password_length", value=10),
            SettingEntry(key="require_symbols", value=True),
            SettingEntry(key="require_uppercase", value=False),
        ],
    )

    policy = await load_password_policy(db)

    assert policy == PasswordPolicy(
        min_length=10,
        require_uppercase=False,
        require_lowercase=True,
        require_numbers=True,
        require_symbols=True,
    )
    assert policy.validate("abcdefghi1!") == []


def test_null_values_fall_back_to_defaults():
    policy = PasswordPolicy.from_values({
        "min_password_length": None,
        "require_uppercase": None,
        "require_lowercase": False,
        "require_numbers": None,
        "require_symbols": None,
    })

    assert policy == PasswordPolicy(min_length=8, require_lowercase=False)


async def test_cleared_settings_keep_default_rules(db):
    result = await get_setting_service().set_many(
        db,
        [
            SettingEntry(key="min_password_length", value=None),
            SettingEntry(key="require_uppercase", value=None),
        ],
    )
    assert not result.errors

    policy = await load_password_policy(db)

    assert policy.min_length == 8
    assert policy.require_uppercase is True
    assert messages(policy.validate("abc1")) == [
        "The password must be at least 8 characters.",
        "The password must contain at least one uppercase letter.",
    ]
