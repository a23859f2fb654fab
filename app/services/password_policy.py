"""Password policy derived from the security settings."""

import re
from dataclasses import dataclass
from typing import Callable

from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import ValidationException
from app.services.setting_service import get_setting_service

POLICY_DEFAULTS = {
    "min_password_length": 8,
    "require_uppercase": True,
    "require_lowercase": True,
    "require_numbers": True,
    "require_symbols": False,
}


@dataclass(frozen=True)
class PasswordRule:
    """A single named check with the message shown when it fails."""

    name: str
    message: str
    check: Callable[[str], bool]


@dataclass(frozen=True)
class PasswordPolicy:
    """Active password requirements."""

    min_length: int = 8
    require_uppercase: bool = True
    require_lowercase: bool = True
    require_numbers: bool = True
    require_symbols: bool = False

    @classmethod
    def from_values(cls, values: dict) -> "PasswordPolicy":
        """Build a policy from a setting-key mapping.

        Missing or null values fall back to ``POLICY_DEFAULTS``.
        """
        merged = {
            key: default if values.get(key) is None else values[key]
            for key, default in POLICY_DEFAULTS.items()
        }
        return cls(
            min_length=int(merged["min_password_length"]),
            require_uppercase=bool(merged["require_uppercase"]),
            require_lowercase=bool(merged["require_lowercase"]),
            require_numbers=bool(merged["require_numbers"]),
            require_symbols=bool(merged["require_symbols"]),
        )

    def rules(self) -> list[PasswordRule]:
        """Ordered list of the checks this policy enforces."""
        min_length = self.min_length
        rules = [
            PasswordRule(
                "min_length",
                f"The password must be at least {min_length} characters.",
                lambda value: len(value) >= min_length,
            )
        ]
        if self.require_uppercase:
            rules.append(PasswordRule(
                "uppercase",
                "The password must contain at least one uppercase letter.",
                lambda value: re.search(r"[A-Z]", value) is not None,
            ))
        if self.require_lowercase:
            rules.append(PasswordRule(
                "lowercase",
                "The password must contain at least one lowercase letter.",
                lambda value: re.search(r"[a-z]", value) is not None,
            ))
        if self.require_numbers:
            rules.append(PasswordRule(
                "numbers",
                "The password must contain at least one number.",
                lambda value: re.search(r"[0-9]", value) is not None,
            ))
        if self.require_symbols:
            rules.append(PasswordRule(
                "symbols",
                "The password must contain at least one symbol.",
                lambda value: re.search(r"[^A-Za-z0-9]", value) is not None,
            ))
        return rules

    def validate(
        self,
        password: str,
        confirmation: str | None = None,
        field: str = "password",
    ) -> list[dict[str, str]]:
        """Check a candidate password.

        Args:
            password: Candidate password
            confirmation: Repeated password; skipped when None
            field: Field name reported with each error

        Returns:
            One ``{field, message}`` entry per violated rule, empty when valid
        """
        if not password:
            return [{"field": field, "message": "The password field is required."}]

        errors = [
            {"field": field, "message": rule.message}
            for rule in self.rules()
            if not rule.check(password)
        ]
        if confirmation is not None and confirmation != password:
            errors.append({"field": field, "message": "The password confirmation does not match."})
        return errors

    def enforce(self, password: str, confirmation: str | None = None, field: str = "password") -> None:
        """Raise ValidationException listing every violated rule."""
        errors = self.validate(password, confirmation, field)
        if errors:
            raise ValidationException(errors)


async def load_password_policy(db: AsyncSession) -> PasswordPolicy:
    """Build the policy from the current security settings."""
    values = await get_setting_service().get_many(db, POLICY_DEFAULTS)
    return PasswordPolicy.from_values(values)
