"""Domain-level request contracts shared by multiple layers."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class RegisterInput:
    """Raw registration fields as received from the transport layer."""

    full_name: str | None = None
    email: str | None = None
    password: str | None = None
    mobile: str | None = None


@dataclass(slots=True)
class LoginInput:
    """Raw login fields as received from the transport layer."""

    email: str | None = None
    password: str | None = None


@dataclass(slots=True)
class CreateAccountInput:
    """Validated, normalised fields required to persist a new account."""

    full_name: str
    email: str
    password_hash: str
    mobile: str
    role: str = "user"


@dataclass(slots=True)
class UpdateAccountInput:
    """Partial profile update; ``None`` means the field is left untouched."""

    full_name: str | None = None
    email: str | None = None
    mobile: str | None = None

    def changes(self) -> dict[str, str]:
        """Return only the fields that carry a value, keyed by column name."""
        values = {"full_name": self.full_name, "email": self.email, "mobile": self.mobile}
        return {column: value for column, value in values.items() if value}
