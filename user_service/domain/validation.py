"""Ordered required-field checks for account requests."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence

from .contracts import LoginInput, RegisterInput


@dataclass(frozen=True, slots=True)
class FieldError:
    """First failing check of a validation run."""

    field: str
    message: str


# (attribute, message) pairs evaluated in order; the first missing one wins.
LOGIN_RULES: tuple[tuple[str, str], ...] = (
    ("email", "Email is required."),
    ("password", "Password is required."),
)

REGISTER_RULES: tuple[tuple[str, str], ...] = LOGIN_RULES + (
    ("full_name", "Name is required."),
    ("mobile", "Mobile is required."),
)


def first_missing(payload: Any, rules: Sequence[tuple[str, str]]) -> FieldError | None:
    """Return the first rule whose attribute is empty, or ``None`` when all pass."""
    for field, message in rules:
        if not getattr(payload, field, None):
            return FieldError(field=field, message=message)
    return None


def validate_register(payload: RegisterInput) -> FieldError | None:
    return first_missing(payload, REGISTER_RULES)


def validate_login(payload: LoginInput) -> FieldError | None:
    return first_missing(payload, LOGIN_RULES)
