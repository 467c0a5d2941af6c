from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class Account:
    """Aggregate root for a single user directory entry."""

    account_id: str
    full_name: str | None
    email: str
    password_hash: str
    mobile: str | None
    role: str = "user"
    token: str | None = None
