"""Password hashing using bcrypt."""

from __future__ import annotations

import bcrypt

DEFAULT_ROUNDS = 10
# bcrypt ignores everything past the first 72 bytes of the secret.
_MAX_BYTES = 72


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:_MAX_BYTES]


class PasswordHasher:
    """Salted, adaptive one-way hashing of plaintext passwords.

    Parameters
    ----------
    rounds:
        The bcrypt work factor (log2 of iterations).
    """

    def __init__(self, rounds: int = DEFAULT_ROUNDS) -> None:
        self._rounds = rounds

    def hash(self, password: str) -> str:
        """Hash a plaintext password with a fresh salt.

        Raises
        ------
        ValueError
            If ``password`` is empty or not a string.
        """
        if not isinstance(password, str) or not password:
            raise ValueError("password must be a non-empty string")
        salt = bcrypt.gensalt(rounds=self._rounds)
        return bcrypt.hashpw(_encode(password), salt).decode("utf-8")

    def verify(self, password: str, password_hash: str) -> bool:
        """Return ``True`` when ``password`` matches ``password_hash``."""
        if not isinstance(password, str) or not isinstance(password_hash, str):
            return False
        try:
            return bcrypt.checkpw(_encode(password), password_hash.encode("utf-8"))
        except (ValueError, TypeError):
            # Stored value is not a bcrypt hash
            return False
