"""Account and authentication exceptions.

Raised by the repository, security and service layers; the HTTP router maps
each type onto a status code.
"""

from __future__ import annotations


class AccountServiceError(Exception):
    """Base exception carrying a human-readable message."""

    def __init__(self, message: str = "Account service error") -> None:
        self.message = message
        super().__init__(self.message)


class ValidationError(AccountServiceError):
    """Raised when a required request field is missing."""

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        super().__init__(message)


class Conflict(AccountServiceError):
    """Raised when registering an email that already belongs to an account."""

    def __init__(self, message: str = "User account already exists") -> None:
        super().__init__(message)


class NotFound(AccountServiceError):
    """Raised when an account id or email does not exist."""

    def __init__(self, message: str = "User not exists.") -> None:
        super().__init__(message)


class InvalidCredentials(AccountServiceError):
    """Raised when the supplied password does not match the stored hash."""

    def __init__(self, message: str = "Invalid Credentials") -> None:
        super().__init__(message)


class DuplicateEmail(AccountServiceError):
    """Raised by the repository when the unique email index rejects a write."""

    def __init__(self, email: str) -> None:
        self.email = email
        super().__init__(f"email already registered: {email}")


class AuthError(AccountServiceError):
    """Base exception for bearer token failures."""

    def __init__(self, message: str = "Authentication error") -> None:
        super().__init__(message)


class MalformedToken(AuthError):
    def __init__(self, message: str = "Malformed token") -> None:
        super().__init__(message)


class InvalidSignature(AuthError):
    def __init__(self, message: str = "Invalid token signature") -> None:
        super().__init__(message)


class TokenExpired(AuthError):
    def __init__(self, message: str = "Token expired") -> None:
        super().__init__(message)
