"""Account service orchestrating validation, persistence, hashing and token issuance."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Callable, Protocol

from .account import Account
from .contracts import CreateAccountInput, LoginInput, RegisterInput, UpdateAccountInput
from .errors import Conflict, DuplicateEmail, InvalidCredentials, NotFound, ValidationError
from .validation import FieldError, validate_login, validate_register
from ..security.passwords import PasswordHasher
from ..security.tokens import TokenIssuer

logger = logging.getLogger(__name__)


class AccountStore(Protocol):
    """Persistence operations the service relies on."""

    def create(
        self,
        payload: CreateAccountInput,
        issue_token: Callable[[Account], str] | None = None,
    ) -> Account: ...

    def find_by_email(self, email: str) -> Account | None: ...

    def find_by_id(self, account_id: str) -> Account | None: ...

    def list(self, account_id: str | None = None) -> list[Account]: ...

    def update(self, account_id: str, changes: dict[str, str]) -> Account: ...

    def store_token(self, account_id: str, token: str) -> None: ...

    def delete(self, account_id: str) -> None: ...


@dataclass(slots=True)
class SessionView:
    """Account details returned after a successful login."""

    account_id: str
    full_name: str | None
    email: str
    mobile: str | None
    role: str
    token: str


def normalize_email(email: str) -> str:
    return email.lower()


def _raise_for(failure: FieldError | None) -> None:
    if failure is not None:
        raise ValidationError(failure.field, failure.message)


class AccountService:
    """Account workflows backed by a repository, a password hasher and a token issuer."""

    def __init__(
        self,
        repository: AccountStore,
        hasher: PasswordHasher,
        token_issuer: TokenIssuer,
    ) -> None:
        """Store dependencies used to orchestrate persistence and token issuance."""
        self._repository = repository
        self._hasher = hasher
        self._tokens = token_issuer

    def register(self, payload: RegisterInput) -> Account:
        """Create an account for a previously unused email and issue its first token.

        The returned account carries the stored token; callers decide which
        fields to expose.
        """
        _raise_for(validate_register(payload))
        email = normalize_email(payload.email)

        if self._repository.find_by_email(email) is not None:
            logger.info("registration rejected, email already registered")
            raise Conflict()

        try:
            account = self._repository.create(
                CreateAccountInput(
                    full_name=payload.full_name,
                    email=email,
                    password_hash=self._hasher.hash(payload.password),
                    mobile=payload.mobile,
                ),
                issue_token=lambda created: self._tokens.issue(
                    user_id=created.account_id, email=created.email
                ),
            )
        except DuplicateEmail as exc:
            logger.info("registration lost race on unique email index")
            raise Conflict() from exc

        logger.info("account created: %s", account.account_id)
        return account

    def login(self, payload: LoginInput) -> SessionView:
        """Check credentials and issue a fresh bearer token."""
        _raise_for(validate_login(payload))
        account = self._repository.find_by_email(normalize_email(payload.email))
        if account is None:
            raise NotFound()
        if not self._hasher.verify(payload.password, account.password_hash):
            logger.warning("login failed for account %s: bad password", account.account_id)
            raise InvalidCredentials()

        token = self._tokens.issue(user_id=account.account_id, email=account.email)
        self._repository.store_token(account.account_id, token)
        logger.info("login succeeded for account %s", account.account_id)
        return SessionView(
            account_id=account.account_id,
            full_name=account.full_name,
            email=account.email,
            mobile=account.mobile,
            role=account.role,
            token=token,
        )

    def list_accounts(self, account_id: str | None = None) -> list[Account]:
        return self._repository.list(account_id)

    def update_account(self, account_id: str, payload: UpdateAccountInput) -> Account:
        """Apply the provided profile fields; password and role are never touched here."""
        changes = payload.changes()
        if "email" in changes:
            changes["email"] = normalize_email(changes["email"])
        try:
            account = self._repository.update(account_id, changes)
        except DuplicateEmail as exc:
            raise Conflict() from exc
        logger.info("account %s updated fields %s", account_id, sorted(changes))
        return account

    def delete_account(self, account_id: str) -> None:
        self._repository.delete(account_id)
        logger.info("account deleted: %s", account_id)
