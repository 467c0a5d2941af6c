"""Database repository for user account data."""

from __future__ import annotations

import logging
import uuid
from typing import Callable

from psycopg import errors, sql
from psycopg.rows import tuple_row
from psycopg_pool import ConnectionPool

from .domain.account import Account
from .domain.contracts import CreateAccountInput
from .domain.errors import DuplicateEmail, NotFound

logger = logging.getLogger(__name__)

_COLUMNS = "account_id, full_name, email, password_hash, mobile, role, token"

_SCHEMA = """
CREATE TABLE IF NOT EXISTS accounts (
    account_id    TEXT PRIMARY KEY,
    full_name     TEXT,
    email         TEXT NOT NULL,
    password_hash TEXT NOT NULL,
    mobile        TEXT,
    role          TEXT NOT NULL DEFAULT 'user',
    token         TEXT,
    created_at    TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at    TIMESTAMPTZ NOT NULL DEFAULT NOW()
);
CREATE UNIQUE INDEX IF NOT EXISTS accounts_email_lower_key ON accounts (lower(email));
"""

_UPDATABLE_COLUMNS = frozenset({"full_name", "email", "mobile"})


class AccountRepository:
    """Postgres-backed account persistence with a storage-level unique email index."""

    def __init__(self, pool: ConnectionPool) -> None:
        """Store the connection pool used for all database interactions."""
        self._pool = pool

    def ensure_schema(self) -> None:
        """Create the accounts table and its case-insensitive email index if missing."""
        with self._pool.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(_SCHEMA)
                conn.commit()
        logger.info("accounts schema ready")

    def create(
        self,
        payload: CreateAccountInput,
        issue_token: Callable[[Account], str] | None = None,
    ) -> Account:
        """Insert a new account, assigning its identifier.

        When ``issue_token`` is given it is called with the inserted account and
        its result is stored in the same transaction, so a failure there leaves
        no account behind.

        Raises ``DuplicateEmail`` when another account already owns the email,
        including when a concurrent registration won the race past the
        service-level existence check.
        """
        account_id = str(uuid.uuid4())
        with self._pool.connection() as conn:
            with conn.cursor(row_factory=tuple_row) as cur:
                try:
                    cur.execute(
                        f"""
                        INSERT INTO accounts (account_id, full_name, email, password_hash, mobile, role)
                        VALUES (%s, %s, %s, %s, %s, %s)
                        RETURNING {_COLUMNS}
                        """,
                        (
                            account_id,
                            payload.full_name,
                            payload.email,
                            payload.password_hash,
                            payload.mobile,
                            payload.role,
                        ),
                    )
                except errors.UniqueViolation as exc:
                    conn.rollback()
                    raise DuplicateEmail(payload.email) from exc
                account = self._map_record(cur.fetchone())
                try:
                    if issue_token is not None:
                        account.token = issue_token(account)
                        cur.execute(
                            "UPDATE accounts SET token = %s WHERE account_id = %s",
                            (account.token, account.account_id),
                        )
                except Exception:
                    conn.rollback()
                    raise
                conn.commit()
        return account

    def find_by_email(self, email: str) -> Account | None:
        """Fetch the account owning the normalised ``email`` or return ``None``."""
        return self._fetch_one("lower(email) = lower(%s)", (email,))

    def find_by_id(self, account_id: str) -> Account | None:
        """Fetch an account by identifier or return ``None``."""
        return self._fetch_one("account_id = %s", (account_id,))

    def list(self, account_id: str | None = None) -> list[Account]:
        """Return every account, or the zero-or-one account matching ``account_id``."""
        query = f"SELECT {_COLUMNS} FROM accounts"
        params: tuple = ()
        if account_id:
            query += " WHERE account_id = %s"
            params = (account_id,)
        with self._pool.connection() as conn:
            with conn.cursor(row_factory=tuple_row) as cur:
                cur.execute(query, params)
                rows = cur.fetchall()
        return [self._map_record(row) for row in rows]

    def update(self, account_id: str, changes: dict[str, str]) -> Account:
        """Apply ``changes`` to the account and return its new state.

        Only ``full_name``, ``email`` and ``mobile`` may be changed. Raises
        ``NotFound`` for an unknown id and ``DuplicateEmail`` when the new email
        belongs to another account.
        """
        unknown = set(changes) - _UPDATABLE_COLUMNS
        if unknown:
            raise ValueError(f"columns not updatable: {sorted(unknown)}")
        if not changes:
            account = self.find_by_id(account_id)
            if account is None:
                raise NotFound()
            return account

        assignments = sql.SQL(", ").join(
            sql.SQL("{} = %s").format(sql.Identifier(column)) for column in changes
        )
        query = sql.SQL(
            "UPDATE accounts SET {}, updated_at = NOW() WHERE account_id = %s RETURNING " + _COLUMNS
        ).format(assignments)
        with self._pool.connection() as conn:
            with conn.cursor(row_factory=tuple_row) as cur:
                try:
                    cur.execute(query, (*changes.values(), account_id))
                except errors.UniqueViolation as exc:
                    conn.rollback()
                    raise DuplicateEmail(changes.get("email", "")) from exc
                row = cur.fetchone()
                conn.commit()
        if not row:
            raise NotFound()
        return self._map_record(row)

    def store_token(self, account_id: str, token: str) -> None:
        """Record the most recently issued bearer token on the account."""
        with self._pool.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    "UPDATE accounts SET token = %s WHERE account_id = %s",
                    (token, account_id),
                )
                conn.commit()

    def delete(self, account_id: str) -> None:
        """Permanently remove an account; raises ``NotFound`` if it does not exist."""
        with self._pool.connection() as conn:
            with conn.cursor() as cur:
                cur.execute("DELETE FROM accounts WHERE account_id = %s", (account_id,))
                deleted = cur.rowcount
                conn.commit()
        if deleted == 0:
            raise NotFound()

    def _fetch_one(self, where: str, params: tuple) -> Account | None:
        with self._pool.connection() as conn:
            with conn.cursor(row_factory=tuple_row) as cur:
                cur.execute(f"SELECT {_COLUMNS} FROM accounts WHERE {where}", params)
                row = cur.fetchone()
                if not row:
                    return None
        return self._map_record(row)

    def _map_record(self, row: tuple) -> Account:
        """Convert a raw database tuple into the domain ``Account`` dataclass."""
        return Account(
            account_id=row[0],
            full_name=row[1],
            email=row[2],
            password_hash=row[3],
            mobile=row[4],
            role=row[5],
            token=row[6],
        )
