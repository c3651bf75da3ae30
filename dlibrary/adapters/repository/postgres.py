"""
PostgreSQL repository adapter - Implements AccountRepository protocol.

This module provides the PostgreSQL implementation of the domain's
repository port using psycopg3 with raw SQL.

Atomicity:
----------
Every state change is a single UPDATE ... RETURNING statement, so no reader
observes a half-applied transition and no explicit row locks are needed:

1. **Artifact consumption**: the WHERE clause matches the live artifact and
   the SET clause clears it in the same statement. Two concurrent consumers
   of one token serialize on the row; the second finds nothing to match.

2. **Issuance**: overwrites both artifacts in one statement (last write wins).

3. **Email uniqueness**: a partial unique index on ``email WHERE NOT is_deleted``
   lets INSERT ... ON CONFLICT DO NOTHING report duplicates without raising.

Expiry comparisons use the ``now`` passed in by the domain so every check
runs against the same server clock.
"""

import logging
import time
import uuid
from collections.abc import Callable, Mapping
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any

import psycopg
from psycopg import errors, sql
from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool

from dlibrary.domain.account import Account, AccountStatus, Role
from dlibrary.domain.exceptions import EmailAlreadyRegistered
from dlibrary.domain.ports import MODERATION_FIELDS

logger = logging.getLogger(__name__)

_COLUMNS = (
    "id",
    "name",
    "email",
    "password_hash",
    "school_name",
    "location",
    "gender",
    "contact",
    "verified",
    "verification_token",
    "verification_token_expires_at",
    "verification_code",
    "verification_code_expires_at",
    "role",
    "status",
    "suspended_until",
    "is_deleted",
    "deleted_at",
    "deleted_reason",
    "deleted_by",
    "created_at",
)
_RETURNING = ", ".join(_COLUMNS)
_PLACEHOLDERS = ", ".join(["%s"] * len(_COLUMNS))


def _to_account(row: Mapping[str, Any]) -> Account:
    values = {name: row[name] for name in _COLUMNS}
    values["role"] = Role(values["role"])
    values["status"] = AccountStatus(values["status"])
    return Account(**values)


def _to_db(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


class PostgresAccountRepository:
    """
    Implements AccountRepository protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries for security.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        """
        Initialize repository with connection pool.

        Args:
            pool: psycopg3 ConnectionPool for database connections
        """
        self._pool = pool

    def add(self, account: Account) -> bool:
        """
        Insert a new account.

        Returns:
            True if inserted, False if a non-deleted account holds the email
        """
        insert_sql = f"""
            INSERT INTO accounts ({_RETURNING})
            VALUES ({_PLACEHOLDERS})
            ON CONFLICT (email) WHERE NOT is_deleted DO NOTHING
        """
        params = [_to_db(getattr(account, name)) for name in _COLUMNS]

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(insert_sql, params)
            conn.commit()
            return cursor.rowcount == 1

    def get(self, account_id: uuid.UUID) -> Account | None:
        select_sql = f"SELECT {_RETURNING} FROM accounts WHERE id = %s"
        return self._fetch_one(select_sql, (account_id,))

    def get_by_email(self, email: str) -> Account | None:
        """Prefer the live account; otherwise the most recently created deleted one."""
        select_sql = f"""
            SELECT {_RETURNING} FROM accounts
            WHERE email = %s
            ORDER BY is_deleted ASC, created_at DESC
            LIMIT 1
        """
        return self._fetch_one(select_sql, (email,))

    def store_verification(
        self,
        account_id: uuid.UUID,
        token: str,
        token_expires_at: datetime,
        code: str,
        code_expires_at: datetime,
    ) -> bool:
        update_sql = """
            UPDATE accounts
            SET verification_token = %s,
                verification_token_expires_at = %s,
                verification_code = %s,
                verification_code_expires_at = %s,
                updated_at = NOW()
            WHERE id = %s
        """
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(
                update_sql, (token, token_expires_at, code, code_expires_at, account_id)
            )
            conn.commit()
            return cursor.rowcount == 1

    def consume_token(self, token: str, now: datetime) -> Account | None:
        """Verify and clear a live token; the numeric code is left as is."""
        update_sql = f"""
            UPDATE accounts
            SET verified = TRUE,
                verification_token = NULL,
                verification_token_expires_at = NULL,
                updated_at = NOW()
            WHERE verification_token = %s
              AND verification_token_expires_at > %s
            RETURNING {_RETURNING}
        """
        return self._fetch_one(update_sql, (token, now))

    def consume_code(self, email: str, code: str, now: datetime) -> Account | None:
        """Verify via a live code and clear both artifacts."""
        update_sql = f"""
            UPDATE accounts
            SET verified = TRUE,
                verification_token = NULL,
                verification_token_expires_at = NULL,
                verification_code = NULL,
                verification_code_expires_at = NULL,
                updated_at = NOW()
            WHERE email = %s
              AND verification_code = %s
              AND verification_code_expires_at > %s
            RETURNING {_RETURNING}
        """
        return self._fetch_one(update_sql, (email, code, now))

    def update(self, account_id: uuid.UUID, changes: Mapping[str, Any]) -> Account | None:
        """
        Apply moderation field changes in one UPDATE.

        Raises:
            ValueError: If a field outside MODERATION_FIELDS is given
            EmailAlreadyRegistered: If restoring would duplicate a live email
        """
        unknown = set(changes) - MODERATION_FIELDS
        if unknown:
            raise ValueError(f"Fields not updatable: {sorted(unknown)}")
        if not changes:
            return self.get(account_id)

        assignments = sql.SQL(", ").join(
            sql.SQL("{} = %s").format(sql.Identifier(name)) for name in changes
        )
        update_sql = sql.SQL(
            "UPDATE accounts SET {}, updated_at = NOW() WHERE id = %s RETURNING {}"
        ).format(assignments, sql.SQL(_RETURNING))
        params = [_to_db(value) for value in changes.values()] + [account_id]

        try:
            return self._fetch_one(update_sql, params)
        except errors.UniqueViolation:
            raise EmailAlreadyRegistered("Another account already uses this email") from None

    def restore(self, account_id: uuid.UUID) -> Account | None:
        """
        Undelete in one UPDATE guarded by ``is_deleted``.

        Concurrent restores serialize on the row; only the first matches.
        """
        update_sql = f"""
            UPDATE accounts
            SET is_deleted = FALSE,
                deleted_at = NULL,
                deleted_reason = '',
                deleted_by = '',
                updated_at = NOW()
            WHERE id = %s AND is_deleted
            RETURNING {_RETURNING}
        """
        try:
            return self._fetch_one(update_sql, (account_id,))
        except errors.UniqueViolation:
            raise EmailAlreadyRegistered("Another account already uses this email") from None

    def list_accounts(self, include_deleted: bool = False) -> list[Account]:
        select_sql = f"""
            SELECT {_RETURNING} FROM accounts
            WHERE %s OR NOT is_deleted
            ORDER BY created_at ASC
        """
        with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cursor:
            cursor.execute(select_sql, (include_deleted,))
            return [_to_account(row) for row in cursor.fetchall()]

    def _fetch_one(self, query: Any, params: Any) -> Account | None:
        with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cursor:
            cursor.execute(query, params)
            row = cursor.fetchone()
            conn.commit()
        return _to_account(row) if row is not None else None


def wait_for_database(
    pool: ConnectionPool,
    max_immediate_retries: int = 5,
    long_backoff: float = 30.0,
    connect_timeout: float = 5.0,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """
    Block until the database answers, retrying forever.

    The first ``max_immediate_retries`` failures back off linearly
    (1s, 2s, ...); after that every retry waits ``long_backoff`` seconds.

    Returns:
        Number of attempts it took to connect
    """
    attempt = 0
    while True:
        attempt += 1
        logger.info("Database: attempting connection (attempt %d)", attempt)
        try:
            with pool.connection(timeout=connect_timeout) as conn:
                conn.execute("SELECT 1")
        except psycopg.OperationalError as e:
            logger.error("Database connection error (attempt %d): %s", attempt, e)
            if attempt < max_immediate_retries:
                backoff = float(attempt)
                logger.info("Retrying connection in %.0fs...", backoff)
            else:
                backoff = long_backoff
                logger.warning(
                    "Database not reachable after %d attempts, retrying every %.0fs",
                    attempt,
                    long_backoff,
                )
            sleep(backoff)
            continue

        logger.info("Database connected")
        return attempt


MIGRATIONS_DIR = Path(__file__).resolve().parents[3] / "migrations"


def run_migrations(pool: ConnectionPool, migrations_dir: Path = MIGRATIONS_DIR) -> list[str]:
    """
    Apply every ``*.sql`` file in ``migrations_dir`` in filename order.

    All files run on one connection, each in its own transaction. They run
    on every startup, so each must be idempotent (IF NOT EXISTS and the like).

    Returns:
        Names of the applied files

    Raises:
        RuntimeError: If a file fails; later files are not attempted
    """
    scripts = sorted(migrations_dir.glob("*.sql")) if migrations_dir.is_dir() else []
    if not scripts:
        logger.warning("Migrations: nothing to apply in %s", migrations_dir)
        return []

    logger.info("Migrations: applying %d file(s) from %s", len(scripts), migrations_dir)
    applied: list[str] = []
    with pool.connection() as conn:
        for script in scripts:
            try:
                with conn.transaction():
                    conn.execute(script.read_text())
            except (psycopg.Error, OSError) as e:
                logger.error("Migrations: %s failed: %s", script.name, e)
                raise RuntimeError(f"Database migration failed: {script.name}") from e
            applied.append(script.name)
            logger.info("Migrations: %s applied", script.name)
    return applied
