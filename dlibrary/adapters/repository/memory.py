"""
In-memory repository adapter - Implements AccountRepository protocol.

Process-local store for development and tests. A single lock serializes
every operation, which gives the same guarantees the Postgres adapter gets
from single-statement UPDATEs: no reader sees a half-applied transition and
only the first consumer of an artifact succeeds.
"""

import threading
import uuid
from collections.abc import Mapping
from dataclasses import replace
from datetime import datetime
from typing import Any

from dlibrary.domain.account import Account
from dlibrary.domain.exceptions import EmailAlreadyRegistered
from dlibrary.domain.ports import MODERATION_FIELDS


class InMemoryAccountRepository:
    """
    Implements AccountRepository protocol with a dict keyed by account id.

    Uses structural subtyping - no explicit inheritance from Protocol.
    Returned accounts are copies; mutating them does not touch the store.
    """

    def __init__(self) -> None:
        self._accounts: dict[uuid.UUID, Account] = {}
        self._lock = threading.Lock()

    def add(self, account: Account) -> bool:
        with self._lock:
            if self._find_live_by_email(account.email) is not None:
                return False
            self._accounts[account.id] = replace(account)
            return True

    def get(self, account_id: uuid.UUID) -> Account | None:
        with self._lock:
            stored = self._accounts.get(account_id)
            return replace(stored) if stored else None

    def get_by_email(self, email: str) -> Account | None:
        with self._lock:
            stored = self._find_live_by_email(email)
            if stored is None:
                deleted = [a for a in self._accounts.values() if a.email == email]
                stored = max(deleted, key=lambda a: a.created_at, default=None)
            return replace(stored) if stored else None

    def store_verification(
        self,
        account_id: uuid.UUID,
        token: str,
        token_expires_at: datetime,
        code: str,
        code_expires_at: datetime,
    ) -> bool:
        with self._lock:
            stored = self._accounts.get(account_id)
            if stored is None:
                return False
            stored.verification_token = token
            stored.verification_token_expires_at = token_expires_at
            stored.verification_code = code
            stored.verification_code_expires_at = code_expires_at
            return True

    def consume_token(self, token: str, now: datetime) -> Account | None:
        with self._lock:
            for stored in self._accounts.values():
                if (
                    stored.verification_token == token
                    and stored.verification_token_expires_at is not None
                    and stored.verification_token_expires_at > now
                ):
                    stored.verified = True
                    stored.verification_token = None
                    stored.verification_token_expires_at = None
                    return replace(stored)
            return None

    def consume_code(self, email: str, code: str, now: datetime) -> Account | None:
        with self._lock:
            for stored in self._accounts.values():
                if (
                    stored.email == email
                    and stored.verification_code == code
                    and stored.verification_code_expires_at is not None
                    and stored.verification_code_expires_at > now
                ):
                    stored.verified = True
                    stored.verification_token = None
                    stored.verification_token_expires_at = None
                    stored.verification_code = None
                    stored.verification_code_expires_at = None
                    return replace(stored)
            return None

    def update(self, account_id: uuid.UUID, changes: Mapping[str, Any]) -> Account | None:
        unknown = set(changes) - MODERATION_FIELDS
        if unknown:
            raise ValueError(f"Fields not updatable: {sorted(unknown)}")

        with self._lock:
            stored = self._accounts.get(account_id)
            if stored is None:
                return None
            if (
                stored.is_deleted
                and changes.get("is_deleted") is False
                and self._find_live_by_email(stored.email) is not None
            ):
                raise EmailAlreadyRegistered("Another account already uses this email")
            for name, value in changes.items():
                setattr(stored, name, value)
            return replace(stored)

    def restore(self, account_id: uuid.UUID) -> Account | None:
        with self._lock:
            stored = self._accounts.get(account_id)
            if stored is None or not stored.is_deleted:
                return None
            if self._find_live_by_email(stored.email) is not None:
                raise EmailAlreadyRegistered("Another account already uses this email")
            stored.is_deleted = False
            stored.deleted_at = None
            stored.deleted_reason = ""
            stored.deleted_by = ""
            return replace(stored)

    def list_accounts(self, include_deleted: bool = False) -> list[Account]:
        with self._lock:
            accounts = [
                replace(a)
                for a in self._accounts.values()
                if include_deleted or not a.is_deleted
            ]
        return sorted(accounts, key=lambda a: a.created_at)

    def _find_live_by_email(self, email: str) -> Account | None:
        for stored in self._accounts.values():
            if stored.email == email and not stored.is_deleted:
                return stored
        return None
