"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the domain requires
from infrastructure. Adapters implement these protocols.
"""

import uuid
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Protocol

from .account import Account

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Server clock used for every expiry comparison."""
    return datetime.now(timezone.utc)


# Fields a moderation transition may change through AccountRepository.update().
MODERATION_FIELDS = frozenset(
    {
        "status",
        "suspended_until",
        "role",
        "is_deleted",
        "deleted_at",
        "deleted_reason",
        "deleted_by",
    }
)


class AccountAction(str, Enum):
    """
    Moderation notice kinds.

    Each value selects one notification template; renderers must cover
    every member.
    """

    BANNED = "banned"
    SUSPENDED = "suspended"
    DELETED = "deleted"
    RESTORED = "restored"
    ROLE_CHANGED = "role_changed"


@dataclass(frozen=True)
class AccountNotice:
    """Payload of an account-action notification."""

    action: AccountAction
    reason: str | None = None
    until: datetime | None = None
    admin_name: str | None = None
    user_name: str | None = None
    new_role: str | None = None


class AccountRepository(Protocol):
    """Port interface for account persistence."""

    def add(self, account: Account) -> bool:
        """
        Persist a new account.

        Returns:
            True if stored, False if a non-deleted account already holds the email
        """
        ...

    def get(self, account_id: uuid.UUID) -> Account | None:
        """Fetch an account by id, deleted or not."""
        ...

    def get_by_email(self, email: str) -> Account | None:
        """
        Fetch an account by normalized email.

        A non-deleted account is preferred over soft-deleted ones holding
        the same address.
        """
        ...

    def store_verification(
        self,
        account_id: uuid.UUID,
        token: str,
        token_expires_at: datetime,
        code: str,
        code_expires_at: datetime,
    ) -> bool:
        """
        Replace any outstanding token and code for the account.

        Returns:
            True if the account exists
        """
        ...

    def consume_token(self, token: str, now: datetime) -> Account | None:
        """
        Atomically verify the account holding ``token`` if it expires after ``now``.

        Clears the token and its expiry only; the numeric code is kept.

        Returns:
            The updated account, or None if no live token matched
        """
        ...

    def consume_code(self, email: str, code: str, now: datetime) -> Account | None:
        """
        Atomically verify the account matching (email, code) if the code expires after ``now``.

        Clears both the token and the code with their expiries.

        Returns:
            The updated account, or None if no live code matched
        """
        ...

    def update(self, account_id: uuid.UUID, changes: Mapping[str, Any]) -> Account | None:
        """
        Apply moderation field changes in a single atomic write.

        Only keys in MODERATION_FIELDS are accepted.

        Returns:
            The updated account, or None if it does not exist
        """
        ...

    def restore(self, account_id: uuid.UUID) -> Account | None:
        """
        Atomically undelete a soft-deleted account and clear its audit fields.

        Returns:
            The restored account, or None if it does not exist or is not deleted

        Raises:
            EmailAlreadyRegistered: If a live account already holds the email
        """
        ...

    def list_accounts(self, include_deleted: bool = False) -> list[Account]:
        """List accounts ordered by creation time."""
        ...


class NotificationDispatcher(Protocol):
    """Port interface for user-facing notifications."""

    def send_verification(self, to: str, link: str, code: str) -> None:
        """
        Deliver the verification link and numeric code.

        Raises:
            NotificationError: If delivery failed
        """
        ...

    def send_account_action(self, to: str, notice: AccountNotice) -> None:
        """
        Deliver a moderation notice.

        Raises:
            NotificationError: If delivery failed
        """
        ...
