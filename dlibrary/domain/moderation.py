"""
Account state machine - administrator-driven moderation transitions.

States are ``status`` (ACTIVE | INACTIVE | SUSPENDED | BANNED) crossed with
the orthogonal ``is_deleted`` flag.

Transitions
===========

    ban          any       -> BANNED,    suspended_until cleared
    suspend      any       -> SUSPENDED, suspended_until = until
    unsuspend    any       -> ACTIVE,    suspended_until cleared  (also lifts a ban)
    change_role  role updated, status untouched
    soft_delete  is_deleted = True with deleted_at/reason/by recorded
    restore      is_deleted = False, audit fields cleared (requires is_deleted)

Each transition is one atomic repository write followed by a best-effort
notification. A failed notification is logged and never reverses the write.
Role, status and the delete flag are independent: deleting an account keeps
its status and role, and restoring it leaves them as they were.
"""

import logging
import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from .account import Account, AccountStatus, Role
from .exceptions import AccountNotDeleted, AccountNotFound, InvalidInput
from .ports import (
    AccountAction,
    AccountNotice,
    AccountRepository,
    Clock,
    NotificationDispatcher,
    utc_now,
)

logger = logging.getLogger(__name__)


@dataclass
class ModerationService:
    """Applies moderation transitions and sends the matching notices."""

    repository: AccountRepository
    notifier: NotificationDispatcher
    clock: Clock = field(default=utc_now)

    def list_accounts(self, include_deleted: bool = False) -> list[Account]:
        return self.repository.list_accounts(include_deleted=include_deleted)

    def ban(
        self, account_id: uuid.UUID, reason: str | None = None, actor: str | None = None
    ) -> Account:
        account = self._apply(
            account_id,
            {"status": AccountStatus.BANNED, "suspended_until": None},
            "ban",
            actor,
        )
        self._notify(account, AccountNotice(AccountAction.BANNED, reason=reason, admin_name=actor))
        return account

    def suspend(
        self,
        account_id: uuid.UUID,
        until: datetime | None,
        reason: str | None = None,
        actor: str | None = None,
    ) -> Account:
        """
        Suspend an account until the given instant.

        A past ``until`` is accepted: the status reads SUSPENDED but the
        login gate no longer blocks on it.

        Raises:
            InvalidInput: If ``until`` is missing
            AccountNotFound: If the account does not exist
        """
        if until is None:
            raise InvalidInput("Missing `until` field (ISO date string)")
        if not isinstance(until, datetime):
            raise InvalidInput("Invalid `until` date")
        if until.tzinfo is None:
            until = until.replace(tzinfo=timezone.utc)

        account = self._apply(
            account_id,
            {"status": AccountStatus.SUSPENDED, "suspended_until": until},
            "suspend",
            actor,
        )
        self._notify(
            account,
            AccountNotice(AccountAction.SUSPENDED, reason=reason, until=until, admin_name=actor),
        )
        return account

    def unsuspend(
        self, account_id: uuid.UUID, reason: str | None = None, actor: str | None = None
    ) -> Account:
        account = self._apply(
            account_id,
            {"status": AccountStatus.ACTIVE, "suspended_until": None},
            "unsuspend",
            actor,
        )
        self._notify(
            account,
            AccountNotice(
                AccountAction.RESTORED, reason=reason, admin_name=actor, user_name=account.name
            ),
        )
        return account

    def change_role(
        self, account_id: uuid.UUID, role: str | Role | None, actor: str | None = None
    ) -> Account:
        """
        Raises:
            InvalidInput: If the role is missing or unknown
            AccountNotFound: If the account does not exist
        """
        if role is None or role == "":
            raise InvalidInput("Missing `role` in request body")
        try:
            new_role = role if isinstance(role, Role) else Role.parse(role)
        except ValueError:
            raise InvalidInput("Invalid role") from None

        account = self._apply(account_id, {"role": new_role}, "change_role", actor)
        self._notify(
            account,
            AccountNotice(
                AccountAction.ROLE_CHANGED,
                admin_name=actor,
                user_name=account.name,
                new_role=new_role.value,
            ),
        )
        return account

    def soft_delete(
        self, account_id: uuid.UUID, reason: str | None = None, actor: str | None = None
    ) -> Account:
        account = self._apply(
            account_id,
            {
                "is_deleted": True,
                "deleted_at": self.clock(),
                "deleted_reason": reason or "",
                "deleted_by": actor or "",
            },
            "soft_delete",
            actor,
        )
        self._notify(
            account,
            AccountNotice(
                AccountAction.DELETED, reason=reason, admin_name=actor, user_name=account.name
            ),
        )
        return account

    def restore(
        self, account_id: uuid.UUID, reason: str | None = None, actor: str | None = None
    ) -> Account:
        """
        Raises:
            AccountNotFound: If the account does not exist
            AccountNotDeleted: If the account is not soft-deleted
        """
        account = self.repository.restore(account_id)
        if account is None:
            # Nothing restored: tell a missing account from a live one
            if self.repository.get(account_id) is None:
                raise AccountNotFound()
            raise AccountNotDeleted()

        logger.info("Account %s: restore by %s", account_id, actor or "unknown admin")
        self._notify(
            account,
            AccountNotice(
                AccountAction.RESTORED, reason=reason, admin_name=actor, user_name=account.name
            ),
        )
        return account

    def _apply(
        self,
        account_id: uuid.UUID,
        changes: Mapping[str, Any],
        transition: str,
        actor: str | None,
    ) -> Account:
        account = self.repository.update(account_id, changes)
        if account is None:
            raise AccountNotFound()
        logger.info("Account %s: %s by %s", account_id, transition, actor or "unknown admin")
        return account

    def _notify(self, account: Account, notice: AccountNotice) -> None:
        try:
            self.notifier.send_account_action(account.email, notice)
        except Exception:  # never reverses the transition
            logger.exception(
                "Failed to send %s notice to %s", notice.action.value, account.email
            )
