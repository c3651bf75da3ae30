"""
Account aggregate - the single record behind identity and moderation.

An account carries two orthogonal pieces of moderation state:

- ``status``: ACTIVE | INACTIVE | SUSPENDED | BANNED
- ``is_deleted``: soft-delete flag with its own audit trail

Verification is tracked separately by ``verified`` plus the two outstanding
artifacts (link token, numeric code), each with its own expiry. Verifying an
account never changes ``status``: a new account stays INACTIVE until an
administrator activates it, and login is gated on ``verified`` instead.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class AccountStatus(str, Enum):
    """Moderation status of an account."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"
    BANNED = "banned"


class Role(str, Enum):
    """Account role. ``member`` is accepted on input as an alias of USER."""

    USER = "user"
    LIBRARIAN = "librarian"
    ADMIN = "admin"

    @classmethod
    def parse(cls, value: str) -> "Role":
        """
        Resolve a role name, accepting the ``member`` alias.

        Raises:
            ValueError: If the name is not a known role
        """
        normalized = value.strip().lower()
        if normalized == "member":
            return cls.USER
        return cls(normalized)


def normalize_email(email: str) -> str:
    """
    Normalize email address for consistent storage and lookup.

    Applies: strip whitespace + lowercase
    """
    return email.strip().lower()


@dataclass
class Account:
    """Persistent account record."""

    email: str
    password_hash: str
    name: str
    created_at: datetime
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    school_name: str = ""
    location: str = ""
    gender: str = ""
    contact: str = ""

    verified: bool = False
    verification_token: str | None = None
    verification_token_expires_at: datetime | None = None
    verification_code: str | None = None
    verification_code_expires_at: datetime | None = None

    role: Role = Role.USER
    status: AccountStatus = AccountStatus.INACTIVE
    suspended_until: datetime | None = None

    is_deleted: bool = False
    deleted_at: datetime | None = None
    deleted_reason: str = ""
    deleted_by: str = ""

    def is_suspended_at(self, now: datetime) -> bool:
        """True while a suspension window is still running at ``now``."""
        return (
            self.status == AccountStatus.SUSPENDED
            and self.suspended_until is not None
            and self.suspended_until > now
        )


@dataclass(frozen=True)
class Session:
    """Minimal session payload returned by a successful login."""

    id: uuid.UUID
    name: str
    email: str
    role: Role
    school_name: str = ""

    @classmethod
    def for_account(cls, account: Account) -> "Session":
        return cls(
            id=account.id,
            name=account.name,
            email=account.email,
            role=account.role,
            school_name=account.school_name,
        )
