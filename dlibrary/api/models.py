"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
Field names are camelCase on the wire and snake_case in Python.
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

from dlibrary.domain.account import Account, Session


class ApiModel(BaseModel):
    """Base model mapping snake_case attributes to camelCase JSON."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RegisterRequest(ApiModel):
    """Request model for user registration."""

    full_name: str = Field(..., min_length=1, description="Display name")
    email: EmailStr
    password: str = Field(..., min_length=6, description="User password (min 6 characters)")
    school_name: str = ""
    location: str = ""
    gender: str = ""
    contact: str = ""


class VerifyCodeRequest(ApiModel):
    """Request model for code-based verification."""

    email: str = Field(..., min_length=1)
    code: str = Field(..., min_length=1, description="6-digit verification code")


class ResendRequest(ApiModel):
    """Request model for resending verification artifacts."""

    email: str = Field(..., min_length=1)


class LoginRequest(ApiModel):
    """Request model for login."""

    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class ModerationRequest(ApiModel):
    """Optional body of ban, unsuspend, delete and restore."""

    reason: str | None = None


class SuspendRequest(ModerationRequest):
    """Request model for suspension."""

    until: datetime = Field(..., description="End of the suspension (ISO 8601)")


class RoleRequest(ApiModel):
    """Request model for role changes (member, librarian or admin)."""

    role: str = Field(..., min_length=1)


class MessageResponse(ApiModel):
    """Standard response carrying only a message. Errors use the same shape."""

    message: str


class SessionUser(ApiModel):
    id: uuid.UUID
    name: str
    email: str
    role: str
    school_name: str = ""

    @classmethod
    def from_session(cls, session: Session) -> "SessionUser":
        return cls(
            id=session.id,
            name=session.name,
            email=session.email,
            role=session.role.value,
            school_name=session.school_name,
        )


class LoginResponse(ApiModel):
    """Response model for successful login."""

    message: str
    user_id: uuid.UUID
    user: SessionUser


class AccountSummary(ApiModel):
    """Admin view of an account (never includes secrets or artifacts)."""

    id: uuid.UUID
    name: str
    email: str
    role: str
    status: str
    verified: bool
    suspended_until: datetime | None
    join_date: datetime
    is_deleted: bool
    deleted_at: datetime | None
    deleted_reason: str
    deleted_by: str

    @classmethod
    def from_account(cls, account: Account) -> "AccountSummary":
        return cls(
            id=account.id,
            name=account.name,
            email=account.email,
            role=account.role.value,
            status=account.status.value,
            verified=account.verified,
            suspended_until=account.suspended_until,
            join_date=account.created_at,
            is_deleted=account.is_deleted,
            deleted_at=account.deleted_at,
            deleted_reason=account.deleted_reason,
            deleted_by=account.deleted_by,
        )


class AccountResponse(ApiModel):
    message: str
    user: AccountSummary


class AccountListResponse(ApiModel):
    count: int
    users: list[AccountSummary]


class DeleteResponse(ApiModel):
    message: str
    id: uuid.UUID
