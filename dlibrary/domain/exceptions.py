"""
Domain exceptions - Semantic error types for accounts.

This module defines domain-specific exceptions that communicate
business rule violations without leaking infrastructure details.
Every exception carries a ``message`` that is safe to show a client.
"""

from enum import Enum


class AccountError(Exception):
    """Base class for account domain errors."""

    default_message = "Account error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidInput(AccountError):
    """Missing or malformed input."""

    default_message = "Invalid input"


class AccountNotDeleted(InvalidInput):
    """Restore requested for an account that is not soft-deleted."""

    default_message = "User is not deleted"


class AlreadyVerified(AccountError):
    """Verification resend requested for a verified account."""

    default_message = "User already verified"


class EmailAlreadyRegistered(AccountError):
    """A non-deleted account already holds the email."""

    default_message = "User already exists"


class AccountNotFound(AccountError):
    """No account matches the lookup."""

    default_message = "User not found"


class VerificationInvalid(AccountError):
    """
    Token or code did not match a live artifact.

    Raised for unknown and expired artifacts alike.
    """

    default_message = "Invalid or expired verification"


class DenialReason(Enum):
    """Why the login gate refused a session."""

    INVALID_CREDENTIALS = "invalid_credentials"
    EMAIL_NOT_VERIFIED = "email_not_verified"
    ACCOUNT_REMOVED = "account_removed"
    ACCOUNT_DEACTIVATED = "account_deactivated"
    ACCOUNT_SUSPENDED = "account_suspended"


class AuthenticationDenied(AccountError):
    """Credential, verification or status check failed at login."""

    default_message = "Invalid credentials"

    def __init__(self, reason: DenialReason, message: str | None = None) -> None:
        self.reason = reason
        super().__init__(message)


class NotificationError(AccountError):
    """Notification delivery failed."""

    default_message = "Notification delivery failed"
