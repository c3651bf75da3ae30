"""
Domain layer - Pure business logic with zero framework imports.

This package contains the account identity-verification and moderation
lifecycle. It defines its own port interfaces for infrastructure
abstraction, so storage and mail adapters plug in from the outside.
"""

from .account import Account, AccountStatus, Role, Session, normalize_email
from .credentials import CredentialStore
from .exceptions import (
    AccountError,
    AccountNotDeleted,
    AccountNotFound,
    AlreadyVerified,
    AuthenticationDenied,
    DenialReason,
    EmailAlreadyRegistered,
    InvalidInput,
    NotificationError,
    VerificationInvalid,
)
from .login import LoginGate
from .moderation import ModerationService
from .ports import AccountAction, AccountNotice, AccountRepository, NotificationDispatcher
from .registration import RegistrationService
from .verification import VerificationArtifacts, VerificationIssuer

__all__ = [
    "Account",
    "AccountAction",
    "AccountError",
    "AccountNotDeleted",
    "AccountNotFound",
    "AccountNotice",
    "AccountRepository",
    "AccountStatus",
    "AlreadyVerified",
    "AuthenticationDenied",
    "CredentialStore",
    "DenialReason",
    "EmailAlreadyRegistered",
    "InvalidInput",
    "LoginGate",
    "ModerationService",
    "NotificationDispatcher",
    "NotificationError",
    "RegistrationService",
    "Role",
    "Session",
    "VerificationArtifacts",
    "VerificationInvalid",
    "VerificationIssuer",
    "normalize_email",
]
