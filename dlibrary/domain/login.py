"""
Login gate - single allow/deny decision for a login attempt.

Checks run in order and stop at the first failure:

1. account found by email          -> INVALID_CREDENTIALS
2. password matches                -> INVALID_CREDENTIALS
3. email verified                  -> EMAIL_NOT_VERIFIED
4. not soft-deleted                -> ACCOUNT_REMOVED
5. not banned                      -> ACCOUNT_DEACTIVATED
6. no running suspension           -> ACCOUNT_SUSPENDED

A suspension whose end has passed does not block and is not cleared here;
the status keeps reading SUSPENDED until an administrator changes it.
The gate never looks at ACTIVE vs INACTIVE.
"""

import logging
from dataclasses import dataclass, field

from .account import AccountStatus, Session, normalize_email
from .credentials import CredentialStore
from .exceptions import AuthenticationDenied, DenialReason
from .ports import AccountRepository, Clock, utc_now

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"
EMAIL_NOT_VERIFIED = "Please verify your email before logging in"
ACCOUNT_REMOVED = "This account has been removed. Contact support for assistance."
ACCOUNT_DEACTIVATED = "Your account has been deactivated. Contact support for more information."


@dataclass
class LoginGate:
    """Composes credential, verification and moderation checks."""

    repository: AccountRepository
    credentials: CredentialStore
    clock: Clock = field(default=utc_now)

    def authenticate(self, email: str, password: str) -> Session:
        """
        Authenticate an email/password pair.

        Returns:
            Session payload for the account

        Raises:
            AuthenticationDenied: With the reason of the first failed check
        """
        account = self.repository.get_by_email(normalize_email(email))

        if account is None:
            # Same bcrypt cost as a real mismatch
            self.credentials.verify_dummy(password)
            raise self._deny(DenialReason.INVALID_CREDENTIALS, INVALID_CREDENTIALS, email)

        if not self.credentials.verify(password, account.password_hash):
            raise self._deny(DenialReason.INVALID_CREDENTIALS, INVALID_CREDENTIALS, email)

        if not account.verified:
            raise self._deny(DenialReason.EMAIL_NOT_VERIFIED, EMAIL_NOT_VERIFIED, email)

        if account.is_deleted:
            raise self._deny(DenialReason.ACCOUNT_REMOVED, ACCOUNT_REMOVED, email)

        if account.status == AccountStatus.BANNED:
            raise self._deny(DenialReason.ACCOUNT_DEACTIVATED, ACCOUNT_DEACTIVATED, email)

        now = self.clock()
        if account.is_suspended_at(now):
            until = account.suspended_until
            message = f"Your account is suspended until {until:%Y-%m-%d %H:%M %Z}."
            raise self._deny(DenialReason.ACCOUNT_SUSPENDED, message, email)

        logger.info("Login successful for account %s", account.id)
        return Session.for_account(account)

    def _deny(self, reason: DenialReason, message: str, email: str) -> AuthenticationDenied:
        logger.info("Login denied (%s) for %s", reason.value, normalize_email(email))
        return AuthenticationDenied(reason, message)
