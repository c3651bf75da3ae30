"""
Verification issuer - dual artifacts proving ownership of an email address.

Each account has at most one live link token and one live numeric code.
Both are issued together with independent expiries and either one can
verify the account:

- token: 24 random bytes, hex encoded, delivered as a link
- code:  6 digits drawn uniformly from 100000-999999, delivered in the body

Consumption rules differ by artifact. Consuming the token clears only the
token; consuming the code clears both. An artifact is live while
``now < expires_at``; equality counts as expired.

Lookups that fail for any reason raise the same VerificationInvalid so
that unknown and expired artifacts are indistinguishable to the caller.
"""

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta

from .account import Account, normalize_email
from .exceptions import AccountNotFound, AlreadyVerified, VerificationInvalid
from .ports import AccountRepository, Clock, utc_now

logger = logging.getLogger(__name__)

TOKEN_BYTES = 24
CODE_MIN = 100000
CODE_MAX = 999999
DEFAULT_TTL = timedelta(hours=24)


def generate_token() -> str:
    """Generate an opaque link token (48 hex characters)."""
    return secrets.token_hex(TOKEN_BYTES)


def generate_code() -> str:
    """
    Generate a 6-digit verification code.

    The range starts at 100000, so the string is always 6 characters wide.
    """
    return str(CODE_MIN + secrets.randbelow(CODE_MAX - CODE_MIN + 1))


@dataclass(frozen=True)
class VerificationArtifacts:
    """A freshly issued token/code pair."""

    token: str
    token_expires_at: datetime
    code: str
    code_expires_at: datetime


class VerificationIssuer:
    """Issues, replaces and consumes verification artifacts."""

    def __init__(
        self,
        repository: AccountRepository,
        clock: Clock = utc_now,
        ttl: timedelta = DEFAULT_TTL,
    ) -> None:
        self._repository = repository
        self._clock = clock
        self._ttl = ttl

    def issue(self, account: Account) -> VerificationArtifacts:
        """
        Issue a new token and code, overwriting any outstanding ones.

        Raises:
            AccountNotFound: If the account no longer exists
        """
        now = self._clock()
        artifacts = VerificationArtifacts(
            token=generate_token(),
            token_expires_at=now + self._ttl,
            code=generate_code(),
            code_expires_at=now + self._ttl,
        )
        stored = self._repository.store_verification(
            account.id,
            artifacts.token,
            artifacts.token_expires_at,
            artifacts.code,
            artifacts.code_expires_at,
        )
        if not stored:
            raise AccountNotFound()

        account.verification_token = artifacts.token
        account.verification_token_expires_at = artifacts.token_expires_at
        account.verification_code = artifacts.code
        account.verification_code_expires_at = artifacts.code_expires_at
        logger.info("Issued verification artifacts for account %s", account.id)
        return artifacts

    def consume_token(self, token: str) -> Account:
        """
        Verify the account holding a live link token.

        Raises:
            VerificationInvalid: If no live token matches
        """
        if not token:
            raise VerificationInvalid("Invalid or expired token")

        account = self._repository.consume_token(token, self._clock())
        if account is None:
            logger.info("Verification token rejected")
            raise VerificationInvalid("Invalid or expired token")

        logger.info("Account %s verified by link", account.id)
        return account

    def consume_code(self, email: str, code: str) -> Account:
        """
        Verify the account matching an email and live numeric code.

        Raises:
            VerificationInvalid: If no live code matches the pair
        """
        if not email or not code:
            raise VerificationInvalid("Invalid or expired code")

        account = self._repository.consume_code(normalize_email(email), code, self._clock())
        if account is None:
            logger.info("Verification code rejected")
            raise VerificationInvalid("Invalid or expired code")

        logger.info("Account %s verified by code", account.id)
        return account

    def resend(self, email: str) -> tuple[Account, VerificationArtifacts]:
        """
        Replace the outstanding artifacts of an unverified account.

        Raises:
            AccountNotFound: If no account holds the email
            AlreadyVerified: If the account is already verified
        """
        account = self._repository.get_by_email(normalize_email(email))
        if account is None:
            raise AccountNotFound()
        if account.verified:
            raise AlreadyVerified()
        return account, self.issue(account)
