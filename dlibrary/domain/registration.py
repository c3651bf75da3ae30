"""
Registration domain service - account creation and verification delivery.

Registration creates an unverified, INACTIVE account, issues its
verification artifacts and sends them to the address. Delivery is
best-effort: the account exists even when the notification fails, and
the user can ask for a resend.
"""

import logging
from dataclasses import dataclass, field
from urllib.parse import urlencode

from .account import Account, AccountStatus, Role, normalize_email
from .credentials import CredentialStore
from .exceptions import EmailAlreadyRegistered, InvalidInput
from .ports import AccountRepository, Clock, NotificationDispatcher, utc_now
from .verification import VerificationArtifacts, VerificationIssuer

logger = logging.getLogger(__name__)


@dataclass
class RegistrationService:
    """
    Domain service for user registration.

    Orchestrates the registration flow: email normalization,
    password hashing, artifact issuance and verification delivery.
    """

    repository: AccountRepository
    notifier: NotificationDispatcher
    credentials: CredentialStore
    issuer: VerificationIssuer
    verification_link_base: str
    clock: Clock = field(default=utc_now)

    def register(
        self,
        name: str,
        email: str,
        password: str,
        *,
        school_name: str = "",
        location: str = "",
        gender: str = "",
        contact: str = "",
    ) -> Account:
        """
        Register a new account and send its verification artifacts.

        Args:
            name: Display name
            email: User's email address (will be normalized)
            password: User's password (will be hashed)

        Returns:
            The stored account (unverified, INACTIVE)

        Raises:
            InvalidInput: If name, email or password is empty
            EmailAlreadyRegistered: If a non-deleted account holds the email
        """
        normalized_email = normalize_email(email)
        required = (("fullName", name), ("email", normalized_email), ("password", password))
        for field_name, value in required:
            if not value or not value.strip():
                raise InvalidInput(f"Missing `{field_name}` field")

        account = Account(
            email=normalized_email,
            password_hash=self.credentials.hash(password),
            name=name.strip(),
            created_at=self.clock(),
            school_name=school_name,
            location=location,
            gender=gender,
            contact=contact,
        )
        if not self.repository.add(account):
            logger.info("Registration rejected, email already registered: %s", normalized_email)
            raise EmailAlreadyRegistered()

        logger.info("Registered account %s for %s", account.id, normalized_email)
        artifacts = self.issuer.issue(account)
        self._deliver(account, artifacts)
        return account

    def resend_verification(self, email: str) -> Account:
        """
        Replace and resend the verification artifacts.

        Raises:
            AccountNotFound: If no account holds the email
            AlreadyVerified: If the account is already verified
        """
        account, artifacts = self.issuer.resend(email)
        self._deliver(account, artifacts)
        return account

    def ensure_admin(self, email: str, password: str, name: str = "Admin") -> Account | None:
        """
        Create a verified admin account unless the email is already taken.

        Returns:
            The created account, or None if one already existed
        """
        normalized_email = normalize_email(email)
        if self.repository.get_by_email(normalized_email) is not None:
            logger.info("Admin user already exists: %s", normalized_email)
            return None

        account = Account(
            email=normalized_email,
            password_hash=self.credentials.hash(password),
            name=name,
            created_at=self.clock(),
            verified=True,
            role=Role.ADMIN,
            status=AccountStatus.INACTIVE,
        )
        if not self.repository.add(account):
            return None
        logger.info("Seeded admin user: %s", normalized_email)
        return account

    def verification_link(self, token: str) -> str:
        return f"{self.verification_link_base}?{urlencode({'token': token})}"

    def _deliver(self, account: Account, artifacts: VerificationArtifacts) -> None:
        try:
            self.notifier.send_verification(
                account.email, self.verification_link(artifacts.token), artifacts.code
            )
        except Exception:  # best-effort delivery
            logger.exception("Failed to send verification email to %s", account.email)
