"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- A controllable clock for expiry checks
- In-memory repository and cheap bcrypt credentials
- A recording notification dispatcher
- Wired domain services
"""

from datetime import datetime, timedelta, timezone

import pytest

from dlibrary.adapters.repository import InMemoryAccountRepository
from dlibrary.domain.account import Account, AccountStatus, Role
from dlibrary.domain.credentials import CredentialStore
from dlibrary.domain.login import LoginGate
from dlibrary.domain.moderation import ModerationService
from dlibrary.domain.ports import AccountNotice
from dlibrary.domain.registration import RegistrationService
from dlibrary.domain.verification import VerificationIssuer

T0 = datetime(2030, 1, 1, 12, 0, tzinfo=timezone.utc)
LINK_BASE = "http://localhost:5173/auth/verify"
PASSWORD = "correct-horse-battery"


class FixedClock:
    """Clock returning a settable instant."""

    def __init__(self, now: datetime = T0) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now = self.now + delta


class RecordingNotifier:
    """NotificationDispatcher that remembers what it was asked to send."""

    def __init__(self) -> None:
        self.verifications: list[tuple[str, str, str]] = []
        self.notices: list[tuple[str, AccountNotice]] = []

    def send_verification(self, to: str, link: str, code: str) -> None:
        self.verifications.append((to, link, code))

    def send_account_action(self, to: str, notice: AccountNotice) -> None:
        self.notices.append((to, notice))


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def repository() -> InMemoryAccountRepository:
    return InMemoryAccountRepository()


@pytest.fixture(scope="session")
def credentials() -> CredentialStore:
    """Low-cost bcrypt so the suite stays fast."""
    return CredentialStore(rounds=4)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def issuer(repository: InMemoryAccountRepository, clock: FixedClock) -> VerificationIssuer:
    return VerificationIssuer(repository, clock=clock)


@pytest.fixture
def registration_service(
    repository: InMemoryAccountRepository,
    notifier: RecordingNotifier,
    credentials: CredentialStore,
    issuer: VerificationIssuer,
    clock: FixedClock,
) -> RegistrationService:
    return RegistrationService(
        repository=repository,
        notifier=notifier,
        credentials=credentials,
        issuer=issuer,
        verification_link_base=LINK_BASE,
        clock=clock,
    )


@pytest.fixture
def moderation_service(
    repository: InMemoryAccountRepository, notifier: RecordingNotifier, clock: FixedClock
) -> ModerationService:
    return ModerationService(repository=repository, notifier=notifier, clock=clock)


@pytest.fixture
def login_gate(
    repository: InMemoryAccountRepository, credentials: CredentialStore, clock: FixedClock
) -> LoginGate:
    return LoginGate(repository=repository, credentials=credentials, clock=clock)


@pytest.fixture
def make_account(repository: InMemoryAccountRepository, credentials: CredentialStore):
    """Factory storing an account directly in the repository."""

    def _make(
        email: str = "reader@example.com",
        *,
        name: str = "Reader",
        password: str = PASSWORD,
        verified: bool = True,
        role: Role = Role.USER,
        status: AccountStatus = AccountStatus.INACTIVE,
        created_at: datetime = T0,
        **fields,
    ) -> Account:
        account = Account(
            email=email,
            password_hash=credentials.hash(password),
            name=name,
            created_at=created_at,
            verified=verified,
            role=role,
            status=status,
            **fields,
        )
        assert repository.add(account)
        return account

    return _make
