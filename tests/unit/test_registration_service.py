"""
Unit tests for RegistrationService.

Tests account creation, best-effort delivery, resend and admin seeding.
"""

import logging
from urllib.parse import parse_qs, urlparse

import bcrypt
import pytest

from dlibrary.domain.account import AccountStatus, Role
from dlibrary.domain.credentials import CredentialStore
from dlibrary.domain.exceptions import (
    AccountNotFound,
    AlreadyVerified,
    EmailAlreadyRegistered,
    InvalidInput,
    NotificationError,
)


class FailingNotifier:
    def send_verification(self, to: str, link: str, code: str) -> None:
        raise NotificationError()

    def send_account_action(self, to, notice) -> None:
        raise NotificationError()


class TestRegister:
    """Tests for register()."""

    def test_creates_unverified_inactive_account(self, registration_service, repository) -> None:
        account = registration_service.register("Ada", "ada@example.com", "password123")

        stored = repository.get(account.id)
        assert stored.verified is False
        assert stored.status == AccountStatus.INACTIVE
        assert stored.role == Role.USER
        assert stored.is_deleted is False

    def test_email_normalized(self, registration_service) -> None:
        account = registration_service.register("Ada", "  Ada@Example.COM ", "password123")
        assert account.email == "ada@example.com"

    def test_password_is_hashed(self, registration_service, repository) -> None:
        account = registration_service.register("Ada", "ada@example.com", "password123")

        stored = repository.get(account.id)
        assert stored.password_hash != "password123"
        assert bcrypt.checkpw(b"password123", stored.password_hash.encode())

    def test_profile_fields_stored(self, registration_service, repository) -> None:
        account = registration_service.register(
            "Ada",
            "ada@example.com",
            "password123",
            school_name="Analytical School",
            location="London",
            gender="female",
            contact="+44 20 0000",
        )

        stored = repository.get(account.id)
        assert stored.school_name == "Analytical School"
        assert stored.location == "London"
        assert stored.contact == "+44 20 0000"

    def test_sends_link_and_code(self, registration_service, notifier, repository) -> None:
        account = registration_service.register("Ada", "ada@example.com", "password123")

        assert len(notifier.verifications) == 1
        to, link, code = notifier.verifications[0]
        stored = repository.get(account.id)
        assert to == "ada@example.com"
        assert code == stored.verification_code
        parsed = urlparse(link)
        assert f"{parsed.scheme}://{parsed.netloc}{parsed.path}" == (
            "http://localhost:5173/auth/verify"
        )
        assert parse_qs(parsed.query) == {"token": [stored.verification_token]}

    def test_duplicate_email_rejected(self, registration_service) -> None:
        registration_service.register("Ada", "ada@example.com", "password123")

        with pytest.raises(EmailAlreadyRegistered, match="User already exists"):
            registration_service.register("Other", "ADA@example.com", "password456")

    def test_email_reusable_after_soft_delete(
        self, registration_service, moderation_service
    ) -> None:
        first = registration_service.register("Ada", "ada@example.com", "password123")
        moderation_service.soft_delete(first.id, actor="Admin")

        second = registration_service.register("Ada", "ada@example.com", "password123")

        assert second.id != first.id

    @pytest.mark.parametrize(
        ("name", "email", "password", "field"),
        [
            ("", "ada@example.com", "password123", "fullName"),
            ("   ", "ada@example.com", "password123", "fullName"),
            ("Ada", "  ", "password123", "email"),
            ("Ada", "ada@example.com", "", "password"),
        ],
    )
    def test_blank_fields_rejected(
        self, registration_service, repository, name, email, password, field
    ) -> None:
        with pytest.raises(InvalidInput, match=f"Missing `{field}` field"):
            registration_service.register(name, email, password)

        assert repository.list_accounts(include_deleted=True) == []

    def test_delivery_failure_keeps_account(
        self, registration_service, repository, caplog: pytest.LogCaptureFixture
    ) -> None:
        """A failed send is logged; the account and its artifacts remain."""
        registration_service.notifier = FailingNotifier()

        with caplog.at_level(logging.ERROR):
            account = registration_service.register("Ada", "ada@example.com", "password123")

        stored = repository.get(account.id)
        assert stored is not None
        assert stored.verification_token is not None
        assert "Failed to send verification email" in caplog.text


class TestResendVerification:
    """Tests for resend_verification()."""

    def test_resend_sends_new_artifacts(self, registration_service, notifier) -> None:
        registration_service.register("Ada", "ada@example.com", "password123")

        registration_service.resend_verification("ada@example.com")

        assert len(notifier.verifications) == 2
        assert notifier.verifications[0][1] != notifier.verifications[1][1]

    def test_resend_unknown_email(self, registration_service) -> None:
        with pytest.raises(AccountNotFound):
            registration_service.resend_verification("ghost@example.com")

    def test_resend_verified(self, registration_service, make_account) -> None:
        make_account("done@example.com", verified=True)

        with pytest.raises(AlreadyVerified, match="User already verified"):
            registration_service.resend_verification("done@example.com")


class TestEnsureAdmin:
    """Tests for ensure_admin()."""

    def test_creates_verified_admin(self, registration_service, login_gate) -> None:
        account = registration_service.ensure_admin("Admin@Library.org", "admin-pass")

        assert account.role == Role.ADMIN
        assert account.verified is True
        assert account.status == AccountStatus.INACTIVE
        assert login_gate.authenticate("admin@library.org", "admin-pass").role == Role.ADMIN

    def test_existing_email_is_left_alone(self, registration_service, make_account) -> None:
        make_account("admin@library.org", role=Role.USER)

        assert registration_service.ensure_admin("admin@library.org", "admin-pass") is None

    def test_sends_no_verification(self, registration_service, notifier) -> None:
        registration_service.ensure_admin("admin@library.org", "admin-pass")
        assert notifier.verifications == []


class TestDefaultCredentialCost:
    """The production credential store uses a bcrypt cost of at least 10."""

    def test_default_rounds(self) -> None:
        store = CredentialStore()
        password_hash = store.hash("password123")

        assert store.rounds >= 10
        assert int(password_hash.split("$")[2]) >= 10
