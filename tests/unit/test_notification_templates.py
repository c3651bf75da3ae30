"""
Unit tests for notification templates.
"""

from datetime import datetime, timedelta, timezone

import pytest

from dlibrary.adapters.smtp.templates import (
    ACTION_DETAILS,
    VERIFICATION_SUBJECT,
    format_until,
    render_account_action,
    render_verification,
)
from dlibrary.domain.ports import AccountAction, AccountNotice


class TestVerificationTemplate:
    def test_contains_code_and_link(self) -> None:
        link = "http://localhost:5173/auth/verify?token=abc123"

        message = render_verification(link, "482913")

        assert message.subject == VERIFICATION_SUBJECT
        assert "482913" in message.text
        assert link in message.text
        assert "482913" in message.html
        assert 'href="http://localhost:5173/auth/verify?token=abc123"' in message.html

    def test_link_is_escaped_in_html(self) -> None:
        message = render_verification("http://x/verify?token=a&b=<c>", "123456")

        assert "&amp;b=&lt;c&gt;" in message.html


class TestAccountActionTemplates:
    def test_every_action_has_a_template(self) -> None:
        assert set(ACTION_DETAILS) == set(AccountAction)

    @pytest.mark.parametrize("action", list(AccountAction))
    def test_every_action_renders(self, action: AccountAction) -> None:
        message = render_account_action(
            AccountNotice(action, reason="Because", admin_name="Admin", new_role="librarian")
        )

        assert message.subject == ACTION_DETAILS[action].subject
        assert "Because" in message.text
        assert "Admin" in message.html

    def test_suspension_mentions_until(self) -> None:
        until = datetime(2030, 3, 4, 15, 30, tzinfo=timezone.utc)

        message = render_account_action(AccountNotice(AccountAction.SUSPENDED, until=until))

        assert "March 04, 2030 15:30 UTC" in message.text

    def test_role_change_mentions_role(self) -> None:
        message = render_account_action(
            AccountNotice(AccountAction.ROLE_CHANGED, new_role="librarian")
        )

        assert "librarian" in message.text

    def test_default_admin_name(self) -> None:
        message = render_account_action(AccountNotice(AccountAction.BANNED))

        assert "Library Administration" in message.text

    def test_reason_is_escaped_in_html(self) -> None:
        message = render_account_action(
            AccountNotice(AccountAction.DELETED, reason="<script>alert(1)</script>")
        )

        assert "<script>" not in message.html
        assert "&lt;script&gt;" in message.html

    def test_greeting_uses_user_name(self) -> None:
        message = render_account_action(AccountNotice(AccountAction.RESTORED, user_name="Grace"))

        assert message.text.startswith("Hello, Grace")


class TestFormatUntil:
    def test_none(self) -> None:
        assert format_until(None) == "further notice"

    def test_converts_to_utc(self) -> None:
        until = datetime(2030, 1, 1, 10, 0, tzinfo=timezone(timedelta(hours=2)))

        assert format_until(until) == "January 01, 2030 08:00 UTC"
