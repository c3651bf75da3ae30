"""
Console notification adapter - Implements NotificationDispatcher protocol.

Used whenever mail transport is not configured: messages are logged
instead of sent, so the calling code behaves the same either way.
"""

import logging

from dlibrary.domain.ports import AccountNotice

from .templates import render_account_action

logger = logging.getLogger(__name__)


class ConsoleNotificationDispatcher:
    """
    Implements NotificationDispatcher protocol via console logging.

    Uses structural subtyping - no explicit inheritance from Protocol.
    For development - prints verification links and codes to the log.
    """

    def send_verification(self, to: str, link: str, code: str) -> None:
        """
        Log verification link and code (simulates email delivery).

        The code is logged at INFO level to be visible in container logs.

        Args:
            to: Recipient email address
            link: One-click verification link
            code: 6-digit verification code
        """
        logger.info("[VERIFICATION] Email: %s Code: %s Link: %s", to, code, link)

    def send_account_action(self, to: str, notice: AccountNotice) -> None:
        """Log the subject and reason of a moderation notice."""
        message = render_account_action(notice)
        logger.info(
            "[ACCOUNT ACTION] Email: %s Action: %s Subject: %s Reason: %s",
            to,
            notice.action.value,
            message.subject,
            notice.reason or "-",
        )
