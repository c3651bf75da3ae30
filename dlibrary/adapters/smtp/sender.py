"""
SMTP notification adapter - Implements NotificationDispatcher protocol.

Sends multipart (plain text + HTML) mail over STARTTLS (port 587) or
implicit TLS (``smtp_secure``, port 465). Transport failures are raised as
NotificationError; callers decide whether they are fatal.
"""

import logging
import smtplib
import ssl
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from dlibrary.config.settings import Settings
from dlibrary.domain.exceptions import NotificationError
from dlibrary.domain.ports import AccountNotice, NotificationDispatcher

from .console import ConsoleNotificationDispatcher
from .templates import RenderedMessage, render_account_action, render_verification

logger = logging.getLogger(__name__)


class SmtpNotificationDispatcher:
    """Implements NotificationDispatcher protocol via smtplib."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings

    def send_verification(self, to: str, link: str, code: str) -> None:
        self._send(to, render_verification(link, code))

    def send_account_action(self, to: str, notice: AccountNotice) -> None:
        self._send(to, render_account_action(notice))

    def _create_message(self, to: str, rendered: RenderedMessage) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = rendered.subject
        msg["From"] = self._settings.smtp_from or self._settings.smtp_user
        msg["To"] = to

        msg.attach(MIMEText(rendered.text, "plain"))
        msg.attach(MIMEText(rendered.html, "html"))
        return msg

    def _send(self, to: str, rendered: RenderedMessage) -> None:
        settings = self._settings
        message = self._create_message(to, rendered)
        password = settings.smtp_password.get_secret_value() if settings.smtp_password else ""

        try:
            context = ssl.create_default_context()
            if settings.smtp_secure:
                with smtplib.SMTP_SSL(
                    settings.smtp_host, settings.smtp_port, context=context
                ) as server:
                    server.login(settings.smtp_user, password)
                    server.send_message(message)
            else:
                with smtplib.SMTP(settings.smtp_host, settings.smtp_port) as server:
                    server.starttls(context=context)
                    server.login(settings.smtp_user, password)
                    server.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Failed to send email to %s: %s", to, e)
            raise NotificationError() from e

        logger.info("Email sent to %s: %s", to, rendered.subject)


def build_notification_dispatcher(settings: Settings) -> NotificationDispatcher:
    """SMTP when host, user and password are configured; console otherwise."""
    if settings.smtp_configured:
        logger.info("Mail transport configured: %s:%s", settings.smtp_host, settings.smtp_port)
        return SmtpNotificationDispatcher(settings)
    logger.info("Mail transport not configured, notifications will be logged")
    return ConsoleNotificationDispatcher()
