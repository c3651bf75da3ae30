"""Notification adapters - console and SMTP delivery."""

from .console import ConsoleNotificationDispatcher
from .sender import SmtpNotificationDispatcher, build_notification_dispatcher

__all__ = [
    "ConsoleNotificationDispatcher",
    "SmtpNotificationDispatcher",
    "build_notification_dispatcher",
]
