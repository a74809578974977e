"""Notification delivery for overdue-loan notices."""

from .dispatcher import NotificationDispatcher
from .transport import MailTransport, SmtpTransport

__all__ = ["NotificationDispatcher", "MailTransport", "SmtpTransport"]
