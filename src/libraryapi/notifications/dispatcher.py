"""Batch notification sending."""

import logging

from .transport import MailTransport

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """Sends one message to many recipients through a mail transport.

    Failures are not retried here; a ``TransportError`` from the transport
    reaches the caller unchanged.
    """

    def __init__(self, transport: MailTransport, from_address: str, subject: str):
        self.transport = transport
        self.from_address = from_address
        self.subject = subject

    def send_batch(self, message: str, recipients: list[str]) -> None:
        """Send ``message`` to every address in ``recipients`` in a single call."""
        logger.info("Sending '%s' to %d recipient(s)", self.subject, len(recipients))
        self.transport.send(self.from_address, self.subject, message, list(recipients))
