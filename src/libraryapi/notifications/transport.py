"""Mail transports used by the notification dispatcher."""

import logging
import smtplib
import ssl
from email.message import EmailMessage
from typing import Optional, Protocol

from ..config import SMTP_SECURITY_MODES, Config
from ..exceptions import TransportError

logger = logging.getLogger(__name__)


class MailTransport(Protocol):
    """Anything that can deliver one message to a list of recipients."""

    def send(self, from_address: str, subject: str, body: str, recipients: list[str]) -> None:
        ...


class SmtpTransport:
    """Deliver mail through an SMTP server."""

    def __init__(
        self,
        host: str = "localhost",
        port: int = 25,
        username: Optional[str] = None,
        password: Optional[str] = None,
        security: str = "none",
        timeout: float = 30.0,
    ):
        """Initialize the transport.

        Args:
            host: SMTP server host
            port: SMTP server port
            username: Login user (login is skipped without a password)
            password: Login password
            security: One of "starttls", "ssl" or "none"
            timeout: Socket timeout in seconds
        """
        if security not in SMTP_SECURITY_MODES:
            raise ValueError(f"Unknown SMTP security mode: {security}")
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.security = security
        self.timeout = timeout

    @classmethod
    def from_config(cls, config: Config) -> "SmtpTransport":
        """Create a transport from application config."""
        return cls(
            host=config.smtp_host,
            port=config.smtp_port,
            username=config.smtp_username,
            password=config.smtp_password,
            security=config.smtp_security,
        )

    def send(self, from_address: str, subject: str, body: str, recipients: list[str]) -> None:
        """Send one message to all recipients.

        Raises:
            TransportError: If the server cannot be reached or rejects the message
        """
        message = EmailMessage()
        message["From"] = from_address
        message["To"] = ", ".join(recipients)
        message["Subject"] = subject
        message.set_content(body)

        try:
            if self.security == "ssl":
                server = smtplib.SMTP_SSL(
                    self.host, self.port, timeout=self.timeout,
                    context=ssl.create_default_context(),
                )
            else:
                server = smtplib.SMTP(self.host, self.port, timeout=self.timeout)

            with server:
                server.ehlo()
                if self.security == "starttls":
                    server.starttls(context=ssl.create_default_context())
                    server.ehlo()
                if self.username and self.password:
                    server.login(self.username, self.password)
                server.send_message(message, from_addr=from_address, to_addrs=recipients)
        except smtplib.SMTPException as e:
            raise TransportError(f"SMTP error: {e}", recipients) from e
        except OSError as e:
            raise TransportError(
                f"Cannot reach SMTP server {self.host}:{self.port}: {e}", recipients
            ) from e

        logger.debug("Delivered '%s' to %d recipient(s) via %s", subject, len(recipients), self.host)
