"""
Email transports.

SmtpEmailTransport talks to a real SMTP server; LoggingEmailTransport only
writes the message to the log (used when email is disabled, e.g. locally).
"""

import logging
import smtplib
from email.mime.text import MIMEText
from typing import Optional, Protocol

from ..claims.exceptions import NotificationError
from ..utils.config import Settings, settings as default_settings
from .templates import EmailMessage

logger = logging.getLogger(__name__)


class EmailTransport(Protocol):
    def send(self, recipient: str, message: EmailMessage) -> None: ...


class SmtpEmailTransport:
    """Send plain-text email through an SMTP server."""

    def __init__(
        self,
        host: str,
        port: int,
        sender: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
        use_tls: bool = True,
        timeout: float = 10.0,
    ):
        self.host = host
        self.port = port
        self.sender = sender
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.timeout = timeout

    @classmethod
    def from_settings(cls, config: Optional[Settings] = None) -> "SmtpEmailTransport":
        config = config or default_settings
        return cls(
            host=config.smtp_host,
            port=config.smtp_port,
            sender=config.email_sender,
            username=config.smtp_username,
            password=config.smtp_password,
            use_tls=config.smtp_use_tls,
            timeout=config.smtp_timeout,
        )

    def send(self, recipient: str, message: EmailMessage) -> None:
        mime = MIMEText(message.body, "plain", "utf-8")
        mime["Subject"] = message.subject
        mime["From"] = self.sender
        mime["To"] = recipient

        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
                if self.use_tls:
                    server.starttls()
                if self.username:
                    server.login(self.username, self.password or "")
                server.sendmail(self.sender, [recipient], mime.as_string())
        except (smtplib.SMTPException, OSError) as e:
            raise NotificationError("email", str(e)) from e

        logger.info(f"Email '{message.subject}' sent to {recipient}")


class LoggingEmailTransport:
    """Write emails to the log instead of sending them."""

    def send(self, recipient: str, message: EmailMessage) -> None:
        logger.info(f"[email disabled] To: {recipient} | Subject: {message.subject}")
        logger.debug(message.body)


def create_email_transport(config: Optional[Settings] = None) -> EmailTransport:
    """Pick the transport matching the email settings."""
    config = config or default_settings
    if config.email_enabled:
        return SmtpEmailTransport.from_settings(config)
    return LoggingEmailTransport()
