"""Email and in-app notifications for claim status changes."""

from .dispatcher import NotificationDispatcher
from .email_transport import (
    EmailTransport,
    LoggingEmailTransport,
    SmtpEmailTransport,
    create_email_transport,
)
from .templates import (
    EmailMessage,
    claim_status_email,
    claim_status_in_app,
    new_claim_assigned_email,
    new_claim_assigned_in_app,
)

__all__ = [
    "NotificationDispatcher",
    "EmailTransport",
    "LoggingEmailTransport",
    "SmtpEmailTransport",
    "create_email_transport",
    "EmailMessage",
    "claim_status_email",
    "claim_status_in_app",
    "new_claim_assigned_email",
    "new_claim_assigned_in_app",
]
