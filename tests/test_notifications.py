"""
Tests for notification delivery.

Covers message templates, the in-app notification store, email
transports and the best-effort dispatcher (inline and background).
"""

import smtplib
import threading
from datetime import datetime

import pytest

from src.claims.exceptions import NotificationError
from src.claims.schema import (
    Claim,
    ClaimStatus,
    Employee,
    Hr,
    NotificationCategory,
    Policy,
    RecipientRole,
)
from src.notifications import email_transport as email_transport_module
from src.notifications.dispatcher import NotificationDispatcher
from src.notifications.email_transport import (
    LoggingEmailTransport,
    SmtpEmailTransport,
    create_email_transport,
)
from src.notifications.templates import (
    EmailMessage,
    claim_status_email,
    claim_status_in_app,
    new_claim_assigned_email,
    new_claim_assigned_in_app,
)
from src.utils.config import Settings

from conftest import FailingNotificationStore, RecordingEmailTransport


def create_claim(status: ClaimStatus = ClaimStatus.PENDING, **kwargs) -> Claim:
    return Claim(
        id=42,
        amount=1234.5,
        status=status,
        claim_date=datetime(2026, 2, 1, 8, 0, 0),
        policy=Policy(id=1, policy_name="Dental Basic", coverage_amount=2000.0),
        employee=Employee(id=3, employee_id="EMP-003", name="Lena Fischer", email="lena@example.com"),
        **kwargs,
    )


MESSAGE = EmailMessage(subject="Claim #42 Pending", body="Dear Lena,")


# ============================================================================
# Templates
# ============================================================================


class TestTemplates:

    @pytest.mark.parametrize("status,title,verb", [
        (ClaimStatus.PENDING, "Claim Submitted", "submitted"),
        (ClaimStatus.APPROVED, "Claim Approved", "approved"),
        (ClaimStatus.REJECTED, "Claim Rejected", "rejected"),
    ])
    def test_status_in_app(self, status, title, verb):
        assert claim_status_in_app(create_claim(status)) == (title, f"Your claim #42 has been {verb}.")

    def test_status_email(self):
        message = claim_status_email(create_claim(ClaimStatus.REJECTED, remarks="Missing receipt"))

        assert message.subject == "Claim #42 Rejected"
        assert "Dear Lena Fischer," in message.body
        assert "'Dental Basic' has been rejected" in message.body
        assert "Amount: 1,234.50" in message.body
        assert "Remarks: Missing receipt" in message.body

    def test_status_email_without_remarks(self):
        message = claim_status_email(create_claim())

        assert "Remarks" not in message.body

    def test_assignment_messages(self):
        hr = Hr(id=9, name="Priya Nair", email="priya@example.com")
        claim = create_claim(fraud_flag=True, fraud_reason="3 claims filed in the last 30 days")

        message = new_claim_assigned_email(hr, claim)

        assert message.subject == "New claim #42 assigned to you"
        assert "Hello Priya Nair," in message.body
        assert "Lena Fischer (EMP-003)" in message.body
        assert "Fraud flag: 3 claims filed in the last 30 days" in message.body
        assert new_claim_assigned_in_app(claim) == (
            "New Claim Assigned",
            "A new claim #42 has been assigned to you.",
        )


# ============================================================================
# Notification Store
# ============================================================================


class TestNotificationStore:

    def test_create_and_get(self, notification_store):
        created = notification_store.create("Claim Submitted", "Your claim #1 has been submitted.", 5, RecipientRole.EMPLOYEE)

        fetched = notification_store.get(created.id)

        assert fetched.title == "Claim Submitted"
        assert fetched.recipient_role == RecipientRole.EMPLOYEE
        assert fetched.category == NotificationCategory.CLAIM
        assert fetched.read is False
        assert fetched.created_at is not None

    def test_get_unknown(self, notification_store):
        assert notification_store.get(404) is None

    def test_list_newest_first_and_per_role(self, notification_store):
        first = notification_store.create("A", "first", 5, RecipientRole.EMPLOYEE)
        second = notification_store.create("B", "second", 5, RecipientRole.EMPLOYEE)
        notification_store.create("C", "for hr 5", 5, RecipientRole.HR)

        inbox = notification_store.list_for_recipient(5, RecipientRole.EMPLOYEE)

        assert [n.id for n in inbox] == [second.id, first.id]

    def test_mark_read_and_unread_count(self, notification_store):
        first = notification_store.create("A", "first", 5, RecipientRole.HR)
        notification_store.create("B", "second", 5, RecipientRole.HR)

        assert notification_store.count_unread(5, RecipientRole.HR) == 2
        assert notification_store.mark_read(first.id) is True
        assert notification_store.mark_read(999) is False
        assert notification_store.count_unread(5, RecipientRole.HR) == 1
        unread = notification_store.list_for_recipient(5, RecipientRole.HR, unread_only=True)
        assert [n.body for n in unread] == ["second"]


# ============================================================================
# Email Transports
# ============================================================================


class FakeSMTP:
    """Stand-in for smtplib.SMTP that records the conversation."""

    instances: list["FakeSMTP"] = []
    fail_on_send = False

    def __init__(self, host, port, timeout=None):
        self.host = host
        self.port = port
        self.timeout = timeout
        self.calls = []
        FakeSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.calls.append("quit")
        return False

    def starttls(self):
        self.calls.append("starttls")

    def login(self, username, password):
        self.calls.append(("login", username, password))

    def sendmail(self, sender, recipients, payload):
        if FakeSMTP.fail_on_send:
            raise smtplib.SMTPRecipientsRefused({recipients[0]: (550, b"no such user")})
        self.calls.append(("sendmail", sender, recipients, payload))


@pytest.fixture
def fake_smtp(monkeypatch):
    FakeSMTP.instances = []
    FakeSMTP.fail_on_send = False
    monkeypatch.setattr(email_transport_module.smtplib, "SMTP", FakeSMTP)
    return FakeSMTP


class TestSmtpEmailTransport:

    def test_send_with_tls_and_login(self, fake_smtp):
        transport = SmtpEmailTransport(
            host="mail.example.com",
            port=2525,
            sender="claims@example.com",
            username="claims",
            password="secret",
        )

        transport.send("lena@example.com", MESSAGE)

        server = fake_smtp.instances[0]
        assert (server.host, server.port, server.timeout) == ("mail.example.com", 2525, 10.0)
        assert server.calls[0] == "starttls"
        assert server.calls[1] == ("login", "claims", "secret")
        _, sender, recipients, payload = server.calls[2]
        assert sender == "claims@example.com"
        assert recipients == ["lena@example.com"]
        assert "Subject: Claim #42 Pending" in payload
        assert server.calls[-1] == "quit"

    def test_plain_send_skips_tls_and_login(self, fake_smtp):
        transport = SmtpEmailTransport("localhost", 25, "claims@example.com", use_tls=False)

        transport.send("lena@example.com", MESSAGE)

        assert [c[0] if isinstance(c, tuple) else c for c in fake_smtp.instances[0].calls] == ["sendmail", "quit"]

    def test_smtp_error_becomes_notification_error(self, fake_smtp):
        fake_smtp.fail_on_send = True
        transport = SmtpEmailTransport("localhost", 25, "claims@example.com", use_tls=False)

        with pytest.raises(NotificationError) as exc_info:
            transport.send("nobody@example.com", MESSAGE)

        assert exc_info.value.details == {"channel": "email"}

    def test_connection_error_becomes_notification_error(self, monkeypatch):
        def refuse(*args, **kwargs):
            raise ConnectionRefusedError("connection refused")

        monkeypatch.setattr(email_transport_module.smtplib, "SMTP", refuse)
        transport = SmtpEmailTransport("localhost", 25, "claims@example.com")

        with pytest.raises(NotificationError):
            transport.send("lena@example.com", MESSAGE)


class TestCreateEmailTransport:

    def test_disabled_email_logs_only(self):
        transport = create_email_transport(Settings(_env_file=None, email_enabled=False))

        assert isinstance(transport, LoggingEmailTransport)
        transport.send("lena@example.com", MESSAGE)

    def test_enabled_email_uses_smtp_settings(self):
        config = Settings(
            _env_file=None,
            email_enabled=True,
            smtp_host="smtp.example.com",
            smtp_port=465,
            email_sender="noreply@example.com",
            smtp_use_tls=False,
        )

        transport = create_email_transport(config)

        assert isinstance(transport, SmtpEmailTransport)
        assert transport.host == "smtp.example.com"
        assert transport.port == 465
        assert transport.sender == "noreply@example.com"
        assert transport.use_tls is False


# ============================================================================
# Dispatcher
# ============================================================================


class TestInlineDispatcher:

    def test_email_success(self, notification_store):
        transport = RecordingEmailTransport()
        dispatcher = NotificationDispatcher(transport, notification_store)

        assert dispatcher.is_background is False
        assert dispatcher.send_email("lena@example.com", MESSAGE) is True
        assert transport.recipients == ["lena@example.com"]

    def test_in_app_success(self, notification_store):
        dispatcher = NotificationDispatcher(RecordingEmailTransport(), notification_store)

        assert dispatcher.create_in_app_notification("T", "B", 3, RecipientRole.EMPLOYEE) is True
        assert notification_store.count_unread(3, RecipientRole.EMPLOYEE) == 1

    def test_failures_are_reported_not_raised(self):
        transport = RecordingEmailTransport(fail=True)
        store = FailingNotificationStore()
        dispatcher = NotificationDispatcher(transport, store)

        assert dispatcher.send_email("lena@example.com", MESSAGE) is False
        assert dispatcher.create_in_app_notification("T", "B", 3, RecipientRole.HR) is False
        assert transport.attempts == 1
        assert store.attempts == 1


class BlockingEmailTransport:
    """Holds the first send until released."""

    def __init__(self):
        self.started = threading.Event()
        self.release = threading.Event()
        self.done = threading.Event()
        self.sent = []

    def send(self, recipient, message):
        self.started.set()
        self.release.wait(timeout=5)
        self.sent.append(recipient)
        self.done.set()


class TestBackgroundDispatcher:

    def test_send_runs_on_worker(self, notification_store):
        transport = BlockingEmailTransport()
        dispatcher = NotificationDispatcher(transport, notification_store, workers=2, queue_size=5)
        try:
            assert dispatcher.is_background is True
            assert dispatcher.send_email("lena@example.com", MESSAGE) is True
            assert transport.started.wait(timeout=5)
            # Caller returned while the worker is still blocked
            assert transport.sent == []
            transport.release.set()
            assert transport.done.wait(timeout=5)
            assert transport.sent == ["lena@example.com"]
        finally:
            transport.release.set()
            dispatcher.shutdown()

    def test_saturated_pool_drops_notifications(self, notification_store):
        transport = BlockingEmailTransport()
        dispatcher = NotificationDispatcher(transport, notification_store, workers=1, queue_size=0)
        try:
            assert dispatcher.send_email("first@example.com", MESSAGE) is True
            assert transport.started.wait(timeout=5)

            assert dispatcher.send_email("second@example.com", MESSAGE) is False
            assert dispatcher.create_in_app_notification("T", "B", 1, RecipientRole.HR) is False

            transport.release.set()
            assert transport.done.wait(timeout=5)
            assert transport.sent == ["first@example.com"]
            assert notification_store.count_unread(1, RecipientRole.HR) == 0
        finally:
            transport.release.set()
            dispatcher.shutdown()

    def test_shutdown_discards_queued_sends(self, notification_store):
        transport = BlockingEmailTransport()
        dispatcher = NotificationDispatcher(transport, notification_store, workers=1, queue_size=5)
        try:
            assert dispatcher.send_email("first@example.com", MESSAGE) is True
            assert transport.started.wait(timeout=5)
            assert dispatcher.send_email("queued@example.com", MESSAGE) is True

            dispatcher.shutdown()
            transport.release.set()
            dispatcher.shutdown(wait=True)

            assert transport.sent == ["first@example.com"]
        finally:
            transport.release.set()
            dispatcher.shutdown()

    def test_send_after_shutdown_is_rejected(self, notification_store):
        dispatcher = NotificationDispatcher(RecordingEmailTransport(), notification_store, workers=1)
        dispatcher.shutdown()

        assert dispatcher.send_email("lena@example.com", MESSAGE) is False

    def test_from_settings(self, notification_store):
        config = Settings(_env_file=None, notification_workers=2, notification_queue_size=10)

        dispatcher = NotificationDispatcher.from_settings(notification_store, config)
        try:
            assert dispatcher.is_background is True
            assert isinstance(dispatcher.email_transport, LoggingEmailTransport)
        finally:
            dispatcher.shutdown()
