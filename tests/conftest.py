"""
Shared fixtures for the claims tests.

Every test gets its own SQLite file under tmp_path, a fixed clock and
fakes for the email transport and the notification dispatcher.
"""

from datetime import datetime, timedelta
from typing import Optional

import pytest

from src.claims.exceptions import NotificationError
from src.claims.schema import Claim, ClaimStatus, Employee, Hr, Policy
from src.claims.service import ClaimService
from src.notifications.dispatcher import NotificationDispatcher
from src.notifications.templates import EmailMessage
from src.storage.claim_store import ClaimStore
from src.storage.database import Database
from src.storage.directory_store import DirectoryStore
from src.storage.notification_store import NotificationStore


# ============================================================================
# Fakes
# ============================================================================


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: Optional[datetime] = None):
        self.now = start or datetime(2026, 1, 15, 9, 0, 0)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


class RecordingEmailTransport:
    """Collects sent emails; raises on every send when fail=True."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent: list[tuple[str, EmailMessage]] = []
        self.attempts = 0

    def send(self, recipient: str, message: EmailMessage) -> None:
        self.attempts += 1
        if self.fail:
            raise NotificationError("email", "SMTP server unavailable")
        self.sent.append((recipient, message))

    @property
    def recipients(self) -> list[str]:
        return [recipient for recipient, _ in self.sent]


class FailingNotificationStore:
    """Notification store whose writes always fail."""

    def __init__(self):
        self.attempts = 0

    def create(self, *args, **kwargs):
        self.attempts += 1
        raise NotificationError("in-app", "notification table locked")


class RecordingDispatcher:
    """Dispatcher stand-in that records every call and reports failure."""

    def __init__(self):
        self.emails: list[tuple[str, EmailMessage]] = []
        self.in_app: list[dict] = []

    def send_email(self, recipient, message) -> bool:
        self.emails.append((recipient, message))
        return False

    def create_in_app_notification(self, title, body, recipient_id, recipient_role, category) -> bool:
        self.in_app.append({
            "title": title,
            "body": body,
            "recipient_id": recipient_id,
            "recipient_role": recipient_role,
            "category": category,
        })
        return False

    def reset(self):
        self.emails.clear()
        self.in_app.clear()


# ============================================================================
# Storage fixtures
# ============================================================================


@pytest.fixture
def db(tmp_path):
    return Database(tmp_path / "claims.db")


@pytest.fixture
def directory(db):
    return DirectoryStore(db)


@pytest.fixture
def claim_store(db):
    return ClaimStore(db)


@pytest.fixture
def notification_store(db):
    return NotificationStore(db)


@pytest.fixture
def policy(directory):
    return directory.add_policy(Policy(policy_name="Health Plus", coverage_amount=5000.0))


@pytest.fixture
def employee(directory):
    return directory.add_employee(
        Employee(employee_id="EMP-001", name="Asha Rao", email="asha.rao@example.com")
    )


@pytest.fixture
def other_employee(directory):
    return directory.add_employee(
        Employee(employee_id="EMP-002", name="Tomas Berg", email="tomas.berg@example.com")
    )


@pytest.fixture
def hr_staff(directory):
    """Three active HRs in roster order A, B, C."""
    return [
        directory.add_hr(Hr(name="HR A", email="hr.a@example.com")),
        directory.add_hr(Hr(name="HR B", email="hr.b@example.com")),
        directory.add_hr(Hr(name="HR C", email="hr.c@example.com")),
    ]


# ============================================================================
# Service fixtures
# ============================================================================


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def email_transport():
    return RecordingEmailTransport()


@pytest.fixture
def dispatcher(email_transport, notification_store):
    return NotificationDispatcher(email_transport, notification_store)


@pytest.fixture
def service(claim_store, directory, dispatcher, clock):
    return ClaimService(
        claim_store=claim_store,
        hr_directory=directory,
        dispatcher=dispatcher,
        clock=clock,
    )


def make_claim(policy: Policy, employee: Employee, amount: float = 1200.0, **kwargs) -> Claim:
    """Build an unsaved claim."""
    return Claim(policy=policy, employee=employee, amount=amount, **kwargs)


def store_pending_claims(claim_store: ClaimStore, policy, employee, hr: Hr, count: int):
    """Put `count` pending claims on an HR's desk, bypassing the service."""
    for _ in range(count):
        claim_store.save(make_claim(
            policy, employee, amount=100.0, status=ClaimStatus.PENDING, assigned_hr=hr,
        ))
