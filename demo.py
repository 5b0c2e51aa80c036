#!/usr/bin/env python3
"""
InsurAI Claims - Lifecycle Demo Script

Walks a few claims through the backend:
1. Seed policies, employees and the HR roster
2. Submit claims (coverage check, fraud heuristics, HR assignment)
3. Approve and reject claims
4. Show the in-app notification inboxes

Run with: python demo.py

Claims are saved to the database configured by DATABASE_PATH (data/claims.db).
View saved claims with: python view_claims.py
"""

import logging
import os
import sys
from datetime import datetime, timedelta

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

# Load environment variables
from dotenv import load_dotenv
load_dotenv()

from src.claims import (
    Claim,
    ClaimDocument,
    ClaimService,
    ClaimValidationError,
    Employee,
    Hr,
    Policy,
    RecipientRole,
)
from src.notifications import NotificationDispatcher
from src.storage import ClaimStore, Database, DirectoryStore, NotificationStore
from src.utils.config import settings

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("demo")


def print_header(title: str):
    """Print a formatted section header."""
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70)


def print_claim(claim: Claim):
    """Print a one-claim summary."""
    hr = claim.assigned_hr.name if claim.assigned_hr else "unassigned"
    print(f"\n  Claim #{claim.id}  [{claim.status.value}]")
    print(f"    Employee:  {claim.employee.name} ({claim.employee.employee_id})")
    print(f"    Policy:    {claim.policy.policy_name} (coverage ${claim.policy.coverage_amount:,.2f})")
    print(f"    Amount:    ${claim.amount:,.2f}")
    print(f"    Assigned:  {hr}")
    if claim.fraud_flag:
        print(f"    FRAUD:     {claim.fraud_reason}")
    if claim.remarks:
        print(f"    Remarks:   {claim.remarks}")


# =============================================================================
# Seed data
# =============================================================================

def seed_directory(directory: DirectoryStore) -> tuple[list[Policy], list[Employee]]:
    """Create demo reference data unless it already exists."""
    policies = directory.list_policies()
    if not policies:
        policies = [
            directory.add_policy(Policy(policy_name="Health Plus", coverage_amount=5000.0)),
            directory.add_policy(Policy(policy_name="Dental Basic", coverage_amount=1200.0)),
        ]

    employees = []
    for code, name, email in [
        ("EMP-001", "Asha Rao", "asha.rao@example.com"),
        ("EMP-002", "Tomas Berg", "tomas.berg@example.com"),
        ("EMP-003", "Lena Fischer", None),
    ]:
        employee = directory.get_employee_by_code(code)
        if employee is None:
            employee = directory.add_employee(Employee(employee_id=code, name=name, email=email))
        employees.append(employee)

    if not directory.list_hrs():
        directory.add_hr(Hr(name="Priya Nair", email="priya.nair@example.com"))
        directory.add_hr(Hr(name="Daniel Okafor", email="daniel.okafor@example.com"))
        directory.add_hr(Hr(name="Mei Tanaka", email=None))

    return policies, employees


# =============================================================================
# MAIN
# =============================================================================

def main():
    """Run the demo."""
    db = Database()
    directory = DirectoryStore(db)
    notification_store = NotificationStore(db)
    dispatcher = NotificationDispatcher.from_settings(notification_store)
    service = ClaimService(
        claim_store=ClaimStore(db),
        hr_directory=directory,
        dispatcher=dispatcher,
    )

    print_header("INSURAI CLAIMS - LIFECYCLE DEMO")
    print(f"  Database: {db.db_path}")
    print(f"  Email:    {'SMTP ' + settings.smtp_host if settings.email_enabled else 'log only'}")

    (health, dental), (asha, tomas, lena) = seed_directory(directory)

    # 1. Regular submissions spread across the HR roster
    print_header("1. SUBMISSIONS")
    submitted = [
        service.submit_claim(Claim(
            policy=health, employee=asha, amount=850.0,
            description="Physiotherapy sessions",
            documents=[ClaimDocument(file_name="invoice.pdf", file_url="uploads/invoice.pdf")],
        )),
        service.submit_claim(Claim(policy=dental, employee=tomas, amount=300.0, description="Filling")),
        service.submit_claim(Claim(policy=dental, employee=lena, amount=180.0, description="Check-up")),
    ]
    for claim in submitted:
        print_claim(claim)

    # 2. Amount above coverage
    print_header("2. COVERAGE CHECK")
    try:
        service.submit_claim(Claim(policy=dental, employee=asha, amount=1500.0))
    except ClaimValidationError as e:
        print(f"\n  Rejected before saving: {e.message}")

    # 3. Claims that trip the fraud heuristics
    print_header("3. FRAUD HEURISTICS")
    near_limit = service.submit_claim(Claim(policy=health, employee=tomas, amount=4800.0))
    print_claim(near_limit)
    repeat = service.submit_claim(Claim(
        policy=health, employee=asha, amount=850.0,
        claim_date=datetime.now() - timedelta(days=2),
    ))
    print_claim(repeat)

    # 4. Decisions
    print_header("4. DECISIONS")
    print_claim(service.approve_claim(submitted[0].id, "Invoice verified"))
    print_claim(service.reject_claim(repeat.id, "Duplicate of an earlier claim"))

    # 5. Inboxes
    print_header("5. IN-APP NOTIFICATIONS")
    for employee in (asha, tomas, lena):
        inbox = notification_store.list_for_recipient(employee.id, RecipientRole.EMPLOYEE)
        print(f"\n  {employee.name}: {len(inbox)} notification(s)")
        for notification in inbox[:3]:
            print(f"    - {notification.title}: {notification.body}")

    dispatcher.shutdown()
    print("\n  Done. Run 'python view_claims.py' to browse the stored claims.\n")


if __name__ == "__main__":
    main()
