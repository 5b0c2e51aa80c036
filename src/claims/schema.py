"""
Claim schema for the claims administration backend.

Defines Pydantic models for claims and the records they reference
(policies, employees, HR staff), plus in-app notification records.
Every model here is a fully populated value object: stores build them
with all associations attached so callers never see half-loaded data.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


# ============================================================================
# Enums
# ============================================================================


class ClaimStatus(str, Enum):
    """Claim decision status."""
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class RecipientRole(str, Enum):
    """Who an in-app notification is addressed to."""
    EMPLOYEE = "EMPLOYEE"
    HR = "HR"


class NotificationCategory(str, Enum):
    """Grouping used by the notification inbox."""
    CLAIM = "CLAIM"


# ============================================================================
# Reference Records
# ============================================================================


class Policy(BaseModel):
    """An insurance policy claims are filed against."""
    id: Optional[int] = None
    policy_name: str = Field(description="Display name of the policy")
    coverage_amount: float = Field(ge=0, description="Maximum payable amount under the policy")


class Employee(BaseModel):
    """A claim submitter."""
    id: Optional[int] = None
    employee_id: str = Field(description="External employee identifier (e.g. 'EMP-001')")
    name: str
    email: Optional[str] = None

    @field_validator("employee_id")
    @classmethod
    def validate_employee_id(cls, v: str) -> str:
        """Ensure employee_id is not empty."""
        if not v or not v.strip():
            raise ValueError("employee_id cannot be empty")
        return v.strip()


class Hr(BaseModel):
    """An HR staff member who reviews claims."""
    id: Optional[int] = None
    name: str
    email: Optional[str] = None
    active: bool = True


# ============================================================================
# Claim
# ============================================================================


class ClaimDocument(BaseModel):
    """Reference to an attachment uploaded with a claim."""
    id: Optional[int] = None
    file_name: str
    file_url: str = Field(description="Where the attachment is stored")
    uploaded_at: Optional[datetime] = None


class Claim(BaseModel):
    """
    A request for payout against a policy, submitted by an employee.

    The amount may never exceed ``policy.coverage_amount``; the lifecycle
    service enforces this on submission and on every update.
    """

    id: Optional[int] = None

    amount: float = Field(ge=0, description="Requested payout")
    status: ClaimStatus = Field(default=ClaimStatus.PENDING)
    description: Optional[str] = None
    remarks: Optional[str] = Field(None, description="Reviewer remarks set on approval or rejection")

    claim_date: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    fraud_flag: bool = False
    fraud_reason: Optional[str] = None

    documents: List[ClaimDocument] = Field(default_factory=list)

    policy: Policy
    employee: Employee
    assigned_hr: Optional[Hr] = None

    def exceeds_coverage(self) -> bool:
        """True when the amount is above what the policy pays out."""
        return self.amount > self.policy.coverage_amount


class ClaimSummary(BaseModel):
    """Flat projection of a claim for listings and admin views."""

    id: int
    amount: float
    status: ClaimStatus
    fraud_flag: bool
    claim_date: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    employee_id: Optional[int] = None
    employee_name: str
    policy_id: Optional[int] = None
    policy_name: str
    assigned_hr_id: Optional[int] = None
    assigned_hr_name: Optional[str] = None

    document_count: int = 0

    @classmethod
    def from_claim(cls, claim: Claim) -> "ClaimSummary":
        if claim.id is None:
            raise ValueError("Only persisted claims can be summarised")
        hr = claim.assigned_hr
        return cls(
            id=claim.id,
            amount=claim.amount,
            status=claim.status,
            fraud_flag=claim.fraud_flag,
            claim_date=claim.claim_date,
            updated_at=claim.updated_at,
            employee_id=claim.employee.id,
            employee_name=claim.employee.name,
            policy_id=claim.policy.id,
            policy_name=claim.policy.policy_name,
            assigned_hr_id=hr.id if hr else None,
            assigned_hr_name=hr.name if hr else None,
            document_count=len(claim.documents),
        )


# ============================================================================
# Processing Results
# ============================================================================


class FraudAssessment(BaseModel):
    """Outcome of the fraud heuristics for one claim."""
    flag: bool = False
    reason: Optional[str] = None

    @classmethod
    def clear(cls) -> "FraudAssessment":
        """Assessment used when nothing suspicious was found (or evaluation failed)."""
        return cls(flag=False, reason=None)


class Notification(BaseModel):
    """An in-app notification record."""
    id: Optional[int] = None
    title: str
    body: str
    recipient_id: int
    recipient_role: RecipientRole
    category: NotificationCategory = NotificationCategory.CLAIM
    read: bool = False
    created_at: Optional[datetime] = None
