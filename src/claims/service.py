"""
Claim lifecycle service.

Handles the claim workflow:
- Submission (coverage check, fraud heuristics, HR assignment, notifications)
- Approval and rejection (status change + employee notifications)
- Updates and read queries

Only ClaimValidationError and ClaimNotFoundError leave this module. Fraud
and notification failures are logged and absorbed.
"""

import logging
from datetime import datetime
from typing import TYPE_CHECKING, Callable, Iterable, Optional, Protocol, Sequence

from ..notifications.templates import (
    claim_status_email,
    claim_status_in_app,
    new_claim_assigned_email,
    new_claim_assigned_in_app,
)
from .assignment import HrLoadBalancer
from .exceptions import ClaimNotFoundError, ClaimValidationError
from .fraud import FraudHeuristicEvaluator
from .schema import (
    Claim,
    ClaimStatus,
    ClaimSummary,
    Employee,
    FraudAssessment,
    Hr,
    NotificationCategory,
    Policy,
    RecipientRole,
)

if TYPE_CHECKING:
    from ..notifications.dispatcher import NotificationDispatcher
    from ..storage.claim_store import ClaimStore

logger = logging.getLogger(__name__)


class Directory(Protocol):
    def get_policy(self, policy_id: int) -> Optional[Policy]: ...

    def list_active_hrs(self) -> list[Hr]: ...


class FraudEvaluator(Protocol):
    def evaluate(self, claim: Claim, history: Sequence[Claim]) -> FraudAssessment: ...


class ClaimService:
    """
    Orchestrates submission, assignment, decisioning and notification fan-out.

    All collaborators are passed in, so tests can swap any of them for fakes.
    """

    def __init__(
        self,
        claim_store: "ClaimStore",
        hr_directory: Directory,
        dispatcher: "NotificationDispatcher",
        fraud_evaluator: Optional[FraudEvaluator] = None,
        load_balancer: Optional[HrLoadBalancer] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.claims = claim_store
        self.hr_directory = hr_directory
        self.dispatcher = dispatcher
        self.fraud_evaluator = fraud_evaluator or FraudHeuristicEvaluator()
        self.load_balancer = load_balancer or HrLoadBalancer(claim_store)
        self.clock = clock

    # =========================================================================
    # Submission
    # =========================================================================

    def submit_claim(self, claim: Claim) -> Claim:
        """
        Submit a new claim with automatic HR assignment.

        Args:
            claim: Claim with employee, policy and amount set

        Returns:
            The persisted claim (id populated)

        Raises:
            ClaimValidationError: amount is negative or exceeds the policy
                coverage, the policy is unknown, or the claim already has an id
        """
        if claim.id is not None:
            raise ClaimValidationError(
                f"Claim #{claim.id} has already been submitted", claim_id=claim.id
            )
        self._validate_coverage(claim)

        now = self.clock()
        claim.status = ClaimStatus.PENDING
        claim.created_at = now
        claim.updated_at = now
        if claim.claim_date is None:
            claim.claim_date = now
        for document in claim.documents:
            document.id = None
            if document.uploaded_at is None:
                document.uploaded_at = now

        # Fraud detection (fail-open)
        assessment = self._assess_fraud(claim)
        claim.fraud_flag = assessment.flag
        claim.fraud_reason = assessment.reason

        # Automatic HR assignment
        selected_hr = self.load_balancer.select(self.hr_directory.list_active_hrs())
        claim.assigned_hr = selected_hr

        saved = self.claims.save(claim)
        logger.info(
            f"Claim #{saved.id} submitted by {saved.employee.employee_id} "
            f"(amount {saved.amount:.2f}, assigned HR: {selected_hr.id if selected_hr else 'none'})"
        )

        self._notify_employee(saved)
        if selected_hr is not None:
            self._notify_assigned_hr(selected_hr, saved)

        return saved

    def _assess_fraud(self, claim: Claim) -> FraudAssessment:
        try:
            history = self.claims.list_by_employee(claim.employee.id)
            return self.fraud_evaluator.evaluate(claim, history)
        except Exception as e:
            logger.warning(f"Fraud detection failed, treating claim as clean: {e}")
            return FraudAssessment.clear()

    # =========================================================================
    # Decisions
    # =========================================================================

    def approve_claim(self, claim_id: int, remarks: Optional[str]) -> Claim:
        """
        Approve a claim and notify the employee.

        Raises:
            ClaimNotFoundError: no claim with this id
        """
        return self._decide(claim_id, ClaimStatus.APPROVED, remarks)

    def reject_claim(self, claim_id: int, remarks: Optional[str]) -> Claim:
        """
        Reject a claim and notify the employee.

        Raises:
            ClaimNotFoundError: no claim with this id
        """
        return self._decide(claim_id, ClaimStatus.REJECTED, remarks)

    def _decide(self, claim_id: int, status: ClaimStatus, remarks: Optional[str]) -> Claim:
        claim = self.claims.get(claim_id)
        if claim is None:
            raise ClaimNotFoundError(claim_id)

        claim.status = status
        claim.remarks = remarks
        claim.updated_at = self.clock()

        updated = self.claims.save(claim)
        if updated is None:
            raise ClaimNotFoundError(claim_id)

        logger.info(f"Claim #{claim_id} {status.value.lower()}")
        self._notify_employee(updated)
        return updated

    # =========================================================================
    # Updates
    # =========================================================================

    def update_claim(self, claim: Claim) -> Claim:
        """
        Persist changes to an existing claim. No notifications are sent.

        Raises:
            ClaimValidationError: amount is negative or exceeds the policy
                coverage, or the policy is unknown
            ClaimNotFoundError: claim has no id or the id is unknown
        """
        self._validate_coverage(claim)
        if claim.id is None:
            raise ClaimNotFoundError(None)

        claim.updated_at = self.clock()
        updated = self.claims.save(claim)
        if updated is None:
            raise ClaimNotFoundError(claim.id)
        return updated

    def save_all(self, claims: Iterable[Claim]) -> list[Claim]:
        """Bulk re-save without validation or notifications."""
        return self.claims.save_all(claims)

    def _validate_coverage(self, claim: Claim):
        """Check the amount against the stored policy, replacing the caller's copy."""
        if claim.amount < 0:
            raise ClaimValidationError(
                f"Claim amount {claim.amount:.2f} is negative", claim_id=claim.id
            )

        policy = None
        if claim.policy.id is not None:
            policy = self.hr_directory.get_policy(claim.policy.id)
        if policy is None:
            raise ClaimValidationError(
                f"Unknown policy: {claim.policy.id}", claim_id=claim.id
            )
        claim.policy = policy

        if claim.exceeds_coverage():
            raise ClaimValidationError(
                f"Claim amount {claim.amount:.2f} exceeds policy coverage "
                f"{claim.policy.coverage_amount:.2f}",
                claim_id=claim.id,
            )

    # =========================================================================
    # Queries
    # =========================================================================

    def get_claim_by_id(self, claim_id: int) -> Optional[Claim]:
        return self.claims.get(claim_id)

    def get_claims_by_ids(self, claim_ids: Sequence[int]) -> list[Claim]:
        return self.claims.get_many(claim_ids)

    def get_all_claims(self) -> list[Claim]:
        return self.claims.list_all()

    def get_claims_by_employee(self, employee: Employee) -> list[Claim]:
        return self.claims.list_by_employee(employee.id)

    def get_claims_by_employee_id(self, employee_id: str) -> list[Claim]:
        """Claims for an external employee id (e.g. 'EMP-001')."""
        return self.claims.list_by_employee_code(employee_id)

    def get_claims_by_employee_and_status(self, employee: Employee, status: ClaimStatus) -> list[Claim]:
        return self.claims.list_by_employee_and_status(employee.id, status)

    def get_claims_by_employee_id_and_status(self, employee_id: str, status: ClaimStatus) -> list[Claim]:
        return self.claims.list_by_employee_code_and_status(employee_id, status)

    def get_claims_by_assigned_hr(self, hr_id: int) -> list[Claim]:
        return self.claims.list_by_assigned_hr(hr_id)

    def get_fraud_claims_by_assigned_hr(self, hr_id: int) -> list[Claim]:
        return self.claims.list_fraud_by_assigned_hr(hr_id)

    def get_claims_by_status(self, status: ClaimStatus) -> list[Claim]:
        return self.claims.list_by_status(status)

    @staticmethod
    def get_claim_summaries(claims: Iterable[Claim]) -> list[ClaimSummary]:
        return [ClaimSummary.from_claim(claim) for claim in claims]

    # =========================================================================
    # Notifications
    # =========================================================================

    def _notify_employee(self, claim: Claim):
        """One status email and one in-app notification for the claim's employee."""
        employee = claim.employee
        if employee.email:
            try:
                self.dispatcher.send_email(employee.email, claim_status_email(claim))
            except Exception as e:
                logger.error(f"Failed to send claim #{claim.id} email to employee: {e}")
        else:
            logger.info(f"Employee {employee.employee_id} has no email - skipping status email")

        title, body = claim_status_in_app(claim)
        try:
            self.dispatcher.create_in_app_notification(
                title, body, employee.id, RecipientRole.EMPLOYEE, NotificationCategory.CLAIM
            )
        except Exception as e:
            logger.error(f"Failed to create claim #{claim.id} notification for employee: {e}")

    def _notify_assigned_hr(self, hr: Hr, claim: Claim):
        if hr.email:
            try:
                self.dispatcher.send_email(hr.email, new_claim_assigned_email(hr, claim))
            except Exception as e:
                logger.error(f"Failed to send claim #{claim.id} assignment email to HR: {e}")

        title, body = new_claim_assigned_in_app(claim)
        try:
            self.dispatcher.create_in_app_notification(
                title, body, hr.id, RecipientRole.HR, NotificationCategory.CLAIM
            )
        except Exception as e:
            logger.error(f"Failed to create claim #{claim.id} notification for HR: {e}")
