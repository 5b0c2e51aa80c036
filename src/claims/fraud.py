"""
Rule-based fraud heuristics for newly submitted claims.

Looks at the new claim next to the employee's earlier claims and flags:
- Amounts close to the policy coverage limit
- Duplicates (same policy, same amount, close dates)
- Unusually frequent filing
- Cumulative payouts on one policy exceeding its coverage

The evaluator never raises: failures are logged and reported as "no fraud".
"""

import logging
from datetime import timedelta
from typing import Optional, Sequence

from ..utils.config import settings
from .exceptions import FraudEvaluationError
from .schema import Claim, ClaimStatus, FraudAssessment

logger = logging.getLogger(__name__)

# Amounts closer than this are treated as equal
AMOUNT_TOLERANCE = 0.005


class FraudHeuristicEvaluator:
    """
    Deterministic fraud scoring over a claim and its employee's history.

    Thresholds default to the values in settings.
    """

    def __init__(
        self,
        coverage_ratio: Optional[float] = None,
        duplicate_window_days: Optional[int] = None,
        frequency_window_days: Optional[int] = None,
        frequency_limit: Optional[int] = None,
    ):
        self.coverage_ratio = coverage_ratio if coverage_ratio is not None else settings.fraud_coverage_ratio
        self.duplicate_window = timedelta(
            days=duplicate_window_days if duplicate_window_days is not None
            else settings.fraud_duplicate_window_days
        )
        self.frequency_window = timedelta(
            days=frequency_window_days if frequency_window_days is not None
            else settings.fraud_frequency_window_days
        )
        self.frequency_limit = frequency_limit if frequency_limit is not None else settings.fraud_frequency_limit

    def evaluate(self, claim: Claim, history: Sequence[Claim]) -> FraudAssessment:
        """
        Score a claim against the employee's previous claims.

        Args:
            claim: The claim being submitted
            history: Every claim the same employee filed before

        Returns:
            FraudAssessment with the flag and a "; "-joined reason
        """
        try:
            reasons = self._collect_reasons(claim, history)
        except Exception as e:
            logger.error(f"Fraud evaluation failed for employee {claim.employee.employee_id}: {e}")
            return FraudAssessment.clear()

        if not reasons:
            return FraudAssessment.clear()

        logger.info(f"Claim for employee {claim.employee.employee_id} flagged: {reasons}")
        return FraudAssessment(flag=True, reason="; ".join(reasons))

    def _collect_reasons(self, claim: Claim, history: Sequence[Claim]) -> list[str]:
        prior = [c for c in history if claim.id is None or c.id != claim.id]
        for other in prior:
            if other.employee.id != claim.employee.id:
                raise FraudEvaluationError(
                    f"history contains claim {other.id} of another employee"
                )

        reasons = []

        # 1. Close to the coverage limit
        coverage = claim.policy.coverage_amount
        if coverage > 0 and claim.amount >= coverage * self.coverage_ratio:
            reasons.append(
                f"Claim amount {claim.amount:.2f} is {claim.amount / coverage:.0%} "
                f"of policy coverage {coverage:.2f}"
            )

        same_policy = [c for c in prior if c.policy.id == claim.policy.id]
        reference = claim.claim_date

        # 2. Duplicate of a recent claim
        if reference is not None:
            for other in same_policy:
                if other.claim_date is None:
                    continue
                if (abs(other.amount - claim.amount) < AMOUNT_TOLERANCE
                        and abs(reference - other.claim_date) <= self.duplicate_window):
                    reasons.append(
                        f"Possible duplicate of claim #{other.id} "
                        f"(same policy and amount within {self.duplicate_window.days} days)"
                    )
                    break

        # 3. Filing frequency
        if reference is not None:
            recent = [
                c for c in prior
                if c.claim_date is not None
                and reference - self.frequency_window <= c.claim_date <= reference
            ]
            if len(recent) >= self.frequency_limit:
                reasons.append(
                    f"{len(recent)} claims filed in the last {self.frequency_window.days} days"
                )

        # 4. Cumulative exposure on the policy
        outstanding = sum(c.amount for c in same_policy if c.status != ClaimStatus.REJECTED)
        if same_policy and outstanding + claim.amount > coverage:
            reasons.append(
                f"Cumulative claims on policy ({outstanding + claim.amount:.2f}) "
                f"exceed coverage {coverage:.2f}"
            )

        return reasons
