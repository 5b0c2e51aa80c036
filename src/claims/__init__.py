"""
Claims module.

Claim lifecycle for the claims administration backend: submission against
a policy, workload-based HR assignment, fraud heuristics and approval or
rejection with employee and HR notifications.
"""

from .schema import (
    # Enums
    ClaimStatus,
    RecipientRole,
    NotificationCategory,
    # Models
    Policy,
    Employee,
    Hr,
    ClaimDocument,
    Claim,
    ClaimSummary,
    FraudAssessment,
    Notification,
)
from .exceptions import (
    ClaimsError,
    ClaimValidationError,
    ClaimNotFoundError,
    NotificationError,
    FraudEvaluationError,
)
from .fraud import FraudHeuristicEvaluator
from .assignment import HrLoadBalancer
from .service import ClaimService

__all__ = [
    # Service
    "ClaimService",
    "FraudHeuristicEvaluator",
    "HrLoadBalancer",
    # Enums
    "ClaimStatus",
    "RecipientRole",
    "NotificationCategory",
    # Models
    "Policy",
    "Employee",
    "Hr",
    "ClaimDocument",
    "Claim",
    "ClaimSummary",
    "FraudAssessment",
    "Notification",
    # Errors
    "ClaimsError",
    "ClaimValidationError",
    "ClaimNotFoundError",
    "NotificationError",
    "FraudEvaluationError",
]
