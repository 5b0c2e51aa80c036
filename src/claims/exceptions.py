"""Exceptions raised by the claims core."""

from typing import Any, Dict, Optional


class ClaimsError(Exception):
    """Base exception for all claims errors."""

    def __init__(
        self,
        message: str,
        error_code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


class ClaimValidationError(ClaimsError):
    """Claim data breaks a business rule (e.g. amount above coverage)."""

    def __init__(self, message: str, claim_id: Optional[int] = None):
        super().__init__(
            message=f"Claim validation failed: {message}",
            error_code="CLAIM_VALIDATION_ERROR",
            details={"claim_id": claim_id} if claim_id is not None else {},
        )


class ClaimNotFoundError(ClaimsError):
    """Claim not found in storage."""

    def __init__(self, claim_id: Optional[int]):
        super().__init__(
            message=f"Claim not found: {claim_id}",
            error_code="CLAIM_NOT_FOUND",
            details={"claim_id": claim_id},
        )


class NotificationError(ClaimsError):
    """An email or in-app notification could not be delivered."""

    def __init__(self, channel: str, message: str):
        super().__init__(
            message=f"{channel} notification failed: {message}",
            error_code="NOTIFICATION_ERROR",
            details={"channel": channel},
        )


class FraudEvaluationError(ClaimsError):
    """Fraud heuristics could not be computed for a claim."""

    def __init__(self, message: str):
        super().__init__(
            message=f"Fraud evaluation failed: {message}",
            error_code="FRAUD_EVALUATION_ERROR",
        )
