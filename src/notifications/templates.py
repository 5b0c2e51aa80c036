"""Message texts for claim emails and in-app notifications."""

from pydantic import BaseModel

from ..claims.schema import Claim, ClaimStatus, Hr


class EmailMessage(BaseModel):
    """Rendered email ready for a transport."""
    subject: str
    body: str


STATUS_LINES = {
    ClaimStatus.PENDING: "has been submitted and is awaiting review",
    ClaimStatus.APPROVED: "has been approved",
    ClaimStatus.REJECTED: "has been rejected",
}

IN_APP_TITLES = {
    ClaimStatus.PENDING: "Claim Submitted",
    ClaimStatus.APPROVED: "Claim Approved",
    ClaimStatus.REJECTED: "Claim Rejected",
}

IN_APP_VERBS = {
    ClaimStatus.PENDING: "submitted",
    ClaimStatus.APPROVED: "approved",
    ClaimStatus.REJECTED: "rejected",
}

NEW_CLAIM_ASSIGNED_TITLE = "New Claim Assigned"


def claim_status_email(claim: Claim) -> EmailMessage:
    """Status update sent to the employee who filed the claim."""
    lines = [
        f"Dear {claim.employee.name},",
        "",
        f"Your claim #{claim.id} under policy '{claim.policy.policy_name}' "
        f"{STATUS_LINES[claim.status]}.",
        "",
        f"Amount: {claim.amount:,.2f}",
        f"Status: {claim.status.value}",
    ]
    if claim.remarks:
        lines.append(f"Remarks: {claim.remarks}")
    lines += ["", "Regards,", "Claims Team"]

    return EmailMessage(
        subject=f"Claim #{claim.id} {claim.status.value}",
        body="\n".join(lines),
    )


def new_claim_assigned_email(hr: Hr, claim: Claim) -> EmailMessage:
    """Heads-up sent to the HR a new claim was routed to."""
    lines = [
        f"Hello {hr.name},",
        "",
        f"Claim #{claim.id} from {claim.employee.name} ({claim.employee.employee_id}) "
        f"has been assigned to you.",
        "",
        f"Policy: {claim.policy.policy_name}",
        f"Amount: {claim.amount:,.2f}",
    ]
    if claim.fraud_flag:
        lines.append(f"Fraud flag: {claim.fraud_reason or 'raised'}")
    lines += ["", "Please review it at your earliest convenience."]

    return EmailMessage(
        subject=f"New claim #{claim.id} assigned to you",
        body="\n".join(lines),
    )


def claim_status_in_app(claim: Claim) -> tuple[str, str]:
    """Title and body of the employee's in-app notification."""
    return (
        IN_APP_TITLES[claim.status],
        f"Your claim #{claim.id} has been {IN_APP_VERBS[claim.status]}.",
    )


def new_claim_assigned_in_app(claim: Claim) -> tuple[str, str]:
    """Title and body of the assigned HR's in-app notification."""
    return (
        NEW_CLAIM_ASSIGNED_TITLE,
        f"A new claim #{claim.id} has been assigned to you.",
    )
