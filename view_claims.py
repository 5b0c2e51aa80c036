#!/usr/bin/env python3
"""
View stored claims from the database.

Usage:
    python view_claims.py                     # List all claims
    python view_claims.py 12                  # View claim #12 in detail
    python view_claims.py --status Pending    # Filter by status
    python view_claims.py --hr 2              # Claims assigned to HR #2
    python view_claims.py --hr 2 --fraud      # Only fraud-flagged claims for HR #2
    python view_claims.py --employee EMP-001  # Claims of one employee
    python view_claims.py --notifications EMPLOYEE 1   # Inbox of a recipient
    python view_claims.py --stats             # Show statistics
"""

import argparse
import os
import sys
from datetime import datetime
from typing import Optional

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from src.claims import Claim, ClaimService, ClaimStatus, RecipientRole
from src.notifications import NotificationDispatcher
from src.storage import (
    ClaimStore,
    DirectoryStore,
    NotificationStore,
    get_claim_store,
    get_database,
    get_notification_store,
)

console = Console()

STATUS_STYLES = {
    ClaimStatus.PENDING: "yellow",
    ClaimStatus.APPROVED: "green",
    ClaimStatus.REJECTED: "red",
}


def format_datetime(value: Optional[datetime]) -> str:
    """Format datetime for display."""
    return value.strftime("%Y-%m-%d %H:%M") if value else ""


def truncate(text: Optional[str], max_len: int = 50) -> str:
    """Truncate text with ellipsis."""
    if not text:
        return ""
    if len(text) > max_len:
        return text[:max_len - 3] + "..."
    return text


def styled_status(status: ClaimStatus) -> str:
    style = STATUS_STYLES[status]
    return f"[{style}]{status.value}[/{style}]"


def make_claims_table(claims: list[Claim], title: str) -> Table:
    """Create summary table with key claim info."""
    table = Table(title=title, box=box.ROUNDED, header_style="bold cyan")

    table.add_column("ID", style="bold", justify="right")
    table.add_column("Filed", style="dim")
    table.add_column("Status")
    table.add_column("Employee")
    table.add_column("Policy")
    table.add_column("Amount", justify="right")
    table.add_column("Assigned HR")
    table.add_column("Fraud")

    for claim in claims:
        table.add_row(
            str(claim.id),
            format_datetime(claim.claim_date),
            styled_status(claim.status),
            truncate(f"{claim.employee.name} ({claim.employee.employee_id})", 30),
            truncate(claim.policy.policy_name, 20),
            f"${claim.amount:,.2f}",
            claim.assigned_hr.name if claim.assigned_hr else "[dim]unassigned[/dim]",
            "[red]yes[/red]" if claim.fraud_flag else "",
        )

    return table


def show_claim_detail(claim: Claim):
    """Show full details of a single claim."""
    lines = [
        f"[bold]Status:[/bold]      {styled_status(claim.status)}",
        f"[bold]Amount:[/bold]      ${claim.amount:,.2f} of ${claim.policy.coverage_amount:,.2f} coverage",
        f"[bold]Policy:[/bold]      {claim.policy.policy_name}",
        f"[bold]Employee:[/bold]    {claim.employee.name} ({claim.employee.employee_id})"
        + (f" <{claim.employee.email}>" if claim.employee.email else ""),
        f"[bold]Assigned HR:[/bold] {claim.assigned_hr.name if claim.assigned_hr else 'unassigned'}",
        f"[bold]Filed:[/bold]       {format_datetime(claim.claim_date)}",
        f"[bold]Created:[/bold]     {format_datetime(claim.created_at)}",
        f"[bold]Updated:[/bold]     {format_datetime(claim.updated_at)}",
    ]
    if claim.description:
        lines.append(f"[bold]Description:[/bold] {claim.description}")
    if claim.remarks:
        lines.append(f"[bold]Remarks:[/bold]     {claim.remarks}")
    if claim.fraud_flag:
        lines.append(f"[bold red]Fraud flag:[/bold red]  {claim.fraud_reason}")

    console.print(Panel("\n".join(lines), title=f"Claim #{claim.id}", border_style="cyan"))

    if claim.documents:
        docs = Table(title="Documents", box=box.SIMPLE)
        docs.add_column("File")
        docs.add_column("Location", style="dim")
        docs.add_column("Uploaded", style="dim")
        for document in claim.documents:
            docs.add_row(document.file_name, document.file_url, format_datetime(document.uploaded_at))
        console.print(docs)


def show_notifications(role: RecipientRole, recipient_id: int):
    """Show the in-app inbox of an employee or HR."""
    store = get_notification_store()
    notifications = store.list_for_recipient(recipient_id, role)
    unread = store.count_unread(recipient_id, role)

    table = Table(
        title=f"Notifications for {role.value} #{recipient_id} ({unread} unread)",
        box=box.ROUNDED,
        header_style="bold cyan",
    )
    table.add_column("When", style="dim")
    table.add_column("Title", style="bold")
    table.add_column("Message")
    table.add_column("Read")

    for notification in notifications:
        table.add_row(
            format_datetime(notification.created_at),
            notification.title,
            notification.body,
            "" if notification.read else "[yellow]new[/yellow]",
        )

    console.print(table)


def show_stats(service: ClaimService):
    """Print database statistics."""
    store = service.claims
    directory = DirectoryStore(get_database())

    console.print(f"\n[bold]Database:[/bold] {store.db.db_path}")
    console.print(f"[bold]Total claims:[/bold] {store.count()}\n")

    console.print("[bold]Status Breakdown:[/bold]")
    for status in ClaimStatus:
        console.print(f"  {styled_status(status)}: {store.count(status)}")

    table = Table(title="HR Workload", box=box.ROUNDED, header_style="bold cyan")
    table.add_column("HR")
    table.add_column("Active")
    table.add_column("Pending", justify="right")
    table.add_column("Fraud flagged", justify="right")
    for hr in directory.list_hrs():
        table.add_row(
            hr.name,
            "yes" if hr.active else "[dim]no[/dim]",
            str(store.count_by_assigned_hr_and_status(hr.id, ClaimStatus.PENDING)),
            str(len(service.get_fraud_claims_by_assigned_hr(hr.id))),
        )
    console.print()
    console.print(table)


def build_service(store: ClaimStore, notification_store: NotificationStore) -> ClaimService:
    """Service over the stored claims, wired the same way as the demo."""
    return ClaimService(
        claim_store=store,
        hr_directory=DirectoryStore(store.db),
        dispatcher=NotificationDispatcher.from_settings(notification_store),
    )


def main():
    parser = argparse.ArgumentParser(description="View stored claims")
    parser.add_argument("claim_id", nargs="?", type=int, help="Specific claim ID to view")
    parser.add_argument("--status", choices=[s.value for s in ClaimStatus], help="Filter by status")
    parser.add_argument("--hr", type=int, help="Filter by assigned HR id")
    parser.add_argument("--fraud", action="store_true", help="With --hr: only fraud-flagged claims")
    parser.add_argument("--employee", help="Filter by employee id (e.g. EMP-001)")
    parser.add_argument(
        "--notifications",
        nargs=2,
        metavar=("ROLE", "RECIPIENT_ID"),
        help="Show the inbox of an EMPLOYEE or HR",
    )
    parser.add_argument("--stats", action="store_true", help="Show statistics")
    parser.add_argument("--limit", type=int, default=50, help="Max claims to list")

    args = parser.parse_args()

    store = get_claim_store()
    service = build_service(store, get_notification_store())

    if args.stats:
        show_stats(service)
        return

    if args.notifications:
        role, recipient_id = args.notifications
        show_notifications(RecipientRole(role.upper()), int(recipient_id))
        return

    if args.claim_id is not None:
        claim = service.get_claim_by_id(args.claim_id)
        if claim is None:
            console.print(f"[red]Claim not found: {args.claim_id}[/red]")
            sys.exit(1)
        show_claim_detail(claim)
        return

    if args.hr is not None:
        if args.fraud:
            claims = service.get_fraud_claims_by_assigned_hr(args.hr)
            title = f"Fraud-flagged claims for HR #{args.hr}"
        else:
            claims = service.get_claims_by_assigned_hr(args.hr)
            title = f"Claims assigned to HR #{args.hr}"
        if args.status:
            claims = [c for c in claims if c.status.value == args.status]
    elif args.employee and args.status:
        claims = service.get_claims_by_employee_id_and_status(args.employee, ClaimStatus(args.status))
        title = f"{args.status} claims of {args.employee}"
    elif args.employee:
        claims = service.get_claims_by_employee_id(args.employee)
        title = f"Claims of {args.employee}"
    elif args.status:
        claims = service.get_claims_by_status(ClaimStatus(args.status))
        title = f"{args.status} claims"
    else:
        claims = store.list_all(limit=args.limit)
        title = "All claims"

    if not claims:
        console.print("[yellow]No claims found.[/yellow]")
        return

    console.print(make_claims_table(claims[:args.limit], title))
    console.print(f"Total: {len(claims)} claim(s)")


if __name__ == "__main__":
    main()
