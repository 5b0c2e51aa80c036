"""
Workload-based HR assignment.

Picks the active HR with the fewest pending claims. Counts come from a
count query at decision time, never from a stored counter.

Known limitation: selection is read-then-write without a lock, so two
concurrent submissions can both land on the same least-loaded HR.
"""

import logging
from typing import Optional, Protocol, Sequence

from .schema import ClaimStatus, Hr

logger = logging.getLogger(__name__)


class PendingCountSource(Protocol):
    def count_by_assigned_hr_and_status(self, hr_id: int, status: ClaimStatus) -> int: ...


class HrLoadBalancer:
    """Select an assignee from the active HR roster."""

    def __init__(self, counts: PendingCountSource):
        self.counts = counts

    def pending_count(self, hr: Hr) -> int:
        return self.counts.count_by_assigned_hr_and_status(hr.id, ClaimStatus.PENDING)

    def select(self, roster: Sequence[Hr]) -> Optional[Hr]:
        """
        Return the HR with the fewest pending claims.

        Ties go to whoever comes first in the roster. An empty roster
        yields None (the claim stays unassigned).
        """
        if not roster:
            logger.warning("No active HR available - claim will be left unassigned")
            return None

        selected = min(roster, key=self.pending_count)
        logger.debug(f"Selected HR {selected.id} ({selected.name}) for assignment")
        return selected
