"""
Reconciliation result schemas.
"""

from pydantic import Field
from typing import Optional
from enum import Enum

from models.base import BaseSchema
from models.tasting import PendingTastingEdit


class ReconcileOutcome(str, Enum):
    """What a reconciliation pass did with one pending edit."""
    MERGED = "merged"        # Applied to the job's tasting, removed
    RETAINED = "retained"    # Job still in flight, kept as is
    DEFERRED = "deferred"    # Backing off after an error, not checked
    ERRORED = "errored"      # Status check failed, kept for retry
    DISCARDED = "discarded"  # Job failed or status unknown, removed
    UNMATCHED = "unmatched"  # Job completed but no tasting found, removed
    ABANDONED = "abandoned"  # Retry budget spent, removed


# Outcomes that drop the edit without writing it anywhere
LOST_OUTCOMES = (
    ReconcileOutcome.DISCARDED,
    ReconcileOutcome.UNMATCHED,
    ReconcileOutcome.ABANDONED,
)


class ReconcileEntry(BaseSchema):
    """Result for a single edit."""

    job_id: str
    outcome: ReconcileOutcome
    reason: Optional[str] = None
    tasting_id: Optional[str] = None
    edit: Optional[PendingTastingEdit] = Field(
        None,
        description="The dropped edit, set when its notes were not written anywhere"
    )


class ReconcileReport(BaseSchema):
    """Result of one reconciliation pass."""

    entries: list[ReconcileEntry] = Field(default_factory=list)
    remaining: int = 0

    def _job_ids(self, outcome: ReconcileOutcome) -> list[str]:
        return [e.job_id for e in self.entries if e.outcome == outcome]

    @property
    def merged(self) -> list[str]:
        return self._job_ids(ReconcileOutcome.MERGED)

    @property
    def retained(self) -> list[str]:
        return self._job_ids(ReconcileOutcome.RETAINED)

    @property
    def deferred(self) -> list[str]:
        return self._job_ids(ReconcileOutcome.DEFERRED)

    @property
    def errored(self) -> list[str]:
        return self._job_ids(ReconcileOutcome.ERRORED)

    @property
    def discarded(self) -> list[str]:
        return self._job_ids(ReconcileOutcome.DISCARDED)

    @property
    def unmatched(self) -> list[str]:
        return self._job_ids(ReconcileOutcome.UNMATCHED)

    @property
    def abandoned(self) -> list[str]:
        return self._job_ids(ReconcileOutcome.ABANDONED)

    @property
    def lost(self) -> list[ReconcileEntry]:
        """Entries whose notes were dropped without being saved."""
        return [e for e in self.entries if e.outcome in LOST_OUTCOMES]


class FallbackResult(BaseSchema):
    """Tasting created directly when a job never produced one."""

    job_id: str
    tasting_id: Optional[str] = None
