"""
Wine queue service.

Read access to `wines_added`, the table the process-wine-queue edge
function works through. Status is owned by the backend.
"""

from typing import Optional
from collections import Counter
import structlog

from config import get_supabase_client
from models.wine_queue import (
    JobStatus,
    QueuedWineJob,
    QueueStatusSummary,
    CompletedWine,
    FailedWine,
)
from exceptions import DatabaseError, DecodingError, WineJobNotFoundError

logger = structlog.get_logger(__name__)

RECENT_COMPLETED_LIMIT = 5
RECENT_ERRORS_LIMIT = 3


class WineQueueService:
    """
    Service for queued wine jobs.

    Handles:
    - Reading a single job's status
    - Per-user queue summary (counts, recent completions, recent errors)
    """

    def __init__(self, client=None):
        self.db = client or get_supabase_client()
        self.table = "wines_added"

    def get_job(
        self,
        job_id: str,
        columns: str = "*",
        user_id: Optional[str] = None
    ) -> QueuedWineJob:
        """
        Fetch one job.

        Errors from the client propagate unchanged so callers can decide
        whether to retry.

        Args:
            job_id: wines_added row id
            columns: Columns to select
            user_id: When given, only a job owned by this user is returned

        Raises:
            WineJobNotFoundError: No row for this id (or not the user's)
            DecodingError: Row is not an object
        """
        query = self.db.table(self.table).select(columns).eq("id", job_id)
        if user_id is not None:
            query = query.eq("user_id", user_id)

        result = query.maybe_single().execute()

        row = result.data if result is not None else None
        if row is None:
            raise WineJobNotFoundError(job_id)
        if not isinstance(row, dict):
            raise DecodingError("wines_added", f"expected object, got {type(row).__name__}")

        return QueuedWineJob.from_row({"id": job_id, **row})

    def get_status_summary(self, user_id: str) -> QueueStatusSummary:
        """
        Summarise a user's queue.

        Args:
            user_id: Owner of the jobs

        Returns:
            QueueStatusSummary with counts and recent results
        """
        logger.debug("getting_queue_status", user_id=user_id)

        try:
            status_rows = (
                self.db.table(self.table)
                .select("status")
                .eq("user_id", user_id)
                .execute()
            ).data or []

            completed_rows = (
                self.db.table(self.table)
                .select("processed_data, processed_at")
                .eq("user_id", user_id)
                .eq("status", JobStatus.COMPLETED.value)
                .order("processed_at", desc=True)
                .limit(RECENT_COMPLETED_LIMIT)
                .execute()
            ).data or []

            error_rows = (
                self.db.table(self.table)
                .select("processed_data, error_message")
                .eq("user_id", user_id)
                .not_.is_("error_message", "null")
                .order("created_at", desc=True)
                .limit(RECENT_ERRORS_LIMIT)
                .execute()
            ).data or []

        except Exception as e:
            logger.error(
                "queue_status_failed",
                user_id=user_id,
                error=str(e)
            )
            raise DatabaseError("select", str(e))

        counts = Counter(JobStatus.parse(row.get("status")) for row in status_rows)
        pending = counts[JobStatus.PENDING]
        working = counts[JobStatus.WORKING]
        completed = counts[JobStatus.COMPLETED]
        failed = counts[JobStatus.FAILED]

        summary = QueueStatusSummary(
            pending=pending,
            working=working,
            completed=completed,
            failed=failed,
            total=pending + working + completed + failed,
            is_processing=working > 0,
            recently_completed=[
                CompletedWine(
                    wine_name=_processed_field(row, "wine_name", "Unknown Wine"),
                    producer_name=_processed_field(row, "producer_name", "Unknown Producer"),
                    completed_at=row.get("processed_at") or "",
                )
                for row in completed_rows
            ],
            errors=[
                FailedWine(
                    wine_name=_processed_field(row, "wine_name", "Unknown Wine"),
                    producer_name=_processed_field(row, "producer_name", "Unknown Producer"),
                    error_message=row.get("error_message") or "Unknown error",
                )
                for row in error_rows
            ],
        )

        logger.info(
            "queue_status_retrieved",
            user_id=user_id,
            total=summary.total,
            working=working
        )

        return summary


def _processed_field(row: dict, key: str, default: str) -> str:
    data = row.get("processed_data") or {}
    if not isinstance(data, dict):
        return default
    return data.get(key) or default


# Singleton instance
_wine_queue_service: Optional[WineQueueService] = None


def get_wine_queue_service() -> WineQueueService:
    """Get or create WineQueueService instance."""
    global _wine_queue_service
    if _wine_queue_service is None:
        _wine_queue_service = WineQueueService()
    return _wine_queue_service
