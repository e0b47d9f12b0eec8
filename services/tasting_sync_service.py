"""
Tasting sync service.

When a user scans a label, the wine is identified asynchronously by the
process-wine-queue edge function, which also creates the tasting row.
Notes the user types in the meantime are queued locally against the job
id and applied here once the job completes.

One pass (reconcile_all) looks at every queued edit:

    completed        -> patch the job's tasting, drop the edit
    pending/working  -> keep the edit as is
    failed/unknown   -> drop the edit, report it as lost
    backend error    -> keep the edit, back off, give up after max_attempts

Passes are serial. The pending list is read once and written once per
pass. Each edit records the user who queued it, and HTTP callers only
see and reconcile their own.
"""

from datetime import datetime, timedelta, timezone
from typing import Callable, Optional
import structlog

from config import get_supabase_client, settings
from models.tasting import PendingTastingEdit, TastingEditPatch
from models.wine_queue import JobStatus, QueuedWineJob
from models.sync import (
    ReconcileEntry,
    ReconcileOutcome,
    ReconcileReport,
    FallbackResult,
)
from services.pending_tasting_store import (
    PendingTastingStore,
    JsonFilePendingTastingStore,
)
from services.wine_queue_service import WineQueueService
from services.auth_service import get_current_user_id
from exceptions import DatabaseError, WineJobNotFoundError

logger = structlog.get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TastingSyncService:
    """
    Applies queued tasting edits to tastings created by wine jobs.

    Handles:
    - Queueing an edit against a job id
    - Reconciliation passes over the whole pending list
    - Fallback tastings for jobs that never produce one
    """

    def __init__(
        self,
        store: PendingTastingStore,
        client=None,
        max_attempts: Optional[int] = None,
        backoff_seconds: Optional[float] = None,
        backoff_max_seconds: Optional[float] = None,
        clock: Optional[Callable[[], datetime]] = None
    ):
        self.store = store
        self.db = client or get_supabase_client()
        self.jobs = WineQueueService(self.db)
        self.table = "tastings"

        self.max_attempts = max_attempts if max_attempts is not None else settings.tasting_sync_max_attempts
        self.backoff_seconds = (
            backoff_seconds if backoff_seconds is not None else settings.tasting_sync_backoff_seconds
        )
        self.backoff_max_seconds = (
            backoff_max_seconds if backoff_max_seconds is not None else settings.tasting_sync_backoff_max_seconds
        )
        self._clock = clock or _utcnow

    # ===================
    # QUEUE
    # ===================

    def pending(self, user_id: Optional[str] = None) -> list[PendingTastingEdit]:
        """Edits still waiting on their job, optionally only one user's."""
        edits = self.store.load()
        if user_id is None:
            return edits
        return [e for e in edits if e.user_id == user_id]

    def enqueue(
        self,
        job_id: str,
        edit: PendingTastingEdit,
        user_id: Optional[str] = None
    ) -> PendingTastingEdit:
        """
        Queue an edit for a job whose tasting does not exist yet.

        A job has at most one pending edit: queueing again for the same
        job replaces the earlier edit. Callers are expected to have checked
        that the job belongs to `user_id`.

        Args:
            job_id: wines_added row id
            edit: Notes to apply once the job completes
            user_id: Owner recorded on the edit

        Returns:
            The stored edit
        """
        update = {"job_id": job_id}
        if user_id is not None:
            update["user_id"] = user_id
        edit = edit.model_copy(update=update)
        edits = self.store.load()

        replaced = any(e.job_id == job_id for e in edits)
        edits = [e for e in edits if e.job_id != job_id]
        edits.append(edit)
        self.store.save(edits)

        logger.info(
            "pending_tasting_enqueued",
            job_id=job_id,
            user_id=edit.user_id,
            replaced=replaced,
            pending_count=len(edits)
        )

        return edit

    # ===================
    # RECONCILIATION
    # ===================

    def reconcile_all(self, user_id: Optional[str] = None) -> ReconcileReport:
        """
        Run one reconciliation pass over the pending edits.

        A failure while handling one edit never stops the others.

        Args:
            user_id: Only reconcile this user's edits; the rest are kept
                untouched. None reconciles every edit.

        Returns:
            ReconcileReport with one entry per reconciled edit
        """
        edits = self.store.load()
        in_scope = [e for e in edits if user_id is None or e.user_id == user_id]
        if not in_scope:
            logger.debug("tasting_sync_nothing_pending", user_id=user_id)
            return ReconcileReport()

        now = self._clock()
        entries: list[ReconcileEntry] = []
        remaining: list[PendingTastingEdit] = []
        kept_in_scope = 0

        logger.info("tasting_sync_started", pending_count=len(in_scope), user_id=user_id)

        for edit in edits:
            if user_id is not None and edit.user_id != user_id:
                remaining.append(edit)
                continue

            entry, kept = self._reconcile_one(edit, now)
            entries.append(entry)
            if kept is not None:
                remaining.append(kept)
                kept_in_scope += 1

        self.store.save(remaining)

        report = ReconcileReport(entries=entries, remaining=kept_in_scope)

        logger.info(
            "tasting_sync_complete",
            merged=len(report.merged),
            retained=len(report.retained),
            deferred=len(report.deferred),
            errored=len(report.errored),
            lost=len(report.lost),
            remaining=report.remaining
        )

        return report

    def _reconcile_one(
        self,
        edit: PendingTastingEdit,
        now: datetime
    ) -> tuple[ReconcileEntry, Optional[PendingTastingEdit]]:
        """Resolve one edit. Returns the report entry and the edit to keep (or None)."""
        if edit.next_attempt_at is not None and edit.next_attempt_at > now:
            return ReconcileEntry(
                job_id=edit.job_id,
                outcome=ReconcileOutcome.DEFERRED,
                reason=f"next attempt at {edit.next_attempt_at.isoformat()}"
            ), edit

        try:
            job = self.jobs.get_job(edit.job_id, columns="status, scan_id")

            if job.status == JobStatus.COMPLETED:
                return self._merge(edit, job)

            if job.status.is_in_flight:
                kept = edit
                if edit.attempts or edit.next_attempt_at:
                    kept = edit.model_copy(update={"attempts": 0, "next_attempt_at": None})
                return ReconcileEntry(
                    job_id=edit.job_id,
                    outcome=ReconcileOutcome.RETAINED,
                    reason=f"job {job.status.value}"
                ), kept

            logger.warning(
                "pending_tasting_discarded",
                job_id=edit.job_id,
                job_status=job.status.value,
                dropped=edit.to_patch().to_update()
            )
            return ReconcileEntry(
                job_id=edit.job_id,
                outcome=ReconcileOutcome.DISCARDED,
                reason=f"job {job.status.value}",
                edit=edit
            ), None

        except Exception as e:
            return self._record_failure(edit, now, e)

    def _merge(
        self,
        edit: PendingTastingEdit,
        job: QueuedWineJob
    ) -> tuple[ReconcileEntry, Optional[PendingTastingEdit]]:
        tasting_id = self._find_job_tasting(job)

        if tasting_id is None:
            logger.warning(
                "pending_tasting_unmatched",
                job_id=edit.job_id,
                scan_id=job.scan_id,
                dropped=edit.to_patch().to_update()
            )
            return ReconcileEntry(
                job_id=edit.job_id,
                outcome=ReconcileOutcome.UNMATCHED,
                reason="no tasting found for completed job",
                edit=edit
            ), None

        self._apply_patch(tasting_id, edit.to_patch())

        logger.info(
            "pending_tasting_merged",
            job_id=edit.job_id,
            tasting_id=tasting_id
        )

        return ReconcileEntry(
            job_id=edit.job_id,
            outcome=ReconcileOutcome.MERGED,
            tasting_id=tasting_id
        ), None

    def _find_job_tasting(self, job: QueuedWineJob) -> Optional[str]:
        """
        Locate the tasting the edge function created for a job.

        The job only links to its scan, so this takes the newest tasting of
        the scan's owner. A tasting logged by the same user after the job
        finished would be picked instead.
        """
        if not job.scan_id:
            return None

        result = (
            self.db.table("scans")
            .select("user_id")
            .eq("id", job.scan_id)
            .maybe_single()
            .execute()
        )
        scan = result.data if result is not None else None

        user_id = scan.get("user_id") if isinstance(scan, dict) else None
        if not user_id:
            return None

        rows = (
            self.db.table(self.table)
            .select("id, vintage_id")
            .eq("user_id", user_id)
            .order("created_at", desc=True)
            .limit(1)
            .execute()
        ).data or []

        return rows[0].get("id") if rows else None

    def _apply_patch(self, tasting_id: str, patch: TastingEditPatch) -> None:
        if patch.is_empty:
            logger.debug("pending_tasting_patch_empty", tasting_id=tasting_id)
            return

        self.db.table(self.table).update(patch.to_update()).eq("id", tasting_id).execute()

    def _record_failure(
        self,
        edit: PendingTastingEdit,
        now: datetime,
        error: Exception
    ) -> tuple[ReconcileEntry, Optional[PendingTastingEdit]]:
        attempts = edit.attempts + 1

        if attempts >= self.max_attempts:
            logger.error(
                "pending_tasting_abandoned",
                job_id=edit.job_id,
                attempts=attempts,
                error=str(error),
                error_type=type(error).__name__,
                dropped=edit.to_patch().to_update()
            )
            return ReconcileEntry(
                job_id=edit.job_id,
                outcome=ReconcileOutcome.ABANDONED,
                reason=str(error),
                edit=edit
            ), None

        delay = min(self.backoff_seconds * 2 ** (attempts - 1), self.backoff_max_seconds)
        kept = edit.model_copy(update={
            "attempts": attempts,
            "next_attempt_at": now + timedelta(seconds=delay),
        })

        logger.warning(
            "pending_tasting_check_failed",
            job_id=edit.job_id,
            attempts=attempts,
            retry_in_seconds=delay,
            error=str(error),
            error_type=type(error).__name__
        )

        return ReconcileEntry(
            job_id=edit.job_id,
            outcome=ReconcileOutcome.ERRORED,
            reason=str(error)
        ), kept

    # ===================
    # FALLBACK
    # ===================

    def create_fallback(
        self,
        job_id: str,
        image_url: str,
        user_id: Optional[str] = None
    ) -> Optional[FallbackResult]:
        """
        Create a tasting without a vintage for a job that never completed.

        Carries the queued edit's non-empty fields, then removes the edit.
        Calling again for the same job is a no-op.

        Args:
            job_id: wines_added row id
            image_url: Label image to attach
            user_id: Owner; resolved from the auth session when omitted

        Returns:
            FallbackResult, or None when no edit is queued for this job

        Raises:
            NotAuthenticatedError: No user id given and no session
            WineJobNotFoundError: The job does not belong to the user
            DatabaseError: Ownership check or insert failed (the edit is kept)
        """
        edits = self.store.load()
        edit = next((e for e in edits if e.job_id == job_id), None)

        if edit is None:
            logger.info("fallback_tasting_skipped", job_id=job_id, reason="no_pending_edit")
            return None

        if user_id is None:
            user_id = get_current_user_id(client=self.db)

        self._require_job_owner(job_id, edit, user_id)

        record = {
            "user_id": user_id,
            "tasted_at": self._clock().isoformat(),
            "image_url": image_url,
            **edit.to_patch().to_update(),
        }

        try:
            result = self.db.table(self.table).insert(record).execute()
        except Exception as e:
            logger.error(
                "fallback_tasting_create_failed",
                job_id=job_id,
                error=str(e)
            )
            raise DatabaseError("insert", str(e), details={"job_id": job_id})

        tasting_id = result.data[0].get("id") if result.data else None

        self.store.save([e for e in edits if e.job_id != job_id])

        logger.info(
            "fallback_tasting_created",
            job_id=job_id,
            tasting_id=tasting_id
        )

        return FallbackResult(job_id=job_id, tasting_id=tasting_id)

    def _require_job_owner(self, job_id: str, edit: PendingTastingEdit, user_id: str) -> None:
        """Refuse to turn someone else's queued notes into a tasting."""
        if edit.user_id is not None and edit.user_id != user_id:
            logger.warning("fallback_tasting_refused", job_id=job_id, user_id=user_id)
            raise WineJobNotFoundError(job_id)

        try:
            self.jobs.get_job(job_id, columns="user_id", user_id=user_id)
        except WineJobNotFoundError:
            logger.warning("fallback_tasting_refused", job_id=job_id, user_id=user_id)
            raise
        except Exception as e:
            raise DatabaseError("select", str(e), details={"job_id": job_id})


# Singleton instance
_tasting_sync_service: Optional[TastingSyncService] = None


def get_tasting_sync_service() -> TastingSyncService:
    """Get or create TastingSyncService backed by the configured JSON store."""
    global _tasting_sync_service
    if _tasting_sync_service is None:
        _tasting_sync_service = TastingSyncService(
            JsonFilePendingTastingStore(settings.pending_store_path)
        )
    return _tasting_sync_service
