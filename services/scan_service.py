"""
Scan service.

Uploads label images, creates the scan and wines_added rows, and triggers
the processing edge function. Notes typed while a wine is being
identified are queued with the tasting sync service.
"""

import time
import uuid
from typing import Optional
import structlog

from config import get_supabase_client, settings
from models.scan import ScanResponse, ScanUploadResult, TastingNotesRequest
from models.tasting import PendingTastingEdit
from models.wine_queue import JobStatus
from services.edge_function_service import EdgeFunctionService
from services.wine_queue_service import WineQueueService
from services.tasting_sync_service import TastingSyncService, get_tasting_sync_service
from exceptions import DatabaseError, ExternalServiceError

logger = structlog.get_logger(__name__)

# Scan with vintage, wine and producer embedded
FULL_SCAN_QUERY = (
    "*, vintage:vintages!matched_vintage_id(*, wine:wines!wine_id(*, producer:producers!producer_id(*)))"
)


class ScanService:
    """
    Service for label scans.

    Handles:
    - Uploading an image and queueing it for processing
    - Listing a user's scans
    - Capturing tasting notes for a wine still being processed
    """

    def __init__(self, client=None, sync_service: Optional[TastingSyncService] = None):
        self.db = client or get_supabase_client()
        self.functions = EdgeFunctionService(self.db)
        self.jobs = WineQueueService(self.db)
        self.sync_service = sync_service
        self.bucket = settings.scan_bucket

    def upload_scan(self, image_bytes: bytes, user_id: str) -> ScanUploadResult:
        """
        Upload a JPEG label and create its processing job.

        The processing trigger is best effort: the queued row is picked up
        on the next run even when the trigger call fails.

        Args:
            image_bytes: JPEG data
            user_id: Owner

        Returns:
            ScanUploadResult with scan id and job id

        Raises:
            DatabaseError: Upload or inserts failed
        """
        user_id = user_id.lower()
        file_name = f"{user_id}/{time.time()}.jpg"
        scan_id = str(uuid.uuid4())
        job_id = str(uuid.uuid4())

        logger.info(
            "uploading_scan",
            user_id=user_id,
            storage_path=file_name,
            size_bytes=len(image_bytes)
        )

        try:
            storage = self.db.storage.from_(self.bucket)
            storage.upload(
                file_name,
                image_bytes,
                file_options={"content-type": "image/jpeg"}
            )
            public_url = storage.get_public_url(file_name)

            self.db.table("scans").insert({
                "id": scan_id,
                "user_id": user_id,
                "image_path": file_name,
                "scan_image_url": public_url,
            }).execute()

            self.db.table("wines_added").insert({
                "id": job_id,
                "user_id": user_id,
                "image_url": public_url,
                "scan_id": scan_id,
                "status": JobStatus.PENDING.value,
            }).execute()

        except Exception as e:
            logger.error(
                "scan_upload_failed",
                user_id=user_id,
                storage_path=file_name,
                error=str(e)
            )
            raise DatabaseError("scan upload", str(e))

        queued = True
        try:
            self.functions.process_wine_queue()
        except ExternalServiceError as e:
            queued = False
            logger.warning("process_wine_queue_trigger_failed", job_id=job_id, error=e.message)

        logger.info(
            "scan_uploaded",
            scan_id=scan_id,
            job_id=job_id,
            queued=queued
        )

        return ScanUploadResult(
            scan_id=scan_id,
            job_id=job_id,
            image_url=public_url,
            queued=queued
        )

    def fetch_user_scans(self, user_id: str) -> list[ScanResponse]:
        """
        Get a user's scans, newest first.

        Raises:
            DatabaseError: Query failed
        """
        try:
            result = (
                self.db.table("scans")
                .select(FULL_SCAN_QUERY)
                .eq("user_id", user_id)
                .order("created_at", desc=True)
                .execute()
            )
        except Exception as e:
            logger.error("scans_fetch_failed", user_id=user_id, error=str(e))
            raise DatabaseError("select", str(e))

        return [ScanResponse.model_validate(row) for row in result.data or []]

    def submit_tasting_notes(
        self,
        job_id: str,
        notes: TastingNotesRequest,
        user_id: str
    ) -> PendingTastingEdit:
        """
        Capture notes for a wine that is still being processed.

        The notes are mirrored onto wines_added.pending_tasting_notes so the
        edge function can pick them up itself, and queued locally so the
        sync pass applies them if it does not.

        Args:
            job_id: wines_added row id from upload_scan
            notes: Rating, notes and location
            user_id: Caller; must own the job

        Returns:
            The queued edit

        Raises:
            WineJobNotFoundError: No such job for this user
        """
        self.jobs.get_job(job_id, columns="user_id", user_id=user_id)

        edit = PendingTastingEdit(job_id=job_id, user_id=user_id, **notes.model_dump())

        mirror = {
            "rating": edit.rating,
            "notes": edit.notes,
            "detailed_notes": edit.detailed_notes or None,
            "location_name": edit.location_name or None,
            "location_city": edit.location_city or None,
        }

        try:
            self.db.table("wines_added").update(
                {"pending_tasting_notes": mirror}
            ).eq("id", job_id).eq("user_id", user_id).execute()
        except Exception as e:
            logger.warning(
                "pending_tasting_notes_mirror_failed",
                job_id=job_id,
                error=str(e)
            )

        sync_service = self.sync_service or get_tasting_sync_service()

        return sync_service.enqueue(job_id, edit, user_id=user_id)


# Singleton instance
_scan_service: Optional[ScanService] = None


def get_scan_service() -> ScanService:
    """Get or create ScanService instance."""
    global _scan_service
    if _scan_service is None:
        _scan_service = ScanService()
    return _scan_service
