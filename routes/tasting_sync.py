"""
Tasting sync API routes.

Queue tasting notes against a wine job, run a reconciliation pass, and
create fallback tastings. Every route acts on the caller's own edits.
"""

from fastapi import APIRouter, Depends
import structlog

from models.tasting import PendingTastingCreate, PendingTastingEdit, FallbackRequest
from models.sync import ReconcileReport, FallbackResult
from services.tasting_sync_service import get_tasting_sync_service
from services.wine_queue_service import get_wine_queue_service
from routes.dependencies import handle_error, current_user_id

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("/pending", response_model=list[PendingTastingEdit])
async def list_pending(user_id: str = Depends(current_user_id)):
    """List the caller's edits still waiting on their wine job."""
    try:
        return get_tasting_sync_service().pending(user_id)
    except Exception as e:
        return handle_error(e)


@router.post("/pending", response_model=PendingTastingEdit, status_code=201)
async def enqueue_pending(data: PendingTastingCreate, user_id: str = Depends(current_user_id)):
    """
    Queue tasting notes for a wine that is still being processed.

    The job must belong to the caller. Replaces any edit already queued
    for the same job.
    """
    try:
        get_wine_queue_service().get_job(data.job_id, columns="user_id", user_id=user_id)

        service = get_tasting_sync_service()
        return service.enqueue(data.job_id, data.to_edit(), user_id=user_id)
    except Exception as e:
        return handle_error(e)


@router.post("/reconcile", response_model=ReconcileReport)
async def reconcile(user_id: str = Depends(current_user_id)):
    """
    Run one reconciliation pass over the caller's edits.

    The report lists what happened to every pending edit. Entries for
    edits that were dropped without being saved carry the edit itself.
    """
    try:
        return get_tasting_sync_service().reconcile_all(user_id)
    except Exception as e:
        return handle_error(e)


@router.post("/{job_id}/fallback", response_model=FallbackResult)
async def create_fallback(
    job_id: str,
    data: FallbackRequest,
    user_id: str = Depends(current_user_id)
):
    """
    Create a tasting without a vintage from the edit queued for a job.

    Answers 200 with `tasting_id: null` when nothing is queued for the job
    and 404 when the job is not the caller's.
    """
    try:
        service = get_tasting_sync_service()
        result = service.create_fallback(job_id, data.image_url, user_id=user_id)
        return result or FallbackResult(job_id=job_id)
    except Exception as e:
        return handle_error(e)
