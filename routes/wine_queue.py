"""
Wine queue API routes.
"""

from fastapi import APIRouter, Depends
import structlog

from models.wine_queue import QueueStatusSummary, QueuedWineJob
from services.wine_queue_service import get_wine_queue_service
from routes.dependencies import handle_error, current_user_id

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("/status", response_model=QueueStatusSummary)
async def queue_status(user_id: str = Depends(current_user_id)):
    """Counts per status plus the latest completions and errors."""
    try:
        return get_wine_queue_service().get_status_summary(user_id)
    except Exception as e:
        return handle_error(e)


@router.get("/{job_id}", response_model=QueuedWineJob)
async def get_job(job_id: str, user_id: str = Depends(current_user_id)):
    """Get one of the caller's queued wine jobs."""
    try:
        return get_wine_queue_service().get_job(job_id, user_id=user_id)
    except Exception as e:
        return handle_error(e)
