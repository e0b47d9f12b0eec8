"""
Scan API routes.
"""

from fastapi import APIRouter, Depends, File, UploadFile
import structlog

from models.scan import ScanResponse, ScanUploadResult, TastingNotesRequest
from models.tasting import PendingTastingEdit
from services.scan_service import get_scan_service
from routes.dependencies import handle_error, current_user_id
from exceptions import ValidationError

logger = structlog.get_logger(__name__)

router = APIRouter()

ALLOWED_CONTENT_TYPES = ("image/jpeg", "image/jpg")
MAX_IMAGE_BYTES = 10 * 1024 * 1024


def _image_too_large(size: int) -> ValidationError:
    return ValidationError(
        "Label image is too large",
        code="IMAGE_TOO_LARGE",
        details={"max_bytes": MAX_IMAGE_BYTES, "size_bytes": size}
    )


@router.get("", response_model=list[ScanResponse])
async def list_scans(user_id: str = Depends(current_user_id)):
    """List the caller's scans, newest first."""
    try:
        return get_scan_service().fetch_user_scans(user_id)
    except Exception as e:
        return handle_error(e)


@router.post("", response_model=ScanUploadResult, status_code=201)
async def upload_scan(
    file: UploadFile = File(...),
    user_id: str = Depends(current_user_id)
):
    """
    Upload a label photo and queue it for processing.

    Returns the job id to queue tasting notes against.
    """
    try:
        if file.content_type not in ALLOWED_CONTENT_TYPES:
            raise ValidationError(
                "Label image must be a JPEG",
                code="INVALID_IMAGE_TYPE",
                details={"provided": file.content_type}
            )

        if file.size is not None and file.size > MAX_IMAGE_BYTES:
            raise _image_too_large(file.size)

        # Never buffer more than one byte past the limit
        image_bytes = await file.read(MAX_IMAGE_BYTES + 1)

        if not image_bytes:
            raise ValidationError("Label image is empty", code="EMPTY_IMAGE")
        if len(image_bytes) > MAX_IMAGE_BYTES:
            raise _image_too_large(len(image_bytes))

        return get_scan_service().upload_scan(image_bytes, user_id)

    except Exception as e:
        return handle_error(e)


@router.post("/{job_id}/tasting-notes", response_model=PendingTastingEdit, status_code=202)
async def submit_tasting_notes(
    job_id: str,
    data: TastingNotesRequest,
    user_id: str = Depends(current_user_id)
):
    """Capture notes for a wine that is still being identified."""
    try:
        return get_scan_service().submit_tasting_notes(job_id, data, user_id)
    except Exception as e:
        return handle_error(e)
