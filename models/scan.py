"""
Scan schemas.
"""

from pydantic import Field
from typing import Optional

from models.base import BaseSchema, TimestampMixin


class ScanResponse(BaseSchema, TimestampMixin):
    """Scan row with its matched vintage embedded when there is one."""

    id: str
    user_id: Optional[str] = None
    image_path: Optional[str] = None
    scan_image_url: Optional[str] = None
    ocr_text: Optional[str] = None
    matched_vintage_id: Optional[str] = None
    confidence: Optional[float] = None
    vintage: Optional[dict] = Field(None, description="Embedded vintage/wine/producer")


class ScanUploadResult(BaseSchema):
    """
    Result of uploading a label image.

    `job_id` is the wines_added row id. Tasting notes entered while the
    job runs are queued against it.
    """

    scan_id: str
    job_id: str
    image_url: str
    queued: bool = Field(
        True,
        description="False when the processing trigger failed; the job still exists"
    )


class TastingNotesRequest(BaseSchema):
    """Notes entered on the scanner sheet while the wine is processed."""

    rating: Optional[int] = Field(None, ge=0, le=5)
    notes: Optional[str] = None
    detailed_notes: Optional[str] = None
    location_name: Optional[str] = None
    location_city: Optional[str] = None
