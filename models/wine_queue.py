"""
Wine queue schemas.

A scanned label becomes a `wines_added` row that the `process-wine-queue`
edge function works through. Its status is owned by the backend; this
side only reads it.
"""

from pydantic import Field
from typing import Optional, Any
from datetime import datetime
from enum import Enum

from models.base import BaseSchema


class JobStatus(str, Enum):
    """Status of a queued wine job."""
    PENDING = "pending"
    WORKING = "working"
    COMPLETED = "completed"
    FAILED = "failed"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, raw: Optional[str]) -> "JobStatus":
        """Map a raw column value to a status; anything unrecognised is UNKNOWN."""
        if not raw:
            return cls.UNKNOWN
        try:
            return cls(raw.strip().lower())
        except ValueError:
            return cls.UNKNOWN

    @property
    def is_in_flight(self) -> bool:
        return self in (JobStatus.PENDING, JobStatus.WORKING)

    @property
    def is_terminal(self) -> bool:
        return not self.is_in_flight


class QueuedWineJob(BaseSchema):
    """Subset of a `wines_added` row."""

    id: str
    status: JobStatus = JobStatus.UNKNOWN
    scan_id: Optional[str] = None
    user_id: Optional[str] = None
    image_url: Optional[str] = None
    error_message: Optional[str] = None
    processed_data: Optional[dict[str, Any]] = None
    created_at: Optional[datetime] = None
    processed_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: dict) -> "QueuedWineJob":
        return cls(**{**row, "status": JobStatus.parse(row.get("status"))})


class CompletedWine(BaseSchema):
    """Recently completed job, as listed in the queue summary."""

    wine_name: str
    producer_name: str
    completed_at: str


class FailedWine(BaseSchema):
    """Recent job error, as listed in the queue summary."""

    wine_name: str
    producer_name: str
    error_message: str


class QueueStatusSummary(BaseSchema):
    """Per-user queue counts plus recent results."""

    pending: int = 0
    working: int = 0
    completed: int = 0
    failed: int = 0
    total: int = 0
    is_processing: bool = False
    recently_completed: list[CompletedWine] = Field(default_factory=list)
    errors: list[FailedWine] = Field(default_factory=list)
