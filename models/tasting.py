"""
Tasting schemas.

Covers the journal rows in the `tastings` table and the locally queued
edits that wait for a wine job to produce their tasting.
"""

from pydantic import Field, field_validator, AliasChoices
from typing import Any, Optional
from datetime import datetime, timezone

from models.base import BaseSchema, TimestampMixin


def _blank_to_none(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    return v if v.strip() else None


def _lenient_int(v: Any) -> Optional[int]:
    """Whole numbers and numeric strings; anything else reads as unset."""
    if isinstance(v, bool):
        return None
    if isinstance(v, int):
        return v
    if isinstance(v, float):
        return int(v) if v.is_integer() else None
    if isinstance(v, str):
        try:
            return int(v.strip())
        except ValueError:
            return None
    return None


def _lenient_datetime(v: Any) -> Optional[datetime]:
    if isinstance(v, datetime):
        return v
    if isinstance(v, str):
        try:
            return datetime.fromisoformat(v.replace("Z", "+00:00"))
        except ValueError:
            return None
    return None


class PendingTastingEdit(BaseSchema):
    """
    Tasting notes captured before the backend has created the tasting.

    Keyed by the `wines_added` job id. Mobile clients send that key as
    `wines_added_id`, so both spellings decode. A row is only rejected
    when the job id is missing; other fields that do not parse read as
    unset so the rest of the notes survive.
    """

    job_id: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("job_id", "wines_added_id"),
        description="wines_added row id this edit waits on"
    )
    user_id: Optional[str] = Field(None, description="Owner of the job; None for rows written by older clients")
    rating: Optional[int] = Field(None, description="User verdict, 0 means unset")
    notes: Optional[str] = None
    detailed_notes: Optional[str] = None
    location_name: Optional[str] = None
    location_city: Optional[str] = None
    image_url: Optional[str] = None

    # Retry bookkeeping, only touched when a status check fails
    attempts: int = Field(default=0, ge=0)
    next_attempt_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @field_validator("rating", mode="before")
    @classmethod
    def lenient_rating(cls, v: Any) -> Optional[int]:
        return _lenient_int(v)

    @field_validator(
        "user_id", "notes", "detailed_notes", "location_name", "location_city", "image_url",
        mode="before"
    )
    @classmethod
    def lenient_text(cls, v: Any) -> Optional[str]:
        return v if isinstance(v, str) else None

    @field_validator("attempts", mode="before")
    @classmethod
    def lenient_attempts(cls, v: Any) -> int:
        attempts = _lenient_int(v)
        return attempts if attempts is not None and attempts >= 0 else 0

    @field_validator("next_attempt_at", mode="before")
    @classmethod
    def lenient_next_attempt(cls, v: Any) -> Optional[datetime]:
        return _lenient_datetime(v)

    @field_validator("created_at", mode="before")
    @classmethod
    def lenient_created_at(cls, v: Any) -> datetime:
        return _lenient_datetime(v) or datetime.now(timezone.utc)

    def to_patch(self) -> "TastingEditPatch":
        """Build the partial update carrying only this edit's non-empty fields."""
        return TastingEditPatch.from_edit(self)


class TastingEditPatch(BaseSchema):
    """
    Partial tasting update.

    Empty strings and non-positive ratings are dropped on construction so
    they never overwrite values already on the record.
    """

    verdict: Optional[int] = None
    notes: Optional[str] = None
    detailed_notes: Optional[str] = None
    location_name: Optional[str] = None
    location_city: Optional[str] = None

    @field_validator("verdict")
    @classmethod
    def positive_verdict(cls, v: Optional[int]) -> Optional[int]:
        if v is None or v <= 0:
            return None
        return v

    @field_validator("notes", "detailed_notes", "location_name", "location_city")
    @classmethod
    def drop_blank(cls, v: Optional[str]) -> Optional[str]:
        return _blank_to_none(v)

    @classmethod
    def from_edit(cls, edit: PendingTastingEdit) -> "TastingEditPatch":
        return cls(
            verdict=edit.rating,
            notes=edit.notes,
            detailed_notes=edit.detailed_notes,
            location_name=edit.location_name,
            location_city=edit.location_city,
        )

    @property
    def is_empty(self) -> bool:
        return not self.to_update()

    def to_update(self) -> dict:
        """Column dict for a PostgREST update/insert."""
        return self.model_dump(exclude_none=True)


class PendingTastingCreate(BaseSchema):
    """Request body for queueing a tasting edit."""

    job_id: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("job_id", "wines_added_id")
    )
    rating: Optional[int] = Field(None, ge=0, le=5)
    notes: Optional[str] = None
    detailed_notes: Optional[str] = None
    location_name: Optional[str] = None
    location_city: Optional[str] = None
    image_url: Optional[str] = None

    def to_edit(self) -> PendingTastingEdit:
        return PendingTastingEdit(**self.model_dump())


class FallbackRequest(BaseSchema):
    """Request body for creating a fallback tasting."""

    image_url: str = Field(..., min_length=1)


class TastingCreate(BaseSchema):
    """
    Create a new tasting.

    `vintage_id` is optional: fallback tastings are created without one
    and linked by the user later.
    """

    vintage_id: Optional[str] = None
    verdict: Optional[int] = Field(None, ge=1, le=5)
    notes: Optional[str] = None
    detailed_notes: Optional[str] = None
    tasted_at: Optional[datetime] = None
    image_url: Optional[str] = None
    location_name: Optional[str] = None
    location_address: Optional[str] = None
    location_city: Optional[str] = None
    location_latitude: Optional[float] = Field(None, ge=-90, le=90)
    location_longitude: Optional[float] = Field(None, ge=-180, le=180)


class TastingUpdate(BaseSchema):
    """
    Update an existing tasting.

    All fields optional - only provided fields are updated.
    """

    vintage_id: Optional[str] = None
    verdict: Optional[int] = Field(None, ge=1, le=5)
    notes: Optional[str] = None
    detailed_notes: Optional[str] = None
    tasted_at: Optional[datetime] = None
    location_name: Optional[str] = None
    location_address: Optional[str] = None
    location_city: Optional[str] = None
    location_latitude: Optional[float] = Field(None, ge=-90, le=90)
    location_longitude: Optional[float] = Field(None, ge=-180, le=180)


class TastingResponse(BaseSchema, TimestampMixin):
    """Tasting row as returned by the journal endpoints."""

    id: str
    user_id: Optional[str] = None
    vintage_id: Optional[str] = None
    verdict: Optional[int] = None
    notes: Optional[str] = None
    detailed_notes: Optional[str] = None
    tasted_at: Optional[datetime] = None
    image_url: Optional[str] = None
    location_name: Optional[str] = None
    location_address: Optional[str] = None
    location_city: Optional[str] = None
    location_latitude: Optional[float] = None
    location_longitude: Optional[float] = None
    vintage: Optional[dict] = Field(None, description="Embedded vintage/wine/producer")

    @property
    def has_location(self) -> bool:
        return self.location_latitude is not None and self.location_longitude is not None


class TastingListResponse(BaseSchema):
    """Page of tastings."""

    data: list[TastingResponse]
    page: int
    page_size: int
