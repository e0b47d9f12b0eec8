"""
Pydantic models for validation and serialization.
"""

from models.base import (
    BaseSchema,
    TimestampMixin,
    PaginationParams,
)
from models.tasting import (
    PendingTastingEdit,
    TastingEditPatch,
    PendingTastingCreate,
    FallbackRequest,
    TastingCreate,
    TastingUpdate,
    TastingResponse,
    TastingListResponse,
)
from models.wine_queue import (
    JobStatus,
    QueuedWineJob,
    QueueStatusSummary,
)
from models.sync import (
    ReconcileOutcome,
    ReconcileEntry,
    ReconcileReport,
    FallbackResult,
)
from models.scan import ScanResponse, ScanUploadResult, TastingNotesRequest
from models.stats import WineStats, DisplayStats, StatItem
from models.sharing import (
    ConnectionStatus,
    InviteResult,
    AcceptInviteResult,
    SharingConnection,
)
from models.enrichment import (
    ExpertRatingRequest,
    ExpertRating,
    EnrichWineRequest,
    EnrichResponse,
)

__all__ = [
    # Base
    "BaseSchema",
    "TimestampMixin",
    "PaginationParams",

    # Tastings
    "PendingTastingEdit",
    "TastingEditPatch",
    "PendingTastingCreate",
    "FallbackRequest",
    "TastingCreate",
    "TastingUpdate",
    "TastingResponse",
    "TastingListResponse",

    # Wine queue
    "JobStatus",
    "QueuedWineJob",
    "QueueStatusSummary",

    # Sync
    "ReconcileOutcome",
    "ReconcileEntry",
    "ReconcileReport",
    "FallbackResult",

    # Scans
    "ScanResponse",
    "ScanUploadResult",
    "TastingNotesRequest",

    # Stats
    "WineStats",
    "DisplayStats",
    "StatItem",

    # Sharing
    "ConnectionStatus",
    "InviteResult",
    "AcceptInviteResult",
    "SharingConnection",

    # Enrichment
    "ExpertRatingRequest",
    "ExpertRating",
    "EnrichWineRequest",
    "EnrichResponse",
]
