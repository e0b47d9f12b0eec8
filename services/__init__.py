"""
Business logic services.

Each service handles one domain area.
"""

from services.pending_tasting_store import (
    PendingTastingStore,
    InMemoryPendingTastingStore,
    JsonFilePendingTastingStore,
)
from services.tasting_sync_service import TastingSyncService, get_tasting_sync_service
from services.wine_queue_service import WineQueueService, get_wine_queue_service
from services.edge_function_service import EdgeFunctionService, get_edge_function_service
from services.scan_service import ScanService, get_scan_service
from services.tasting_service import TastingService, get_tasting_service
from services.stats_service import StatsService, get_stats_service
from services.sharing_service import SharingService, get_sharing_service
from services.auth_service import get_current_user_id

__all__ = [
    "PendingTastingStore",
    "InMemoryPendingTastingStore",
    "JsonFilePendingTastingStore",
    "TastingSyncService",
    "get_tasting_sync_service",
    "WineQueueService",
    "get_wine_queue_service",
    "EdgeFunctionService",
    "get_edge_function_service",
    "ScanService",
    "get_scan_service",
    "TastingService",
    "get_tasting_service",
    "StatsService",
    "get_stats_service",
    "SharingService",
    "get_sharing_service",
    "get_current_user_id",
]
