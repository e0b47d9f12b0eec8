"""
API route modules.

Each module defines routes for one domain area.
"""

from routes.tasting_sync import router as tasting_sync_router
from routes.wine_queue import router as wine_queue_router
from routes.scans import router as scans_router
from routes.tastings import router as tastings_router
from routes.stats import router as stats_router
from routes.sharing import router as sharing_router
from routes.deep_links import router as deep_links_router
from routes.enrichment import router as enrichment_router

__all__ = [
    "tasting_sync_router",
    "wine_queue_router",
    "scans_router",
    "tastings_router",
    "stats_router",
    "sharing_router",
    "deep_links_router",
    "enrichment_router",
]
