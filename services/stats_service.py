"""
Stats service.

Single source for the journal numbers: the user_wine_stats view, which
row-level security scopes to the caller.
"""

from typing import Optional
import structlog

from config import get_supabase_client
from models.stats import WineStats, DisplayStats

logger = structlog.get_logger(__name__)


class StatsService:
    """Reads the user_wine_stats view."""

    def __init__(self, client=None):
        self.db = client or get_supabase_client()
        self.view = "user_wine_stats"

    def get_user_stats(self, user_id: Optional[str] = None) -> Optional[WineStats]:
        """Stats for the current user, or None when they cannot be read."""
        try:
            query = self.db.table(self.view).select("*")
            if user_id:
                query = query.eq("user_id", user_id)
            result = query.maybe_single().execute()
        except Exception as e:
            logger.warning("user_stats_fetch_failed", error=str(e))
            return None

        if result is None or not result.data:
            logger.info("user_stats_not_found", user_id=user_id)
            return None

        return WineStats.model_validate(result.data)

    def get_display_stats(self, user_id: Optional[str] = None) -> Optional[DisplayStats]:
        stats = self.get_user_stats(user_id)
        if stats is None:
            return None
        return DisplayStats.from_stats(stats)


# Singleton instance
_stats_service: Optional[StatsService] = None


def get_stats_service() -> StatsService:
    """Get or create StatsService instance."""
    global _stats_service
    if _stats_service is None:
        _stats_service = StatsService()
    return _stats_service
