"""
Stats API routes.
"""

from fastapi import APIRouter, Depends
import structlog

from models.stats import WineStats, DisplayStats
from services.stats_service import get_stats_service
from routes.dependencies import handle_error, current_user_id
from exceptions import NotFoundError

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("", response_model=WineStats)
async def get_stats(user_id: str = Depends(current_user_id)):
    """Raw numbers from user_wine_stats."""
    try:
        stats = get_stats_service().get_user_stats(user_id)
        if stats is None:
            raise NotFoundError("Stats", user_id, code="STATS_NOT_FOUND")
        return stats
    except Exception as e:
        return handle_error(e)


@router.get("/display", response_model=DisplayStats)
async def get_display_stats(user_id: str = Depends(current_user_id)):
    """The four formatted tiles (wines, countries, rating, this month)."""
    try:
        stats = get_stats_service().get_display_stats(user_id)
        if stats is None:
            raise NotFoundError("Stats", user_id, code="STATS_NOT_FOUND")
        return stats
    except Exception as e:
        return handle_error(e)
