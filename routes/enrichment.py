"""
Wine enrichment API routes.

Thin wrappers over the enrich-wines and fetch-expert-rating edge
functions.
"""

from typing import Optional
from fastapi import APIRouter, Depends
import structlog

from models.enrichment import (
    EnrichResponse,
    EnrichWineOptions,
    ExpertRating,
    ExpertRatingRequest,
)
from services.edge_function_service import get_edge_function_service
from routes.dependencies import handle_error, current_user_id

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.post("/wines", response_model=EnrichResponse)
async def enrich_wines(user_id: str = Depends(current_user_id)):
    """Enrich every wine in the caller's journal that still lacks details."""
    try:
        logger.info("bulk_enrichment_requested", user_id=user_id)
        return get_edge_function_service().enrich_wines()
    except Exception as e:
        return handle_error(e)


@router.post("/wines/{wine_id}", response_model=EnrichResponse)
async def enrich_wine(
    wine_id: str,
    data: Optional[EnrichWineOptions] = None,
    user_id: str = Depends(current_user_id)
):
    """
    Enrich a single wine.

    The body is optional; producer, name and year help the lookup.
    """
    try:
        options = data or EnrichWineOptions()
        return get_edge_function_service().enrich_wine(options.for_wine(wine_id))
    except Exception as e:
        return handle_error(e)


@router.post("/expert-rating", response_model=ExpertRating)
async def fetch_expert_rating(data: ExpertRatingRequest, user_id: str = Depends(current_user_id)):
    try:
        return get_edge_function_service().fetch_expert_rating(data)
    except Exception as e:
        return handle_error(e)
