"""
Tasting journal API routes.
"""

from fastapi import APIRouter, Depends, Query
import structlog

from models.tasting import (
    TastingCreate,
    TastingUpdate,
    TastingResponse,
    TastingListResponse,
)
from services.tasting_service import get_tasting_service
from routes.dependencies import handle_error, current_user_id

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("", response_model=TastingListResponse)
async def list_tastings(
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(12, ge=1, le=100, description="Items per page"),
    user_id: str = Depends(current_user_id)
):
    """List the caller's tastings, newest first."""
    try:
        tastings = get_tasting_service().get_user_tastings(user_id, page=page, page_size=page_size)
        return TastingListResponse(data=tastings, page=page, page_size=page_size)
    except Exception as e:
        return handle_error(e)


@router.get("/map", response_model=list[TastingResponse])
async def map_tastings(
    limit: int = Query(100, ge=1, le=500),
    user_id: str = Depends(current_user_id)
):
    """Tastings with coordinates, for the map view."""
    try:
        return get_tasting_service().get_tastings_for_map(user_id, limit=limit)
    except Exception as e:
        return handle_error(e)


@router.get("/{tasting_id}", response_model=TastingResponse)
async def get_tasting(tasting_id: str, user_id: str = Depends(current_user_id)):
    try:
        return get_tasting_service().get_by_id(tasting_id, user_id)
    except Exception as e:
        return handle_error(e)


@router.post("", response_model=TastingResponse, status_code=201)
async def create_tasting(data: TastingCreate, user_id: str = Depends(current_user_id)):
    try:
        return get_tasting_service().create(user_id, data)
    except Exception as e:
        return handle_error(e)


@router.patch("/{tasting_id}", response_model=TastingResponse)
async def update_tasting(
    tasting_id: str,
    data: TastingUpdate,
    user_id: str = Depends(current_user_id)
):
    """Update a tasting. Only the fields sent are changed."""
    try:
        return get_tasting_service().update(tasting_id, user_id, data)
    except Exception as e:
        return handle_error(e)


@router.delete("/{tasting_id}", status_code=204)
async def delete_tasting(tasting_id: str, user_id: str = Depends(current_user_id)):
    try:
        get_tasting_service().delete(tasting_id, user_id)
    except Exception as e:
        return handle_error(e)
