"""
Deep link API routes.
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query
import structlog

from utils.deep_links import resolve_deep_link, INVITE
from services.sharing_service import get_sharing_service
from routes.dependencies import handle_error, optional_user_id
from exceptions import NotFoundError

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("/resolve")
async def resolve(
    url: str = Query(..., min_length=1, description="Deep link or web link"),
    user_id: Optional[str] = Depends(optional_user_id)
):
    """
    Resolve a link to an in-app destination.

    Invite links are accepted straight away for signed-in callers. For
    anonymous callers the code is returned so it can be redeemed after
    login.
    """
    try:
        link = resolve_deep_link(url)
        if link is None:
            raise NotFoundError("Deep link route", url, code="DEEP_LINK_NOT_FOUND")

        response = {
            "destination": link.destination,
            "invite_code": link.invite_code,
            "connection_id": link.connection_id,
            "accepted": False,
        }

        if link.destination == INVITE and user_id:
            result = get_sharing_service().accept_invite_by_code(link.invite_code)
            response["accepted"] = result.success
            response["connection_id"] = result.connection_id

        logger.info(
            "deep_link_resolved",
            destination=link.destination,
            accepted=response["accepted"]
        )

        return response

    except Exception as e:
        return handle_error(e)
