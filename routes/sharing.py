"""
Sharing API routes.
"""

from fastapi import APIRouter, Depends
import structlog

from models.sharing import (
    InvitationRequest,
    SendInvitationResponse,
    AcceptInviteResult,
    SharingConnection,
)
from services.sharing_service import get_sharing_service
from routes.dependencies import handle_error, current_user_id
from exceptions import ValidationError

logger = structlog.get_logger(__name__)

router = APIRouter()

CONNECTION_ACTIONS = ("accept", "reject", "revoke")


@router.post("/invitations", response_model=SendInvitationResponse)
async def send_invitation(data: InvitationRequest, user_id: str = Depends(current_user_id)):
    """Invite someone by e-mail to view the caller's journal."""
    try:
        result = get_sharing_service().send_invitation(data.viewer_email)
        return SendInvitationResponse(
            success=result.success,
            message=result.message,
            invite_code=result.invite_code
        )
    except Exception as e:
        return handle_error(e)


@router.post("/invites/{code}/accept", response_model=AcceptInviteResult)
async def accept_invite(code: str, user_id: str = Depends(current_user_id)):
    try:
        return get_sharing_service().accept_invite_by_code(code)
    except Exception as e:
        return handle_error(e)


@router.get("/connections", response_model=list[SharingConnection])
async def list_connections(user_id: str = Depends(current_user_id)):
    try:
        return get_sharing_service().get_connections()
    except Exception as e:
        return handle_error(e)


@router.post("/connections/{connection_id}/{action}", response_model=SharingConnection)
async def update_connection(
    connection_id: str,
    action: str,
    user_id: str = Depends(current_user_id)
):
    """Accept, reject or revoke a sharing connection."""
    try:
        if action not in CONNECTION_ACTIONS:
            raise ValidationError(
                f"Unknown action: {action}",
                code="INVALID_CONNECTION_ACTION",
                details={"provided": action, "valid": list(CONNECTION_ACTIONS)}
            )

        service = get_sharing_service()
        if action == "accept":
            return service.accept_connection(connection_id, user_id)
        if action == "reject":
            return service.reject_connection(connection_id, user_id)
        return service.revoke_connection(connection_id, user_id)

    except Exception as e:
        return handle_error(e)
