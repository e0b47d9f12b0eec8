"""
Sharing schemas.
"""

from pydantic import Field
from typing import Optional
from datetime import datetime
from enum import Enum

from models.base import BaseSchema


class ConnectionStatus(str, Enum):
    """Status of a sharing connection."""
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    REVOKED = "revoked"


class InvitationRequest(BaseSchema):
    viewer_email: str = Field(..., min_length=3, pattern=r"^[^@\s]+@[^@\s]+$")


class InviteResult(BaseSchema):
    """Response of the send-sharing-invitation edge function."""

    success: bool
    error: Optional[str] = None
    action: Optional[str] = None
    connection_id: Optional[str] = None
    invite_code: Optional[str] = None

    @property
    def message(self) -> str:
        if not self.success:
            return self.error or "Failed to send invitation"
        if self.action == "reshared":
            return "Invitation resent successfully"
        if self.action == "resent":
            return "Invitation resent after previous rejection"
        return "Invitation sent successfully"


class AcceptInviteResult(BaseSchema):
    """Response of the accept_invite_by_code RPC / accept-invite function."""

    success: bool
    error: Optional[str] = None
    connection_id: Optional[str] = None
    sharer_id: Optional[str] = None


class SharingConnection(BaseSchema):
    """Row of get_sharing_connections_with_profiles."""

    id: str
    sharer_id: str
    viewer_id: Optional[str] = None
    viewer_email: Optional[str] = None
    status: ConnectionStatus = ConnectionStatus.PENDING
    created_at: Optional[datetime] = None
    accepted_at: Optional[datetime] = None
    sharer_first_name: Optional[str] = None
    sharer_last_name: Optional[str] = None
    viewer_first_name: Optional[str] = None
    viewer_last_name: Optional[str] = None


class SendInvitationResponse(BaseSchema):
    success: bool
    message: str
    invite_code: Optional[str] = Field(None)
