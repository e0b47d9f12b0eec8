"""
Sharing service.

Journal sharing between users: invitations go out through the
send-sharing-invitation edge function, invite codes are redeemed with the
accept_invite_by_code RPC, and connection rows are updated directly.
"""

from datetime import datetime, timezone
from typing import Optional
import structlog

from config import get_supabase_client
from models.sharing import (
    ConnectionStatus,
    InviteResult,
    AcceptInviteResult,
    SharingConnection,
)
from services.edge_function_service import EdgeFunctionService
from exceptions import DatabaseError, DecodingError, InvalidInviteError, NotFoundError

logger = structlog.get_logger(__name__)


class SharingService:
    """
    Service for sharing connections.

    Handles:
    - Sending invitations by e-mail
    - Accepting invite codes (deep links)
    - Accepting, rejecting and revoking connections
    """

    def __init__(self, client=None):
        self.db = client or get_supabase_client()
        self.functions = EdgeFunctionService(self.db)
        self.table = "sharing_connections"

    def send_invitation(self, viewer_email: str) -> InviteResult:
        """
        Invite someone to view the caller's journal.

        Returns:
            InviteResult; `message` holds the text to show the user
        """
        logger.info("sending_sharing_invitation")

        result = self.functions.send_sharing_invitation(viewer_email.strip().lower())

        if result.success:
            logger.info(
                "sharing_invitation_sent",
                action=result.action,
                connection_id=result.connection_id
            )
        else:
            logger.warning("sharing_invitation_rejected", error=result.error)

        return result

    def accept_invite_by_code(self, code: str) -> AcceptInviteResult:
        """
        Redeem an invite code.

        Raises:
            InvalidInviteError: Backend refused the code
            DecodingError: RPC reply had an unexpected shape
        """
        try:
            response = self.db.rpc("accept_invite_by_code", {"code": code}).execute()
        except Exception as e:
            logger.error("accept_invite_failed", error=str(e))
            raise DatabaseError("rpc accept_invite_by_code", str(e))

        data = response.data
        if isinstance(data, list):
            data = data[0] if data else None
        if not isinstance(data, dict):
            raise DecodingError("accept_invite_by_code", "expected object")

        result = AcceptInviteResult.model_validate(data)

        if not result.success:
            logger.warning("invite_code_rejected", error=result.error)
            raise InvalidInviteError(code, result.error)

        logger.info(
            "invite_accepted",
            connection_id=result.connection_id,
            sharer_id=result.sharer_id
        )

        return result

    def get_connections(self) -> list[SharingConnection]:
        """Connections of the caller, both directions, with profile names."""
        try:
            response = self.db.rpc("get_sharing_connections_with_profiles").execute()
        except Exception as e:
            logger.error("sharing_connections_fetch_failed", error=str(e))
            raise DatabaseError("rpc get_sharing_connections_with_profiles", str(e))

        try:
            return [SharingConnection.model_validate(row) for row in response.data or []]
        except Exception as e:
            raise DecodingError("sharing_connections", str(e))

    def accept_connection(self, connection_id: str, user_id: str) -> SharingConnection:
        """Accept an invitation addressed to the user."""
        return self._set_status(
            connection_id,
            ConnectionStatus.ACCEPTED,
            owner=("viewer_id", user_id),
            extra={"accepted_at": datetime.now(timezone.utc).isoformat()}
        )

    def reject_connection(self, connection_id: str, user_id: str) -> SharingConnection:
        """Reject an invitation addressed to the user."""
        return self._set_status(connection_id, ConnectionStatus.REJECTED, owner=("viewer_id", user_id))

    def revoke_connection(self, connection_id: str, user_id: str) -> SharingConnection:
        """Stop sharing the user's journal with the viewer."""
        return self._set_status(connection_id, ConnectionStatus.REVOKED, owner=("sharer_id", user_id))

    def _set_status(
        self,
        connection_id: str,
        status: ConnectionStatus,
        owner: tuple[str, str],
        extra: Optional[dict] = None
    ) -> SharingConnection:
        """
        Move a connection to a new status.

        owner is the (column, user id) pair the row must match; anything
        else is reported as not found.
        """
        column, user_id = owner

        try:
            result = (
                self.db.table(self.table)
                .update({"status": status.value, **(extra or {})})
                .eq("id", connection_id)
                .eq(column, user_id)
                .execute()
            )
        except Exception as e:
            logger.error(
                "sharing_connection_update_failed",
                connection_id=connection_id,
                status=status.value,
                error=str(e)
            )
            raise DatabaseError("update", str(e))

        if not result.data:
            logger.warning(
                "sharing_connection_not_found",
                connection_id=connection_id,
                user_id=user_id
            )
            raise NotFoundError("Sharing connection", connection_id)

        logger.info(
            "sharing_connection_updated",
            connection_id=connection_id,
            status=status.value
        )

        return SharingConnection.model_validate(result.data[0])


# Singleton instance
_sharing_service: Optional[SharingService] = None


def get_sharing_service() -> SharingService:
    """Get or create SharingService instance."""
    global _sharing_service
    if _sharing_service is None:
        _sharing_service = SharingService()
    return _sharing_service
