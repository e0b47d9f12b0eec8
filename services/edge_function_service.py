"""
Edge function client.

The backend exposes a fixed set of serverless functions. Their logic
(OCR, matching, enrichment, expert ratings, invitation e-mails) lives on
the backend; this module only sends JSON bodies and decodes replies.
"""

import json
from typing import Any, Optional
import structlog

from config import get_supabase_client
from models.enrichment import (
    ExpertRatingRequest,
    ExpertRating,
    EnrichWineRequest,
    EnrichResponse,
)
from models.sharing import InviteResult, AcceptInviteResult
from exceptions import ExternalServiceError, UnknownEdgeFunctionError, DecodingError

logger = structlog.get_logger(__name__)

PROCESS_WINE_QUEUE = "process-wine-queue"
ENRICH_WINES = "enrich-wines"
FETCH_EXPERT_RATING = "fetch-expert-rating"
SEND_SHARING_INVITATION = "send-sharing-invitation"
ACCEPT_INVITE = "accept-invite"

KNOWN_FUNCTIONS = (
    PROCESS_WINE_QUEUE,
    ENRICH_WINES,
    FETCH_EXPERT_RATING,
    SEND_SHARING_INVITATION,
    ACCEPT_INVITE,
)


class EdgeFunctionService:
    """Invokes the backend's edge functions."""

    def __init__(self, client=None):
        self.db = client or get_supabase_client()

    def invoke(self, name: str, body: Optional[dict] = None) -> Any:
        """
        Invoke an edge function and decode its JSON reply.

        Args:
            name: One of KNOWN_FUNCTIONS
            body: JSON body (empty object when omitted)

        Returns:
            Decoded JSON, or the raw text when the reply is not JSON

        Raises:
            UnknownEdgeFunctionError: Name not in KNOWN_FUNCTIONS
            ExternalServiceError: Invocation failed
        """
        if name not in KNOWN_FUNCTIONS:
            raise UnknownEdgeFunctionError(name, list(KNOWN_FUNCTIONS))

        logger.debug("edge_function_invoking", function=name)

        try:
            raw = self.db.functions.invoke(
                name,
                invoke_options={"body": body or {}}
            )
        except Exception as e:
            logger.error(
                "edge_function_failed",
                function=name,
                error=str(e),
                error_type=type(e).__name__
            )
            raise ExternalServiceError(name, f"Edge function {name} failed: {e}")

        logger.info("edge_function_invoked", function=name)

        return _decode(raw)

    # ===================
    # TYPED HELPERS
    # ===================

    def process_wine_queue(self) -> Any:
        """Ask the backend to work through pending wines_added rows."""
        return self.invoke(PROCESS_WINE_QUEUE, {})

    def enrich_wines(self) -> EnrichResponse:
        """Bulk enrichment of the caller's wines."""
        return self._parse(EnrichResponse, self.invoke(ENRICH_WINES, {"action": "enrich"}), ENRICH_WINES)

    def enrich_wine(self, request: EnrichWineRequest) -> EnrichResponse:
        """Enrich a single wine."""
        return self._parse(
            EnrichResponse,
            self.invoke(ENRICH_WINES, request.model_dump()),
            ENRICH_WINES
        )

    def fetch_expert_rating(self, request: ExpertRatingRequest) -> ExpertRating:
        return self._parse(
            ExpertRating,
            self.invoke(FETCH_EXPERT_RATING, request.to_body()),
            FETCH_EXPERT_RATING
        )

    def send_sharing_invitation(self, viewer_email: str) -> InviteResult:
        return self._parse(
            InviteResult,
            self.invoke(SEND_SHARING_INVITATION, {"viewer_email": viewer_email}),
            SEND_SHARING_INVITATION
        )

    def accept_invite(self, code: str) -> AcceptInviteResult:
        return self._parse(
            AcceptInviteResult,
            self.invoke(ACCEPT_INVITE, {"code": code}),
            ACCEPT_INVITE
        )

    @staticmethod
    def _parse(model, payload: Any, name: str):
        if not isinstance(payload, dict):
            raise DecodingError(name, f"expected object, got {type(payload).__name__}")
        try:
            return model.model_validate(payload)
        except Exception as e:
            raise DecodingError(name, str(e))


def _decode(raw: Any) -> Any:
    """Functions reply with bytes, str or already-decoded JSON depending on client version."""
    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8")
    if isinstance(raw, str):
        if not raw:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            return raw
    return raw


# Singleton instance
_edge_function_service: Optional[EdgeFunctionService] = None


def get_edge_function_service() -> EdgeFunctionService:
    """Get or create EdgeFunctionService instance."""
    global _edge_function_service
    if _edge_function_service is None:
        _edge_function_service = EdgeFunctionService()
    return _edge_function_service
