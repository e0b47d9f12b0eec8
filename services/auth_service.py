"""
Resolve the Supabase user behind a request.
"""

from typing import Optional
import structlog

from config import get_supabase_client
from exceptions import NotAuthenticatedError

logger = structlog.get_logger(__name__)


def get_current_user_id(access_token: Optional[str] = None, client=None) -> str:
    """
    Return the id of the authenticated user.

    Args:
        access_token: JWT from the caller. When omitted the client's own
            session is used.
        client: Supabase client (defaults to the shared one)

    Raises:
        NotAuthenticatedError: No valid session
    """
    client = client or get_supabase_client()

    try:
        response = client.auth.get_user(access_token) if access_token else client.auth.get_user()
    except Exception as e:
        logger.warning("auth_user_lookup_failed", error=str(e))
        raise NotAuthenticatedError() from e

    user = getattr(response, "user", None)
    if user is None or not getattr(user, "id", None):
        raise NotAuthenticatedError()

    return str(user.id)


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Extract the token from an `Authorization: Bearer ...` header."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()
