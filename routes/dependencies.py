"""
Shared route helpers: error conversion and caller authentication.
"""

from typing import Optional
from fastapi import Header
from fastapi.responses import JSONResponse
import structlog

from services.auth_service import get_current_user_id, bearer_token
from exceptions import AppError, NotAuthenticatedError

logger = structlog.get_logger(__name__)


def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, AppError):
        return JSONResponse(
            status_code=e.status_code,
            content=e.to_dict()
        )
    logger.error("unexpected_error", error=str(e), type=type(e).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred"
            }
        }
    )


def current_user_id(authorization: Optional[str] = Header(None)) -> str:
    """
    Resolve the caller from `Authorization: Bearer <jwt>`.

    Raises:
        NotAuthenticatedError: Header missing or token rejected
    """
    token = bearer_token(authorization)
    if token is None:
        raise NotAuthenticatedError("Authentication required")
    return get_current_user_id(token)


def optional_user_id(authorization: Optional[str] = Header(None)) -> Optional[str]:
    """Like current_user_id, but None for anonymous callers."""
    token = bearer_token(authorization)
    if token is None:
        return None
    try:
        return get_current_user_id(token)
    except NotAuthenticatedError:
        return None
