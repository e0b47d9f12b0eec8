"""
Custom exception classes for the application.

Every error carries a stable code, a human message, the HTTP status the
routes should answer with, and a details dict for context.
"""

from typing import Optional, Any
from datetime import datetime, timezone


class AppError(Exception):
    """
    Base exception for all application errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "TASTING_NOT_FOUND")
        message: Human-readable message
        status_code: HTTP status code
        details: Additional context
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "timestamp": self.timestamp
            }
        }


class NotFoundError(AppError):
    """Resource not found (404)."""

    def __init__(
        self,
        resource: str,
        identifier: str,
        code: Optional[str] = None
    ):
        super().__init__(
            code=code or f"{resource.upper().replace(' ', '_')}_NOT_FOUND",
            message=f"{resource} not found",
            status_code=404,
            details={"id": identifier}
        )


class ValidationError(AppError):
    """Validation failed (422)."""

    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=422,
            details=details
        )


class ExternalServiceError(AppError):
    """External service failure (503)."""

    def __init__(
        self,
        service: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code=f"{service.upper().replace('-', '_')}_ERROR",
            message=message,
            status_code=503,
            details={"service": service, **(details or {})}
        )


class DatabaseError(AppError):
    """Database operation failed (500)."""

    def __init__(
        self,
        operation: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="DATABASE_ERROR",
            message=f"Database {operation} failed: {message}",
            status_code=500,
            details={"operation": operation, **(details or {})}
        )


# ===================
# AUTH ERRORS
# ===================

class NotAuthenticatedError(AppError):
    """No Supabase session for the caller (401)."""

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(
            code="NOT_AUTHENTICATED",
            message=message,
            status_code=401
        )


# ===================
# DECODING ERRORS
# ===================

class DecodingError(AppError):
    """Backend payload did not match the expected shape (502)."""

    def __init__(self, resource: str, message: str, details: Optional[dict] = None):
        super().__init__(
            code="DECODING_ERROR",
            message=f"Unexpected {resource} payload: {message}",
            status_code=502,
            details={"resource": resource, **(details or {})}
        )


# ===================
# TASTING ERRORS
# ===================

class TastingNotFoundError(NotFoundError):
    """Tasting not found."""

    def __init__(self, tasting_id: str):
        super().__init__(
            resource="Tasting",
            identifier=tasting_id,
            code="TASTING_NOT_FOUND"
        )


class PendingStoreCorruptError(AppError):
    """Local pending-tasting slot could not be parsed."""

    def __init__(self, path: str, message: str):
        super().__init__(
            code="PENDING_STORE_CORRUPT",
            message=f"Pending tasting store is unreadable: {message}",
            status_code=500,
            details={"path": path}
        )


# ===================
# WINE QUEUE ERRORS
# ===================

class WineJobNotFoundError(NotFoundError):
    """Queued wine job (wines_added row) not found."""

    def __init__(self, job_id: str):
        super().__init__(
            resource="Wine job",
            identifier=job_id,
            code="WINE_JOB_NOT_FOUND"
        )


# ===================
# EDGE FUNCTION ERRORS
# ===================

class UnknownEdgeFunctionError(ValidationError):
    """Edge function name is not one we are allowed to call."""

    def __init__(self, name: str, known: list[str]):
        super().__init__(
            code="UNKNOWN_EDGE_FUNCTION",
            message=f"Unknown edge function: {name}",
            details={"provided": name, "valid": known}
        )


# ===================
# SHARING ERRORS
# ===================

class InvalidInviteError(ValidationError):
    """Invite code was rejected by the backend."""

    def __init__(self, code: str, reason: Optional[str] = None):
        super().__init__(
            code="INVALID_INVITE",
            message=reason or "Invite could not be accepted",
            details={"invite_code": code}
        )
