"""
Custom exceptions module.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    NotFoundError,
    ValidationError,
    ExternalServiceError,
    DatabaseError,

    # Auth / decoding
    NotAuthenticatedError,
    DecodingError,

    # Tastings
    TastingNotFoundError,
    PendingStoreCorruptError,

    # Wine queue
    WineJobNotFoundError,

    # Edge functions
    UnknownEdgeFunctionError,

    # Sharing
    InvalidInviteError,
)

__all__ = [
    # Base
    "AppError",
    "NotFoundError",
    "ValidationError",
    "ExternalServiceError",
    "DatabaseError",

    # Auth / decoding
    "NotAuthenticatedError",
    "DecodingError",

    # Tastings
    "TastingNotFoundError",
    "PendingStoreCorruptError",

    # Wine queue
    "WineJobNotFoundError",

    # Edge functions
    "UnknownEdgeFunctionError",

    # Sharing
    "InvalidInviteError",
]
