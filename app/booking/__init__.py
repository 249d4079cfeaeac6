"""Reservation engine: catalog, pricing, availability and status lifecycle"""

from app.booking.errors import (
    BookingError,
    ValidationError,
    ConflictError,
    AccessDenied,
    NotFound,
    InvalidTransition,
)

__all__ = [
    "BookingError",
    "ValidationError",
    "ConflictError",
    "AccessDenied",
    "NotFound",
    "InvalidTransition",
]
