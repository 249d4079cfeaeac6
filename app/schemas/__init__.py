"""Pydantic schemas for request/response validation"""

from app.schemas.auth import (
    Token,
    TokenPayload,
    LoginRequest,
    RefreshRequest,
    SignupRequest,
    ProfileUpdate,
    UserResponse,
)
from app.schemas.reservation import (
    TableTypeResponse,
    ReservationCreate,
    ReservationUpdate,
    ReservationUser,
    ReservationResponse,
    ReservationListResponse,
    AvailabilityResponse,
    ReservationEvent,
)
from app.schemas.contact_message import (
    ContactMessageCreate,
    ContactMessageStatusUpdate,
    ContactMessageResponse,
    ContactMessageListResponse,
)

__all__ = [
    "Token",
    "TokenPayload",
    "LoginRequest",
    "RefreshRequest",
    "SignupRequest",
    "ProfileUpdate",
    "UserResponse",
    "TableTypeResponse",
    "ReservationCreate",
    "ReservationUpdate",
    "ReservationUser",
    "ReservationResponse",
    "ReservationListResponse",
    "AvailabilityResponse",
    "ReservationEvent",
    "ContactMessageCreate",
    "ContactMessageStatusUpdate",
    "ContactMessageResponse",
    "ContactMessageListResponse",
]
