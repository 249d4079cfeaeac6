"""Database models"""

from app.models.user import User, UserRole
from app.models.reservation import Reservation, ReservationStatus
from app.models.contact_message import ContactMessage, ContactMessageStatus
from app.models.audit import AuditLog

__all__ = [
    "User",
    "UserRole",
    "Reservation",
    "ReservationStatus",
    "ContactMessage",
    "ContactMessageStatus",
    "AuditLog",
]
