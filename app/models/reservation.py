"""Reservation model"""

import enum
import uuid
from datetime import datetime
from decimal import Decimal
from sqlalchemy import CheckConstraint, Column, String, Integer, Date, Time, DateTime, ForeignKey, Index
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.database import Base


class ReservationStatus(str, enum.Enum):
    """Reservation lifecycle states"""
    PENDING = "pending"  # awaiting the customer's own confirmation
    CONFIRMED = "confirmed"  # confirmed by the customer, awaiting admin decision
    ACCEPTED = "accepted"
    DENIED = "denied"
    CANCELLED = "cancelled"


class Reservation(Base):
    """Table bookings"""
    __tablename__ = "reservations"
    __table_args__ = (
        Index("ix_reservations_slot", "table_type", "reservation_date", "status"),
        CheckConstraint("start_time < end_time", name="ck_reservations_time_range"),
        CheckConstraint("num_people > 0", name="ck_reservations_num_people"),
        CheckConstraint("total_price_cents >= 0", name="ck_reservations_price"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)

    # Booking details
    table_type = Column(String(50), nullable=False)
    reservation_date = Column(Date, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    num_people = Column(Integer, nullable=False)

    # Pricing, in cents to avoid float issues
    total_price_cents = Column(Integer, nullable=False, default=0)

    status = Column(String(20), nullable=False, default=ReservationStatus.PENDING.value)

    # Metadata
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    user = relationship("User", back_populates="reservations")

    @property
    def total_price(self) -> Decimal:
        return Decimal(self.total_price_cents or 0).scaleb(-2)

    @total_price.setter
    def total_price(self, value: Decimal) -> None:
        self.total_price_cents = int(value * 100)
