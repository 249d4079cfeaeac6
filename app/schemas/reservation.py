"""Reservation schemas"""

from datetime import date, datetime, time
from decimal import Decimal
from typing import Optional, List
from uuid import UUID
from pydantic import BaseModel

from app.models.reservation import ReservationStatus


class TableTypeResponse(BaseModel):
    """Bookable table type"""
    name: str
    capacity_min: int
    capacity_max: int
    price_per_hour: Decimal

    class Config:
        from_attributes = True


class ReservationCreate(BaseModel):
    """Create reservation request"""
    table_type: str
    reservation_date: date
    start_time: time
    end_time: time
    num_people: int


class ReservationUpdate(BaseModel):
    """Update reservation request; status changes go through the state machine"""
    table_type: Optional[str] = None
    reservation_date: Optional[date] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    num_people: Optional[int] = None
    status: Optional[ReservationStatus] = None


class ReservationUser(BaseModel):
    """Owner summary embedded in reservation responses"""
    id: UUID
    email: str
    first_name: Optional[str]
    last_name: Optional[str]

    class Config:
        from_attributes = True


class ReservationResponse(BaseModel):
    """Reservation response"""
    id: UUID
    user_id: UUID
    user: Optional[ReservationUser] = None
    table_type: str
    reservation_date: date
    start_time: time
    end_time: time
    num_people: int
    total_price: Decimal
    status: ReservationStatus
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ReservationListResponse(BaseModel):
    """Reservation list"""
    items: List[ReservationResponse]
    total: int


class AvailabilityResponse(BaseModel):
    """Availability check response"""
    table_type: str
    reservation_date: date
    start_time: time
    end_time: time
    available: bool


class ReservationEvent(BaseModel):
    """Entry of a reservation's audit history"""
    action: str
    actor_id: Optional[UUID]
    actor_type: Optional[str]
    data_json: Optional[dict]
    created_at: datetime

    class Config:
        from_attributes = True
