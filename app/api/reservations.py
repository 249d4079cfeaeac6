"""Reservation API endpoints"""

from datetime import date, time
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.booking import service
from app.booking.availability import has_conflict
from app.booking.catalog import get_table_type, get_table_types
from app.database import get_db
from app.models.reservation import ReservationStatus
from app.models.user import User, UserRole
from app.schemas.reservation import (
    TableTypeResponse,
    ReservationCreate,
    ReservationUpdate,
    ReservationResponse,
    ReservationListResponse,
    AvailabilityResponse,
    ReservationEvent,
)
from app.api.auth import get_current_active_user, require_role

router = APIRouter()


@router.get("/table_types", response_model=List[TableTypeResponse])
async def list_table_types():
    """List bookable table types"""
    return get_table_types()


@router.get("/availability/check", response_model=AvailabilityResponse)
async def check_availability(
    table_type: str,
    reservation_date: date,
    start_time: time,
    end_time: time,
    db: AsyncSession = Depends(get_db),
):
    """Check whether a table type is free for a time range"""
    if get_table_type(table_type) is None:
        raise HTTPException(status_code=400, detail="Invalid table type")
    if start_time.tzinfo is not None or end_time.tzinfo is not None:
        raise HTTPException(status_code=400, detail="Times must not carry a timezone")
    if start_time >= end_time:
        raise HTTPException(status_code=400, detail="End time must be after start time")

    conflict = await has_conflict(db, table_type, reservation_date, start_time, end_time)

    return AvailabilityResponse(
        table_type=table_type,
        reservation_date=reservation_date,
        start_time=start_time,
        end_time=end_time,
        available=not conflict,
    )


@router.post("", response_model=ReservationResponse, status_code=201)
async def create_reservation(
    reservation_data: ReservationCreate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Book a table; new reservations are pending until the customer confirms"""
    return await service.create_reservation(
        db,
        current_user,
        table_type=reservation_data.table_type,
        reservation_date=reservation_data.reservation_date,
        start_time=reservation_data.start_time,
        end_time=reservation_data.end_time,
        num_people=reservation_data.num_people,
    )


@router.get("/mine", response_model=ReservationListResponse)
async def list_my_reservations(
    status: Optional[ReservationStatus] = None,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """List the caller's reservations, newest first"""
    reservations = await service.get_own_reservations(db, current_user, status=status)
    return ReservationListResponse(items=reservations, total=len(reservations))


@router.get("/admin", response_model=ReservationListResponse)
async def list_reservations_for_admin(
    current_user: User = Depends(require_role(UserRole.ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    """Admin view: confirmed, accepted and denied reservations"""
    reservations = await service.list_for_admin(db, current_user)
    return ReservationListResponse(items=reservations, total=len(reservations))


@router.get("/{reservation_id}", response_model=ReservationResponse)
async def get_reservation(
    reservation_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Get reservation details"""
    return await service.get_reservation_by_id(db, current_user, reservation_id)


@router.put("/{reservation_id}", response_model=ReservationResponse)
async def update_reservation(
    reservation_id: UUID,
    reservation_data: ReservationUpdate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Update reservation fields and/or status"""
    return await service.update_reservation(
        db,
        current_user,
        reservation_id,
        reservation_data.model_dump(exclude_unset=True),
    )


@router.post("/{reservation_id}/confirm", response_model=ReservationResponse)
async def confirm_reservation(
    reservation_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Confirm a pending reservation and hand it over for admin review"""
    return await service.confirm_reservation(db, current_user, reservation_id)


@router.post("/{reservation_id}/cancel", response_model=ReservationResponse)
async def cancel_reservation(
    reservation_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Cancel a reservation"""
    return await service.cancel_reservation(db, current_user, reservation_id)


@router.delete("/{reservation_id}", status_code=204)
async def delete_reservation(
    reservation_id: UUID,
    current_user: User = Depends(require_role(UserRole.ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    """Remove a reservation (admin only, soft delete via cancellation)"""
    await service.delete_reservation(db, current_user, reservation_id)


@router.get("/{reservation_id}/history", response_model=List[ReservationEvent])
async def get_reservation_history(
    reservation_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Audit trail of a reservation"""
    return await service.get_reservation_history(db, current_user, reservation_id)
