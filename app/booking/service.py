"""
Reservation lifecycle operations.

Every operation validates first, then mutates the session and commits once,
so price, status and the audit entry are persisted together or not at all.
"""

from datetime import date, time
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
import structlog

from app.booking import pricing
from app.booking.availability import has_conflict, slot_lock
from app.booking.catalog import TableType, get_table_type
from app.booking.errors import AccessDenied, ConflictError, NotFound, ValidationError
from app.booking.state_machine import ADMIN_VISIBLE_STATUSES, ACTIVE_STATUSES, check_transition
from app.models.audit import AuditLog
from app.models.reservation import Reservation, ReservationStatus
from app.models.user import User

logger = structlog.get_logger()

REQUIRED_FIELDS = ("table_type", "reservation_date", "start_time", "end_time", "num_people")
EDITABLE_FIELDS = REQUIRED_FIELDS
PRICING_FIELDS = ("table_type", "start_time", "end_time")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _resolve_table_type(name: str) -> TableType:
    table = get_table_type(name)
    if table is None:
        raise ValidationError("Invalid table type")
    return table


def _validate_booking(table: TableType, start_time: time, end_time: time, num_people: int) -> None:
    if start_time.tzinfo is not None or end_time.tzinfo is not None:
        raise ValidationError("Times must not carry a timezone")
    if not table.fits(num_people):
        raise ValidationError(
            f"Number of people must be between {table.capacity_min} and "
            f"{table.capacity_max} for {table.name}"
        )
    if start_time >= end_time:
        raise ValidationError("End time must be after start time")


def _parse_status(value: Any) -> ReservationStatus:
    try:
        return ReservationStatus(value)
    except ValueError:
        raise ValidationError(f"Invalid status '{value}'")


def _is_owner(reservation: Reservation, user: User) -> bool:
    return reservation.user_id == user.id


def _ensure_access(reservation: Reservation, user: User) -> None:
    if not (_is_owner(reservation, user) or user.is_admin):
        raise AccessDenied("Access denied")


def _audit(db: AsyncSession, user: User, action: str, reservation: Reservation, data: Dict[str, Any]) -> None:
    db.add(AuditLog(
        actor_id=user.id,
        actor_type="admin" if user.is_admin else "customer",
        action=action,
        resource_type="reservation",
        resource_id=reservation.id,
        data_json=data,
    ))


async def _load(db: AsyncSession, reservation_id: UUID) -> Reservation:
    """Load a reservation with its user, raising NotFound when missing"""
    result = await db.execute(
        select(Reservation)
        .where(Reservation.id == reservation_id)
        .options(selectinload(Reservation.user))
        .execution_options(populate_existing=True)
    )
    reservation = result.scalar_one_or_none()
    if reservation is None:
        raise NotFound("Reservation not found")
    return reservation


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


async def get_own_reservations(
    db: AsyncSession,
    user: User,
    status: Optional[ReservationStatus] = None,
) -> List[Reservation]:
    """Reservations booked by the user, newest first"""
    query = (
        select(Reservation)
        .where(Reservation.user_id == user.id)
        .options(selectinload(Reservation.user))
    )
    if status is not None:
        query = query.where(Reservation.status == _parse_status(status).value)
    query = query.order_by(Reservation.reservation_date.desc(), Reservation.start_time.desc())

    result = await db.execute(query)
    return list(result.scalars().all())


async def get_reservation_by_id(db: AsyncSession, user: User, reservation_id: UUID) -> Reservation:
    reservation = await _load(db, reservation_id)
    _ensure_access(reservation, user)
    return reservation


async def list_for_admin(db: AsyncSession, user: User) -> List[Reservation]:
    """
    Admin operational view.

    Pending reservations have not been confirmed by their owner yet and
    cancelled ones were withdrawn, so neither is listed.
    """
    if not user.is_admin:
        raise AccessDenied("Admin access required")

    result = await db.execute(
        select(Reservation)
        .where(Reservation.status.in_([status.value for status in ADMIN_VISIBLE_STATUSES]))
        .options(selectinload(Reservation.user))
        .order_by(Reservation.reservation_date.desc(), Reservation.start_time.desc())
    )
    return list(result.scalars().all())


async def get_reservation_history(db: AsyncSession, user: User, reservation_id: UUID) -> List[AuditLog]:
    reservation = await get_reservation_by_id(db, user, reservation_id)
    result = await db.execute(
        select(AuditLog)
        .where(AuditLog.resource_type == "reservation", AuditLog.resource_id == reservation.id)
        .order_by(AuditLog.created_at)
    )
    return list(result.scalars().all())


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


async def create_reservation(
    db: AsyncSession,
    user: User,
    table_type: Optional[str],
    reservation_date: Optional[date],
    start_time: Optional[time],
    end_time: Optional[time],
    num_people: Optional[int],
) -> Reservation:
    """Book a table; the reservation starts out pending"""
    values = {
        "table_type": table_type,
        "reservation_date": reservation_date,
        "start_time": start_time,
        "end_time": end_time,
        "num_people": num_people,
    }
    if any(values[field] is None or values[field] == "" for field in REQUIRED_FIELDS):
        raise ValidationError("All fields are required: " + ", ".join(REQUIRED_FIELDS))

    table = _resolve_table_type(table_type)
    _validate_booking(table, start_time, end_time, num_people)

    async with slot_lock(table.name):
        if await has_conflict(db, table.name, reservation_date, start_time, end_time):
            raise ConflictError("This time slot is already reserved")

        reservation = Reservation(
            user_id=user.id,
            table_type=table.name,
            reservation_date=reservation_date,
            start_time=start_time,
            end_time=end_time,
            num_people=num_people,
            status=ReservationStatus.PENDING.value,
        )
        reservation.total_price = pricing.price(table, start_time, end_time)
        db.add(reservation)
        await db.flush()

        _audit(db, user, "create_reservation", reservation, {
            "status": reservation.status,
            "total_price": str(reservation.total_price),
        })
        await db.commit()

    logger.info(
        "Reservation created",
        reservation_id=str(reservation.id),
        user_id=str(user.id),
        table_type=table.name,
        reservation_date=reservation_date.isoformat(),
        total_price=str(reservation.total_price),
    )
    return await _load(db, reservation.id)


async def update_reservation(
    db: AsyncSession,
    user: User,
    reservation_id: UUID,
    changes: Dict[str, Any],
) -> Reservation:
    """
    Edit booking fields and/or request a status change.

    Field edits are re-validated, re-checked for conflicts against other
    reservations and repriced. A requested status goes through the state
    machine. Both are committed together.
    """
    reservation = await _load(db, reservation_id)
    _ensure_access(reservation, user)

    requested_status = changes.get("status")
    edits = {
        field: value
        for field, value in changes.items()
        if field in EDITABLE_FIELDS and value is not None
    }

    if requested_status is not None:
        requested_status = _parse_status(requested_status)
        check_transition(
            ReservationStatus(reservation.status),
            requested_status,
            is_owner=_is_owner(reservation, user),
            is_admin=user.is_admin,
        )

    if not edits:
        if requested_status is not None:
            await _set_status(db, user, reservation, requested_status)
            return await _load(db, reservation.id)
        return reservation

    if ReservationStatus(reservation.status) not in ACTIVE_STATUSES:
        raise ValidationError(f"Cannot modify a {reservation.status} reservation")

    merged = {field: getattr(reservation, field) for field in EDITABLE_FIELDS}
    merged.update(edits)
    table = _resolve_table_type(merged["table_type"])
    _validate_booking(table, merged["start_time"], merged["end_time"], merged["num_people"])

    async with slot_lock(table.name):
        if await has_conflict(
            db,
            table.name,
            merged["reservation_date"],
            merged["start_time"],
            merged["end_time"],
            exclude_id=reservation.id,
        ):
            raise ConflictError("This time slot is already reserved")

        for field, value in edits.items():
            setattr(reservation, field, value)
        if any(field in edits for field in PRICING_FIELDS):
            reservation.total_price = pricing.price(table, reservation.start_time, reservation.end_time)

        _audit(db, user, "update_reservation", reservation, {
            "fields": {field: str(value) for field, value in edits.items()},
            "total_price": str(reservation.total_price),
        })

        if requested_status is not None:
            await _set_status(db, user, reservation, requested_status)
        else:
            await db.commit()

    logger.info(
        "Reservation updated",
        reservation_id=str(reservation.id),
        fields=sorted(edits),
        total_price=str(reservation.total_price),
    )
    return await _load(db, reservation.id)


async def _set_status(
    db: AsyncSession,
    user: User,
    reservation: Reservation,
    requested: ReservationStatus,
) -> None:
    """Apply an already validated transition and commit"""
    previous = reservation.status
    reservation.status = requested.value
    _audit(db, user, "change_status", reservation, {"from": previous, "to": requested.value})
    await db.commit()

    logger.info(
        "Reservation status changed",
        reservation_id=str(reservation.id),
        from_status=previous,
        to_status=requested.value,
        actor_id=str(user.id),
        is_admin=user.is_admin,
    )


async def change_status(
    db: AsyncSession,
    user: User,
    reservation_id: UUID,
    requested: ReservationStatus,
) -> Reservation:
    requested = _parse_status(requested)
    reservation = await _load(db, reservation_id)
    check_transition(
        ReservationStatus(reservation.status),
        requested,
        is_owner=_is_owner(reservation, user),
        is_admin=user.is_admin,
    )
    await _set_status(db, user, reservation, requested)
    return await _load(db, reservation.id)


async def confirm_reservation(db: AsyncSession, user: User, reservation_id: UUID) -> Reservation:
    return await change_status(db, user, reservation_id, ReservationStatus.CONFIRMED)


async def cancel_reservation(db: AsyncSession, user: User, reservation_id: UUID) -> Reservation:
    return await change_status(db, user, reservation_id, ReservationStatus.CANCELLED)


async def delete_reservation(db: AsyncSession, user: User, reservation_id: UUID) -> Reservation:
    """Admin removal; reservations are soft-deleted by cancelling them"""
    if not user.is_admin:
        raise AccessDenied("Admin access required")
    return await cancel_reservation(db, user, reservation_id)
