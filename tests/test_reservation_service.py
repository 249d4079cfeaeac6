"""Tests for the reservation lifecycle operations"""

import asyncio
from collections import defaultdict
from datetime import date, time, timezone
from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.booking import availability, service
from app.booking.errors import (
    AccessDenied,
    ConflictError,
    InvalidTransition,
    NotFound,
    ValidationError,
)
from app.database import Base
from app.models.reservation import Reservation, ReservationStatus
from app.models.user import User, UserRole

DAY = date(2024, 6, 1)


async def _book(db, user, table_type="Parasol", start=time(12, 0), end=time(14, 0), num_people=3, day=DAY):
    return await service.create_reservation(db, user, table_type, day, start, end, num_people)


@pytest.mark.asyncio
async def test_create_reservation(test_db, test_user):
    """A valid booking is priced, pending and carries its owner"""
    reservation = await _book(test_db, test_user)

    assert reservation.status == ReservationStatus.PENDING.value
    assert reservation.total_price == Decimal("30.00")
    assert reservation.user.email == "test@example.com"


@pytest.mark.asyncio
@pytest.mark.parametrize("missing", service.REQUIRED_FIELDS)
async def test_create_requires_all_fields(test_db, test_user, missing):
    """Every booking field is required"""
    values = {
        "table_type": "Parasol",
        "reservation_date": DAY,
        "start_time": time(12, 0),
        "end_time": time(14, 0),
        "num_people": 3,
    }
    values[missing] = None

    with pytest.raises(ValidationError, match="All fields are required"):
        await service.create_reservation(test_db, test_user, **values)


@pytest.mark.asyncio
async def test_create_rejects_unknown_table_type(test_db, test_user):
    """Table types must come from the catalog"""
    with pytest.raises(ValidationError, match="Invalid table type"):
        await _book(test_db, test_user, table_type="Terrace")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "table_type,num_people",
    [("Parasol", 5), ("Parasol", 0), ("Mini Cabane", 6), ("Cabane", 5), ("Cabane", 21)],
)
async def test_create_rejects_party_size_outside_capacity(test_db, test_user, table_type, num_people):
    """Party size must fit the table's capacity range"""
    with pytest.raises(ValidationError, match="Number of people must be between"):
        await _book(test_db, test_user, table_type=table_type, num_people=num_people)


@pytest.mark.asyncio
@pytest.mark.parametrize("start,end", [(time(14, 0), time(12, 0)), (time(12, 0), time(12, 0))])
async def test_create_rejects_non_positive_duration(test_db, test_user, start, end):
    """End time must be strictly after start time"""
    with pytest.raises(ValidationError, match="End time must be after start time"):
        await _book(test_db, test_user, start=start, end=end)


@pytest.mark.asyncio
async def test_validation_order_capacity_before_times(test_db, test_user):
    """The first failing check wins"""
    with pytest.raises(ValidationError, match="Number of people"):
        await _book(test_db, test_user, num_people=50, start=time(14, 0), end=time(12, 0))


@pytest.mark.asyncio
async def test_overlapping_booking_conflicts(test_db, test_user, other_user):
    """Overlapping active bookings on the same table and day are rejected"""
    await _book(test_db, test_user)

    with pytest.raises(ConflictError):
        await _book(test_db, other_user, start=time(13, 0), end=time(15, 0))

    following = await _book(test_db, other_user, start=time(14, 0), end=time(16, 0))
    assert following.status == ReservationStatus.PENDING.value


@pytest.mark.asyncio
async def test_cancelled_booking_frees_the_slot(test_db, test_user, other_user):
    """A cancelled reservation no longer blocks its slot"""
    first = await _book(test_db, test_user)
    await service.cancel_reservation(test_db, test_user, first.id)

    again = await _book(test_db, other_user, start=time(13, 0), end=time(15, 0))
    assert again.status == ReservationStatus.PENDING.value


@pytest.mark.asyncio
async def test_full_lifecycle_to_accepted(test_db, test_user, test_admin_user):
    """Owner confirms, admin accepts"""
    reservation = await _book(test_db, test_user)

    confirmed = await service.confirm_reservation(test_db, test_user, reservation.id)
    assert confirmed.status == ReservationStatus.CONFIRMED.value

    accepted = await service.change_status(test_db, test_admin_user, reservation.id, ReservationStatus.ACCEPTED)
    assert accepted.status == ReservationStatus.ACCEPTED.value

    with pytest.raises(InvalidTransition):
        await service.cancel_reservation(test_db, test_admin_user, reservation.id)


@pytest.mark.asyncio
async def test_admin_cannot_accept_pending(test_db, test_user, test_admin_user):
    """Accepting requires a confirmed reservation"""
    reservation = await _book(test_db, test_user)

    with pytest.raises(InvalidTransition, match="'pending' to 'accepted'"):
        await service.update_reservation(test_db, test_admin_user, reservation.id, {"status": "accepted"})


@pytest.mark.asyncio
async def test_owner_cannot_deny(test_db, test_user):
    """Only admins decide on reservations"""
    reservation = await _book(test_db, test_user)
    await service.confirm_reservation(test_db, test_user, reservation.id)

    with pytest.raises(AccessDenied):
        await service.update_reservation(test_db, test_user, reservation.id, {"status": "denied"})


@pytest.mark.asyncio
async def test_cancel_twice_is_rejected(test_db, test_user):
    """Cancelling is not idempotent"""
    reservation = await _book(test_db, test_user)
    await service.cancel_reservation(test_db, test_user, reservation.id)

    with pytest.raises(InvalidTransition):
        await service.cancel_reservation(test_db, test_user, reservation.id)


@pytest.mark.asyncio
async def test_owner_cannot_cancel_confirmed_but_admin_can(test_db, test_user, test_admin_user):
    """Confirmed reservations can only be cancelled by an admin"""
    reservation = await _book(test_db, test_user)
    await service.confirm_reservation(test_db, test_user, reservation.id)

    with pytest.raises(AccessDenied):
        await service.cancel_reservation(test_db, test_user, reservation.id)

    cancelled = await service.cancel_reservation(test_db, test_admin_user, reservation.id)
    assert cancelled.status == ReservationStatus.CANCELLED.value


@pytest.mark.asyncio
async def test_strangers_cannot_read_or_change(test_db, test_user, other_user):
    """Other customers have no access"""
    reservation = await _book(test_db, test_user)

    with pytest.raises(AccessDenied):
        await service.get_reservation_by_id(test_db, other_user, reservation.id)
    with pytest.raises(AccessDenied):
        await service.confirm_reservation(test_db, other_user, reservation.id)
    with pytest.raises(AccessDenied):
        await service.update_reservation(test_db, other_user, reservation.id, {"num_people": 2})


@pytest.mark.asyncio
async def test_unknown_reservation(test_db, test_user):
    with pytest.raises(NotFound):
        await service.get_reservation_by_id(test_db, test_user, uuid4())


@pytest.mark.asyncio
async def test_edit_reprices(test_db, test_user):
    """Changing times or table type recomputes the price"""
    reservation = await _book(test_db, test_user)

    longer = await service.update_reservation(
        test_db, test_user, reservation.id, {"end_time": time(15, 30)}
    )
    assert longer.total_price == Decimal("52.50")

    upgraded = await service.update_reservation(
        test_db, test_user, reservation.id, {"table_type": "Mini Cabane"}
    )
    assert upgraded.total_price == Decimal("87.50")


@pytest.mark.asyncio
async def test_edit_may_overlap_its_own_slot(test_db, test_user):
    """A reservation does not conflict with itself"""
    reservation = await _book(test_db, test_user)

    shifted = await service.update_reservation(
        test_db, test_user, reservation.id, {"start_time": time(13, 0), "end_time": time(15, 0)}
    )
    assert shifted.start_time == time(13, 0)
    assert shifted.total_price == Decimal("30.00")


@pytest.mark.asyncio
async def test_edit_into_another_booking_conflicts(test_db, test_user, other_user):
    """Edits are checked against other active reservations"""
    await _book(test_db, other_user, start=time(16, 0), end=time(18, 0))
    reservation = await _book(test_db, test_user)

    with pytest.raises(ConflictError):
        await service.update_reservation(test_db, test_user, reservation.id, {"end_time": time(17, 0)})

    unchanged = await service.get_reservation_by_id(test_db, test_user, reservation.id)
    assert unchanged.end_time == time(14, 0)
    assert unchanged.total_price == Decimal("30.00")


@pytest.mark.asyncio
async def test_edit_revalidates_capacity(test_db, test_user):
    """Switching table type re-checks the party size"""
    reservation = await _book(test_db, test_user)

    with pytest.raises(ValidationError, match="Number of people"):
        await service.update_reservation(test_db, test_user, reservation.id, {"table_type": "Cabane"})


@pytest.mark.asyncio
async def test_terminal_reservations_cannot_be_edited(test_db, test_user):
    """Field edits require an active reservation"""
    reservation = await _book(test_db, test_user)
    await service.cancel_reservation(test_db, test_user, reservation.id)

    with pytest.raises(ValidationError, match="Cannot modify a cancelled reservation"):
        await service.update_reservation(test_db, test_user, reservation.id, {"num_people": 2})


@pytest.mark.asyncio
async def test_failed_status_change_discards_field_edits(test_db, test_user):
    """Edits and status changes are applied together or not at all"""
    reservation = await _book(test_db, test_user)

    with pytest.raises(AccessDenied):
        await service.update_reservation(
            test_db, test_user, reservation.id, {"num_people": 2, "status": "accepted"}
        )

    unchanged = await service.get_reservation_by_id(test_db, test_user, reservation.id)
    assert unchanged.num_people == 3


@pytest.mark.asyncio
async def test_admin_view_filters_statuses(test_db, test_user, test_admin_user):
    """Admins see confirmed, accepted and denied reservations only"""
    pending = await _book(test_db, test_user, start=time(8, 0), end=time(9, 0))
    cancelled = await _book(test_db, test_user, start=time(9, 0), end=time(10, 0))
    confirmed = await _book(test_db, test_user, start=time(10, 0), end=time(11, 0))
    denied = await _book(test_db, test_user, start=time(11, 0), end=time(12, 0))
    accepted = await _book(test_db, test_user, start=time(12, 0), end=time(13, 0), day=date(2024, 6, 2))

    await service.cancel_reservation(test_db, test_user, cancelled.id)
    for reservation in (confirmed, denied, accepted):
        await service.confirm_reservation(test_db, test_user, reservation.id)
    await service.change_status(test_db, test_admin_user, denied.id, ReservationStatus.DENIED)
    await service.change_status(test_db, test_admin_user, accepted.id, ReservationStatus.ACCEPTED)

    listed = await service.list_for_admin(test_db, test_admin_user)

    assert [r.id for r in listed] == [accepted.id, denied.id, confirmed.id]
    assert pending.id not in {r.id for r in listed}


@pytest.mark.asyncio
async def test_admin_view_requires_admin(test_db, test_user):
    with pytest.raises(AccessDenied):
        await service.list_for_admin(test_db, test_user)


@pytest.mark.asyncio
async def test_own_reservations_with_status_filter(test_db, test_user, other_user):
    """Customers list their own reservations, optionally by status"""
    mine = await _book(test_db, test_user)
    await _book(test_db, other_user, start=time(15, 0), end=time(16, 0))
    await service.confirm_reservation(test_db, test_user, mine.id)

    assert [r.id for r in await service.get_own_reservations(test_db, test_user)] == [mine.id]
    assert [r.id for r in await service.get_own_reservations(test_db, test_user, status="confirmed")] == [mine.id]
    assert await service.get_own_reservations(test_db, test_user, status="pending") == []


@pytest.mark.asyncio
async def test_delete_is_admin_only_cancel(test_db, test_user, test_admin_user):
    """Deleting soft-cancels the reservation"""
    reservation = await _book(test_db, test_user)

    with pytest.raises(AccessDenied):
        await service.delete_reservation(test_db, test_user, reservation.id)

    deleted = await service.delete_reservation(test_db, test_admin_user, reservation.id)
    assert deleted.status == ReservationStatus.CANCELLED.value


@pytest.mark.asyncio
async def test_history_records_each_change(test_db, test_user, test_admin_user):
    """Every create, edit and status change is audited"""
    reservation = await _book(test_db, test_user)
    await service.update_reservation(test_db, test_user, reservation.id, {"num_people": 2})
    await service.confirm_reservation(test_db, test_user, reservation.id)
    await service.change_status(test_db, test_admin_user, reservation.id, ReservationStatus.DENIED)

    history = await service.get_reservation_history(test_db, test_user, reservation.id)

    assert [entry.action for entry in history] == [
        "create_reservation",
        "update_reservation",
        "change_status",
        "change_status",
    ]
    assert history[-1].data_json == {"from": "confirmed", "to": "denied"}
    assert history[-1].actor_type == "admin"


@pytest.mark.asyncio
async def test_invalid_status_value(test_db, test_user):
    with pytest.raises(ValidationError, match="Invalid status"):
        await service.get_own_reservations(test_db, test_user, status="archived")


@pytest.mark.asyncio
async def test_create_rejects_times_with_timezone(test_db, test_user):
    with pytest.raises(ValidationError, match="Times must not carry a timezone"):
        await _book(test_db, test_user, start=time(12, 0, tzinfo=timezone.utc))


@pytest.fixture
async def session_factory(tmp_path):
    """Sessions on separate connections to one file database"""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'bookings.db'}")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest.mark.asyncio
async def test_concurrent_bookings_for_same_slot(session_factory, monkeypatch):
    """Two simultaneous requests for one slot: exactly one books it"""
    monkeypatch.setattr(availability, "_slot_locks", defaultdict(asyncio.Lock))

    async with session_factory() as db:
        users = [
            User(email=f"racer{i}@example.com", hashed_password="x", role=UserRole.CUSTOMER)
            for i in range(2)
        ]
        db.add_all(users)
        await db.commit()

    async def attempt(user):
        async with session_factory() as db:
            return await _book(db, user)

    results = await asyncio.gather(*(attempt(user) for user in users), return_exceptions=True)

    booked = [result for result in results if isinstance(result, Reservation)]
    rejected = [result for result in results if isinstance(result, ConflictError)]
    assert len(booked) == 1
    assert len(rejected) == 1

    async with session_factory() as db:
        result = await db.execute(select(func.count(Reservation.id)))
        assert result.scalar() == 1


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "overrides",
    [
        {"start_time": time(14, 0), "end_time": time(12, 0)},
        {"num_people": 0},
        {"total_price_cents": -1},
    ],
)
async def test_table_rejects_invalid_rows(test_db, test_user, overrides):
    """The reservations table enforces time range, party size and price"""
    values = {
        "user_id": test_user.id,
        "table_type": "Parasol",
        "reservation_date": DAY,
        "start_time": time(12, 0),
        "end_time": time(14, 0),
        "num_people": 2,
        "total_price_cents": 3000,
        "status": ReservationStatus.PENDING.value,
    }
    values.update(overrides)
    test_db.add(Reservation(**values))

    with pytest.raises(IntegrityError):
        await test_db.commit()
    await test_db.rollback()
