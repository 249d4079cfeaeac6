"""Reservation price computation"""

from datetime import date, datetime, time
from decimal import Decimal, ROUND_CEILING

from app.booking.catalog import TableType

CENT = Decimal("0.01")
SECONDS_PER_HOUR = Decimal(3600)


def duration_seconds(start_time: time, end_time: time) -> int:
    """Seconds between two times of the same day"""
    start = datetime.combine(date.min, start_time)
    end = datetime.combine(date.min, end_time)
    return int((end - start).total_seconds())


def duration_hours(start_time: time, end_time: time) -> Decimal:
    return Decimal(duration_seconds(start_time, end_time)) / SECONDS_PER_HOUR


def price(table_type: TableType, start_time: time, end_time: time) -> Decimal:
    """
    Total price for booking a table between two times.

    Uses fractional hours and rounds up to the next cent, so a partial cent
    is always charged as a full one.
    """
    seconds = Decimal(duration_seconds(start_time, end_time))
    total = table_type.price_per_hour * seconds / SECONDS_PER_HOUR
    return total.quantize(CENT, rounding=ROUND_CEILING)
