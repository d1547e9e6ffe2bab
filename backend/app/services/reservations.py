import logging
import re
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from zoneinfo import ZoneInfo

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.config import settings
from backend.app.core.errors import CapacityExceeded, Conflict, InvalidDate, NotFound, OutOfHours
from backend.app.core.redis_client import table_lock
from backend.app.db.models import ACTIVE_STATUSES, DiningTable, Reservation, Restaurant


logger = logging.getLogger(__name__)

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def local_zone() -> tzinfo:
    return ZoneInfo(settings.TIMEZONE)


def parse_day(value: str) -> date:
    """Parse a strict YYYY-MM-DD path/query value."""
    if not DATE_PATTERN.match(value):
        raise InvalidDate()
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise InvalidDate() from exc


def within_hours(restaurant: Restaurant, start_time: datetime, end_time: datetime, tz: tzinfo | None = None) -> bool:
    """Compare wall-clock "HH:MM" of both ends against the restaurant's hours.

    Plain string comparison of zero-padded times; the date is dropped, so a
    reservation running past midnight never fits.
    """
    tz = tz or local_zone()
    start_hhmm = start_time.astimezone(tz).strftime("%H:%M")
    end_hhmm = end_time.astimezone(tz).strftime("%H:%M")
    return start_hhmm >= restaurant.opening_time and end_hhmm <= restaurant.closing_time


async def has_overlap(
    session: AsyncSession,
    table_id: int,
    start_time: datetime,
    duration_minutes: int,
) -> bool:
    """True when an active reservation on the table intersects [start, start + duration)."""
    end_time = start_time + timedelta(minutes=duration_minutes)

    result = await session.execute(
        select(Reservation).where(
            Reservation.table_id == table_id,
            Reservation.status.in_(ACTIVE_STATUSES),
            Reservation.start_time < end_time,
        )
    )
    for existing in result.scalars():
        existing_end = existing.start_time + timedelta(minutes=existing.duration_minutes)
        if existing_end > start_time or existing.start_time == start_time:
            return True
    return False


async def create_reservation(
    session: AsyncSession,
    *,
    restaurant_id: int,
    table_id: int,
    customer_name: str,
    phone: str,
    party_size: int,
    start_time: datetime,
    duration_minutes: int,
    tz: tzinfo | None = None,
) -> Reservation:
    """Validate a booking against the restaurant, table and calendar, then insert it."""
    restaurant = await session.get(Restaurant, restaurant_id)
    if restaurant is None:
        raise NotFound("Restaurant not found")

    table = await session.scalar(
        select(DiningTable).where(
            DiningTable.id == table_id,
            DiningTable.restaurant_id == restaurant_id,
        )
    )
    if table is None:
        raise NotFound("Table not found in this restaurant")

    if party_size > table.capacity:
        raise CapacityExceeded(table.capacity, party_size)

    start_utc = start_time.astimezone(timezone.utc)
    end_utc = start_utc + timedelta(minutes=duration_minutes)
    if not within_hours(restaurant, start_utc, end_utc, tz):
        raise OutOfHours(restaurant.opening_time, restaurant.closing_time)

    async with table_lock(table_id):
        if await has_overlap(session, table_id, start_utc, duration_minutes):
            logger.info("Rejected booking for table %s at %s: already booked", table_id, start_utc.isoformat())
            raise Conflict()

        reservation = Reservation(
            restaurant_id=restaurant_id,
            table_id=table_id,
            customer_name=customer_name,
            phone=phone,
            party_size=party_size,
            start_time=start_utc,
            duration_minutes=duration_minutes,
            status="confirmed",
        )
        session.add(reservation)
        await session.commit()

    logger.info(
        "Reservation %s confirmed: table %s, %s for %s min, party of %s",
        reservation.id, table_id, start_utc.isoformat(), duration_minutes, party_size,
    )
    return reservation


async def list_reservations_by_date(
    session: AsyncSession,
    restaurant_id: int,
    day: str,
    tz: tzinfo | None = None,
) -> list[tuple[Reservation, DiningTable]]:
    """All reservations starting on ``day`` (local calendar), with their tables."""
    parsed = parse_day(day)

    restaurant = await session.get(Restaurant, restaurant_id)
    if restaurant is None:
        raise NotFound("Restaurant not found")

    tz = tz or local_zone()
    day_start = datetime.combine(parsed, time.min, tzinfo=tz).astimezone(timezone.utc)
    day_end = datetime.combine(parsed + timedelta(days=1), time.min, tzinfo=tz).astimezone(timezone.utc)

    result = await session.execute(
        select(Reservation, DiningTable)
        .join(DiningTable, Reservation.table_id == DiningTable.id)
        .where(
            Reservation.restaurant_id == restaurant_id,
            Reservation.start_time >= day_start,
            Reservation.start_time < day_end,
        )
        .order_by(Reservation.start_time, Reservation.id)
    )
    return [(row.Reservation, row.DiningTable) for row in result]


async def cancel_reservation(session: AsyncSession, reservation_id: int) -> Reservation:
    """Mark a reservation cancelled. The row is kept for history."""
    reservation = await session.get(Reservation, reservation_id)
    if reservation is None:
        raise NotFound("Reservation not found")

    reservation.status = "cancelled"
    await session.commit()
    logger.info("Reservation %s cancelled", reservation_id)
    return reservation
