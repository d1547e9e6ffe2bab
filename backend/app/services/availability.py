from __future__ import annotations

from datetime import datetime, time, timezone, tzinfo

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.errors import MissingParameter, NotFound
from backend.app.db.models import DiningTable, Restaurant
from backend.app.services.reservations import has_overlap, local_zone, parse_day

# Every slot is checked as a 90 minute booking, whatever the caller ends up reserving.
SLOT_CHECK_MINUTES = 90
SLOT_MINUTES = (0, 15, 30, 45)


async def _eligible_tables(session: AsyncSession, restaurant_id: int, party_size: int) -> list[DiningTable]:
    result = await session.execute(
        select(DiningTable)
        .where(
            DiningTable.restaurant_id == restaurant_id,
            DiningTable.capacity >= party_size,
        )
        .order_by(DiningTable.capacity, DiningTable.id)
    )
    return list(result.scalars())


def _slot_starts(restaurant: Restaurant, day, tz: tzinfo) -> list[datetime]:
    # Hour granularity: a 22:30 close still stops after the 21:45 slot.
    open_hour = int(restaurant.opening_time.split(":")[0])
    close_hour = int(restaurant.closing_time.split(":")[0])
    return [
        datetime.combine(day, time(hour, minute), tzinfo=tz).astimezone(timezone.utc)
        for hour in range(open_hour, close_hour)
        for minute in SLOT_MINUTES
    ]


async def available_slots(
    session: AsyncSession,
    restaurant_id: int | None,
    day: str | None,
    party_size: int | None,
    tz: tzinfo | None = None,
) -> list[dict]:
    """Quarter-hour start times with the smallest free table that seats the party.

    At most one table is reported per slot.
    """
    if restaurant_id is None or not day or party_size is None:
        raise MissingParameter()

    parsed = parse_day(day)

    restaurant = await session.get(Restaurant, restaurant_id)
    if restaurant is None:
        raise NotFound("Restaurant not found")

    tables = await _eligible_tables(session, restaurant_id, party_size)
    if not tables:
        return []

    slots: list[dict] = []
    for slot_start in _slot_starts(restaurant, parsed, tz or local_zone()):
        for table in tables:
            if not await has_overlap(session, table.id, slot_start, SLOT_CHECK_MINUTES):
                slots.append(
                    {
                        "time": slot_start,
                        "table_id": table.id,
                        "table_number": table.table_number,
                    }
                )
                break
    return slots
