import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from backend.app.core.errors import Conflict, NotFound
from backend.app.db.models import DiningTable, Restaurant


logger = logging.getLogger(__name__)


async def create_restaurant(
    session: AsyncSession,
    *,
    name: str,
    opening_time: str,
    closing_time: str,
) -> Restaurant:
    restaurant = Restaurant(name=name, opening_time=opening_time, closing_time=closing_time)
    session.add(restaurant)
    await session.commit()
    logger.info("Restaurant %s created (%s-%s)", restaurant.id, opening_time, closing_time)
    return restaurant


async def list_restaurants(session: AsyncSession) -> list[Restaurant]:
    result = await session.execute(select(Restaurant).order_by(Restaurant.name, Restaurant.id))
    return list(result.scalars())


async def get_restaurant(session: AsyncSession, restaurant_id: int) -> Restaurant:
    """Load a restaurant with its tables ordered by table number."""
    restaurant = await session.scalar(
        select(Restaurant)
        .where(Restaurant.id == restaurant_id)
        .options(selectinload(Restaurant.tables))
    )
    if restaurant is None:
        raise NotFound("Restaurant not found")
    return restaurant


async def add_table(
    session: AsyncSession,
    *,
    restaurant_id: int,
    table_number: int,
    capacity: int,
) -> DiningTable:
    restaurant = await session.get(Restaurant, restaurant_id)
    if restaurant is None:
        raise NotFound("Restaurant not found")

    duplicate_message = f"Table {table_number} already exists for this restaurant"
    existing = await session.scalar(
        select(DiningTable).where(
            DiningTable.restaurant_id == restaurant_id,
            DiningTable.table_number == table_number,
        )
    )
    if existing is not None:
        raise Conflict(duplicate_message)

    table = DiningTable(restaurant_id=restaurant_id, table_number=table_number, capacity=capacity)
    session.add(table)
    try:
        await session.commit()
    except IntegrityError as exc:
        # Lost a race with a concurrent insert of the same number.
        await session.rollback()
        raise Conflict(duplicate_message) from exc

    logger.info("Table %s (#%s, %s seats) added to restaurant %s", table.id, table_number, capacity, restaurant_id)
    return table
