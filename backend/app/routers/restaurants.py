from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.db.session import get_session
from backend.app.routers.schemas import (
    ReservationOut,
    ReservationWithTableOut,
    RestaurantDetailOut,
    RestaurantIn,
    RestaurantOut,
    TableIn,
    TableOut,
)
from backend.app.services import reservations as reservation_service
from backend.app.services import restaurants as restaurant_service


router = APIRouter()


@router.post("/restaurants", response_model=RestaurantOut, status_code=status.HTTP_201_CREATED)
async def create_restaurant(
    payload: RestaurantIn,
    session: AsyncSession = Depends(get_session),
) -> RestaurantOut:
    restaurant = await restaurant_service.create_restaurant(
        session,
        name=payload.name,
        opening_time=payload.opening_time,
        closing_time=payload.closing_time,
    )
    return RestaurantOut.model_validate(restaurant)


@router.get("/restaurants", response_model=list[RestaurantOut])
async def list_restaurants(session: AsyncSession = Depends(get_session)) -> list[RestaurantOut]:
    restaurants = await restaurant_service.list_restaurants(session)
    return [RestaurantOut.model_validate(restaurant) for restaurant in restaurants]


@router.get("/restaurants/{restaurant_id}", response_model=RestaurantDetailOut)
async def get_restaurant(
    restaurant_id: int,
    session: AsyncSession = Depends(get_session),
) -> RestaurantDetailOut:
    restaurant = await restaurant_service.get_restaurant(session, restaurant_id)
    return RestaurantDetailOut.model_validate(restaurant)


@router.post(
    "/restaurants/{restaurant_id}/tables",
    response_model=TableOut,
    status_code=status.HTTP_201_CREATED,
)
async def add_table(
    payload: TableIn,
    restaurant_id: int = Path(gt=0),
    session: AsyncSession = Depends(get_session),
) -> TableOut:
    table = await restaurant_service.add_table(
        session,
        restaurant_id=restaurant_id,
        table_number=payload.table_number,
        capacity=payload.capacity,
    )
    return TableOut.model_validate(table)


@router.get(
    "/restaurants/{restaurant_id}/reservations/{day}",
    response_model=list[ReservationWithTableOut],
)
async def list_reservations_by_date(
    restaurant_id: int,
    day: str,
    session: AsyncSession = Depends(get_session),
) -> list[ReservationWithTableOut]:
    rows = await reservation_service.list_reservations_by_date(session, restaurant_id, day)
    return [
        ReservationWithTableOut(
            **ReservationOut.model_validate(reservation).model_dump(),
            table_number=table.table_number,
            capacity=table.capacity,
        )
        for reservation, table in rows
    ]
