from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.db.session import get_session
from backend.app.routers.schemas import CancelOut, ReservationIn, ReservationOut
from backend.app.services.reservations import cancel_reservation as cancel_reservation_service
from backend.app.services.reservations import create_reservation as create_reservation_service


router = APIRouter()


@router.post("/reservations", response_model=ReservationOut, status_code=status.HTTP_201_CREATED)
async def create_reservation(
    payload: ReservationIn,
    session: AsyncSession = Depends(get_session),
) -> ReservationOut:
    reservation = await create_reservation_service(
        session,
        restaurant_id=payload.restaurant_id,
        table_id=payload.table_id,
        customer_name=payload.customer_name,
        phone=payload.phone,
        party_size=payload.party_size,
        start_time=payload.start_time,
        duration_minutes=payload.duration_minutes,
    )
    return ReservationOut.model_validate(reservation)


@router.patch("/reservations/{reservation_id}/cancel", response_model=CancelOut)
async def cancel_reservation(
    reservation_id: int,
    session: AsyncSession = Depends(get_session),
) -> CancelOut:
    reservation = await cancel_reservation_service(session, reservation_id)
    return CancelOut(message="Reservation cancelled", id=reservation.id)
