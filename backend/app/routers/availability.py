from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.db.session import get_session
from backend.app.routers.schemas import AvailabilityOut, AvailabilitySlot
from backend.app.services.availability import available_slots


router = APIRouter()


@router.get("/availability", response_model=AvailabilityOut)
async def get_availability(
    restaurant_id: int | None = Query(default=None),
    date: str | None = Query(default=None, description="YYYY-MM-DD"),
    party_size: int | None = Query(default=None),
    session: AsyncSession = Depends(get_session),
) -> AvailabilityOut:
    slots = await available_slots(session, restaurant_id, date, party_size)
    return AvailabilityOut(available_slots=[AvailabilitySlot(**slot) for slot in slots])
