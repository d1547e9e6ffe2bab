from datetime import datetime, timezone
from types import SimpleNamespace
from zoneinfo import ZoneInfo

import pytest
import pytest_asyncio

from backend.app.core.errors import CapacityExceeded, Conflict, NotFound, OutOfHours
from backend.app.db.models import Reservation
from backend.app.services import reservations as reservation_service
from backend.app.services import restaurants as restaurant_service


def at(hour: int, minute: int = 0) -> datetime:
    return datetime(2030, 1, 10, hour, minute, tzinfo=timezone.utc)


@pytest_asyncio.fixture
async def bistro(session):
    restaurant = await restaurant_service.create_restaurant(
        session, name="Bistro", opening_time="10:00", closing_time="22:00"
    )
    small = await restaurant_service.add_table(session, restaurant_id=restaurant.id, table_number=1, capacity=2)
    large = await restaurant_service.add_table(session, restaurant_id=restaurant.id, table_number=2, capacity=6)
    return SimpleNamespace(restaurant=restaurant, small=small, large=large)


async def book(session, bistro, table, start, duration=90, party_size=2):
    return await reservation_service.create_reservation(
        session,
        restaurant_id=bistro.restaurant.id,
        table_id=table.id,
        customer_name="Ada Lovelace",
        phone="5551234567",
        party_size=party_size,
        start_time=start,
        duration_minutes=duration,
    )


@pytest.mark.asyncio
class TestHasOverlap:
    async def test_empty_table_has_no_overlap(self, session, bistro):
        assert await reservation_service.has_overlap(session, bistro.small.id, at(12), 90) is False

    @pytest.mark.parametrize(
        ("start", "duration", "expected"),
        [
            (at(12), 90, True),  # identical
            (at(11), 90, True),  # ends inside
            (at(13), 60, True),  # starts inside
            (at(11), 240, True),  # encloses
            (at(12, 30), 15, True),  # enclosed
            (at(13, 30), 60, False),  # starts at existing end
            (at(10, 30), 90, False),  # ends at existing start
        ],
    )
    async def test_half_open_intervals(self, session, bistro, start, duration, expected):
        await book(session, bistro, bistro.small, at(12), 90)

        assert await reservation_service.has_overlap(session, bistro.small.id, start, duration) is expected

    async def test_other_tables_do_not_count(self, session, bistro):
        await book(session, bistro, bistro.small, at(12))

        assert await reservation_service.has_overlap(session, bistro.large.id, at(12), 90) is False

    @pytest.mark.parametrize("status", ["cancelled", "completed"])
    async def test_inactive_reservations_do_not_count(self, session, bistro, status):
        reservation = await book(session, bistro, bistro.small, at(12))
        reservation.status = status
        await session.commit()

        assert await reservation_service.has_overlap(session, bistro.small.id, at(12), 90) is False

    async def test_pending_reservations_count(self, session, bistro):
        reservation = await book(session, bistro, bistro.small, at(12))
        reservation.status = "pending"
        await session.commit()

        assert await reservation_service.has_overlap(session, bistro.small.id, at(12, 45), 30) is True


class TestWithinHours:
    restaurant = SimpleNamespace(opening_time="10:00", closing_time="22:00")

    def test_inside(self):
        assert reservation_service.within_hours(self.restaurant, at(10), at(22), timezone.utc)

    def test_starts_before_opening(self):
        assert not reservation_service.within_hours(self.restaurant, at(9, 59), at(11), timezone.utc)

    def test_ends_after_closing(self):
        assert not reservation_service.within_hours(self.restaurant, at(21), at(22, 1), timezone.utc)

    def test_uses_wall_clock_of_given_zone(self):
        # 09:30 UTC is 10:30 in Paris in January
        paris = ZoneInfo("Europe/Paris")
        assert reservation_service.within_hours(self.restaurant, at(9, 30), at(11), paris)
        assert not reservation_service.within_hours(self.restaurant, at(9, 30), at(11), timezone.utc)

    def test_date_is_dropped_past_midnight(self):
        # 00:30 on the next day compares as "00:30" <= "23:59".
        late = SimpleNamespace(opening_time="18:00", closing_time="23:59")
        start = datetime(2030, 1, 10, 23, 0, tzinfo=timezone.utc)
        end = datetime(2030, 1, 11, 0, 30, tzinfo=timezone.utc)

        assert reservation_service.within_hours(late, start, end, timezone.utc)

    def test_inverted_hours_are_not_special_cased(self):
        inverted = SimpleNamespace(opening_time="22:00", closing_time="10:00")

        assert not reservation_service.within_hours(inverted, at(12), at(13), timezone.utc)


@pytest.mark.asyncio
class TestCreateReservation:
    async def test_confirmed_and_persisted(self, session, bistro):
        reservation = await book(session, bistro, bistro.small, at(12))

        assert reservation.id is not None
        assert reservation.status == "confirmed"
        assert reservation.created_at is not None
        assert reservation.start_time == at(12)

    async def test_checks_run_in_order(self, session, bistro):
        # Oversized party at an out-of-hours time reports capacity first.
        with pytest.raises(CapacityExceeded) as exc_info:
            await book(session, bistro, bistro.small, at(8), party_size=5)

        assert exc_info.value.capacity == 2
        assert exc_info.value.party_size == 5

    async def test_out_of_hours(self, session, bistro):
        with pytest.raises(OutOfHours, match="10:00 to 22:00"):
            await book(session, bistro, bistro.small, at(21, 30))

    async def test_conflict_leaves_no_trace(self, session, bistro):
        await book(session, bistro, bistro.small, at(12))

        with pytest.raises(Conflict):
            await book(session, bistro, bistro.small, at(12, 15))

        rows = await reservation_service.list_reservations_by_date(session, bistro.restaurant.id, "2030-01-10")
        assert len(rows) == 1

    async def test_unknown_table(self, session, bistro):
        with pytest.raises(NotFound, match="Table not found"):
            await reservation_service.create_reservation(
                session,
                restaurant_id=bistro.restaurant.id,
                table_id=999,
                customer_name="Ada Lovelace",
                phone="5551234567",
                party_size=2,
                start_time=at(12),
                duration_minutes=90,
            )


@pytest.mark.asyncio
class TestCancelReservation:
    async def test_cancel_keeps_row(self, session, bistro):
        reservation = await book(session, bistro, bistro.small, at(12))

        cancelled = await reservation_service.cancel_reservation(session, reservation.id)

        assert cancelled.status == "cancelled"
        assert await session.get(Reservation, reservation.id) is not None

    async def test_cancel_completed_reservation(self, session, bistro):
        reservation = await book(session, bistro, bistro.small, at(12))
        reservation.status = "completed"
        await session.commit()

        cancelled = await reservation_service.cancel_reservation(session, reservation.id)

        assert cancelled.status == "cancelled"

    async def test_cancel_unknown(self, session):
        with pytest.raises(NotFound):
            await reservation_service.cancel_reservation(session, 404)


@pytest.mark.asyncio
async def test_deleting_restaurant_cascades(session, bistro):
    await book(session, bistro, bistro.small, at(12))

    await session.delete(bistro.restaurant)
    await session.commit()
    session.expunge_all()

    assert await session.get(Reservation, 1) is None
