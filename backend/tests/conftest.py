from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core import redis_client as redis_module
from backend.app.core.config import settings
from backend.app.db.session import Database
from backend.app.main import app


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
BOOKING_DAY = "2030-01-10"


@pytest_asyncio.fixture
async def database() -> AsyncIterator[Database]:
    """Fresh schema per test, mirroring a schema re-run between suites."""
    db = Database(TEST_DATABASE_URL)
    await db.reset()
    app.state.database = db
    try:
        yield db
    finally:
        await db.dispose()


@pytest_asyncio.fixture
async def session(database: Database) -> AsyncIterator[AsyncSession]:
    async with database.session() as session:
        yield session


@pytest_asyncio.fixture
async def client(database: Database) -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture(autouse=True)
def no_redis(monkeypatch):
    monkeypatch.setattr(redis_module, "redis_client", None)


@pytest_asyncio.fixture
async def restaurant(client: AsyncClient) -> dict:
    response = await client.post(
        "/api/restaurants",
        json={"name": "The Grill House", "opening_time": "10:00", "closing_time": "22:00"},
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest_asyncio.fixture
async def table(client: AsyncClient, restaurant: dict) -> dict:
    response = await client.post(
        f"/api/restaurants/{restaurant['id']}/tables",
        json={"table_number": 1, "capacity": 4},
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def reservation_payload(restaurant: dict, table: dict):
    def _payload(**overrides) -> dict:
        payload = {
            "restaurant_id": restaurant["id"],
            "table_id": table["id"],
            "customer_name": "John Doe",
            "phone": "1234567890",
            "party_size": 2,
            "start_time": f"{BOOKING_DAY}T12:00:00Z",
            "duration_minutes": 90,
        }
        payload.update(overrides)
        return payload

    return _payload


@pytest.fixture(autouse=True)
def utc_wall_clock(monkeypatch):
    monkeypatch.setattr(settings, "TIMEZONE", "UTC")
