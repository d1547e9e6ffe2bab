from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from uuid import uuid4

import redis.asyncio as redis

from backend.app.core.config import settings
from backend.app.core.errors import TableBusy


redis_client: redis.Redis | None = None

RELEASE_SCRIPT = """
if redis.call("GET", KEYS[1]) == ARGV[1] then
    return redis.call("DEL", KEYS[1])
end
return 0
"""


async def init_redis() -> None:
    """Initialise a shared Redis connection when REDIS_URL is configured."""
    global redis_client
    if not settings.REDIS_URL:
        redis_client = None
        return
    redis_client = redis.from_url(
        settings.REDIS_URL,
        decode_responses=True,
    )


async def close_redis() -> None:
    """Close the Redis connection if it was initialised."""
    global redis_client
    if redis_client is not None:
        await redis_client.aclose()
    redis_client = None


def _table_lock_key(table_id: int) -> str:
    return f"lock:table:{table_id}"


@asynccontextmanager
async def table_lock(table_id: int) -> AsyncIterator[None]:
    """Hold ``lock:table:{id}`` for the overlap-check-then-insert span.

    Without a Redis client this is a no-op and two concurrent bookings of the
    same table can both pass the overlap check.
    """
    if redis_client is None:
        yield
        return

    key = _table_lock_key(table_id)
    token = str(uuid4())
    acquired = await redis_client.set(key, token, nx=True, px=settings.TABLE_LOCK_TTL_MS)
    if not acquired:
        raise TableBusy()

    try:
        yield
    finally:
        # Compare-and-delete in one step; an expired lock may belong to someone else by now.
        await redis_client.eval(RELEASE_SCRIPT, 1, key, token)
