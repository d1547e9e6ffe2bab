from fastapi import APIRouter, Request
from sqlalchemy.exc import SQLAlchemyError

from backend.app.core import redis_client as redis_module
from backend.app.core.errors import ServiceUnavailable


# /health is served at the root, /readiness under the API prefix.
router = APIRouter()
readiness_router = APIRouter()


@router.get("/health")
async def health() -> dict[str, str]:
    """Basic liveness check."""
    return {"status": "ok"}


@readiness_router.get("/readiness")
async def readiness(request: Request) -> dict[str, bool]:
    """Ensure the database (and Redis, when configured) is reachable."""
    try:
        await request.app.state.database.ping()
    except SQLAlchemyError as exc:
        raise ServiceUnavailable("Database unavailable") from exc

    if redis_module.redis_client is not None:
        try:
            await redis_module.redis_client.ping()
        except Exception as exc:  # pragma: no cover - defensive guard
            raise ServiceUnavailable("Redis unavailable") from exc

    return {"ready": True}
