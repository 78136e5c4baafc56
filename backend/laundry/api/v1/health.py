"""Health check endpoints."""

from fastapi import APIRouter, Response, status
from sqlalchemy import text

from laundry.api.v1.dependencies import SessionMakerDep
from laundry.config import settings
from laundry.db import guarded
from laundry.services.exceptions import StoreUnavailable

router = APIRouter()


@router.get("/health", operation_id="healthCheck")
async def health_check(session_maker: SessionMakerDep, response: Response) -> dict[str, str]:
    """Health check endpoint. Answers 503 while the database is unreachable."""

    async def ping() -> None:
        async with session_maker() as session:
            await session.execute(text("SELECT 1"))

    try:
        await guarded(ping(), name="health.database", timeout=settings.storage_timeout)
    except StoreUnavailable:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return {"status": "degraded", "database": "unavailable"}
    return {"status": "healthy", "database": "ok"}
