"""Database engine and session configuration."""

from typing import Any

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel

# Register all models with SQLAlchemy (required for metadata.create_all)
import laundry.models  # noqa: F401
from laundry.config import settings


def build_engine(database_url: str, **overrides: Any) -> AsyncEngine:
    """Create an async engine; pool sizing only applies to server databases."""
    options: dict[str, Any] = {"echo": False, "future": True}  # SQL logging controlled via structlog
    if make_url(database_url).get_backend_name() != "sqlite":
        options.update(
            pool_size=5,
            max_overflow=10,
            pool_pre_ping=True,  # Verify connections before use
            pool_recycle=300,  # Recycle connections after 5 minutes
        )
    options.update(overrides)
    return create_async_engine(database_url, **options)


def build_session_maker(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False)


engine = build_engine(settings.database_url)
async_session_maker = build_session_maker(engine)


async def init_models(bind: AsyncEngine | None = None) -> None:
    """Create missing tables."""
    async with (bind or engine).begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


async def dispose_engine() -> None:
    """Dispose of the engine and release all connections.

    Should be called during application shutdown.
    """
    await engine.dispose()
