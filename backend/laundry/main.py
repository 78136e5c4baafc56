"""FastAPI application entry point."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from laundry.api.v1 import counters, customers, health, notifications, orders
from laundry.config import settings
from laundry.db import dispose_engine, init_models
from laundry.logging import setup_logging
from laundry.tasks import detached_tasks

# Configure logging before anything else
setup_logging()

logger = structlog.get_logger(__name__)

# Seconds to wait for in-flight notifications on shutdown
SHUTDOWN_DRAIN_TIMEOUT = 10.0


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan handler for startup/shutdown events."""
    # Startup
    logger.info(
        "Starting Laundry Tracker API",
        debug=settings.debug,
        store_code=settings.store_code,
        counter_backend=settings.counter_backend,
    )
    await init_models()
    logger.info("Database tables ready")

    yield

    # Shutdown
    logger.info("Shutting down Laundry Tracker API", pending_notifications=detached_tasks.pending)
    await detached_tasks.drain(timeout=SHUTDOWN_DRAIN_TIMEOUT)
    await dispose_engine()
    logger.info("Database connections disposed")


app = FastAPI(
    title="Laundry Tracker API",
    description="Order lifecycle API for the laundry store",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.backend_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API routes
app.include_router(health.router, prefix="/api/v1", tags=["health"])
app.include_router(orders.router, prefix="/api/v1", tags=["orders"])
app.include_router(customers.router, prefix="/api/v1", tags=["customers"])
app.include_router(counters.router, prefix="/api/v1", tags=["counters"])
app.include_router(notifications.router, prefix="/api/v1", tags=["notifications"])
