"""Administrative counter endpoints."""

import structlog
from fastapi import APIRouter
from pydantic import BaseModel, Field

from laundry.api.v1.dependencies import AllocatorDep
from laundry.api.v1.errors import service_errors

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["counters"])


class CounterResetRequest(BaseModel):
    value: int = Field(default=0, ge=0)


class CounterResponse(BaseModel):
    key: str
    sequence: int


@router.get("/counters/{key}", response_model=CounterResponse, operation_id="getCounter")
async def get_counter(key: str, allocator: AllocatorDep) -> CounterResponse:
    """Last issued value for a counter (0 when never used)."""
    with service_errors():
        sequence = await allocator.peek(key)
    return CounterResponse(key=key, sequence=sequence)


@router.post("/counters/{key}/reset", response_model=CounterResponse, operation_id="resetCounter")
async def reset_counter(key: str, request: CounterResetRequest, allocator: AllocatorDep) -> CounterResponse:
    """Overwrite a counter.

    Numbers issued after a reset can repeat earlier ones; order creation then
    fails with 409 until the counter has moved past the existing tickets.
    """
    with service_errors():
        sequence = await allocator.reset(key, request.value)
    return CounterResponse(key=key, sequence=sequence)
