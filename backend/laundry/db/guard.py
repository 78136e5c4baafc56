"""Timeout and error mapping for calls that touch shared storage."""

import asyncio
from collections.abc import Awaitable
from typing import TypeVar

import structlog
from redis.exceptions import RedisError
from sqlalchemy.exc import DBAPIError, IntegrityError, InterfaceError, OperationalError

from laundry.services.exceptions import StoreUnavailable

logger = structlog.get_logger(__name__)

T = TypeVar("T")

# Driver-level failures that mean "the store did not answer", not "the request was wrong"
UNAVAILABLE_ERRORS: tuple[type[BaseException], ...] = (
    OperationalError,
    InterfaceError,
    DBAPIError,
    RedisError,
    ConnectionError,
    OSError,
)


async def guarded(operation: Awaitable[T], *, name: str, timeout: float | None) -> T:
    """Await a storage operation with a timeout, mapping outages to StoreUnavailable.

    The operation must be all-or-nothing at the storage boundary: it runs in its
    own session/transaction, so a timeout (which cancels it) rolls back whatever
    it had not yet committed.

    IntegrityError passes through untouched - a constraint violation is a
    conflict for the caller to interpret, not an outage.

    Usage:
        value = await guarded(store.increment_and_get(key), name="allocate", timeout=5.0)
    """
    try:
        return await asyncio.wait_for(operation, timeout=timeout)
    except IntegrityError:
        raise
    except TimeoutError as e:
        logger.error("Storage operation timed out", operation=name, timeout=timeout)
        raise StoreUnavailable(f"{name} timed out after {timeout}s") from e
    except UNAVAILABLE_ERRORS as e:
        logger.error("Storage unavailable", operation=name, error=str(e))
        raise StoreUnavailable(f"{name} failed: storage unavailable") from e
