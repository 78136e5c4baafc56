"""Sequence allocator service."""

import structlog

from laundry.db.guard import guarded
from laundry.services.counters.exceptions import InvalidCounterKey, InvalidSequence
from laundry.services.counters.stores import CounterStore

logger = structlog.get_logger(__name__)

MAX_KEY_LENGTH = 64


class SequenceAllocator:
    """Issues unique, strictly increasing integers per counter key.

    All state lives in the CounterStore; this class only validates input,
    applies the storage timeout and maps store outages to StoreUnavailable.

    Usage:
        allocator = SequenceAllocator(SqlCounterStore(async_session_maker))
        seq = await allocator.allocate("ticket_260201")   # reserved
        last = await allocator.peek("ticket_260201")      # display only, not reserved
    """

    def __init__(self, store: CounterStore, *, timeout: float | None = 10.0):
        self.store = store
        self.timeout = timeout

    def _check_key(self, key: str) -> None:
        if not key or len(key) > MAX_KEY_LENGTH:
            raise InvalidCounterKey(f"Counter key must be 1-{MAX_KEY_LENGTH} characters, got {key!r}")

    async def allocate(self, key: str, *, prefix: str = "", timeout: float | None = None) -> int:
        """Reserve the next value for `key`.

        Gaps are possible when a caller fails after allocating; duplicates are not.
        Raises StoreUnavailable when the store cannot be reached in time.
        """
        self._check_key(key)
        value = await guarded(
            self.store.increment_and_get(key, prefix=prefix),
            name="counter.allocate",
            timeout=self.timeout if timeout is None else timeout,
        )
        logger.debug("Allocated sequence", counter_key=key, sequence=value)
        return value

    async def peek(self, key: str, *, timeout: float | None = None) -> int:
        """Return the last issued value (0 if never allocated) without reserving anything."""
        self._check_key(key)
        value = await guarded(
            self.store.get_without_increment(key),
            name="counter.peek",
            timeout=self.timeout if timeout is None else timeout,
        )
        return value or 0

    async def reset(self, key: str, value: int = 0, *, timeout: float | None = None) -> int:
        """Overwrite the counter. Administrative use only.

        Not safe to run concurrently with allocate(): values issued around the
        reset may repeat ones issued before it.
        """
        self._check_key(key)
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise InvalidSequence(f"Counter value must be a non-negative integer, got {value!r}")
        stored = await guarded(
            self.store.set_unconditionally(key, value),
            name="counter.reset",
            timeout=self.timeout if timeout is None else timeout,
        )
        logger.warning("Counter reset", counter_key=key, sequence=stored)
        return stored
