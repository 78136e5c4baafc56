"""Counter stores: the atomic increment-and-read primitive behind the allocator.

Two backends are provided:
- SqlCounterStore keeps counters in the `counters` table (default)
- RedisCounterStore keeps them as Redis integers (INCR)

Neither keeps counter state in process memory, so any number of service
instances can allocate from the same store.
"""

from typing import Protocol

import structlog
from redis.asyncio import Redis
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from laundry.models.counter import Counter
from laundry.models.types import utc_now

logger = structlog.get_logger(__name__)


class CounterStore(Protocol):
    """Storage primitives required by SequenceAllocator."""

    async def increment_and_get(self, key: str, *, prefix: str = "") -> int:
        """Atomically add one to the counter (creating it at 1) and return the new value."""
        ...

    async def get_without_increment(self, key: str) -> int | None:
        """Return the current value, or None when the counter does not exist."""
        ...

    async def set_unconditionally(self, key: str, value: int) -> int:
        """Overwrite the counter (creating it if needed) and return the stored value."""
        ...


class SqlCounterStore:
    """Counter store on the `counters` table.

    Increment is a single upsert statement:

        INSERT INTO counters (key, sequence, ...) VALUES (:key, 1, ...)
        ON CONFLICT (key) DO UPDATE SET sequence = counters.sequence + 1, ...
        RETURNING sequence

    The row lock taken by the upsert serializes concurrent callers for the same
    key, and each caller reads back the value its own statement wrote.
    Supported on PostgreSQL and SQLite (3.35+).
    """

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self.session_maker = session_maker

    @staticmethod
    def _insert_for(session: AsyncSession):  # type: ignore[no-untyped-def]
        dialect = session.get_bind().dialect.name
        if dialect == "postgresql":
            return postgresql.insert
        if dialect == "sqlite":
            return sqlite.insert
        raise RuntimeError(f"Counter upsert not supported on {dialect}")

    async def increment_and_get(self, key: str, *, prefix: str = "") -> int:
        async with self.session_maker() as session:
            insert = self._insert_for(session)
            now = utc_now()
            stmt = insert(Counter).values(key=key, sequence=1, prefix=prefix, last_updated=now)
            stmt = stmt.on_conflict_do_update(
                index_elements=["key"],
                set_={
                    "sequence": Counter.__table__.c.sequence + 1,  # type: ignore[attr-defined]
                    "prefix": prefix,
                    "last_updated": now,
                },
            ).returning(Counter.__table__.c.sequence)  # type: ignore[attr-defined]
            result = await session.execute(stmt)
            value: int = result.scalar_one()
            await session.commit()
            return value

    async def get_without_increment(self, key: str) -> int | None:
        async with self.session_maker() as session:
            counter = await session.get(Counter, key)
            return counter.sequence if counter else None

    async def set_unconditionally(self, key: str, value: int) -> int:
        async with self.session_maker() as session:
            insert = self._insert_for(session)
            now = utc_now()
            stmt = insert(Counter).values(key=key, sequence=value, last_updated=now)
            stmt = stmt.on_conflict_do_update(
                index_elements=["key"],
                set_={"sequence": value, "last_updated": now},
            )
            await session.execute(stmt)
            await session.commit()
            return value


class RedisCounterStore:
    """Counter store on Redis integers.

    Keys are namespaced as "counter:<key>"; prefix and last-updated metadata
    live in a "counter:<key>:meta" hash written in the same MULTI block as the
    increment.
    """

    def __init__(self, client: Redis, *, namespace: str = "counter"):
        self.client = client
        self.namespace = namespace

    def _key(self, key: str) -> str:
        return f"{self.namespace}:{key}"

    async def increment_and_get(self, key: str, *, prefix: str = "") -> int:
        async with self.client.pipeline(transaction=True) as pipe:
            pipe.incr(self._key(key))
            pipe.hset(f"{self._key(key)}:meta", mapping={"prefix": prefix, "last_updated": utc_now().isoformat()})
            value, _ = await pipe.execute()
        return int(value)

    async def get_without_increment(self, key: str) -> int | None:
        value = await self.client.get(self._key(key))
        return int(value) if value is not None else None

    async def set_unconditionally(self, key: str, value: int) -> int:
        async with self.client.pipeline(transaction=True) as pipe:
            pipe.set(self._key(key), value)
            pipe.hset(f"{self._key(key)}:meta", mapping={"last_updated": utc_now().isoformat()})
            await pipe.execute()
        return value
