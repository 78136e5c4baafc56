"""Shared fixtures: a throwaway SQLite database per test and fully wired services."""

import asyncio
from collections.abc import AsyncIterator, Callable
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Any

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from laundry.db import build_engine, build_session_maker, init_models
from laundry.services.counters import SequenceAllocator, SqlCounterStore
from laundry.services.customers import CustomerService
from laundry.services.exceptions import DispatchFailure
from laundry.services.notifications import NotificationEvent, OrderNotifier
from laundry.services.orders import OrderDraft, OrderItemDraft, OrderLifecycleService, SqlOrderRepository
from laundry.tasks.detached import DetachedTasks

BUSINESS_DAY = date(2026, 2, 1)
RACKS = frozenset({"Rack 1", "Rack 2", "Rack 3"})


class RecordingDispatcher:
    """Captures dispatched events; optionally fails or blocks to exercise isolation."""

    def __init__(self) -> None:
        self.events: list[NotificationEvent] = []
        self.fail = False
        self.gate: Any = None  # asyncio.Event to hold dispatch until set

    async def dispatch(self, event: NotificationEvent) -> None:
        if self.gate is not None:
            await self.gate.wait()
        if self.fail:
            raise DispatchFailure("gateway down", channel="whatsapp", ticket_number=event.ticket_number)
        self.events.append(event)

    def kinds(self) -> list[str]:
        return [event.kind.value for event in self.events]


class SlowCommitSession(AsyncSession):
    """Session whose commit stalls, so a storage timeout fires with the work still uncommitted."""

    async def commit(self) -> None:
        await asyncio.sleep(5)
        await super().commit()


@pytest.fixture
async def engine(tmp_path: Path) -> AsyncIterator[AsyncEngine]:
    # File database so every session gets its own connection and concurrency is real
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'laundry.db'}")
    await init_models(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return build_session_maker(engine)


@pytest.fixture
def slow_commit_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=SlowCommitSession, expire_on_commit=False)


@pytest.fixture
def allocator(session_maker: async_sessionmaker[AsyncSession]) -> SequenceAllocator:
    return SequenceAllocator(SqlCounterStore(session_maker), timeout=10.0)


@pytest.fixture
def dispatcher() -> RecordingDispatcher:
    return RecordingDispatcher()


@pytest.fixture
async def detached() -> AsyncIterator[DetachedTasks]:
    tasks = DetachedTasks()
    yield tasks
    await tasks.drain(timeout=5)


@pytest.fixture
def notifier(dispatcher: RecordingDispatcher, detached: DetachedTasks) -> OrderNotifier:
    return OrderNotifier(dispatcher, detached)


@pytest.fixture
def customers(session_maker: async_sessionmaker[AsyncSession], allocator: SequenceAllocator) -> CustomerService:
    return CustomerService(session_maker, allocator, timeout=10.0)


@pytest.fixture
def repository(session_maker: async_sessionmaker[AsyncSession]) -> SqlOrderRepository:
    return SqlOrderRepository(session_maker, timeout=10.0)


@pytest.fixture
def service(
    repository: SqlOrderRepository,
    allocator: SequenceAllocator,
    customers: CustomerService,
    notifier: OrderNotifier,
) -> OrderLifecycleService:
    return OrderLifecycleService(
        repository,
        allocator,
        customers,
        notifier,
        store_code="001",
        rack_ids=RACKS,
        today=lambda: BUSINESS_DAY,
    )


@pytest.fixture
def make_draft() -> Callable[..., OrderDraft]:
    def _make(**overrides: Any) -> OrderDraft:
        data: dict[str, Any] = {
            "phone_number": "9876543210",
            "customer_name": "Asha Rao",
            "items": [
                OrderItemDraft(description="Shirt", quantity=2, price=Decimal("50")),
                OrderItemDraft(description="Saree", quantity=1, price=Decimal("300")),
            ],
        }
        data.update(overrides)
        return OrderDraft(**data)

    return _make
