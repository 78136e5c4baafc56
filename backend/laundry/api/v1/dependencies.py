"""FastAPI dependencies for service injection."""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from laundry.config import settings
from laundry.db import async_session_maker
from laundry.services.counters import RedisCounterStore, SequenceAllocator, SqlCounterStore
from laundry.services.customers import CustomerService
from laundry.services.notifications import OrderNotifier, build_dispatcher
from laundry.services.orders import OrderLifecycleService, SqlOrderRepository
from laundry.tasks import detached_tasks
from laundry.utils.redis import redis_client


@lru_cache
def get_allocator() -> SequenceAllocator:
    """Get the process-wide SequenceAllocator on the configured counter backend."""
    if settings.counter_backend == "redis":
        return SequenceAllocator(RedisCounterStore(redis_client()), timeout=settings.storage_timeout)
    return SequenceAllocator(SqlCounterStore(async_session_maker), timeout=settings.storage_timeout)


@lru_cache
def get_notifier() -> OrderNotifier:
    """Get the process-wide OrderNotifier."""
    return OrderNotifier(build_dispatcher(settings), detached_tasks)


def get_session_maker() -> async_sessionmaker[AsyncSession]:
    return async_session_maker


SessionMakerDep = Annotated[async_sessionmaker[AsyncSession], Depends(get_session_maker)]
AllocatorDep = Annotated[SequenceAllocator, Depends(get_allocator)]
NotifierDep = Annotated[OrderNotifier, Depends(get_notifier)]


def get_order_repository(session_maker: SessionMakerDep) -> SqlOrderRepository:
    return SqlOrderRepository(session_maker, timeout=settings.storage_timeout)


def get_customer_service(session_maker: SessionMakerDep, allocator: AllocatorDep) -> CustomerService:
    """Get a CustomerService instance."""
    return CustomerService(session_maker, allocator, timeout=settings.storage_timeout)


CustomerServiceDep = Annotated[CustomerService, Depends(get_customer_service)]


def get_lifecycle_service(
    repository: Annotated[SqlOrderRepository, Depends(get_order_repository)],
    allocator: AllocatorDep,
    customers: CustomerServiceDep,
    notifier: NotifierDep,
) -> OrderLifecycleService:
    """Get an OrderLifecycleService instance."""
    return OrderLifecycleService(
        repository,
        allocator,
        customers,
        notifier,
        store_code=settings.store_code,
        rack_ids=settings.rack_ids,
    )


# Type aliases for cleaner endpoint signatures
LifecycleServiceDep = Annotated[OrderLifecycleService, Depends(get_lifecycle_service)]
