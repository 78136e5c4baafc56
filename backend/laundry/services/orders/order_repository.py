"""Order persistence with conditional (compare-and-set) writes."""

from collections.abc import Callable
from typing import Any

import structlog
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_random

from laundry.db.guard import guarded
from laundry.models.enums import OrderStatus
from laundry.models.order import Order, OrderItem
from laundry.models.types import utc_now
from laundry.services.customers import order_stats_update
from laundry.services.exceptions import ConflictError
from laundry.services.orders.exceptions import DuplicateTicketNumber, OrderNotFound, WriteConflict

logger = structlog.get_logger(__name__)

# Receives a detached copy of the current order, returns the column values to write.
# May raise a ValidationError to abort the write.
OrderMutator = Callable[[Order], dict[str, Any]]


class SqlOrderRepository:
    """Orders table access.

    Every method opens its own session, so calls are independent and safe to
    run concurrently. Writes to an existing order go through
    save_conditionally(), which only succeeds when the row still has the
    version it was read with; a writer that loses the race re-reads and
    re-applies its change.

    Usage:
        repository = SqlOrderRepository(async_session_maker)
        order, before = await repository.save_conditionally(
            "260201-001-00001", lambda order: {"status": OrderStatus.WASHING}
        )
    """

    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession],
        *,
        timeout: float | None = 10.0,
        max_attempts: int = 5,
    ):
        self.session_maker = session_maker
        self.timeout = timeout
        self.max_attempts = max_attempts

    def _get_retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            retry=retry_if_exception_type(WriteConflict),
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_random(min=0, max=0.05),
            reraise=True,
        )

    async def load(self, ticket_number: str) -> Order:
        """Get an order with its items. Raises OrderNotFound."""

        async def _load() -> Order:
            async with self.session_maker() as session:
                order = await session.get(Order, ticket_number)
                if order is None:
                    raise OrderNotFound(f"Order {ticket_number!r} not found")
                return order

        return await guarded(_load(), name="orders.load", timeout=self.timeout)

    async def list_by_status(self, status: OrderStatus) -> list[Order]:
        """Orders currently in `status`, oldest first."""

        async def _list() -> list[Order]:
            async with self.session_maker() as session:
                result = await session.execute(
                    select(Order).where(Order.status == status).order_by(Order.created_at)  # type: ignore[arg-type]
                )
                return list(result.scalars().all())

        return await guarded(_list(), name="orders.list", timeout=self.timeout)

    async def create(self, order: Order, items: list[OrderItem]) -> Order:
        """Insert a new order and add it to the customer's running totals, in one transaction.

        Raises:
            DuplicateTicketNumber: ticket number already used
            StoreUnavailable: storage unreachable or timed out (nothing is written)
        """

        async def _create() -> Order:
            async with self.session_maker() as session:
                order.items = items
                session.add(order)
                try:
                    await session.flush()
                    await session.execute(order_stats_update(order.phone_number, order.total_amount))
                    await session.commit()
                except IntegrityError as e:
                    await session.rollback()
                    raise DuplicateTicketNumber(f"Ticket number {order.ticket_number!r} already exists") from e
                return order

        created = await guarded(_create(), name="orders.create", timeout=self.timeout)
        logger.info(
            "Order created",
            order_ticket=created.ticket_number,
            order_number=created.order_number,
            customer_id=created.customer_id,
            items=len(items),
        )
        return created

    async def save_conditionally(self, ticket_number: str, mutator: OrderMutator) -> tuple[Order, dict[str, Any]]:
        """Apply `mutator` to the current order and write its changes atomically.

        Returns the updated order and the previous values of the changed
        columns, as seen by the write that succeeded.

        Raises:
            OrderNotFound: no such order
            ValidationError: raised by the mutator; nothing is written
            ConflictError: still losing the race after max_attempts
            StoreUnavailable: storage unreachable or timed out
        """

        async def _save() -> tuple[Order, dict[str, Any]]:
            async for attempt in self._get_retrying():
                with attempt:
                    return await self._compare_and_set(ticket_number, mutator)
            raise RuntimeError("Unreachable")

        try:
            return await guarded(_save(), name="orders.save", timeout=self.timeout)
        except WriteConflict as e:
            logger.warning("Order write kept conflicting", order_ticket=ticket_number, attempts=self.max_attempts)
            raise ConflictError(f"Order {ticket_number!r} is being modified concurrently, try again") from e

    async def _compare_and_set(self, ticket_number: str, mutator: OrderMutator) -> tuple[Order, dict[str, Any]]:
        async with self.session_maker() as session:
            order = await session.get(Order, ticket_number)
            if order is None:
                raise OrderNotFound(f"Order {ticket_number!r} not found")
            read_version = order.version
            session.expunge(order)

            changes = mutator(order)
            previous = {field: getattr(order, field) for field in changes}
            values = {**changes, "updated_at": utc_now(), "version": read_version + 1}

            result = await session.execute(
                update(Order)
                .where(Order.ticket_number == ticket_number, Order.version == read_version)  # type: ignore[arg-type]
                .values(**values)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:  # type: ignore[attr-defined]
                await session.rollback()
                logger.debug("Lost conditional write, retrying", order_ticket=ticket_number, version=read_version)
                raise WriteConflict(ticket_number)
            await session.commit()

        for field, value in values.items():
            setattr(order, field, value)
        return order, previous

    async def delete(self, ticket_number: str) -> Order:
        """Hard-delete an order and its items. Administrative use only."""

        async def _delete() -> Order:
            async with self.session_maker() as session:
                order = await session.get(Order, ticket_number)
                if order is None:
                    raise OrderNotFound(f"Order {ticket_number!r} not found")
                await session.delete(order)
                await session.commit()
                return order

        deleted = await guarded(_delete(), name="orders.delete", timeout=self.timeout)
        logger.warning("Order deleted", order_ticket=ticket_number)
        return deleted
