"""Order lifecycle service.

Creates orders with freshly allocated numbers, applies status transitions
and metadata edits through conditional writes, and raises the customer
notification each change implies. Notifications are handed to the notifier
and never awaited here.
"""

from collections.abc import Callable, Collection
from datetime import date
from decimal import Decimal
from typing import Any

import structlog

from laundry.config import settings
from laundry.models.enums import NotificationKind, OrderStatus, PaymentStatus
from laundry.models.order import Order, OrderItem
from laundry.models.types import utc_now
from laundry.services.counters import (
    SequenceAllocator,
    format_order_number,
    format_ticket_number,
    order_counter_key,
    ticket_counter_key,
)
from laundry.services.customers import CustomerService
from laundry.services.exceptions import ValidationError
from laundry.services.notifications import ORDER_NOTIFICATION_KINDS, Channel, OrderNotifier
from laundry.services.orders.exceptions import (
    AssignmentNotAllowed,
    InvalidRack,
    PaymentAlreadyReceived,
    RackNotAllowed,
)
from laundry.services.orders.order_repository import SqlOrderRepository
from laundry.services.orders.schemas import (
    BulkNotificationResult,
    NumberPreview,
    OrderDraft,
    OrderItemDraft,
    OrderUpdate,
)
from laundry.services.orders.transitions import CLOSED_STATUSES, classify_transition, parse_status, rack_allowed
from laundry.utils.datetime_utils import store_today

logger = structlog.get_logger(__name__)


def compute_total(items: list[OrderItemDraft]) -> Decimal:
    """Sum of quantity x price over the items."""
    return sum((item.price * item.quantity for item in items), Decimal("0"))


class OrderLifecycleService:
    """Caller-facing order operations.

    Holds no locks and no per-order state: ticket and order numbers come
    from the allocator, concurrent writes to one order are serialized by the
    repository's conditional write.
    """

    def __init__(
        self,
        repository: SqlOrderRepository,
        allocator: SequenceAllocator,
        customers: CustomerService,
        notifier: OrderNotifier,
        *,
        store_code: str = settings.store_code,
        rack_ids: Collection[str] = settings.rack_ids,
        today: Callable[[], date] = store_today,
    ):
        self.repository = repository
        self.allocator = allocator
        self.customers = customers
        self.notifier = notifier
        self.store_code = store_code
        self.rack_ids = frozenset(rack_ids)
        self.today = today

    async def preview_next_ticket_and_order_number(self, scope_date: date | None = None) -> NumberPreview:
        """Numbers the next order on `scope_date` would get if nobody else creates one first."""
        day = scope_date or self.today()
        last_ticket = await self.allocator.peek(ticket_counter_key(day))
        last_order = await self.allocator.peek(order_counter_key(day))
        return NumberPreview(
            ticket_number=format_ticket_number(day, last_ticket + 1, self.store_code),
            order_number=format_order_number(last_order + 1),
        )

    async def preview_next_customer_id(self) -> str:
        return await self.customers.preview_next_customer_id()

    async def create_order(self, draft: OrderDraft) -> Order:
        """Create an order in status Received and send the confirmation.

        Raises:
            ValidationError: malformed phone number
            ConflictError: ticket number collision (counter was reset)
            StoreUnavailable: counters or storage unreachable
        """
        if draft.ticket_number or draft.order_number:
            logger.debug(
                "Ignoring client-supplied order numbers",
                ticket_number=draft.ticket_number,
                order_number=draft.order_number,
            )

        customer = await self.customers.find_or_register_for_order(draft.phone_number, draft.customer_name)

        day = self.today()
        ticket_sequence = await self.allocator.allocate(ticket_counter_key(day))
        order_sequence = await self.allocator.allocate(order_counter_key(day))
        ticket_number = format_ticket_number(day, ticket_sequence, self.store_code)

        total = draft.total_amount if draft.total_amount is not None else compute_total(draft.items)

        order = Order(
            ticket_number=ticket_number,
            order_number=format_order_number(order_sequence),
            customer_id=customer.customer_id or "",
            customer_name=customer.name,
            phone_number=customer.phone_number,
            expected_delivery=draft.expected_delivery,
            served_by=draft.served_by,
            total_amount=total,
            payment_method=draft.payment_method,
            payment_status=draft.payment_status,
            status=OrderStatus.RECEIVED,
            notes=draft.notes,
        )
        items = [
            OrderItem(
                ticket_number=ticket_number,
                position=position,
                description=item.description,
                quantity=item.quantity,
                price=item.price,
                product_id=item.product_id,
            )
            for position, item in enumerate(draft.items, start=1)
        ]

        created = await self.repository.create(order, items)
        self.notifier.notify(created, NotificationKind.CONFIRMATION)
        return created

    async def get_order(self, ticket_number: str) -> Order:
        return await self.repository.load(ticket_number)

    async def transition_order_status(self, ticket_number: str, new_status: str | OrderStatus) -> Order:
        """Set the order's status and notify the customer if the step calls for it.

        Raises:
            InvalidStatus: `new_status` is not an order status (nothing is written)
            OrderNotFound: no such order
        """
        status = parse_status(new_status)

        order, before = await self.repository.save_conditionally(ticket_number, lambda current: {"status": status})
        previous_status = OrderStatus(before["status"])

        logger.info(
            "Order status changed",
            order_ticket=ticket_number,
            previous_status=previous_status,
            new_status=status,
        )

        event = classify_transition(previous_status, status)
        if event is not None:
            self.notifier.notify(order, event.kind, previous_status=event.previous_status)
        return order

    async def assign_rack(self, ticket_number: str, rack: str) -> Order:
        """Put the order on a rack, or take it off with an empty string.

        Only orders physically in the store can be racked.
        """
        rack = rack.strip()
        if rack and rack not in self.rack_ids:
            raise InvalidRack(f"Unknown rack {rack!r}")

        def mutate(current: Order) -> dict[str, Any]:
            if rack and not rack_allowed(OrderStatus(current.status)):
                raise RackNotAllowed(f"Order in status {current.status!r} is not in the store")
            return {"rack_number": rack}

        order, before = await self.repository.save_conditionally(ticket_number, mutate)
        logger.info("Rack assigned", order_ticket=ticket_number, rack=rack or None, previous_rack=before["rack_number"])
        return order

    async def assign_delivery(self, ticket_number: str, assignee_id: str) -> Order:
        """Assign the order to a delivery person."""
        assignee_id = assignee_id.strip()
        if not assignee_id:
            raise ValidationError("Assignee is required")

        def mutate(current: Order) -> dict[str, Any]:
            if current.status in CLOSED_STATUSES:
                raise AssignmentNotAllowed(f"Order in status {current.status!r} is closed")
            return {"assigned_to": assignee_id, "assigned_at": utc_now()}

        order, _ = await self.repository.save_conditionally(ticket_number, mutate)
        logger.info("Order assigned for delivery", order_ticket=ticket_number, assigned_to=assignee_id)
        return order

    async def unassign_delivery(self, ticket_number: str) -> Order:
        order, before = await self.repository.save_conditionally(
            ticket_number, lambda current: {"assigned_to": None, "assigned_at": None}
        )
        logger.info("Order unassigned", order_ticket=ticket_number, previous_assignee=before["assigned_to"])
        return order

    async def update_order(self, ticket_number: str, changes: OrderUpdate) -> Order:
        """Edit order metadata. The total is never recomputed."""
        fields = {key: value for key, value in changes.model_dump(exclude_unset=True).items() if value is not None}
        if not fields:
            return await self.repository.load(ticket_number)

        order, _ = await self.repository.save_conditionally(ticket_number, lambda current: dict(fields))
        logger.info("Order updated", order_ticket=ticket_number, fields=sorted(fields))
        return order

    async def delete_order(self, ticket_number: str) -> Order:
        return await self.repository.delete(ticket_number)

    async def send_payment_reminder(self, ticket_number: str, *, channel: Channel | None = None) -> Order:
        """Remind the customer of an outstanding payment.

        Raises PaymentAlreadyReceived when the order is already paid.
        """
        return await self.resend_notification(ticket_number, NotificationKind.PAYMENT_REMINDER, channel=channel)

    async def resend_notification(
        self,
        ticket_number: str,
        kind: NotificationKind,
        *,
        channel: Channel | None = None,
    ) -> Order:
        """Send the `kind` message for the order again, rendered from its current state.

        Raises:
            ValidationError: `kind` is not an order notification
            PaymentAlreadyReceived: payment reminder for a paid order
            OrderNotFound: no such order
        """
        if kind not in ORDER_NOTIFICATION_KINDS:
            raise ValidationError(f"{kind.value!r} is not an order notification")

        order = await self.repository.load(ticket_number)
        if kind == NotificationKind.PAYMENT_REMINDER and order.payment_status == PaymentStatus.PAID:
            raise PaymentAlreadyReceived(f"Order {ticket_number!r} is already paid")

        self.notifier.notify(order, kind, channel=channel)
        logger.info("Notification requested", order_ticket=ticket_number, kind=kind, channel=channel)
        return order

    async def notify_ready_orders(self, *, channel: Channel | None = None) -> BulkNotificationResult:
        """Send the ready-for-pickup message to every order waiting on a rack."""
        orders = await self.repository.list_by_status(OrderStatus.READY_FOR_PICKUP)
        queued = sum(1 for order in orders if self.notifier.notify(order, NotificationKind.READY, channel=channel))

        result = BulkNotificationResult(total=len(orders), queued=queued, skipped=len(orders) - queued)
        logger.info("Ready notifications queued", **result.model_dump(), channel=channel)
        return result
