"""Tests for OrderLifecycleService against a real (SQLite) database."""

import asyncio
from collections.abc import Callable
from decimal import Decimal

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from conftest import BUSINESS_DAY, RecordingDispatcher
from laundry.models.customer import Customer
from laundry.models.order import Order
from laundry.models.enums import NotificationKind, OrderStatus, PaymentStatus
from laundry.services.counters import SequenceAllocator
from laundry.services.customers import CustomerService
from laundry.services.exceptions import ConflictError, NotFoundError, StoreUnavailable, ValidationError
from laundry.services.notifications import OrderNotifier
from laundry.services.orders import OrderDraft, OrderLifecycleService, OrderUpdate, SqlOrderRepository
from laundry.services.orders.exceptions import (
    AssignmentNotAllowed,
    InvalidRack,
    InvalidStatus,
    PaymentAlreadyReceived,
    RackNotAllowed,
)
from laundry.tasks.detached import DetachedTasks

DraftFactory = Callable[..., OrderDraft]


# =============================================================================
# Creation
# =============================================================================


async def test_create_order_allocates_numbers_and_totals_items(
    service: OrderLifecycleService,
    make_draft: DraftFactory,
) -> None:
    order = await service.create_order(make_draft())

    assert order.ticket_number == "260201-001-00001"
    assert order.order_number == "001"
    assert order.status == OrderStatus.RECEIVED
    assert order.total_amount == Decimal("400")
    assert [item.position for item in order.items] == [1, 2]


async def test_create_order_keeps_supplied_total(service: OrderLifecycleService, make_draft: DraftFactory) -> None:
    order = await service.create_order(make_draft(total_amount=Decimal("350")))
    assert order.total_amount == Decimal("350")


async def test_create_order_ignores_client_numbers(service: OrderLifecycleService, make_draft: DraftFactory) -> None:
    order = await service.create_order(make_draft(ticket_number="999999-001-99999", order_number="999"))

    assert order.ticket_number == "260201-001-00001"
    assert order.order_number == "001"


async def test_create_order_sends_confirmation(
    service: OrderLifecycleService,
    make_draft: DraftFactory,
    dispatcher: RecordingDispatcher,
    detached: DetachedTasks,
) -> None:
    order = await service.create_order(make_draft())
    await detached.drain(timeout=5)

    assert dispatcher.kinds() == ["confirmation"]
    event = dispatcher.events[0]
    assert event.phone_number == "9876543210"
    assert order.ticket_number in event.rendered_message
    assert "₹400" in event.rendered_message


async def test_create_order_registers_customer_and_updates_stats(
    service: OrderLifecycleService,
    make_draft: DraftFactory,
    session_maker: async_sessionmaker[AsyncSession],
) -> None:
    first = await service.create_order(make_draft(phone_number="+91 98765 43210"))
    second = await service.create_order(make_draft(customer_name="Someone Else", total_amount=Decimal("100")))

    assert first.customer_id == "CUST00001"
    assert second.customer_id == first.customer_id
    # Existing customer's name wins over the one typed on the order
    assert second.customer_name == "Asha Rao"

    async with session_maker() as session:
        customer = (await session.execute(Customer.__table__.select())).one()
    assert customer.total_orders == 2
    assert Decimal(str(customer.total_spent)) == Decimal("500")
    assert customer.last_order_date is not None


async def test_create_order_rejects_invalid_phone(service: OrderLifecycleService, make_draft: DraftFactory) -> None:
    with pytest.raises(ValidationError):
        await service.create_order(make_draft(phone_number="12345"))


async def test_concurrent_creates_never_share_ticket_number(
    service: OrderLifecycleService,
    make_draft: DraftFactory,
) -> None:
    phones = [f"98765432{n:02d}" for n in range(10)]
    orders = await asyncio.gather(*(service.create_order(make_draft(phone_number=phone)) for phone in phones))

    tickets = [order.ticket_number for order in orders]
    assert len(set(tickets)) == len(tickets)
    assert len({order.order_number for order in orders}) == len(orders)


async def test_ticket_collision_after_reset_is_conflict(
    service: OrderLifecycleService,
    allocator: SequenceAllocator,
    make_draft: DraftFactory,
) -> None:
    await service.create_order(make_draft())
    await allocator.reset(f"ticket_{BUSINESS_DAY:%y%m%d}", 0)

    with pytest.raises(ConflictError):
        await service.create_order(make_draft())


# =============================================================================
# Previews
# =============================================================================


async def test_preview_does_not_reserve(service: OrderLifecycleService, make_draft: DraftFactory) -> None:
    preview = await service.preview_next_ticket_and_order_number(BUSINESS_DAY)
    assert preview.ticket_number == "260201-001-00001"
    assert preview.order_number == "001"

    again = await service.preview_next_ticket_and_order_number()
    assert again == preview

    order = await service.create_order(make_draft())
    assert order.ticket_number == preview.ticket_number


async def test_preview_next_customer_id(service: OrderLifecycleService, make_draft: DraftFactory) -> None:
    assert await service.preview_next_customer_id() == "CUST00001"
    await service.create_order(make_draft())
    assert await service.preview_next_customer_id() == "CUST00002"


# =============================================================================
# Status transitions
# =============================================================================


async def test_ready_for_pickup_persists_and_notifies_once(
    service: OrderLifecycleService,
    make_draft: DraftFactory,
    dispatcher: RecordingDispatcher,
    detached: DetachedTasks,
) -> None:
    order = await service.create_order(make_draft())

    updated = await service.transition_order_status(order.ticket_number, "Ready for Pickup")
    await detached.drain(timeout=5)

    assert updated.status == OrderStatus.READY_FOR_PICKUP
    assert updated.updated_at >= order.updated_at
    assert (await service.get_order(order.ticket_number)).status == OrderStatus.READY_FOR_PICKUP
    assert dispatcher.kinds() == ["confirmation", "ready"]


async def test_status_update_event_uses_phrase(
    service: OrderLifecycleService,
    make_draft: DraftFactory,
    dispatcher: RecordingDispatcher,
    detached: DetachedTasks,
) -> None:
    order = await service.create_order(make_draft())
    await service.transition_order_status(order.ticket_number, OrderStatus.WASHING)
    await detached.drain(timeout=5)

    event = dispatcher.events[-1]
    assert event.kind == NotificationKind.STATUS_UPDATE
    assert "Your order is being washed" in event.rendered_message


async def test_silent_transition_sends_nothing(
    service: OrderLifecycleService,
    make_draft: DraftFactory,
    dispatcher: RecordingDispatcher,
    detached: DetachedTasks,
) -> None:
    order = await service.create_order(make_draft())
    await service.transition_order_status(order.ticket_number, OrderStatus.DRYING)
    await detached.drain(timeout=5)

    assert dispatcher.kinds() == ["confirmation"]


async def test_unknown_status_is_rejected_and_nothing_changes(
    service: OrderLifecycleService,
    make_draft: DraftFactory,
) -> None:
    order = await service.create_order(make_draft())

    with pytest.raises(InvalidStatus):
        await service.transition_order_status(order.ticket_number, "Shipped")

    assert (await service.get_order(order.ticket_number)).status == OrderStatus.RECEIVED


async def test_transition_missing_order(service: OrderLifecycleService) -> None:
    with pytest.raises(NotFoundError):
        await service.transition_order_status("260201-001-99999", "Washing")


async def test_any_status_can_follow_any_other(service: OrderLifecycleService, make_draft: DraftFactory) -> None:
    order = await service.create_order(make_draft())
    await service.transition_order_status(order.ticket_number, OrderStatus.DELIVERED)
    reopened = await service.transition_order_status(order.ticket_number, OrderStatus.WASHING)

    assert reopened.status == OrderStatus.WASHING


async def test_concurrent_transitions_persist_exactly_one(
    service: OrderLifecycleService,
    make_draft: DraftFactory,
    dispatcher: RecordingDispatcher,
    detached: DetachedTasks,
) -> None:
    order = await service.create_order(make_draft())

    await asyncio.gather(
        service.transition_order_status(order.ticket_number, OrderStatus.WASHING),
        service.transition_order_status(order.ticket_number, OrderStatus.PACKING),
    )
    await detached.drain(timeout=5)

    stored = await service.get_order(order.ticket_number)
    assert stored.status in {OrderStatus.WASHING, OrderStatus.PACKING}
    assert stored.version == 3

    # Each writer notified about the transition it actually made
    updates = [event for event in dispatcher.events if event.kind == NotificationKind.STATUS_UPDATE]
    assert len(updates) == 2


async def test_notification_failure_does_not_affect_transition(
    service: OrderLifecycleService,
    make_draft: DraftFactory,
    dispatcher: RecordingDispatcher,
    detached: DetachedTasks,
) -> None:
    order = await service.create_order(make_draft())
    dispatcher.fail = True

    updated = await service.transition_order_status(order.ticket_number, OrderStatus.READY_FOR_PICKUP)
    await detached.drain(timeout=5)

    assert updated.status == OrderStatus.READY_FOR_PICKUP
    assert (await service.get_order(order.ticket_number)).status == OrderStatus.READY_FOR_PICKUP


async def test_transition_does_not_wait_for_dispatch(
    service: OrderLifecycleService,
    make_draft: DraftFactory,
    dispatcher: RecordingDispatcher,
    detached: DetachedTasks,
) -> None:
    order = await service.create_order(make_draft())
    await detached.drain(timeout=5)
    dispatcher.gate = asyncio.Event()

    await asyncio.wait_for(service.transition_order_status(order.ticket_number, OrderStatus.DELIVERED), timeout=5)
    assert detached.pending >= 1

    dispatcher.gate.set()
    await detached.drain(timeout=5)
    assert dispatcher.kinds()[-1] == "delivered"


# =============================================================================
# Racks, delivery assignment, edits
# =============================================================================


async def test_assign_and_clear_rack(service: OrderLifecycleService, make_draft: DraftFactory) -> None:
    order = await service.create_order(make_draft())

    racked = await service.assign_rack(order.ticket_number, "Rack 2")
    assert racked.rack_number == "Rack 2"

    cleared = await service.assign_rack(order.ticket_number, "")
    assert cleared.rack_number == ""


async def test_unknown_rack_rejected(service: OrderLifecycleService, make_draft: DraftFactory) -> None:
    order = await service.create_order(make_draft())

    with pytest.raises(InvalidRack):
        await service.assign_rack(order.ticket_number, "Rack 99")


async def test_rack_not_allowed_outside_store(service: OrderLifecycleService, make_draft: DraftFactory) -> None:
    order = await service.create_order(make_draft())
    await service.transition_order_status(order.ticket_number, OrderStatus.OUT_FOR_DELIVERY)

    with pytest.raises(RackNotAllowed):
        await service.assign_rack(order.ticket_number, "Rack 1")

    # Taking an order off its rack is always allowed
    assert (await service.assign_rack(order.ticket_number, "")).rack_number == ""


async def test_rack_allowed_when_ready_for_delivery(service: OrderLifecycleService, make_draft: DraftFactory) -> None:
    order = await service.create_order(make_draft())
    await service.transition_order_status(order.ticket_number, OrderStatus.READY_FOR_DELIVERY)

    assert (await service.assign_rack(order.ticket_number, "Rack 3")).rack_number == "Rack 3"


async def test_assign_and_unassign_delivery(service: OrderLifecycleService, make_draft: DraftFactory) -> None:
    order = await service.create_order(make_draft())

    assigned = await service.assign_delivery(order.ticket_number, "driver-7")
    assert assigned.assigned_to == "driver-7"
    assert assigned.assigned_at is not None

    unassigned = await service.unassign_delivery(order.ticket_number)
    assert unassigned.assigned_to is None
    assert unassigned.assigned_at is None


async def test_assign_delivery_validation(service: OrderLifecycleService, make_draft: DraftFactory) -> None:
    order = await service.create_order(make_draft())

    with pytest.raises(ValidationError):
        await service.assign_delivery(order.ticket_number, "  ")

    await service.transition_order_status(order.ticket_number, OrderStatus.CANCELLED)
    with pytest.raises(AssignmentNotAllowed):
        await service.assign_delivery(order.ticket_number, "driver-7")


async def test_update_order_never_recomputes_total(service: OrderLifecycleService, make_draft: DraftFactory) -> None:
    order = await service.create_order(make_draft(total_amount=Decimal("999")))

    updated = await service.update_order(
        order.ticket_number, OrderUpdate(notes="Handle with care", payment_status=PaymentStatus.PARTIAL)
    )

    assert updated.notes == "Handle with care"
    assert updated.payment_status == PaymentStatus.PARTIAL
    assert updated.total_amount == Decimal("999")


async def test_delete_order(service: OrderLifecycleService, make_draft: DraftFactory) -> None:
    order = await service.create_order(make_draft())

    await service.delete_order(order.ticket_number)

    with pytest.raises(NotFoundError):
        await service.get_order(order.ticket_number)


# =============================================================================
# Payment reminders
# =============================================================================


async def test_payment_reminder(
    service: OrderLifecycleService,
    make_draft: DraftFactory,
    dispatcher: RecordingDispatcher,
    detached: DetachedTasks,
) -> None:
    order = await service.create_order(make_draft())

    await service.send_payment_reminder(order.ticket_number)
    await detached.drain(timeout=5)

    assert dispatcher.kinds() == ["confirmation", "paymentReminder"]
    assert "Payment pending" in dispatcher.events[-1].rendered_message


async def test_payment_reminder_rejected_when_paid(service: OrderLifecycleService, make_draft: DraftFactory) -> None:
    order = await service.create_order(make_draft(payment_status=PaymentStatus.PAID))

    with pytest.raises(PaymentAlreadyReceived):
        await service.send_payment_reminder(order.ticket_number)


# =============================================================================
# Storage timeouts
# =============================================================================


@pytest.fixture
def stalled_service(
    slow_commit_session_maker: async_sessionmaker[AsyncSession],
    allocator: SequenceAllocator,
    customers: CustomerService,
    notifier: OrderNotifier,
) -> OrderLifecycleService:
    """Service whose order writes time out before they commit."""
    return OrderLifecycleService(
        SqlOrderRepository(slow_commit_session_maker, timeout=0.2),
        allocator,
        customers,
        notifier,
        store_code="001",
        today=lambda: BUSINESS_DAY,
    )


async def test_timed_out_transition_leaves_order_unchanged(
    service: OrderLifecycleService,
    stalled_service: OrderLifecycleService,
    make_draft: DraftFactory,
    dispatcher: RecordingDispatcher,
    detached: DetachedTasks,
) -> None:
    order = await service.create_order(make_draft())

    with pytest.raises(StoreUnavailable):
        await stalled_service.transition_order_status(order.ticket_number, OrderStatus.READY_FOR_PICKUP)
    await detached.drain(timeout=5)

    stored = await service.get_order(order.ticket_number)
    assert stored.status == OrderStatus.RECEIVED
    assert stored.version == 1
    assert dispatcher.kinds() == ["confirmation"]


async def test_timed_out_create_writes_no_order(
    stalled_service: OrderLifecycleService,
    make_draft: DraftFactory,
    session_maker: async_sessionmaker[AsyncSession],
    dispatcher: RecordingDispatcher,
    detached: DetachedTasks,
) -> None:
    with pytest.raises(StoreUnavailable):
        await stalled_service.create_order(make_draft())
    await detached.drain(timeout=5)

    async with session_maker() as session:
        orders = (await session.execute(select(func.count()).select_from(Order))).scalar_one()
        customer = (await session.execute(Customer.__table__.select())).one()
    assert orders == 0
    # The customer was registered, but the order never counted towards their totals
    assert customer.total_orders == 0
    assert dispatcher.events == []


# =============================================================================
# Manual notifications
# =============================================================================


async def test_resend_notification(
    service: OrderLifecycleService,
    make_draft: DraftFactory,
    dispatcher: RecordingDispatcher,
    detached: DetachedTasks,
) -> None:
    order = await service.create_order(make_draft())

    await service.resend_notification(order.ticket_number, NotificationKind.CONFIRMATION, channel="sms")
    await detached.drain(timeout=5)

    assert dispatcher.kinds() == ["confirmation", "confirmation"]
    assert dispatcher.events[-1].channel == "sms"
    assert dispatcher.events[-1].rendered_message == dispatcher.events[0].rendered_message


async def test_resend_status_update_uses_current_status(
    service: OrderLifecycleService,
    make_draft: DraftFactory,
    dispatcher: RecordingDispatcher,
    detached: DetachedTasks,
) -> None:
    order = await service.create_order(make_draft())
    await service.transition_order_status(order.ticket_number, OrderStatus.IRONING)

    await service.resend_notification(order.ticket_number, NotificationKind.STATUS_UPDATE)
    await detached.drain(timeout=5)

    assert "being ironed" in dispatcher.events[-1].rendered_message


async def test_resend_notification_rejections(
    service: OrderLifecycleService,
    make_draft: DraftFactory,
    dispatcher: RecordingDispatcher,
    detached: DetachedTasks,
) -> None:
    paid = await service.create_order(make_draft(payment_status=PaymentStatus.PAID))

    with pytest.raises(ValidationError):
        await service.resend_notification(paid.ticket_number, NotificationKind.CUSTOM)
    with pytest.raises(PaymentAlreadyReceived):
        await service.resend_notification(paid.ticket_number, NotificationKind.PAYMENT_REMINDER)
    with pytest.raises(NotFoundError):
        await service.resend_notification("260201-001-99999", NotificationKind.READY)
    await detached.drain(timeout=5)

    assert dispatcher.kinds() == ["confirmation"]


async def test_notify_ready_orders(
    service: OrderLifecycleService,
    make_draft: DraftFactory,
    dispatcher: RecordingDispatcher,
    detached: DetachedTasks,
) -> None:
    first = await service.create_order(make_draft())
    second = await service.create_order(make_draft(phone_number="9123456789", customer_name="Ravi"))
    await service.create_order(make_draft(phone_number="9000000001", customer_name="Meera"))
    await service.transition_order_status(first.ticket_number, OrderStatus.READY_FOR_PICKUP)
    await service.transition_order_status(second.ticket_number, OrderStatus.READY_FOR_PICKUP)
    await detached.drain(timeout=5)
    dispatcher.events.clear()

    result = await service.notify_ready_orders(channel="whatsapp")
    await detached.drain(timeout=5)

    assert (result.total, result.queued, result.skipped) == (2, 2, 0)
    assert dispatcher.kinds() == ["ready", "ready"]
    assert {event.ticket_number for event in dispatcher.events} == {first.ticket_number, second.ticket_number}
    assert {event.channel for event in dispatcher.events} == {"whatsapp"}


async def test_notify_ready_orders_none_waiting(service: OrderLifecycleService, make_draft: DraftFactory) -> None:
    await service.create_order(make_draft())

    result = await service.notify_ready_orders()

    assert (result.total, result.queued, result.skipped) == (0, 0, 0)
