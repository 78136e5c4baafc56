"""Status parsing and transition classification.

Any enumerated status may follow any other; the workflow order in
OrderStatus is convention only. What a transition *means* to the customer
is decided here, as a pure function of (previous, new).
"""

from dataclasses import dataclass

from laundry.models.enums import NotificationKind, OrderStatus
from laundry.services.orders.exceptions import InvalidStatus

# Intermediate steps the customer is told about
STATUS_UPDATE_STATUSES: frozenset[OrderStatus] = frozenset(
    {
        OrderStatus.SORTING,
        OrderStatus.WASHING,
        OrderStatus.IRONING,
        OrderStatus.QUALITY_CHECK,
        OrderStatus.PACKING,
        OrderStatus.OUT_FOR_DELIVERY,
    }
)


@dataclass(frozen=True)
class OrderEvent:
    """Notification implied by a status change."""

    kind: NotificationKind
    previous_status: OrderStatus
    new_status: OrderStatus


def parse_status(value: str | OrderStatus) -> OrderStatus:
    """Return the OrderStatus for `value`, or raise InvalidStatus."""
    try:
        return OrderStatus(value)
    except ValueError as e:
        raise InvalidStatus(f"Invalid status: {value!r}") from e


def classify_transition(previous: OrderStatus, new: OrderStatus) -> OrderEvent | None:
    """Map a transition to at most one customer notification."""
    if new == OrderStatus.READY_FOR_PICKUP:
        kind = NotificationKind.READY
    elif new == OrderStatus.DELIVERED:
        kind = NotificationKind.DELIVERED
    elif new in STATUS_UPDATE_STATUSES:
        kind = NotificationKind.STATUS_UPDATE
    else:
        return None
    return OrderEvent(kind=kind, previous_status=previous, new_status=new)


# Racks hold orders physically in the store
RACKABLE_STATUSES: frozenset[OrderStatus] = OrderStatus.in_store_states()

# No delivery assignment once the order is closed
CLOSED_STATUSES: frozenset[OrderStatus] = OrderStatus.terminal_states()


def rack_allowed(status: OrderStatus) -> bool:
    return status in RACKABLE_STATUSES
