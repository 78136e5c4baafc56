"""Customer message templates, keyed by notification kind."""

from collections.abc import Callable
from decimal import ROUND_HALF_UP, Decimal

from laundry.config import settings
from laundry.models.enums import NotificationKind, OrderStatus
from laundry.models.order import Order
from laundry.utils.datetime_utils import to_store_timezone


def _group_indian(number: int) -> str:
    """Group digits the Indian way: 1234567 -> 12,34,567."""
    digits = str(number)
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups: list[str] = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join([*groups, tail])


def format_amount(amount: Decimal | int | float, currency: str | None = None) -> str:
    """Format money for messages: ₹400, ₹1,00,000, ₹1,234.50."""
    symbol = settings.currency_symbol if currency is None else currency
    value = Decimal(str(amount)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    value = abs(value)
    whole = int(value)
    paise = int((value - whole) * 100)
    text = _group_indian(whole)
    if paise:
        text = f"{text}.{paise:02d}"
    return f"{sign}{symbol}{text}"


def _format_delivery(order: Order) -> str | None:
    local = to_store_timezone(order.expected_delivery)
    if local is None:
        return None
    return f"{local.day} {local:%b %Y, %I:%M %p}"


def order_confirmation(order: Order, previous_status: OrderStatus | None = None) -> str:
    delivery = _format_delivery(order)
    delivery_text = f" Expected delivery: {delivery}." if delivery else ""
    return (
        f"Hi {order.customer_name}, your laundry order #{order.ticket_number} has been received."
        f"{delivery_text} Total: {format_amount(order.total_amount)}. Thank you for choosing us!"
    )


def order_ready(order: Order, previous_status: OrderStatus | None = None) -> str:
    return (
        f"Hi {order.customer_name}, your order #{order.ticket_number} is ready for pickup! "
        f"Please collect from our store. Total: {format_amount(order.total_amount)}. Thank you!"
    )


def order_delivered(order: Order, previous_status: OrderStatus | None = None) -> str:
    return (
        f"Hi {order.customer_name}, your order #{order.ticket_number} has been delivered successfully. "
        "Thank you for your business!"
    )


def order_status_update(order: Order, previous_status: OrderStatus | None = None) -> str:
    status = OrderStatus(order.status)
    phrase = status.meta.phrase or f"Your order status has been updated to {status.value}"
    return (
        f"Hi {order.customer_name}, {phrase} for order #{order.ticket_number}. "
        "We'll notify you when it's ready!"
    )


def payment_reminder(order: Order, previous_status: OrderStatus | None = None) -> str:
    return (
        f"Hi {order.customer_name}, reminder: Payment pending for order #{order.ticket_number}. "
        f"Amount: {format_amount(order.total_amount)}. Please complete payment when collecting your order."
    )


TEMPLATES: dict[NotificationKind, Callable[[Order, OrderStatus | None], str]] = {
    NotificationKind.CONFIRMATION: order_confirmation,
    NotificationKind.READY: order_ready,
    NotificationKind.DELIVERED: order_delivered,
    NotificationKind.STATUS_UPDATE: order_status_update,
    NotificationKind.PAYMENT_REMINDER: payment_reminder,
}


# Kinds rendered from an order; CUSTOM carries its own text
ORDER_NOTIFICATION_KINDS: frozenset[NotificationKind] = frozenset(TEMPLATES)


def render_message(kind: NotificationKind, order: Order, *, previous_status: OrderStatus | None = None) -> str:
    """Render the customer message for `kind` from the order's current state."""
    if kind not in TEMPLATES:
        raise ValueError(f"No order template for {kind.value!r} notifications")
    return TEMPLATES[kind](order, previous_status)
