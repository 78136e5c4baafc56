"""Order notifier: renders a message and hands it to a detached dispatch task."""

import asyncio
from typing import Any

import structlog

from laundry.models.enums import NotificationKind, OrderStatus
from laundry.models.order import Order
from laundry.services.customers.exceptions import InvalidPhoneNumber
from laundry.services.exceptions import DispatchFailure, ValidationError
from laundry.services.notifications.dispatchers import NotificationDispatcher
from laundry.services.notifications.events import Channel, NotificationEvent
from laundry.services.notifications.templates import render_message
from laundry.tasks.detached import DetachedTasks
from laundry.utils.phone import is_valid_phone_number, normalize_phone_number

logger = structlog.get_logger(__name__)


class OrderNotifier:
    """Fire-and-forget customer notifications for orders.

    `notify()` renders synchronously from the order as it is at call time,
    then spawns delivery as a detached task and returns. Delivery failures
    are logged inside the task; they are never retried and never reach the
    caller.
    """

    def __init__(self, dispatcher: NotificationDispatcher, detached: DetachedTasks):
        self.dispatcher = dispatcher
        self.detached = detached

    def notify(
        self,
        order: Order,
        kind: NotificationKind,
        *,
        previous_status: OrderStatus | None = None,
        channel: Channel | None = None,
    ) -> asyncio.Task[Any] | None:
        if not order.phone_number:
            logger.warning("Order has no phone number, notification skipped", ticket_number=order.ticket_number)
            return None

        event = NotificationEvent(
            kind=kind,
            phone_number=order.phone_number,
            rendered_message=render_message(kind, order, previous_status=previous_status),
            ticket_number=order.ticket_number,
            channel=channel,
        )
        return self.detached.spawn(self._deliver(event), name=f"notify:{kind.value}")

    def notify_custom(self, phone_number: str, message: str, *, channel: Channel | None = None) -> asyncio.Task[Any]:
        """Queue a free-text message to any customer phone number.

        Raises:
            InvalidPhoneNumber: not a 10-digit mobile number
            ValidationError: empty message
        """
        if not is_valid_phone_number(phone_number):
            raise InvalidPhoneNumber(f"Invalid phone number: {phone_number!r}")
        if not message.strip():
            raise ValidationError("Message is required")

        event = NotificationEvent(
            kind=NotificationKind.CUSTOM,
            phone_number=normalize_phone_number(phone_number),
            rendered_message=message.strip(),
            channel=channel,
        )
        return self.detached.spawn(self._deliver(event), name=f"notify:{NotificationKind.CUSTOM.value}")

    async def _deliver(self, event: NotificationEvent) -> None:
        try:
            await self.dispatcher.dispatch(event)
        except DispatchFailure as e:
            logger.error(
                "Notification delivery failed",
                kind=event.kind,
                ticket_number=event.ticket_number,
                channel=e.channel,
                error=str(e),
            )
