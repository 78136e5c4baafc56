"""Customer notifications: templates, dispatchers and the detached notifier."""

from laundry.services.notifications.dispatchers import (
    GupshupDispatcher,
    LoggingDispatcher,
    NotificationDispatcher,
    build_dispatcher,
)
from laundry.services.notifications.events import Channel, NotificationEvent
from laundry.services.notifications.notifier import OrderNotifier
from laundry.services.notifications.templates import ORDER_NOTIFICATION_KINDS, format_amount, render_message

__all__ = [
    "ORDER_NOTIFICATION_KINDS",
    "Channel",
    "GupshupDispatcher",
    "LoggingDispatcher",
    "NotificationDispatcher",
    "NotificationEvent",
    "OrderNotifier",
    "build_dispatcher",
    "format_amount",
    "render_message",
]
