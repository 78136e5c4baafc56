"""Database models."""

from sqlmodel import SQLModel

from laundry.models.counter import Counter
from laundry.models.customer import Customer
from laundry.models.enums import (
    CustomerStatus,
    NotificationKind,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
)
from laundry.models.order import Order, OrderItem

__all__ = [
    "SQLModel",
    "Counter",
    "Customer",
    "Order",
    "OrderItem",
    "OrderStatus",
    "PaymentMethod",
    "PaymentStatus",
    "CustomerStatus",
    "NotificationKind",
]
