"""Order lifecycle: creation, status transitions, racks and delivery assignment."""

from laundry.services.orders.lifecycle_service import OrderLifecycleService, compute_total
from laundry.services.orders.order_repository import SqlOrderRepository
from laundry.services.orders.schemas import (
    BulkNotificationResult,
    NumberPreview,
    OrderDraft,
    OrderItemDraft,
    OrderUpdate,
)
from laundry.services.orders.transitions import OrderEvent, classify_transition, parse_status

__all__ = [
    "BulkNotificationResult",
    "NumberPreview",
    "OrderDraft",
    "OrderEvent",
    "OrderItemDraft",
    "OrderLifecycleService",
    "OrderUpdate",
    "SqlOrderRepository",
    "classify_transition",
    "compute_total",
    "parse_status",
]
