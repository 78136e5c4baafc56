"""API schemas for orders endpoints."""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field, field_serializer

from laundry.models.enums import NotificationKind, OrderStatus, PaymentMethod, PaymentStatus
from laundry.models.order import Order, OrderItem
from laundry.services.notifications import Channel
from laundry.utils.datetime_utils import to_store_timezone

# =============================================================================
# Request Schemas
# =============================================================================


class StatusChangeRequest(BaseModel):
    """Free-form status so an unknown value is reported as a validation error."""

    status: str


class RackRequest(BaseModel):
    rack_number: str = ""  # "" takes the order off its rack


class AssignRequest(BaseModel):
    assignee_id: str = Field(min_length=1)


class NotificationRequest(BaseModel):
    kind: NotificationKind
    channel: Channel | None = None  # Configured channel when omitted


class BulkNotificationRequest(BaseModel):
    channel: Channel | None = None


# =============================================================================
# Response Schemas
# =============================================================================


class OrderItemResponse(BaseModel):
    position: int
    description: str
    quantity: int
    price: Decimal
    product_id: str | None
    line_total: Decimal

    @classmethod
    def from_model(cls, item: OrderItem) -> "OrderItemResponse":
        return cls(
            position=item.position,
            description=item.description,
            quantity=item.quantity,
            price=item.price,
            product_id=item.product_id,
            line_total=item.line_total,
        )


class OrderResponse(BaseModel):
    """Order with its items."""

    ticket_number: str
    order_number: str
    customer_id: str
    customer_name: str
    phone_number: str
    status: OrderStatus
    rack_number: str
    total_amount: Decimal
    payment_method: PaymentMethod
    payment_status: PaymentStatus
    served_by: str
    notes: str
    assigned_to: str | None
    assigned_at: datetime | None
    order_date: datetime
    expected_delivery: datetime | None
    created_at: datetime
    updated_at: datetime
    items: list[OrderItemResponse]

    @field_serializer("order_date", "created_at", "updated_at", "expected_delivery", "assigned_at")
    def serialize_datetime(self, dt: datetime | None) -> str | None:
        """Serialize datetime in the store timezone."""
        localized_dt = to_store_timezone(dt)
        return localized_dt.isoformat() if localized_dt else None

    @classmethod
    def from_model(cls, order: Order) -> "OrderResponse":
        """Create response from Order model."""
        return cls(
            ticket_number=order.ticket_number,
            order_number=order.order_number,
            customer_id=order.customer_id,
            customer_name=order.customer_name,
            phone_number=order.phone_number,
            status=order.status,
            rack_number=order.rack_number,
            total_amount=order.total_amount,
            payment_method=order.payment_method,
            payment_status=order.payment_status,
            served_by=order.served_by,
            notes=order.notes,
            assigned_to=order.assigned_to,
            assigned_at=order.assigned_at,
            order_date=order.order_date,
            expected_delivery=order.expected_delivery,
            created_at=order.created_at,
            updated_at=order.updated_at,
            items=[OrderItemResponse.from_model(item) for item in order.items],
        )


class NumberPreviewResponse(BaseModel):
    scope_date: date
    ticket_number: str
    order_number: str


class StatusResponse(BaseModel):
    """Generic status response."""

    status: str
    message: str


class BulkNotificationResponse(BaseModel):
    total: int
    queued: int
    skipped: int
