"""Input schemas for order operations."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from laundry.models.enums import PaymentMethod, PaymentStatus


class OrderItemDraft(BaseModel):
    """One line of a new order."""

    description: str = Field(min_length=1)
    quantity: int = Field(default=1, gt=0)
    price: Decimal = Field(ge=0)
    product_id: str | None = None


class OrderDraft(BaseModel):
    """New order as submitted by the counter staff.

    `ticket_number` and `order_number` are accepted so older clients keep
    working, but they are ignored: creation always allocates fresh numbers.
    """

    phone_number: str
    customer_name: str = Field(min_length=1)
    items: list[OrderItemDraft] = Field(min_length=1)
    total_amount: Decimal | None = Field(default=None, ge=0)  # Computed from items when omitted
    payment_method: PaymentMethod = PaymentMethod.CASH
    payment_status: PaymentStatus = PaymentStatus.PENDING
    expected_delivery: datetime | None = None
    served_by: str = ""
    notes: str = ""

    ticket_number: str | None = None
    order_number: str | None = None


class OrderUpdate(BaseModel):
    """Metadata edit. Unset fields are left unchanged; status and rack have their own operations."""

    notes: str | None = None
    payment_status: PaymentStatus | None = None
    payment_method: PaymentMethod | None = None
    expected_delivery: datetime | None = None


class NumberPreview(BaseModel):
    """Numbers the next order would probably receive. Not a reservation."""

    ticket_number: str
    order_number: str


class BulkNotificationResult(BaseModel):
    """Outcome of a bulk send. Queued messages are delivered in the background."""

    total: int
    queued: int
    skipped: int  # Orders without a phone number
