"""Order and OrderItem database models."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import Column, ForeignKey, String, UniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

from laundry.models.enums import OrderStatus, PaymentMethod, PaymentStatus
from laundry.models.types import MONEY, enum_column, timestamp_column, utc_now


class Order(SQLModel, table=True):
    """Laundry order, keyed by its ticket number.

    Customer fields are copied at creation time; the phone number is the
    durable link to the customer record even if the customer is edited later.
    """

    __tablename__ = "orders"

    # "260201-001-00001" - issued by the ticket counter, immutable
    ticket_number: str = Field(primary_key=True, max_length=32)
    # "001" - issued by the per-day order counter
    order_number: str = Field(index=True, max_length=16)

    customer_id: str = Field(index=True, max_length=32)
    customer_name: str
    phone_number: str = Field(index=True, max_length=20)

    order_date: datetime = Field(default_factory=utc_now, sa_column=timestamp_column())
    expected_delivery: datetime | None = Field(default=None, sa_column=timestamp_column(nullable=True))
    served_by: str = ""

    total_amount: Decimal = Field(sa_type=MONEY)
    payment_method: PaymentMethod = Field(
        default=PaymentMethod.CASH,
        sa_column=enum_column(PaymentMethod, name="paymentmethod"),
    )
    payment_status: PaymentStatus = Field(
        default=PaymentStatus.PENDING,
        sa_column=enum_column(PaymentStatus, name="paymentstatus"),
    )

    status: OrderStatus = Field(
        default=OrderStatus.RECEIVED,
        sa_column=enum_column(OrderStatus, name="orderstatus", index=True),
    )
    rack_number: str = ""  # "" when not on a rack
    notes: str = ""

    # Delivery assignment
    assigned_to: str | None = Field(default=None, index=True)
    assigned_at: datetime | None = Field(default=None, sa_column=timestamp_column(nullable=True))

    created_at: datetime = Field(default_factory=utc_now, sa_column=timestamp_column())
    updated_at: datetime = Field(default_factory=utc_now, sa_column=timestamp_column())

    # Bumped by every conditional write; writers compare-and-set on it
    version: int = Field(default=1)

    items: list["OrderItem"] = Relationship(
        back_populates="order",
        sa_relationship_kwargs={
            "lazy": "selectin",
            "order_by": "OrderItem.position",
            "cascade": "all, delete-orphan",
        },
    )


# Constraint for OrderItem position uniqueness per order
ORDER_ITEM_POSITION_CONSTRAINT = UniqueConstraint("ticket_number", "position", name="uq_order_item_position")


class OrderItem(SQLModel, table=True):
    """Line item within an order (one garment type)."""

    __tablename__ = "order_items"
    __table_args__ = (ORDER_ITEM_POSITION_CONSTRAINT,)

    id: int | None = Field(default=None, primary_key=True)
    ticket_number: str = Field(
        sa_column=Column(String(32), ForeignKey("orders.ticket_number", ondelete="CASCADE"), index=True, nullable=False),
    )
    position: int
    description: str
    quantity: int = 1
    price: Decimal = Field(sa_type=MONEY)
    product_id: str | None = None

    order: Order = Relationship(back_populates="items")

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity
