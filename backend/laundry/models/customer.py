"""Customer database model."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import JSON, Column, UniqueConstraint
from sqlmodel import Field, SQLModel

from laundry.models.enums import CustomerStatus
from laundry.models.types import MONEY, enum_column, timestamp_column, utc_now

# Constraint names are matched against IntegrityError text to report which key collided
CUSTOMER_PHONE_CONSTRAINT = UniqueConstraint("phone_number", name="uq_customers_phone_number")
CUSTOMER_ID_CONSTRAINT = UniqueConstraint("customer_id", name="uq_customers_customer_id")


class Customer(SQLModel, table=True):
    """Customer record, keyed by phone number.

    `customer_id` (CUST00001, ...) is a secondary unique key, issued from the
    global customer counter when not supplied at registration.
    """

    __tablename__ = "customers"
    __table_args__ = (CUSTOMER_PHONE_CONSTRAINT, CUSTOMER_ID_CONSTRAINT)

    id: int | None = Field(default=None, primary_key=True)
    phone_number: str = Field(max_length=20, index=True)
    customer_id: str | None = Field(default=None, max_length=32, index=True)
    name: str
    email: str | None = None
    address: str = ""
    city: str = ""
    state: str = ""
    pincode: str = ""
    notes: str = ""
    tags: list[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))

    # Aggregates, updated incrementally when orders are created
    total_orders: int = 0
    total_spent: Decimal = Field(default=Decimal("0"), sa_type=MONEY)
    last_order_date: datetime | None = Field(default=None, sa_column=timestamp_column(nullable=True))

    status: CustomerStatus = Field(
        default=CustomerStatus.ACTIVE,
        sa_column=enum_column(CustomerStatus, name="customerstatus"),
    )
    created_at: datetime = Field(default_factory=utc_now, sa_column=timestamp_column())
    updated_at: datetime = Field(default_factory=utc_now, sa_column=timestamp_column())

    @property
    def full_address(self) -> str:
        parts = [self.address, self.city, self.state, self.pincode]
        return ", ".join(part for part in parts if part)
