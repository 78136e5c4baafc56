"""Input schemas for customer operations."""

from pydantic import BaseModel, Field

from laundry.models.enums import CustomerStatus


class CustomerDraft(BaseModel):
    """Explicit customer registration."""

    phone_number: str
    name: str = Field(min_length=1)
    customer_id: str | None = None  # Issued from the customer counter when omitted
    email: str | None = None
    address: str = ""
    city: str = ""
    state: str = ""
    pincode: str = ""
    notes: str = ""
    tags: list[str] = Field(default_factory=list)


class CustomerUpdate(BaseModel):
    """Partial customer edit. Unset fields are left unchanged."""

    phone_number: str | None = None
    customer_id: str | None = None
    name: str | None = Field(default=None, min_length=1)
    email: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    pincode: str | None = None
    notes: str | None = None
    status: CustomerStatus | None = None
    tags: list[str] | None = None
