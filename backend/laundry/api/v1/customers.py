"""Customer registration and lookup endpoints."""

from datetime import datetime
from decimal import Decimal

from fastapi import APIRouter
from pydantic import BaseModel, field_serializer

from laundry.api.v1.dependencies import CustomerServiceDep
from laundry.api.v1.errors import service_errors
from laundry.models.customer import Customer
from laundry.models.enums import CustomerStatus
from laundry.services.customers import CustomerDraft, CustomerUpdate
from laundry.utils.datetime_utils import to_store_timezone

router = APIRouter(tags=["customers"])


class CustomerResponse(BaseModel):
    customer_id: str | None
    phone_number: str
    name: str
    email: str | None
    address: str
    city: str
    state: str
    pincode: str
    full_address: str
    notes: str
    tags: list[str]
    status: CustomerStatus
    total_orders: int
    total_spent: Decimal
    last_order_date: datetime | None
    created_at: datetime

    @field_serializer("last_order_date", "created_at")
    def serialize_datetime(self, dt: datetime | None) -> str | None:
        """Serialize datetime in the store timezone."""
        localized_dt = to_store_timezone(dt)
        return localized_dt.isoformat() if localized_dt else None

    @classmethod
    def from_model(cls, customer: Customer) -> "CustomerResponse":
        return cls(
            customer_id=customer.customer_id,
            phone_number=customer.phone_number,
            name=customer.name,
            email=customer.email,
            address=customer.address,
            city=customer.city,
            state=customer.state,
            pincode=customer.pincode,
            full_address=customer.full_address,
            notes=customer.notes,
            tags=list(customer.tags or []),
            status=customer.status,
            total_orders=customer.total_orders,
            total_spent=customer.total_spent,
            last_order_date=customer.last_order_date,
            created_at=customer.created_at,
        )


class CustomerIdPreviewResponse(BaseModel):
    customer_id: str


@router.get("/customers/next-id", response_model=CustomerIdPreviewResponse, operation_id="previewNextCustomerId")
async def preview_next_customer_id(service: CustomerServiceDep) -> CustomerIdPreviewResponse:
    """Customer ID the next registration will probably get. Not reserved."""
    with service_errors():
        customer_id = await service.preview_next_customer_id()
    return CustomerIdPreviewResponse(customer_id=customer_id)


@router.post("/customers", response_model=CustomerResponse, status_code=201, operation_id="registerCustomer")
async def register_customer(draft: CustomerDraft, service: CustomerServiceDep) -> CustomerResponse:
    with service_errors():
        customer = await service.register(draft)
    return CustomerResponse.from_model(customer)


@router.get("/customers/{identifier}", response_model=CustomerResponse, operation_id="getCustomer")
async def get_customer(identifier: str, service: CustomerServiceDep) -> CustomerResponse:
    """Look up a customer by phone number or customer ID."""
    with service_errors():
        customer = await service.get(identifier)
    return CustomerResponse.from_model(customer)


@router.patch("/customers/{identifier}", response_model=CustomerResponse, operation_id="updateCustomer")
async def update_customer(identifier: str, changes: CustomerUpdate, service: CustomerServiceDep) -> CustomerResponse:
    with service_errors():
        customer = await service.update(identifier, changes)
    return CustomerResponse.from_model(customer)
