"""Order CRUD API endpoints."""

from datetime import date

from fastapi import APIRouter

from laundry.api.v1.dependencies import LifecycleServiceDep
from laundry.api.v1.errors import service_errors
from laundry.api.v1.orders.schemas import (
    NumberPreviewResponse,
    OrderResponse,
    StatusResponse,
)
from laundry.services.orders import OrderDraft, OrderUpdate
from laundry.utils.datetime_utils import store_today

router = APIRouter(tags=["orders"])


@router.get("/orders/next-number", response_model=NumberPreviewResponse, operation_id="previewNextOrderNumber")
async def preview_next_order_number(
    service: LifecycleServiceDep,
    scope_date: date | None = None,
) -> NumberPreviewResponse:
    """Ticket and order number the next order will probably get. Not reserved."""
    day = scope_date or store_today()
    with service_errors():
        preview = await service.preview_next_ticket_and_order_number(day)
    return NumberPreviewResponse(scope_date=day, ticket_number=preview.ticket_number, order_number=preview.order_number)


@router.post("/orders", response_model=OrderResponse, status_code=201, operation_id="createOrder")
async def create_order(draft: OrderDraft, service: LifecycleServiceDep) -> OrderResponse:
    """Create an order. Ticket and order numbers are always allocated by the server."""
    with service_errors():
        order = await service.create_order(draft)
    return OrderResponse.from_model(order)


@router.get("/orders/{ticket_number}", response_model=OrderResponse, operation_id="getOrder")
async def get_order(ticket_number: str, service: LifecycleServiceDep) -> OrderResponse:
    with service_errors():
        order = await service.get_order(ticket_number)
    return OrderResponse.from_model(order)


@router.patch("/orders/{ticket_number}", response_model=OrderResponse, operation_id="updateOrder")
async def update_order(ticket_number: str, changes: OrderUpdate, service: LifecycleServiceDep) -> OrderResponse:
    """Edit notes, payment details or expected delivery."""
    with service_errors():
        order = await service.update_order(ticket_number, changes)
    return OrderResponse.from_model(order)


@router.delete("/orders/{ticket_number}", response_model=StatusResponse, operation_id="deleteOrder")
async def delete_order(ticket_number: str, service: LifecycleServiceDep) -> StatusResponse:
    """Permanently delete an order (administrative)."""
    with service_errors():
        order = await service.delete_order(ticket_number)
    return StatusResponse(status="deleted", message=f"Order {order.ticket_number} deleted")
