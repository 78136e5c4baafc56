"""Order lifecycle API endpoints: status, rack, delivery assignment, customer notifications."""

from fastapi import APIRouter

from laundry.api.v1.dependencies import LifecycleServiceDep
from laundry.api.v1.errors import service_errors
from laundry.api.v1.orders.schemas import (
    AssignRequest,
    BulkNotificationRequest,
    BulkNotificationResponse,
    NotificationRequest,
    OrderResponse,
    RackRequest,
    StatusChangeRequest,
    StatusResponse,
)

router = APIRouter(tags=["orders"])


@router.patch("/orders/{ticket_number}/status", response_model=OrderResponse, operation_id="transitionOrderStatus")
async def transition_order_status(
    ticket_number: str,
    request: StatusChangeRequest,
    service: LifecycleServiceDep,
) -> OrderResponse:
    """Move the order to another status. The customer is notified in the background."""
    with service_errors():
        order = await service.transition_order_status(ticket_number, request.status)
    return OrderResponse.from_model(order)


@router.patch("/orders/{ticket_number}/rack", response_model=OrderResponse, operation_id="assignRack")
async def assign_rack(ticket_number: str, request: RackRequest, service: LifecycleServiceDep) -> OrderResponse:
    with service_errors():
        order = await service.assign_rack(ticket_number, request.rack_number)
    return OrderResponse.from_model(order)


@router.patch("/orders/{ticket_number}/assign", response_model=OrderResponse, operation_id="assignDelivery")
async def assign_delivery(ticket_number: str, request: AssignRequest, service: LifecycleServiceDep) -> OrderResponse:
    with service_errors():
        order = await service.assign_delivery(ticket_number, request.assignee_id)
    return OrderResponse.from_model(order)


@router.patch("/orders/{ticket_number}/unassign", response_model=OrderResponse, operation_id="unassignDelivery")
async def unassign_delivery(ticket_number: str, service: LifecycleServiceDep) -> OrderResponse:
    with service_errors():
        order = await service.unassign_delivery(ticket_number)
    return OrderResponse.from_model(order)


@router.post(
    "/orders/{ticket_number}/payment-reminder",
    response_model=StatusResponse,
    status_code=202,
    operation_id="sendPaymentReminder",
)
async def send_payment_reminder(ticket_number: str, service: LifecycleServiceDep) -> StatusResponse:
    """Queue a payment reminder to the customer."""
    with service_errors():
        order = await service.send_payment_reminder(ticket_number)
    return StatusResponse(status="queued", message=f"Payment reminder queued for order {order.ticket_number}")


@router.post(
    "/orders/{ticket_number}/notifications",
    response_model=StatusResponse,
    status_code=202,
    operation_id="resendOrderNotification",
)
async def resend_notification(
    ticket_number: str,
    request: NotificationRequest,
    service: LifecycleServiceDep,
) -> StatusResponse:
    """Queue the chosen order message again, e.g. a lost confirmation."""
    with service_errors():
        order = await service.resend_notification(ticket_number, request.kind, channel=request.channel)
    return StatusResponse(
        status="queued",
        message=f"{request.kind.value} notification queued for order {order.ticket_number}",
    )


@router.post(
    "/orders/notifications/ready",
    response_model=BulkNotificationResponse,
    status_code=202,
    operation_id="notifyReadyOrders",
)
async def notify_ready_orders(
    service: LifecycleServiceDep,
    request: BulkNotificationRequest | None = None,
) -> BulkNotificationResponse:
    """Remind every customer whose order is ready for pickup."""
    with service_errors():
        result = await service.notify_ready_orders(channel=request.channel if request else None)
    return BulkNotificationResponse(total=result.total, queued=result.queued, skipped=result.skipped)
