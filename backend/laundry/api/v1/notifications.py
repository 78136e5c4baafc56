"""Free-text customer notification endpoint."""

from fastapi import APIRouter
from pydantic import BaseModel, Field

from laundry.api.v1.dependencies import NotifierDep
from laundry.api.v1.errors import service_errors
from laundry.api.v1.orders.schemas import StatusResponse
from laundry.services.notifications import Channel

router = APIRouter(tags=["notifications"])


class CustomNotificationRequest(BaseModel):
    phone_number: str
    message: str = Field(min_length=1, max_length=1000)
    channel: Channel | None = None


@router.post(
    "/notifications/custom",
    response_model=StatusResponse,
    status_code=202,
    operation_id="sendCustomNotification",
)
async def send_custom_notification(request: CustomNotificationRequest, notifier: NotifierDep) -> StatusResponse:
    with service_errors():
        notifier.notify_custom(request.phone_number, request.message, channel=request.channel)
    return StatusResponse(status="queued", message="Message queued")
