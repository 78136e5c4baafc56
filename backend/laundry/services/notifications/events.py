"""Notification event handed to a dispatcher."""

from typing import Literal

from pydantic import BaseModel

from laundry.models.enums import NotificationKind

Channel = Literal["sms", "whatsapp", "both"]


class NotificationEvent(BaseModel):
    """A fully rendered customer message.

    Rendering happens before dispatch, so a dispatcher never needs access to
    the order and sees exactly the text composed when the event was raised.
    """

    kind: NotificationKind
    phone_number: str
    rendered_message: str
    ticket_number: str | None = None  # For logging only
    channel: Channel | None = None  # Overrides the dispatcher's configured channel
