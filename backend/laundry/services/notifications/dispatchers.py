"""Notification dispatchers: deliver rendered messages to customers."""

import json
from collections.abc import Awaitable
from typing import Protocol

import httpx
import structlog

from laundry.config import Settings, settings
from laundry.services.exceptions import DispatchFailure
from laundry.services.notifications.events import Channel, NotificationEvent
from laundry.utils.phone import format_gateway_phone

logger = structlog.get_logger(__name__)


class NotificationDispatcher(Protocol):
    """Delivers one rendered notification. Raises DispatchFailure on delivery errors."""

    async def dispatch(self, event: NotificationEvent) -> None: ...


class LoggingDispatcher:
    """Dispatcher that only logs messages (development, or when no gateway is configured)."""

    async def dispatch(self, event: NotificationEvent) -> None:
        logger.info(
            "Notification (not sent, no gateway configured)",
            kind=event.kind,
            ticket_number=event.ticket_number,
            phone_number=event.phone_number,
            channel=event.channel,
            message=event.rendered_message,
        )


class GupshupDispatcher:
    """Dispatcher for the Gupshup WhatsApp and SMS gateways.

    Sends over the event's channel when it names one, otherwise the configured
    channel ("sms", "whatsapp" or "both"). SMS without SMS credentials falls
    back to WhatsApp. No retries: a failed delivery raises DispatchFailure
    and the message is dropped.

    Usage:
        dispatcher = GupshupDispatcher()
        await dispatcher.dispatch(NotificationEvent(kind=..., phone_number=..., rendered_message=...))
    """

    def __init__(
        self,
        *,
        channel: Channel | None = None,
        config: Settings = settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config
        self.channel: Channel = channel or config.notification_channel
        self._transport = transport

    @property
    def sms_configured(self) -> bool:
        return bool((self.config.gupshup_sms_user_id or self.config.gupshup_api_key) and self.config.gupshup_sms_password)

    async def dispatch(self, event: NotificationEvent) -> None:
        if not self.config.gupshup_configured:
            logger.warning(
                "Gupshup not configured, notification not sent",
                kind=event.kind,
                ticket_number=event.ticket_number,
            )
            return

        channel = event.channel or self.channel
        failures: list[DispatchFailure] = []
        async with httpx.AsyncClient(transport=self._transport, timeout=self.config.notification_timeout) as client:
            if channel in ("sms", "both"):
                if self.sms_configured:
                    await self._collect(failures, self._send_sms(client, event))
                elif channel == "sms":
                    logger.warning("Gupshup SMS credentials not configured, falling back to WhatsApp")
                    await self._collect(failures, self._send_whatsapp(client, event))
            if channel in ("whatsapp", "both"):
                await self._collect(failures, self._send_whatsapp(client, event))

        if len(failures) == 1:
            raise failures[0]
        if failures:
            raise DispatchFailure(
                "; ".join(str(f) for f in failures),
                channel=channel,
                ticket_number=event.ticket_number,
            )

    @staticmethod
    async def _collect(failures: list[DispatchFailure], send: Awaitable[None]) -> None:
        try:
            await send
        except DispatchFailure as e:
            failures.append(e)

    async def _send_whatsapp(self, client: httpx.AsyncClient, event: NotificationEvent) -> None:
        destination = format_gateway_phone(event.phone_number)
        data = {
            "channel": "whatsapp",
            "source": format_gateway_phone(self.config.gupshup_source_number),
            "destination": destination,
            "message": json.dumps({"type": "text", "text": event.rendered_message}),
            "src.name": self.config.gupshup_app_name,
        }
        try:
            response = await client.post(
                self.config.gupshup_whatsapp_url,
                data=data,
                headers={"apikey": self.config.gupshup_api_key},
            )
        except httpx.HTTPError as e:
            raise DispatchFailure(
                f"WhatsApp request failed: {e}", channel="whatsapp", ticket_number=event.ticket_number
            ) from e

        if response.status_code not in (200, 202):
            raise DispatchFailure(
                f"WhatsApp rejected with HTTP {response.status_code}: {response.text[:200]}",
                channel="whatsapp",
                ticket_number=event.ticket_number,
            )

        message_id = _json_or_empty(response).get("messageId") or "sent"
        logger.info(
            "WhatsApp sent",
            destination=destination,
            message_id=message_id,
            kind=event.kind,
            ticket_number=event.ticket_number,
        )

    async def _send_sms(self, client: httpx.AsyncClient, event: NotificationEvent) -> None:
        destination = format_gateway_phone(event.phone_number)
        params = {
            "method": "SendMessage",
            "send_to": destination,
            "msg": event.rendered_message,
            "msg_type": "TEXT",
            "userid": self.config.gupshup_sms_user_id or self.config.gupshup_api_key,
            "auth_scheme": "plain",
            "password": self.config.gupshup_sms_password,
            "v": "1.1",
            "format": "json",
        }
        try:
            response = await client.get(self.config.gupshup_sms_url, params=params)
        except httpx.HTTPError as e:
            raise DispatchFailure(f"SMS request failed: {e}", channel="sms", ticket_number=event.ticket_number) from e

        body = _json_or_empty(response).get("response") or {}
        if response.status_code != 200 or body.get("status") != "success":
            raise DispatchFailure(
                f"SMS rejected: {body.get('details') or body.get('reason') or response.status_code}",
                channel="sms",
                ticket_number=event.ticket_number,
            )

        logger.info(
            "SMS sent",
            destination=destination,
            message_id=body.get("id") or "sent",
            kind=event.kind,
            ticket_number=event.ticket_number,
        )


def _json_or_empty(response: httpx.Response) -> dict:  # type: ignore[type-arg]
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def build_dispatcher(config: Settings = settings) -> NotificationDispatcher:
    """Gupshup when credentials are configured, otherwise log-only."""
    if config.gupshup_configured:
        return GupshupDispatcher(config=config)
    return LoggingDispatcher()
