"""
Inbound event notification pipeline.

inbound event -> classify + build payload -> deliver to every subscriber URL.
A failure to build drops that single event's notification; it never affects
other events.
"""

import asyncio

from wahook.core.background import BackgroundTasks
from wahook.core.config.settings import Settings
from wahook.core.exceptions import WebhookError
from wahook.core.logging.context import set_event_context
from wahook.core.logging.logger import get_logger
from wahook.delivery.webhook_client import DeliveryResult, WebhookDeliveryClient
from wahook.processors.payload_builder import PayloadBuilder
from wahook.schemas.core.types import OutboundPayload
from wahook.schemas.whatsapp.events import InboundEvent


class NotificationService:
    """Forwards inbound events to the configured webhook subscribers."""

    def __init__(
        self,
        builder: PayloadBuilder,
        delivery: WebhookDeliveryClient,
        settings: Settings,
        background: BackgroundTasks | None = None,
    ):
        self.builder = builder
        self.delivery = delivery
        self.settings = settings
        self.background = background or BackgroundTasks()
        self.logger = get_logger(__name__)

    async def forward_message(self, event: InboundEvent) -> bool:
        """
        Build and deliver the notification for one event.

        Returns:
            True if every subscriber received the payload, False when the
            payload could not be built or any delivery failed.
        """
        if not self.settings.has_webhooks:
            return True

        set_event_context(chat_id=event.info.chat, sender_id=event.info.sender)
        self.logger.info(f"Forwarding event to webhook: {self.settings.webhook_urls}")

        try:
            payload = await self.builder.build(event)
        except WebhookError as e:
            self.logger.error(f"Dropping notification for message {event.info.id}: {e}")
            return False

        results = await self.deliver(payload)
        ok = all(result.success for result in results)
        if ok:
            self.logger.info("Event forwarded to webhook")
        return ok

    async def deliver(self, payload: OutboundPayload) -> list[DeliveryResult]:
        """Deliver an already built payload to every configured URL."""
        results = await self.delivery.deliver_all(payload, self.settings.webhook_urls)
        for result in results:
            if not result.success:
                self.logger.error(f"Failed to deliver webhook to {result.url}: {result.error}")
        return results

    def schedule(self, event: InboundEvent) -> asyncio.Task:
        """Run ``forward_message`` detached from the caller."""
        return self.background.spawn(
            self.forward_message(event), name=f"forward-{event.info.id}"
        )

    def schedule_payload(self, payload: OutboundPayload) -> asyncio.Task | None:
        """Deliver a prebuilt payload detached from the caller."""
        if not self.settings.has_webhooks:
            return None
        return self.background.spawn(self.deliver(payload), name="deliver-payload")
