"""
FastAPI application factory.

Wires the dedup cache, delivery client, payload builder and services around
a WhatsApp protocol client and exposes the action endpoints. The protocol
client feeds inbound events through ``app.state.notification_service``.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import aiohttp
from fastapi import FastAPI

from wahook.api.errors import register_error_handlers
from wahook.api.routes.actions import router as actions_router
from wahook.core.background import BackgroundTasks
from wahook.core.config.settings import Settings
from wahook.core.config.settings import settings as default_settings
from wahook.core.logging.logger import get_logger, setup_app_logging
from wahook.delivery.webhook_client import WebhookDeliveryClient
from wahook.domain.interfaces.whatsapp_client import IWhatsAppClient
from wahook.persistence.memory.dedup_cache import DedupCache
from wahook.processors.payload_builder import PayloadBuilder
from wahook.services.call_service import CallService
from wahook.services.messaging_service import MessagingService
from wahook.services.notification_service import NotificationService

DEDUP_SWEEP_INTERVAL_SECONDS = 60.0


def create_app(
    client: IWhatsAppClient | None,
    settings: Settings | None = None,
    delivery: WebhookDeliveryClient | None = None,
    cache: DedupCache | None = None,
) -> FastAPI:
    """
    Build the HTTP surface around ``client``.

    Args:
        client: Connected WhatsApp protocol client, or None while it is starting
        settings: Settings to use, defaults to the module level instance
        delivery: Webhook delivery client, built from settings when omitted
        cache: Dedup cache for call-ended events

    Returns:
        FastAPI application with services stored on ``app.state``
    """
    settings = settings or default_settings
    background = BackgroundTasks()
    cache = cache or DedupCache(ttl_seconds=settings.call_dedup_ttl_seconds)
    owns_delivery = delivery is None
    delivery = delivery or WebhookDeliveryClient.from_settings(settings)

    notifications = NotificationService(
        builder=PayloadBuilder(client, settings),
        delivery=delivery,
        settings=settings,
        background=background,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        setup_app_logging()
        logger = get_logger(__name__)
        logger.info(f"Starting wahook v{settings.version} ({settings.environment})")
        if settings.has_webhooks:
            logger.info(f"Webhook subscribers: {settings.webhook_urls}")
        else:
            logger.warning("No webhook configured, inbound events will not be forwarded")

        session = aiohttp.ClientSession(
            connector=aiohttp.TCPConnector(limit=100, keepalive_timeout=30)
        )
        app.state.http_session = session
        if owns_delivery:
            delivery.attach_session(session)
        cache.start_sweeper(DEDUP_SWEEP_INTERVAL_SECONDS)

        try:
            yield
        finally:
            logger.info("Shutting down wahook...")
            await background.drain()
            await cache.stop_sweeper()
            await session.close()
            logger.info("wahook shutdown completed")

    app = FastAPI(
        title="wahook",
        version=settings.version,
        lifespan=lifespan,
        docs_url="/docs" if settings.is_development else None,
    )

    app.state.settings = settings
    app.state.background_tasks = background
    app.state.dedup_cache = cache
    app.state.delivery_client = delivery
    app.state.notification_service = notifications
    app.state.call_service = CallService(client, cache, notifications)
    app.state.messaging_service = MessagingService(client, settings, background)

    register_error_handlers(app)
    app.include_router(actions_router)
    return app
