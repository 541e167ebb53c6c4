"""
Tests for the inbound event notification pipeline.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from wahook.core.background import BackgroundTasks
from wahook.core.logging.context import get_current_chat_context
from wahook.delivery.webhook_client import DeliveryResult
from wahook.processors.payload_builder import PayloadBuilder
from wahook.services.notification_service import NotificationService


def results_for(*successes):
    async def deliver_all(payload, urls):
        return [
            DeliveryResult(
                url=url,
                success=ok,
                status=200 if ok else None,
                error=None if ok else "down",
            )
            for url, ok in zip(urls, successes)
        ]

    return deliver_all


@pytest.fixture
def delivery():
    client = MagicMock()
    client.deliver_all = AsyncMock(side_effect=results_for(True, True))
    return client


@pytest.fixture
def service(fake_client, settings, delivery):
    return NotificationService(PayloadBuilder(fake_client, settings), delivery, settings)


class TestForwardMessage:
    @pytest.mark.asyncio
    async def test_delivers_built_payload_to_every_url(self, service, delivery, make_event):
        ok = await service.forward_message(
            make_event({"kind": "text", "text": "check https://example.com now"})
        )

        assert ok is True
        payload, urls = delivery.deliver_all.await_args.args
        assert payload["Type"] == "link_message"
        assert urls == ["https://hooks.example.com/a", "https://hooks.example.com/b"]

    @pytest.mark.asyncio
    async def test_partial_failure_reports_false(self, service, delivery, make_event):
        delivery.deliver_all.side_effect = results_for(False, True)
        assert await service.forward_message(make_event({"kind": "text", "text": "x"})) is False

    @pytest.mark.asyncio
    async def test_extraction_failure_drops_event(
        self, service, fake_client, delivery, make_event, media_ref
    ):
        fake_client.extract_media.side_effect = OSError("decrypt failed")

        ok = await service.forward_message(
            make_event({"kind": "image", "media": media_ref("p.jpg")})
        )

        assert ok is False
        delivery.deliver_all.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_failed_event_does_not_affect_next(
        self, service, fake_client, delivery, make_event, media_ref
    ):
        fake_client.extract_media.side_effect = OSError("decrypt failed")
        await service.forward_message(make_event({"kind": "image", "media": media_ref()}))

        ok = await service.forward_message(make_event({"kind": "text", "text": "next"}))

        assert ok is True
        delivery.deliver_all.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_no_webhooks_configured(
        self, fake_client, settings_without_webhooks, delivery, make_event
    ):
        service = NotificationService(
            PayloadBuilder(fake_client, settings_without_webhooks),
            delivery,
            settings_without_webhooks,
        )

        assert await service.forward_message(make_event({"kind": "text", "text": "x"})) is True
        delivery.deliver_all.assert_not_awaited()
        assert service.schedule_payload({"a": 1}) is None

    @pytest.mark.asyncio
    async def test_sets_logging_context(self, service, make_event):
        await service.forward_message(
            make_event(
                {"kind": "text", "text": "x"},
                chat="120363025246125888@g.us",
                sender="5511999999999@s.whatsapp.net",
            )
        )
        assert get_current_chat_context() == "120363025246125888@g.us"


class TestScheduling:
    @pytest.mark.asyncio
    async def test_schedule_runs_detached(self, service, delivery, make_event):
        task = service.schedule(make_event({"kind": "text", "text": "x"}))
        assert len(service.background) == 1

        assert await task is True
        delivery.deliver_all.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_schedule_payload(self, service, delivery):
        task = service.schedule_payload({"Type": "call_received"})
        results = await task

        assert [result.success for result in results] == [True, True]
        assert len(service.background) == 0


class TestBackgroundTasks:
    @pytest.mark.asyncio
    async def test_failed_task_is_logged_not_raised(self):
        background = BackgroundTasks()

        async def boom():
            raise RuntimeError("boom")

        background.spawn(boom(), name="boom")
        await background.drain()

        assert len(background) == 0

    @pytest.mark.asyncio
    async def test_cancel_all(self):
        background = BackgroundTasks()
        background.spawn(asyncio.sleep(3600), name="sleeper")
        await background.cancel_all()

        assert len(background) == 0
