"""
Pytest configuration and common fixtures for wahook tests.

Provides a fake WhatsApp client, settings built from a controlled environment
and helpers to build inbound events.
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest

from wahook.core.config.settings import Settings
from wahook.core.logging.context import clear_event_context
from wahook.domain.identity import JID, parse_jid
from wahook.domain.interfaces.whatsapp_client import IWhatsAppClient
from wahook.schemas.whatsapp.events import InboundEvent, MediaReference, MessageInfo

USER_JID = "5511999999999@s.whatsapp.net"
OTHER_JID = "5511888888888@s.whatsapp.net"
GROUP_JID = "120363025246125888@g.us"
OWN_JID = "5511777777777:3@s.whatsapp.net"
EVENT_TIME = datetime(2024, 5, 17, 12, 30, 45, tzinfo=timezone.utc)


class FakeWhatsAppClient(IWhatsAppClient):
    """
    In-memory protocol client.

    Every action is an AsyncMock so tests can assert on calls and inject
    failures through ``side_effect``.
    """

    def __init__(self, connected: bool = True, own_id: str | None = OWN_JID):
        self.connected = connected
        self.logged_in = connected
        self._own_id = parse_jid(own_id) if own_id else None

        self.extract_media = AsyncMock(side_effect=self._stored_path)
        self.get_group_name = AsyncMock(return_value="Team Chat")
        self.send_text = AsyncMock(return_value="3EB0TEXT")
        self.send_media = AsyncMock(return_value="3EB0MEDIA")
        self.send_location = AsyncMock(return_value="3EB0LOC")
        self.send_chat_presence = AsyncMock(return_value=None)
        self.reject_call = AsyncMock(return_value=None)
        self.revoke_message = AsyncMock(return_value=None)
        self.mark_read = AsyncMock(return_value=None)

    @staticmethod
    async def _stored_path(destination_dir: str, media: MediaReference) -> str:
        return f"{destination_dir}/{media.file_name or 'media.bin'}"

    def is_connected(self) -> bool:
        return self.connected

    def is_logged_in(self) -> bool:
        return self.logged_in

    @property
    def own_id(self) -> JID | None:
        return self._own_id

    # Replaced per instance by the mocks above
    async def extract_media(self, destination_dir, media):
        raise NotImplementedError

    async def get_group_name(self, group):
        raise NotImplementedError

    async def send_text(self, to, text, reply_to_id=None, reply_participant=None):
        raise NotImplementedError

    async def send_media(self, to, data, mime_type, **options):
        raise NotImplementedError

    async def send_location(self, to, latitude, longitude):
        raise NotImplementedError

    async def send_chat_presence(self, to, presence, media):
        raise NotImplementedError

    async def reject_call(self, caller, call_id):
        raise NotImplementedError

    async def revoke_message(self, chat, message_id):
        raise NotImplementedError

    async def mark_read(self, message_ids, timestamp, chat, sender, receipt_type):
        raise NotImplementedError


def build_event(
    content: dict,
    chat: str = USER_JID,
    sender: str | None = None,
    message_id: str = "3EB0ABCDEF",
    push_name: str = "Maria",
    context: dict | None = None,
    is_view_once: bool = False,
) -> InboundEvent:
    """Build an inbound event from a content dict (``kind`` selects the variant)."""
    return InboundEvent(
        info=MessageInfo(
            id=message_id,
            sender=sender or chat,
            chat=chat,
            push_name=push_name,
            timestamp=EVENT_TIME,
        ),
        content=content,
        context=context,
        is_view_once=is_view_once,
    )


def media_fields(file_name: str = "file.bin", mimetype: str | None = None) -> dict:
    return {
        "direct_path": "/v/t62/abc",
        "media_key": "a2V5",
        "file_name": file_name,
        "mimetype": mimetype,
    }


@pytest.fixture(autouse=True)
def setup_test_env(monkeypatch):
    """Set up a predictable environment for each test."""
    monkeypatch.setenv("ENVIRONMENT", "DEV")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("PORT", "3000")
    monkeypatch.setenv(
        "WHATSAPP_WEBHOOK", "https://hooks.example.com/a,https://hooks.example.com/b"
    )
    monkeypatch.setenv("WHATSAPP_WEBHOOK_SECRET", "test-secret")
    monkeypatch.setenv("PATH_MEDIA", "statics/media")
    yield
    clear_event_context()


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def settings_without_webhooks(monkeypatch) -> Settings:
    monkeypatch.delenv("WHATSAPP_WEBHOOK", raising=False)
    return Settings()


@pytest.fixture
def fake_client() -> FakeWhatsAppClient:
    return FakeWhatsAppClient()


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_event():
    """Factory fixture: ``make_event({"kind": "text", "text": "hi"}, chat=...)``."""
    return build_event


@pytest.fixture
def media_ref():
    """Factory fixture for media reference fields."""
    return media_fields
