"""
Tests for signed webhook delivery with retry.

A stub session stands in for aiohttp: each call to ``post`` consumes the next
scripted outcome, either an HTTP status or an exception raised on entry.
"""

import asyncio
import hashlib
import hmac
import json

import aiohttp
import pytest

from wahook.core.exceptions import DeliveryError
from wahook.delivery.webhook_client import (
    SIGNATURE_HEADER,
    WebhookDeliveryClient,
    serialize_payload,
    sign_payload,
)

URL_A = "https://hooks.example.com/a"
URL_B = "https://hooks.example.com/b"


class StubResponse:
    def __init__(self, status: int):
        self.status = status


class _PostContext:
    def __init__(self, outcome):
        self.outcome = outcome

    async def __aenter__(self):
        if isinstance(self.outcome, BaseException):
            raise self.outcome
        return StubResponse(self.outcome)

    async def __aexit__(self, *exc_info):
        return False


class StubSession:
    """Scripted replacement for aiohttp.ClientSession."""

    def __init__(self, outcomes=None, per_url=None):
        self.outcomes = list(outcomes or [])
        self.per_url = {url: list(items) for url, items in (per_url or {}).items()}
        self.calls: list[dict] = []
        self.closed = False

    def post(self, url, data=None, headers=None, timeout=None):
        self.calls.append({"url": url, "data": data, "headers": headers, "timeout": timeout})
        queue = self.per_url.get(url, self.outcomes)
        outcome = queue.pop(0) if queue else 200
        return _PostContext(outcome)

    async def close(self):
        self.closed = True


class RecordingSleep:
    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


def connection_error() -> aiohttp.ClientError:
    return aiohttp.ClientConnectionError("connection refused")


@pytest.fixture
def sleeper():
    return RecordingSleep()


def make_client(session, sleeper, **kwargs) -> WebhookDeliveryClient:
    return WebhookDeliveryClient(secret="test-secret", session=session, sleep=sleeper, **kwargs)


class TestSerialization:
    def test_canonical_json(self):
        body = serialize_payload({"b": 1, "a": {"d": "é", "c": None}})
        assert body == '{"a":{"c":null,"d":"é"},"b":1}'.encode("utf-8")

    def test_signature_is_hmac_sha256_hex(self):
        body = b'{"a":1}'
        expected = hmac.new(b"test-secret", body, hashlib.sha256).hexdigest()
        assert sign_payload(body, "test-secret") == expected


class TestDeliver:
    @pytest.mark.asyncio
    async def test_signed_headers_match_body(self, sleeper):
        session = StubSession([200])
        client = make_client(session, sleeper)

        status = await client.deliver({"Type": "text_message"}, URL_A)

        assert status == 200
        call = session.calls[0]
        assert call["url"] == URL_A
        assert call["headers"]["Content-Type"] == "application/json"
        expected = hmac.new(b"test-secret", call["data"], hashlib.sha256).hexdigest()
        assert call["headers"][SIGNATURE_HEADER] == f"sha256={expected}"
        assert json.loads(call["data"]) == {"Type": "text_message"}
        assert sleeper.delays == []

    @pytest.mark.asyncio
    async def test_retries_then_succeeds(self, sleeper):
        session = StubSession([connection_error(), asyncio.TimeoutError(), 204])
        client = make_client(session, sleeper)

        status = await client.deliver({"a": 1}, URL_A)

        assert status == 204
        assert len(session.calls) == 3
        assert sleeper.delays == [1.0, 2.0]
        # Every attempt carries the same bytes and signature
        assert len({call["data"] for call in session.calls}) == 1

    @pytest.mark.asyncio
    async def test_gives_up_after_five_attempts(self, sleeper):
        session = StubSession([connection_error() for _ in range(10)])
        client = make_client(session, sleeper)

        with pytest.raises(DeliveryError) as exc_info:
            await client.deliver({"a": 1}, URL_A)

        assert len(session.calls) == 5
        assert sleeper.delays == [1.0, 2.0, 4.0, 8.0]
        assert "5" in str(exc_info.value)
        assert exc_info.value.attempts == 5
        assert exc_info.value.url == URL_A

    @pytest.mark.asyncio
    async def test_http_error_status_is_not_retried(self, sleeper):
        session = StubSession([500])
        client = make_client(session, sleeper)

        status = await client.deliver({"a": 1}, URL_A)

        assert status == 500
        assert len(session.calls) == 1
        assert sleeper.delays == []

    @pytest.mark.asyncio
    async def test_custom_attempt_budget(self, sleeper):
        session = StubSession([connection_error() for _ in range(3)])
        client = make_client(session, sleeper, max_attempts=2, initial_backoff=0.5)

        with pytest.raises(DeliveryError):
            await client.deliver({"a": 1}, URL_A)

        assert len(session.calls) == 2
        assert sleeper.delays == [0.5]

    def test_invalid_attempt_budget(self, sleeper):
        with pytest.raises(ValueError):
            make_client(StubSession(), sleeper, max_attempts=0)


class TestDeliverAll:
    @pytest.mark.asyncio
    async def test_failure_on_one_url_does_not_affect_another(self, sleeper):
        session = StubSession(
            per_url={
                URL_A: [connection_error() for _ in range(5)],
                URL_B: [200],
            }
        )
        client = make_client(session, sleeper)

        results = await client.deliver_all({"a": 1}, [URL_A, URL_B])

        assert [result.url for result in results] == [URL_A, URL_B]
        assert results[0].success is False
        assert "Failed after 5 attempts" in results[0].error
        assert results[1].success is True
        assert results[1].status == 200

    @pytest.mark.asyncio
    async def test_no_urls(self, sleeper):
        client = make_client(StubSession(), sleeper)
        assert await client.deliver_all({"a": 1}, []) == []


class TestSessionLifecycle:
    @pytest.mark.asyncio
    async def test_injected_session_is_not_closed(self, sleeper):
        session = StubSession()
        async with make_client(session, sleeper):
            pass
        assert session.closed is False

    def test_from_settings(self, settings):
        client = WebhookDeliveryClient.from_settings(settings)
        assert client.secret == "test-secret"
        assert client.max_attempts == 5
        assert client.timeout.total == 10.0
