"""
Signed webhook delivery with retry.

Each payload is serialized once, signed with HMAC-SHA256 over the exact bytes
sent, and POSTed to every subscriber URL independently. Only transport
failures are retried; an HTTP error status from the subscriber is logged and
counts as delivered.
"""

import asyncio
import hashlib
import hmac
import json
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone
from enum import Enum
from typing import Any

import aiohttp
from pydantic import BaseModel, Field

from wahook.core.config.settings import Settings
from wahook.core.exceptions import DeliveryError
from wahook.core.logging.logger import get_logger
from wahook.schemas.core.types import OutboundPayload

SIGNATURE_HEADER = "X-Hub-Signature-256"

DEFAULT_MAX_ATTEMPTS = 5
DEFAULT_INITIAL_BACKOFF = 1.0
DEFAULT_TIMEOUT_SECONDS = 10.0


class DeliveryResult(BaseModel):
    """Outcome of delivering one payload to one subscriber URL."""

    url: str
    success: bool
    status: int | None = None
    error: str | None = None
    delivered_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


def _json_default(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True, exclude_none=True)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def serialize_payload(payload: OutboundPayload) -> bytes:
    """Serialize a payload to canonical JSON bytes (sorted keys, compact)."""
    return json.dumps(
        payload,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        default=_json_default,
    ).encode("utf-8")


def sign_payload(body: bytes, secret: str) -> str:
    """HMAC-SHA256 hex digest of ``body`` keyed with ``secret``."""
    return hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()


class WebhookDeliveryClient:
    """
    HTTP client that delivers signed payloads to subscriber URLs.

    The aiohttp session is injected when the caller manages its lifecycle,
    otherwise one is created on first use and closed by ``close()``.
    """

    def __init__(
        self,
        secret: str,
        session: aiohttp.ClientSession | None = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        initial_backoff: float = DEFAULT_INITIAL_BACKOFF,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.secret = secret
        self.max_attempts = max_attempts
        self.initial_backoff = initial_backoff
        self.timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        self._session = session
        self._owns_session = session is None
        self._sleep = sleep
        self.logger = get_logger(__name__)

    @classmethod
    def from_settings(
        cls, settings: Settings, session: aiohttp.ClientSession | None = None
    ) -> "WebhookDeliveryClient":
        return cls(
            secret=settings.webhook_secret,
            session=session,
            max_attempts=settings.webhook_max_attempts,
            timeout_seconds=settings.webhook_timeout_seconds,
        )

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    def attach_session(self, session: aiohttp.ClientSession) -> None:
        """Use a session owned by the caller (e.g. the app lifespan)."""
        self._session = session
        self._owns_session = False

    async def close(self) -> None:
        """Close the session if this client created it."""
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()

    async def __aenter__(self) -> "WebhookDeliveryClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    def build_headers(self, body: bytes) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            SIGNATURE_HEADER: f"sha256={sign_payload(body, self.secret)}",
        }

    async def deliver(self, payload: OutboundPayload, url: str) -> int:
        """
        Deliver a payload to one URL, retrying transport failures.

        Backoff doubles from ``initial_backoff`` between attempts
        (1s, 2s, 4s, 8s with the defaults).

        Returns:
            HTTP status of the successful attempt

        Raises:
            DeliveryError: When every attempt failed at the transport level
        """
        body = serialize_payload(payload)
        headers = self.build_headers(body)
        session = self._get_session()

        backoff = self.initial_backoff
        last_error: Exception | None = None

        for attempt in range(1, self.max_attempts + 1):
            try:
                async with session.post(
                    url, data=body, headers=headers, timeout=self.timeout
                ) as response:
                    status = response.status
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                last_error = e
                self.logger.warning(
                    f"Attempt {attempt} to submit webhook to {url} failed: {e!r}"
                )
                if attempt < self.max_attempts:
                    await self._sleep(backoff)
                    backoff *= 2
                continue

            if 200 <= status < 300:
                self.logger.info(
                    f"Successfully submitted webhook to {url} on attempt {attempt}"
                )
            else:
                self.logger.warning(
                    f"Webhook {url} answered HTTP {status} on attempt {attempt}, not retrying"
                )
            return status

        self.logger.error(
            f"Giving up on webhook {url} after {self.max_attempts} attempts: {last_error!r}"
        )
        raise DeliveryError(url, self.max_attempts, last_error)

    async def deliver_all(
        self, payload: OutboundPayload, urls: list[str]
    ) -> list[DeliveryResult]:
        """
        Deliver a payload to every URL concurrently.

        Deliveries are independent: one URL failing neither cancels nor rolls
        back the others. Results keep the order of ``urls``.
        """
        outcomes = await asyncio.gather(
            *(self.deliver(payload, url) for url in urls), return_exceptions=True
        )

        results: list[DeliveryResult] = []
        for url, outcome in zip(urls, outcomes):
            if isinstance(outcome, DeliveryError):
                results.append(DeliveryResult(url=url, success=False, error=outcome.message))
            elif isinstance(outcome, BaseException):
                # Anything else is a programming error, do not hide it
                raise outcome
            else:
                results.append(DeliveryResult(url=url, success=True, status=outcome))
        return results
