"""
Call-ended handling.

Upstream may deliver the same call-ended event more than once. The dedup cache
guarantees one call rejection and at most one ``call_received`` webhook per
``call_id:phone`` within the TTL window.
"""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field

from wahook.core.exceptions import ActionError, ClientUnavailableError, ValidationError
from wahook.core.logging.logger import get_logger
from wahook.domain.identity import parse_jid
from wahook.domain.interfaces.whatsapp_client import IWhatsAppClient
from wahook.persistence.memory.dedup_cache import DedupCache, call_key
from wahook.processors.payload_builder import format_timestamp
from wahook.schemas.core.types import CallStatus, OutboundPayload
from wahook.services.notification_service import NotificationService

STATUS_REJECTED = "call rejected"
STATUS_ALREADY_PROCESSED = "call rejected (already processed)"


class CallEndedResult(BaseModel):
    """Outcome reported to the caller of the call-ended action."""

    model_config = ConfigDict(populate_by_name=True)

    status: str
    call_id: str
    phone: str = Field(..., alias="Phone")
    duplicate: bool = Field(False, exclude=True)


def build_call_payload(call_id: str, phone: str, when: datetime | None = None) -> OutboundPayload:
    """Webhook body announcing a rejected call."""
    return {
        "SenderNumber": phone,
        "Call_Id": call_id,
        "Type": CallStatus.RECEIVED.value,
        "Status_Call": CallStatus.REJECTED.value,
        "timestamp": format_timestamp(when or datetime.now(timezone.utc)),
        "IsGroup": False,
    }


class CallService:
    """Rejects ended calls once and notifies subscribers."""

    def __init__(
        self,
        client: IWhatsAppClient | None,
        cache: DedupCache,
        notifications: NotificationService,
    ):
        self.client = client
        self.cache = cache
        self.notifications = notifications
        self.logger = get_logger(__name__)

    async def handle_call_ended(self, call_id: str, phone: str) -> CallEndedResult:
        """
        Reject the call and schedule the webhook, once per call.

        Raises:
            ValidationError: If call_id or phone is missing or phone is malformed
            ClientUnavailableError: If the WhatsApp client is not initialized
            ActionError: If rejecting the call failed (the guard is released)
        """
        if not call_id or not phone:
            raise ValidationError("call_id and Phone are required")
        if self.client is None:
            raise ClientUnavailableError()

        jid = parse_jid(phone)
        key = call_key(call_id, phone)

        # Any failure inside the block, cancellation included, releases the key
        async with self.cache.guarded(key) as first_observer:
            if not first_observer:
                self.logger.info(
                    f"Webhook for call_id {call_id} and Phone {phone} already sent, ignoring"
                )
                return CallEndedResult(
                    status=STATUS_ALREADY_PROCESSED,
                    call_id=call_id,
                    phone=phone,
                    duplicate=True,
                )

            try:
                await self.client.reject_call(jid, call_id)
            except Exception as e:
                raise ActionError("reject call", e) from e

        # The rejection already happened; a failed webhook does not undo it
        self.notifications.schedule_payload(build_call_payload(call_id, phone))

        return CallEndedResult(status=STATUS_REJECTED, call_id=call_id, phone=phone)
