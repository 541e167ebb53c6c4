"""
Webhook payload construction for inbound WhatsApp events.

Turns an InboundEvent into the JSON-ready mapping delivered to subscribers.
Building is fail-fast: a media attachment that cannot be extracted aborts the
whole payload.
"""

from datetime import datetime, timezone
from typing import Any

from wahook.core.config.settings import Settings
from wahook.core.exceptions import ExtractionError, InvalidIdentityError, WebhookError
from wahook.core.logging.logger import get_logger
from wahook.domain.identity import extract_phone_number, is_group_jid, parse_jid
from wahook.domain.interfaces.whatsapp_client import IWhatsAppClient
from wahook.processors.classifier import classify, contains_link, resolve_text
from wahook.schemas.core.types import MediaKind, OutboundPayload
from wahook.schemas.whatsapp.events import (
    AudioContent,
    ContactContent,
    ContactsArrayContent,
    DocumentContent,
    ExtendedTextContent,
    ImageContent,
    InboundEvent,
    ListContent,
    LiveLocationContent,
    LocationContent,
    OrderContent,
    PollUpdateContent,
    ReactionContent,
    StickerContent,
    VideoContent,
)

_MEDIA_KEYS: dict[type, MediaKind] = {
    AudioContent: MediaKind.AUDIO,
    DocumentContent: MediaKind.DOCUMENT,
    ImageContent: MediaKind.IMAGE,
    StickerContent: MediaKind.STICKER,
    VideoContent: MediaKind.VIDEO,
}

_PASS_THROUGH_KEYS: dict[type, str] = {
    ListContent: "list",
    LiveLocationContent: "live_location",
    LocationContent: "location",
    OrderContent: "order",
}


def format_timestamp(value: datetime) -> str:
    """Format as RFC 3339 with second precision, naive values taken as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    formatted = value.isoformat(timespec="seconds")
    if formatted.endswith("+00:00"):
        formatted = formatted[:-6] + "Z"
    return formatted


class PayloadBuilder:
    """
    Builds outbound webhook payloads.

    Collaborators are injected: the protocol client supplies media extraction,
    group metadata and the account's own identity.
    """

    def __init__(self, client: IWhatsAppClient, settings: Settings):
        self.client = client
        self.settings = settings
        self.logger = get_logger(__name__)

    async def build(self, event: InboundEvent) -> OutboundPayload:
        """
        Build the payload for one inbound event.

        Raises:
            WebhookError: If the chat JID is invalid or media extraction fails
        """
        self.logger.debug(f"Raw message: {event.content!r}")

        body: OutboundPayload = {}

        source = event.info.source_string
        if source:
            body["SenderNumber"] = source

        message_data, resolved_text = self._build_message_data(event)
        body["message"] = message_data

        if event.info.push_name:
            body["PushName"] = event.info.push_name

        reaction = self._build_reaction(event)
        if reaction:
            body["reaction"] = reaction
        if event.is_view_once:
            body["view_once"] = True
        if event.is_forwarded:
            body["forwarded"] = True

        body["timestamp"] = format_timestamp(event.info.timestamp)

        await self._add_chat_fields(body, event)

        body["MyNumber"] = self._is_own_number(source)
        body["Type"] = classify(event, resolved_text).value
        body["Port"] = self.settings.port

        contacts = self._build_contacts(event)
        if contacts is not None:
            body["contact"] = contacts

        pass_through_key = _PASS_THROUGH_KEYS.get(type(event.content))
        if pass_through_key:
            body[pass_through_key] = event.content.to_payload()

        if event.has_media:
            media_kind = _MEDIA_KEYS[type(event.content)]
            body[media_kind.value] = await self._extract_media(event, media_kind)

        return body

    def _build_message_data(self, event: InboundEvent) -> tuple[dict[str, Any], str]:
        """Build the nested ``message`` object and return the resolved text."""
        context = event.context
        message_data: dict[str, Any] = {
            "ID": event.info.id,
            "MessageOrigin": context.quoted_message if context else None,
            "RepliedId": context.stanza_id if context else None,
        }

        content = event.content
        text = resolve_text(event)
        if isinstance(content, ExtendedTextContent) and contains_link(content.text):
            if content.title:
                message_data["TitleLink"] = content.title
            if content.description:
                message_data["LinkDescription"] = content.description
            text = content.text
        message_data["TextMessage"] = text

        if isinstance(content, PollUpdateContent):
            self.logger.debug(f"PollUpdateMessage received: {content!r}")
            # Votes are encrypted; selected options are not decoded yet
            message_data["PollUpdate"] = {
                "PollID": content.poll_creation_message_id,
                "SelectedOptions": [],
            }

        return message_data, text

    @staticmethod
    def _build_reaction(event: InboundEvent) -> dict[str, str] | None:
        content = event.content
        if isinstance(content, ReactionContent) and content.text:
            return {"ID": content.target_message_id, "Message": content.text}
        return None

    async def _add_chat_fields(self, body: OutboundPayload, event: InboundEvent) -> None:
        chat = event.info.chat
        try:
            jid = parse_jid(chat)
        except InvalidIdentityError as e:
            raise WebhookError(f"Invalid JID: {e.message}") from e

        is_group = is_group_jid(chat)
        body["IsGroup"] = is_group
        if not is_group:
            return

        try:
            group_name = await self.client.get_group_name(jid)
        except Exception as e:
            self.logger.error(f"Failed to get group name: {e}")
            return
        if group_name:
            body["GroupName"] = group_name

    def _is_own_number(self, source: str) -> bool:
        own_id = self.client.own_id
        if own_id is None:
            return False
        return extract_phone_number(source) == extract_phone_number(own_id)

    def _build_contacts(self, event: InboundEvent) -> list[dict[str, str]] | None:
        content = event.content
        if isinstance(content, ContactContent):
            self.logger.debug(f"Single ContactMessage detected: {content.display_name}")
            return [{"displayName": content.display_name, "vcard": content.vcard}]
        if isinstance(content, ContactsArrayContent):
            contacts = [
                {"displayName": contact.display_name, "vcard": contact.vcard}
                for contact in content.contacts
            ]
            self.logger.debug(f"Multiple contacts message with {len(contacts)} cards")
            return contacts
        return None

    async def _extract_media(self, event: InboundEvent, media_kind: MediaKind) -> str:
        try:
            return await self.client.extract_media(
                self.settings.path_media, event.content.media
            )
        except Exception as e:
            self.logger.error(f"Failed to download {media_kind.value}: {e}")
            raise ExtractionError(media_kind.value, e) from e
