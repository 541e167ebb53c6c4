"""
Message kind classification.

Maps an inbound event to exactly one ``MessageKind``. Rules are checked in a
fixed order and the first match wins: media before text-shaped content, so a
captioned image with a URL is still an ``image_message``.
"""

import re

from wahook.schemas.core.types import MessageKind
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
    PaymentInviteContent,
    PollCreationContent,
    PollUpdateContent,
    ReactionContent,
    StickerContent,
    TextContent,
    VideoContent,
)

# Shared with the payload builder so Type and TitleLink never disagree
LINK_PATTERN = re.compile(r"https?://\S+")

_SIMPLE_KINDS: list[tuple[type, MessageKind]] = [
    (ImageContent, MessageKind.IMAGE_MESSAGE),
    (VideoContent, MessageKind.VIDEO_MESSAGE),
    (DocumentContent, MessageKind.DOCUMENT_MESSAGE),
    (StickerContent, MessageKind.STICKER_MESSAGE),
    (ContactContent, MessageKind.CONTACT_MESSAGE),
    (ContactsArrayContent, MessageKind.CONTACT_MESSAGE),
    (LocationContent, MessageKind.LOCATION_MESSAGE),
    (LiveLocationContent, MessageKind.LIVE_LOCATION_MESSAGE),
    (ListContent, MessageKind.LIST_MESSAGE),
    (OrderContent, MessageKind.ORDER),
    (PaymentInviteContent, MessageKind.PAYMENT),
    (PollCreationContent, MessageKind.POLL_MESSAGE),
    (PollUpdateContent, MessageKind.POLL_MESSAGE),
    (ReactionContent, MessageKind.REACTION_MESSAGE),
]


def contains_link(text: str | None) -> bool:
    """Check whether ``text`` contains an http(s) URL."""
    return bool(text) and LINK_PATTERN.search(text) is not None


def resolve_text(event: InboundEvent) -> str:
    """Body text of an event: conversation, extended text, or media caption."""
    content = event.content
    if isinstance(content, (TextContent, ExtendedTextContent)):
        return content.text
    if isinstance(content, (ImageContent, VideoContent, DocumentContent)):
        return content.caption or ""
    return ""


def classify(event: InboundEvent, text: str | None = None) -> MessageKind:
    """
    Derive the canonical kind of an inbound event.

    Args:
        event: Inbound event to classify
        text: Resolved body text used for link detection. Defaults to
            ``resolve_text(event)``.

    Returns:
        Exactly one MessageKind, ``UNKNOWN`` when no rule applies
    """
    content = event.content

    if isinstance(content, AudioContent):
        return MessageKind.VOICE_MESSAGE if content.ptt else MessageKind.AUDIO_MESSAGE

    for content_type, kind in _SIMPLE_KINDS:
        if isinstance(content, content_type):
            return kind

    # A plain conversation with no body carries nothing to forward
    if isinstance(content, TextContent) and not content.text:
        return MessageKind.UNKNOWN

    if isinstance(content, (TextContent, ExtendedTextContent)):
        body = resolve_text(event) if text is None else text
        if contains_link(body):
            return MessageKind.LINK_MESSAGE
        return MessageKind.TEXT_MESSAGE

    return MessageKind.UNKNOWN
