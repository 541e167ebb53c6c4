"""
Shared enums and type aliases for the webhook notification pipeline.

These are the stable string tags that subscribers see on the wire, so values
must never be renamed.
"""

from enum import Enum
from typing import Any


class MessageKind(str, Enum):
    """Canonical kind of an inbound message, serialized as the payload ``Type``."""

    VOICE_MESSAGE = "voice_message"
    AUDIO_MESSAGE = "audio_message"
    IMAGE_MESSAGE = "image_message"
    VIDEO_MESSAGE = "video_message"
    DOCUMENT_MESSAGE = "document_message"
    STICKER_MESSAGE = "sticker_message"
    CONTACT_MESSAGE = "contact_message"
    LOCATION_MESSAGE = "location_message"
    LIVE_LOCATION_MESSAGE = "live_location_message"
    LIST_MESSAGE = "list_message"
    ORDER = "order"
    PAYMENT = "payment"
    POLL_MESSAGE = "poll_message"
    REACTION_MESSAGE = "reaction_message"
    LINK_MESSAGE = "link_message"
    TEXT_MESSAGE = "text_message"
    UNKNOWN = "unknown"


class MediaKind(str, Enum):
    """Media-bearing payload keys. At most one is present per payload."""

    AUDIO = "audio"
    DOCUMENT = "document"
    IMAGE = "image"
    STICKER = "sticker"
    VIDEO = "video"


class CallStatus(str, Enum):
    """Call notification status values."""

    RECEIVED = "call_received"
    REJECTED = "rejected"


class ChatPresence(str, Enum):
    """Chat presence states accepted by the protocol client."""

    COMPOSING = "composing"
    PAUSED = "paused"


class ChatPresenceMedia(str, Enum):
    """Media hint attached to a composing presence."""

    TEXT = ""
    AUDIO = "audio"


class ReceiptType(str, Enum):
    """Receipt types for mark-read."""

    READ = "read"
    PLAYED = "played"


class ErrorCode(str, Enum):
    """Error codes for the notification pipeline and outbound actions."""

    VALIDATION_ERROR = "validation_error"
    INVALID_IDENTITY = "invalid_identity"
    UNSUPPORTED_MEDIA = "unsupported_media"
    EXTRACTION_ERROR = "extraction_error"
    WEBHOOK_ERROR = "webhook_error"
    DELIVERY_ERROR = "delivery_error"
    CLIENT_UNAVAILABLE = "client_unavailable"
    ACTION_ERROR = "action_error"


# Type aliases
OutboundPayload = dict[str, Any]
