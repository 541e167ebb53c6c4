"""
Inbound WhatsApp event models.

An inbound event carries exactly one content variant out of a closed set,
modelled as a pydantic discriminated union on the ``kind`` field. Pass-through
variants (list, location, live location, order) serialize with camelCase keys
so subscribers see the same field names the protocol uses.
"""

from datetime import datetime
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from wahook.domain.identity import is_group_jid


class MediaReference(BaseModel):
    """Opaque pointer to encrypted media, consumed only by the media extractor."""

    model_config = ConfigDict(extra="forbid")

    url: str | None = Field(None, description="Direct download URL")
    direct_path: str | None = Field(None, description="CDN path of the media blob")
    media_key: str | None = Field(None, description="Base64 media decryption key")
    mimetype: str | None = Field(None, description="Declared content type")
    file_sha256: str | None = Field(None, description="Base64 SHA-256 of the plaintext")
    file_length: int | None = Field(None, ge=0, description="Size in bytes")
    file_name: str | None = Field(None, description="Original file name (documents)")


class PassThroughContent(BaseModel):
    """Base for variants forwarded to subscribers as raw objects."""

    model_config = ConfigDict(
        extra="forbid", alias_generator=to_camel, populate_by_name=True
    )

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True, exclude={"kind"})


# ====================================================================
# Text-shaped variants
# ====================================================================


class TextContent(BaseModel):
    """Plain conversation text."""

    model_config = ConfigDict(extra="forbid")

    kind: Literal["text"] = "text"
    text: str = Field(..., description="Message body")


class ExtendedTextContent(BaseModel):
    """Text with optional link preview metadata."""

    model_config = ConfigDict(extra="forbid")

    kind: Literal["extended_text"] = "extended_text"
    text: str = Field(..., description="Message body")
    matched_text: str | None = Field(None, description="URL the preview was built for")
    title: str | None = Field(None, description="Link preview title")
    description: str | None = Field(None, description="Link preview description")


# ====================================================================
# Media variants
# ====================================================================


class AudioContent(BaseModel):
    model_config = ConfigDict(extra="forbid")

    kind: Literal["audio"] = "audio"
    media: MediaReference
    ptt: bool = Field(False, description="True for push-to-talk voice notes")
    seconds: int | None = None


class ImageContent(BaseModel):
    model_config = ConfigDict(extra="forbid")

    kind: Literal["image"] = "image"
    media: MediaReference
    caption: str | None = None


class VideoContent(BaseModel):
    model_config = ConfigDict(extra="forbid")

    kind: Literal["video"] = "video"
    media: MediaReference
    caption: str | None = None
    gif_playback: bool = False


class DocumentContent(BaseModel):
    model_config = ConfigDict(extra="forbid")

    kind: Literal["document"] = "document"
    media: MediaReference
    caption: str | None = None
    title: str | None = None


class StickerContent(BaseModel):
    model_config = ConfigDict(extra="forbid")

    kind: Literal["sticker"] = "sticker"
    media: MediaReference
    is_animated: bool = False


# ====================================================================
# Contact variants
# ====================================================================


class ContactContent(BaseModel):
    """Single shared contact card."""

    model_config = ConfigDict(extra="forbid")

    kind: Literal["contact"] = "contact"
    display_name: str = ""
    vcard: str = ""


class ContactsArrayContent(BaseModel):
    """Several shared contact cards in one message."""

    model_config = ConfigDict(extra="forbid")

    kind: Literal["contacts_array"] = "contacts_array"
    display_name: str | None = None
    contacts: list[ContactContent] = Field(default_factory=list)


# ====================================================================
# Pass-through variants
# ====================================================================


class LocationContent(PassThroughContent):
    kind: Literal["location"] = "location"
    degrees_latitude: float
    degrees_longitude: float
    name: str | None = None
    address: str | None = None
    url: str | None = None
    comment: str | None = None


class LiveLocationContent(PassThroughContent):
    kind: Literal["live_location"] = "live_location"
    degrees_latitude: float
    degrees_longitude: float
    accuracy_in_meters: int | None = None
    speed_in_mps: float | None = None
    degrees_clockwise_from_magnetic_north: int | None = None
    caption: str | None = None
    sequence_number: int | None = None
    time_offset: int | None = None


class ListRow(PassThroughContent):
    title: str
    description: str | None = None
    row_id: str | None = None


class ListSection(PassThroughContent):
    title: str | None = None
    rows: list[ListRow] = Field(default_factory=list)


class ListContent(PassThroughContent):
    kind: Literal["list"] = "list"
    title: str | None = None
    description: str | None = None
    button_text: str | None = None
    footer_text: str | None = None
    sections: list[ListSection] = Field(default_factory=list)


class OrderContent(PassThroughContent):
    kind: Literal["order"] = "order"
    order_id: str
    item_count: int | None = None
    status: str | None = None
    message: str | None = None
    order_title: str | None = None
    seller_jid: str | None = None
    token: str | None = None
    total_amount1000: int | None = None
    total_currency_code: str | None = None


# ====================================================================
# Poll, reaction and payment variants
# ====================================================================


class PollOption(BaseModel):
    model_config = ConfigDict(extra="forbid")

    option_name: str


class PollCreationContent(BaseModel):
    model_config = ConfigDict(extra="forbid")

    kind: Literal["poll_creation"] = "poll_creation"
    version: Literal[3, 4, 5] = 3
    name: str = ""
    options: list[PollOption] = Field(default_factory=list)
    selectable_options_count: int = 0


class PollUpdateContent(BaseModel):
    """Vote on a poll. The selected options stay encrypted in ``vote``."""

    model_config = ConfigDict(extra="forbid")

    kind: Literal["poll_update"] = "poll_update"
    poll_creation_message_id: str
    vote: str | None = Field(None, description="Opaque encrypted vote payload")


class ReactionContent(BaseModel):
    model_config = ConfigDict(extra="forbid")

    kind: Literal["reaction"] = "reaction"
    target_message_id: str
    text: str = Field("", description="Emoji, empty when the reaction is removed")


class PaymentInviteContent(BaseModel):
    model_config = ConfigDict(extra="forbid")

    kind: Literal["payment_invite"] = "payment_invite"
    service_type: str | None = None
    expiry_timestamp: int | None = None


MessageContent = Annotated[
    TextContent
    | ExtendedTextContent
    | AudioContent
    | ImageContent
    | VideoContent
    | DocumentContent
    | StickerContent
    | ContactContent
    | ContactsArrayContent
    | LocationContent
    | LiveLocationContent
    | ListContent
    | OrderContent
    | PollCreationContent
    | PollUpdateContent
    | ReactionContent
    | PaymentInviteContent,
    Field(discriminator="kind"),
]

MEDIA_CONTENT_TYPES = (
    AudioContent,
    ImageContent,
    VideoContent,
    DocumentContent,
    StickerContent,
)


# ====================================================================
# Envelope
# ====================================================================


class ContextInfo(BaseModel):
    """Reply and forwarding context attached to a message."""

    model_config = ConfigDict(extra="forbid")

    stanza_id: str | None = Field(None, description="ID of the replied message")
    participant: str | None = Field(None, description="Author of the replied message")
    quoted_message: str | None = Field(None, description="Text of the replied message")
    forwarding_score: int = Field(0, ge=0)
    is_forwarded: bool = False


class MessageInfo(BaseModel):
    """Metadata of an inbound message."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    id: str = Field(..., min_length=1, description="Message ID")
    sender: str = Field(..., description="Sender JID")
    chat: str = Field(..., description="Chat JID, individual or group")
    push_name: str = Field("", description="Sender display name")
    timestamp: datetime
    type: str = Field("text", description="Envelope type, e.g. 'text' or 'media'")
    is_from_me: bool = False

    @property
    def source_string(self) -> str:
        """Sender identity as echoed to subscribers."""
        if self.sender != self.chat:
            return f"{self.sender} in {self.chat}"
        return self.chat


class InboundEvent(BaseModel):
    """One inbound message with exactly one populated content variant."""

    model_config = ConfigDict(extra="forbid")

    info: MessageInfo
    content: MessageContent
    context: ContextInfo | None = None
    is_view_once: bool = False

    @property
    def is_group(self) -> bool:
        return is_group_jid(self.info.chat)

    @property
    def is_forwarded(self) -> bool:
        if self.context is None:
            return False
        return self.context.is_forwarded or self.context.forwarding_score > 0

    @property
    def has_media(self) -> bool:
        return isinstance(self.content, MEDIA_CONTENT_TYPES)
