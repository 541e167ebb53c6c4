"""
Outbound WhatsApp actions.

Validates caller input, resolves identities and media, and issues the
corresponding call on the protocol client. Client failures surface as
ActionError with the client's message; malformed input surfaces as
ValidationError.
"""

import asyncio
import base64
import binascii
from datetime import datetime, timezone
from pathlib import Path

from pydantic import BaseModel

from wahook.core.background import BackgroundTasks
from wahook.core.config.settings import Settings
from wahook.core.exceptions import ActionError, ClientUnavailableError, ValidationError
from wahook.core.logging.logger import get_logger
from wahook.domain.identity import JID, parse_jid
from wahook.domain.interfaces.whatsapp_client import IWhatsAppClient
from wahook.media.mime import normalize_audio_mime, resolve_mime_type
from wahook.schemas.core.types import ChatPresence, ChatPresenceMedia, ReceiptType

_PRESENCES: dict[str, tuple[ChatPresence, ChatPresenceMedia]] = {
    "typing": (ChatPresence.COMPOSING, ChatPresenceMedia.TEXT),
    "recording": (ChatPresence.COMPOSING, ChatPresenceMedia.AUDIO),
}

_REVOKE_REFUSALS = ("too old", "not allowed")


class ActionResult(BaseModel):
    """Result of an outbound action."""

    status: str
    message_id: str | None = None


class MessagingService:
    """Outbound actions on behalf of HTTP callers."""

    def __init__(
        self,
        client: IWhatsAppClient | None,
        settings: Settings,
        background: BackgroundTasks | None = None,
    ):
        self.client = client
        self.settings = settings
        self.background = background or BackgroundTasks()
        self.logger = get_logger(__name__)

    def _require_client(self, connected: bool = True) -> IWhatsAppClient:
        if self.client is None:
            raise ClientUnavailableError()
        if connected and not (self.client.is_connected() and self.client.is_logged_in()):
            raise ClientUnavailableError("WhatsApp client not connected or logged in")
        return self.client

    # ================================================================
    # Text and presence
    # ================================================================

    async def send_text(
        self,
        message: str,
        phone: str | None = None,
        jid: str | None = None,
        reply_message_id: str | None = None,
    ) -> ActionResult:
        """
        Send a text message, optionally quoting an earlier message.

        ``jid`` takes precedence over ``phone`` so groups can be addressed.
        Quoting inside a group needs ``phone`` as the quoted participant.
        """
        if not phone and not jid:
            raise ValidationError("Phone or Jid is required")
        if not message:
            raise ValidationError("Message is required")
        client = self._require_client()

        target = parse_jid(jid or phone)
        participant: JID | None = None
        if reply_message_id:
            participant = target
            if target.is_group:
                if not phone:
                    raise ValidationError("Phone is required for quoting in groups")
                participant = parse_jid(phone)

        try:
            message_id = await client.send_text(
                target, message, reply_to_id=reply_message_id, reply_participant=participant
            )
        except Exception as e:
            self.logger.error(f"Failed to send message to {target}: {e}")
            raise ActionError("send message", e) from e

        self.logger.info(f"Message sent successfully to {target}")
        return ActionResult(status="Message sent", message_id=message_id)

    async def send_presence(self, phone: str, presence: str, duration: int = 0) -> ActionResult:
        """
        Show typing or recording in a chat.

        A positive ``duration`` (seconds) schedules a paused presence afterwards.
        """
        if not phone or not presence:
            raise ValidationError("Phone and presence are required")
        client = self._require_client(connected=False)

        jid = parse_jid(phone)
        if presence not in _PRESENCES:
            raise ValidationError("Invalid presence type, must be 'typing' or 'recording'")
        chat_presence, media = _PRESENCES[presence]

        try:
            await client.send_chat_presence(jid, chat_presence, media)
        except Exception as e:
            raise ActionError("send presence", e) from e

        if duration > 0:
            self.background.spawn(
                self._pause_presence_after(client, jid, duration), name=f"pause-{jid}"
            )

        return ActionResult(status=f"Presence {presence} sent to {phone}")

    async def _pause_presence_after(
        self, client: IWhatsAppClient, jid: JID, duration: int
    ) -> None:
        await asyncio.sleep(duration)
        try:
            await client.send_chat_presence(jid, ChatPresence.PAUSED, ChatPresenceMedia.TEXT)
        except Exception as e:
            self.logger.error(f"Failed to send paused presence: {e}")

    # ================================================================
    # Media
    # ================================================================

    async def send_audio(self, phone: str, media: str) -> ActionResult:
        """
        Send an audio message from a ``data:audio/...;base64,`` URI or a file path.
        """
        if not phone:
            raise ValidationError("Phone is required")
        if not media:
            raise ValidationError("media is required")
        client = self._require_client()
        jid = parse_jid(phone)

        if media.startswith("data:audio/") or "," in media:
            header, sep, encoded = media.partition(",")
            if not sep:
                raise ValidationError("Invalid Base64 format")
            mime_type = header.split(";", 1)[0].removeprefix("data:")
            try:
                data = base64.b64decode(encoded, validate=True)
            except (binascii.Error, ValueError) as e:
                raise ValidationError(f"Failed to decode Base64: {e}") from e
        else:
            data = await self._read_file(media)
            mime_type = resolve_mime_type(media, data)

        mime_type = normalize_audio_mime(mime_type)
        self.logger.info(f"Detected MIME type for media: {mime_type}")

        await self._send_media(client, jid, data, mime_type, kind="audio", ptt=True)
        return ActionResult(status="Audio sent")

    async def send_document(
        self,
        phone: str,
        document_path: str,
        file_name: str | None = None,
        caption: str | None = None,
        is_forwarded: bool = False,
    ) -> ActionResult:
        if not phone or not document_path:
            raise ValidationError("Phone and DocumentPath are required")
        client = self._require_client()
        jid = parse_jid(phone)

        data = await self._read_file(document_path)
        self._check_size(data, self.settings.max_file_size, "Document")
        mime_type = resolve_mime_type(document_path, data)

        await self._send_media(
            client,
            jid,
            data,
            mime_type,
            kind="document",
            file_name=file_name or Path(document_path).name,
            caption=caption,
            is_forwarded=is_forwarded,
        )
        return ActionResult(status="Document sent")

    async def send_image(
        self,
        phone: str,
        image_path: str,
        caption: str | None = None,
        view_once: bool = False,
        is_forwarded: bool = False,
    ) -> ActionResult:
        if not phone or not image_path:
            raise ValidationError("Phone and ImagePath are required")
        client = self._require_client()
        jid = parse_jid(phone)

        data = await self._read_file(image_path)
        self._check_size(data, self.settings.max_file_size, "Image")
        mime_type = resolve_mime_type(image_path, data)

        await self._send_media(
            client,
            jid,
            data,
            mime_type,
            kind="image",
            file_name=Path(image_path).name,
            caption=caption,
            view_once=view_once,
            is_forwarded=is_forwarded,
        )
        return ActionResult(status="Image sent")

    async def send_video(
        self,
        phone: str,
        video_path: str,
        caption: str | None = None,
        view_once: bool = False,
        is_forwarded: bool = False,
    ) -> ActionResult:
        if not phone or not video_path:
            raise ValidationError("Phone and VideoPath are required")
        client = self._require_client()
        jid = parse_jid(phone)

        data = await self._read_file(video_path)
        self._check_size(data, self.settings.max_video_size, "Video")
        mime_type = resolve_mime_type(video_path, data)

        await self._send_media(
            client,
            jid,
            data,
            mime_type,
            kind="video",
            file_name=Path(video_path).name,
            caption=caption,
            view_once=view_once,
            is_forwarded=is_forwarded,
        )
        return ActionResult(status="Video sent")

    async def _read_file(self, path: str) -> bytes:
        file_path = Path(path)
        if not file_path.is_file():
            raise ValidationError(f"File not found: {path}")
        try:
            return await asyncio.to_thread(file_path.read_bytes)
        except OSError as e:
            raise ActionError("read file", e) from e

    @staticmethod
    def _check_size(data: bytes, limit: int, label: str) -> None:
        if len(data) > limit:
            raise ValidationError(
                f"{label} size exceeds the maximum limit of {limit} bytes"
            )

    async def _send_media(
        self,
        client: IWhatsAppClient,
        jid: JID,
        data: bytes,
        mime_type: str,
        kind: str,
        **options,
    ) -> str:
        try:
            message_id = await client.send_media(jid, data, mime_type, **options)
        except Exception as e:
            self.logger.error(f"Failed to send {kind} message to {jid}: {e}")
            raise ActionError(f"send {kind} message", e) from e
        self.logger.info(f"{kind.capitalize()} message sent successfully to {jid}")
        return message_id

    # ================================================================
    # Location, revoke and receipts
    # ================================================================

    async def send_location(self, phone: str, latitude: float, longitude: float) -> ActionResult:
        if not phone or not latitude or not longitude:
            raise ValidationError("Phone, latitude, and longitude are required")
        client = self._require_client()
        jid = parse_jid(phone)

        try:
            await client.send_location(jid, latitude, longitude)
        except Exception as e:
            self.logger.error(f"Failed to send location message to {jid}: {e}")
            raise ActionError("send location message", e) from e

        self.logger.info(f"Location message sent successfully to {jid}")
        return ActionResult(status="Location sent")

    async def delete_message(self, phone: str, message_id: str) -> ActionResult:
        """Revoke a message for everyone in the chat."""
        if not phone or not message_id:
            raise ValidationError("Phone and message_id are required")
        client = self._require_client()
        jid = parse_jid(phone)

        try:
            await client.revoke_message(jid, message_id)
        except Exception as e:
            self.logger.error(f"Failed to revoke message {message_id} in chat {jid}: {e}")
            reason = str(e)
            if any(refusal in reason for refusal in _REVOKE_REFUSALS):
                raise ValidationError(
                    "Message deletion not allowed: likely too old or not sent by you"
                ) from e
            raise ActionError("revoke message", e) from e

        self.logger.info(f"Message {message_id} revoked successfully in chat {jid}")
        return ActionResult(status=f"Message {message_id} deleted", message_id=message_id)

    async def mark_read(
        self,
        phone: str,
        message_id: str,
        sender: str | None = None,
        played: bool = False,
    ) -> ActionResult:
        """
        Send a read (or played, for voice notes) receipt.

        Group chats need the original sender of the message.
        """
        if not phone or not message_id:
            raise ValidationError("Phone and message_id are required")
        client = self._require_client()
        chat = parse_jid(phone)

        sender_jid: JID | None = None
        if sender:
            # Receipts address the sender account, not the device it sent from
            sender_jid = parse_jid(sender).to_non_ad()
        elif chat.is_group:
            raise ValidationError("Sender is required for group chats")

        receipt = ReceiptType.PLAYED if played else ReceiptType.READ
        self.logger.debug(
            f"Marking message {message_id} as {receipt.value} in chat {chat} "
            f"with sender {sender_jid}"
        )
        try:
            await client.mark_read(
                [message_id], datetime.now(timezone.utc), chat, sender_jid, receipt
            )
        except Exception as e:
            self.logger.error(f"Failed to mark message {message_id} as read in chat {chat}: {e}")
            raise ActionError("mark message as read", e) from e

        self.logger.info(f"Message {message_id} marked as read in chat {chat}")
        return ActionResult(status=f"Message {message_id} marked as read", message_id=message_id)
