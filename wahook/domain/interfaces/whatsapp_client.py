"""
WhatsApp protocol client interface.

The real-time protocol client (connection, session, encryption) lives outside
this package. wahook only issues status queries and action calls through this
contract, and never mutates connection internals.
"""

from abc import ABC, abstractmethod
from datetime import datetime

from wahook.domain.identity import JID
from wahook.schemas.core.types import ChatPresence, ChatPresenceMedia, ReceiptType
from wahook.schemas.whatsapp.events import MediaReference


class IWhatsAppClient(ABC):
    """
    Contract of the protocol client consumed by the notification pipeline
    and the outbound actions.

    Every action raises on failure; the error message is surfaced to the user.
    """

    # Connection state
    @abstractmethod
    def is_connected(self) -> bool:
        pass

    @abstractmethod
    def is_logged_in(self) -> bool:
        pass

    @property
    @abstractmethod
    def own_id(self) -> JID | None:
        """Identity of the authenticated account, ``None`` before pairing."""
        pass

    # Inbound collaborators
    @abstractmethod
    async def extract_media(self, destination_dir: str, media: MediaReference) -> str:
        """
        Download and decrypt media into ``destination_dir``.

        Returns:
            Local path of the stored file
        """
        pass

    @abstractmethod
    async def get_group_name(self, group: JID) -> str:
        pass

    # Outbound actions
    @abstractmethod
    async def send_text(
        self,
        to: JID,
        text: str,
        reply_to_id: str | None = None,
        reply_participant: JID | None = None,
    ) -> str:
        """Send a text message, returning the new message ID."""
        pass

    @abstractmethod
    async def send_media(
        self,
        to: JID,
        data: bytes,
        mime_type: str,
        *,
        file_name: str | None = None,
        caption: str | None = None,
        view_once: bool = False,
        is_forwarded: bool = False,
        ptt: bool = False,
    ) -> str:
        """Upload and send audio, image, video or document bytes."""
        pass

    @abstractmethod
    async def send_location(self, to: JID, latitude: float, longitude: float) -> str:
        pass

    @abstractmethod
    async def send_chat_presence(
        self, to: JID, presence: ChatPresence, media: ChatPresenceMedia
    ) -> None:
        pass

    @abstractmethod
    async def reject_call(self, caller: JID, call_id: str) -> None:
        pass

    @abstractmethod
    async def revoke_message(self, chat: JID, message_id: str) -> None:
        pass

    @abstractmethod
    async def mark_read(
        self,
        message_ids: list[str],
        timestamp: datetime,
        chat: JID,
        sender: JID | None,
        receipt_type: ReceiptType,
    ) -> None:
        pass
