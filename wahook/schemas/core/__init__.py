"""
Core types shared by the notification pipeline and the outbound actions.
"""

from .types import (
    CallStatus,
    ChatPresence,
    ChatPresenceMedia,
    ErrorCode,
    MediaKind,
    MessageKind,
    OutboundPayload,
    ReceiptType,
)

__all__ = [
    "CallStatus",
    "ChatPresence",
    "ChatPresenceMedia",
    "ErrorCode",
    "MediaKind",
    "MessageKind",
    "OutboundPayload",
    "ReceiptType",
]
