"""
WhatsApp inbound event schemas.
"""

from .events import MEDIA_CONTENT_TYPES, ContextInfo, InboundEvent, MessageContent, MessageInfo

__all__ = ["MEDIA_CONTENT_TYPES", "ContextInfo", "InboundEvent", "MessageContent", "MessageInfo"]
