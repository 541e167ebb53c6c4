"""
Domain layer: identities and the protocol client contract.
"""

from .identity import JID, extract_phone_number, is_group_jid, parse_jid
from .interfaces import IWhatsAppClient

__all__ = ["JID", "IWhatsAppClient", "extract_phone_number", "is_group_jid", "parse_jid"]
