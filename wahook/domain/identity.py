"""
WhatsApp identities (JIDs).

A JID is ``user@server`` where the server tells individual contacts
(``s.whatsapp.net``) apart from groups (``g.us``). The user part may carry a
device suffix (``5511999999999:12``) or an agent suffix (``user.0``).
"""

import re
from dataclasses import dataclass

from wahook.core.exceptions import InvalidIdentityError

DEFAULT_USER_SERVER = "s.whatsapp.net"
GROUP_SERVER = "g.us"
GROUP_SUFFIX = "@" + GROUP_SERVER

KNOWN_SERVERS = frozenset(
    {
        DEFAULT_USER_SERVER,
        GROUP_SERVER,
        "broadcast",
        "lid",
        "newsletter",
        "c.us",
    }
)

_NON_DIGITS = re.compile(r"\D")


@dataclass(frozen=True)
class JID:
    """Parsed WhatsApp identity."""

    user: str
    server: str
    device: int = 0

    @property
    def is_group(self) -> bool:
        return self.server == GROUP_SERVER

    def to_non_ad(self) -> "JID":
        """Drop the device part, leaving the addressable user identity."""
        return JID(self.user, self.server)

    def __str__(self) -> str:
        if self.device:
            return f"{self.user}:{self.device}@{self.server}"
        return f"{self.user}@{self.server}"


def parse_jid(raw: str) -> JID:
    """
    Parse a phone number or a full JID.

    Bare numbers (optionally prefixed with ``+``) are addressed to the default
    user server.

    Raises:
        InvalidIdentityError: If the input is empty or structurally malformed
    """
    if raw is None or not raw.strip():
        raise InvalidIdentityError(str(raw), "empty identity")

    value = raw.strip()
    if value.startswith("+"):
        value = value[1:]

    if "@" not in value:
        if not value.isdigit():
            raise InvalidIdentityError(raw, "phone number must contain only digits")
        return JID(value, DEFAULT_USER_SERVER)

    user_part, _, server = value.partition("@")
    if "@" in server:
        raise InvalidIdentityError(raw, "unexpected number of @ characters")
    if not user_part:
        raise InvalidIdentityError(raw, "no user specified")
    if server not in KNOWN_SERVERS:
        raise InvalidIdentityError(raw, f"unknown server '{server}'")

    device = 0
    if ":" in user_part:
        user_part, _, device_part = user_part.partition(":")
        if not device_part.isdigit():
            raise InvalidIdentityError(raw, "device part must be numeric")
        device = int(device_part)
    # Agent suffix carries no addressing information for this service
    user_part = user_part.split(".", 1)[0]
    if not user_part:
        raise InvalidIdentityError(raw, "no user specified")

    return JID(user_part, server, device)


def is_group_jid(chat: str | JID) -> bool:
    """Check whether a chat identity's string form ends in the group suffix."""
    return str(chat).endswith(GROUP_SUFFIX)


def extract_phone_number(identity: str | JID | None) -> str:
    """
    Normalize an identity to its dialable digits.

    ``+55 (11) 99999-9999``, ``5511999999999@s.whatsapp.net`` and
    ``5511999999999:7@s.whatsapp.net`` all normalize to ``5511999999999``.
    """
    if identity is None:
        return ""
    value = str(identity)
    value = value.split("@", 1)[0]
    value = value.split(":", 1)[0]
    return _NON_DIGITS.sub("", value)
