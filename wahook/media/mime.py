"""
MIME type resolution for outbound media and webhook payloads.

Extension lookup is authoritative; byte sniffing is the fallback for files
whose extension is missing or unknown.
"""

from pathlib import Path

from wahook.core.exceptions import UnsupportedMediaError
from wahook.core.logging.logger import get_logger

logger = get_logger(__name__)

OCTET_STREAM = "application/octet-stream"

EXTENSION_MIME_TYPES: dict[str, str] = {
    "mp3": "audio/mpeg",
    "ogg": "audio/ogg",
    "wav": "audio/wav",
    "aac": "audio/aac",
    "opus": "audio/opus",
    "mp4": "video/mp4",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "pdf": "application/pdf",
    "doc": "application/msword",
    "docx": "application/msword",
    "xls": "application/vnd.ms-excel",
    "xlsx": "application/vnd.ms-excel",
}

# (offset, signature, mime type), checked in order
_MAGIC_NUMBERS: list[tuple[int, bytes, str]] = [
    (0, b"\x89PNG\r\n\x1a\n", "image/png"),
    (0, b"\xff\xd8\xff", "image/jpeg"),
    (0, b"GIF87a", "image/gif"),
    (0, b"GIF89a", "image/gif"),
    (0, b"%PDF-", "application/pdf"),
    (0, b"OggS", "audio/ogg"),
    (0, b"ID3", "audio/mpeg"),
    (4, b"ftyp", "video/mp4"),
    (0, b"PK\x03\x04", "application/zip"),
    (0, b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1", "application/msword"),
]

_AUDIO_ALIASES: dict[str, str] = {
    "audio/opus": "audio/ogg",
    "audio/ogg": "audio/ogg",
    "audio/mpeg": "audio/mpeg",
    "audio/mp3": "audio/mpeg",
    "audio/wav": "audio/wav",
    "audio/aac": "audio/aac",
}


def determine_mime_type(filename: str) -> str | None:
    """Map a file name to its content type by extension, ``None`` if unknown."""
    extension = Path(filename).suffix.lower().lstrip(".")
    return EXTENSION_MIME_TYPES.get(extension)


def detect_content_type(data: bytes) -> str:
    """Sniff the content type from the leading bytes of ``data``."""
    head = data[:512]

    # RIFF containers need the form type at offset 8
    if head.startswith(b"RIFF") and len(head) >= 12:
        form_type = head[8:12]
        if form_type == b"WAVE":
            return "audio/wav"
        if form_type == b"WEBP":
            return "image/webp"
        if form_type == b"AVI ":
            return "video/avi"

    for offset, signature, mime_type in _MAGIC_NUMBERS:
        if head[offset : offset + len(signature)] == signature:
            return mime_type

    # MPEG audio frame sync without an ID3 header
    if len(head) >= 2 and head[0] == 0xFF and (head[1] & 0xE0) == 0xE0:
        return "audio/mpeg"

    if head and _looks_like_text(head):
        return "text/plain; charset=utf-8"

    return OCTET_STREAM


def _looks_like_text(head: bytes) -> bool:
    try:
        decoded = head.decode("utf-8")
    except UnicodeDecodeError as exc:
        # A multi-byte character cut at the sniff boundary is still text
        if exc.start < len(head) - 3:
            return False
        decoded = head[: exc.start].decode("utf-8")
    return not any(ord(ch) < 0x20 and ch not in "\t\n\r\x0c" for ch in decoded)


def resolve_mime_type(filename: str, data: bytes) -> str:
    """Resolve by extension first, falling back to sniffing the content."""
    mime_type = determine_mime_type(filename)
    if mime_type:
        return mime_type

    mime_type = detect_content_type(data)
    logger.warning(
        f"MIME type not detected by extension for file {filename}, "
        f"auto-detected as {mime_type}"
    )
    return mime_type


def normalize_audio_mime(mime_type: str | None) -> str:
    """
    Collapse audio content types to the ones WhatsApp accepts.

    Raises:
        UnsupportedMediaError: For anything that is not a supported audio type
    """
    if not mime_type:
        raise UnsupportedMediaError(mime_type)
    base = mime_type.split(";", 1)[0].strip().lower()
    normalized = _AUDIO_ALIASES.get(base)
    if normalized is None:
        raise UnsupportedMediaError(mime_type)
    return normalized

