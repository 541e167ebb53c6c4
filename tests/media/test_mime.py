"""
Tests for MIME type resolution.
"""

import pytest

from wahook.core.exceptions import UnsupportedMediaError
from wahook.media.mime import (
    OCTET_STREAM,
    detect_content_type,
    determine_mime_type,
    normalize_audio_mime,
    resolve_mime_type,
)


class TestDetermineMimeType:
    @pytest.mark.parametrize(
        "filename,expected",
        [
            ("song.mp3", "audio/mpeg"),
            ("voice.OGG", "audio/ogg"),
            ("clip.mp4", "video/mp4"),
            ("photo.jpeg", "image/jpeg"),
            ("/srv/files/report.pdf", "application/pdf"),
            ("sheet.xlsx", "application/vnd.ms-excel"),
            ("letter.docx", "application/msword"),
        ],
    )
    def test_known_extensions(self, filename, expected):
        assert determine_mime_type(filename) == expected

    @pytest.mark.parametrize("filename", ["archive.rar", "README", "photo.webp"])
    def test_unknown_extension(self, filename):
        assert determine_mime_type(filename) is None


class TestDetectContentType:
    @pytest.mark.parametrize(
        "data,expected",
        [
            (b"\x89PNG\r\n\x1a\n\x00\x00", "image/png"),
            (b"\xff\xd8\xff\xe0\x00\x10JFIF", "image/jpeg"),
            (b"GIF89a\x01\x00", "image/gif"),
            (b"%PDF-1.4\n", "application/pdf"),
            (b"OggS\x00\x02", "audio/ogg"),
            (b"ID3\x04\x00", "audio/mpeg"),
            (b"\xff\xfb\x90\x00", "audio/mpeg"),
            (b"\x00\x00\x00\x18ftypmp42", "video/mp4"),
            (b"RIFF\x24\x00\x00\x00WAVEfmt ", "audio/wav"),
            (b"RIFF\x24\x00\x00\x00WEBPVP8 ", "image/webp"),
            (b"PK\x03\x04\x14\x00", "application/zip"),
        ],
    )
    def test_signatures(self, data, expected):
        assert detect_content_type(data) == expected

    def test_plain_text(self):
        assert detect_content_type("olá, tudo bem?".encode()) == "text/plain; charset=utf-8"

    def test_binary(self):
        assert detect_content_type(b"\x00\x01\x02\x03\x04") == OCTET_STREAM

    def test_empty(self):
        assert detect_content_type(b"") == OCTET_STREAM


class TestResolveMimeType:
    def test_extension_wins_over_content(self):
        assert resolve_mime_type("notes.pdf", b"plain text") == "application/pdf"

    def test_falls_back_to_sniffing(self):
        assert resolve_mime_type("upload", b"\x89PNG\r\n\x1a\n") == "image/png"


class TestNormalizeAudioMime:
    @pytest.mark.parametrize(
        "mime_type,expected",
        [
            ("audio/opus", "audio/ogg"),
            ("audio/ogg; codecs=opus", "audio/ogg"),
            ("audio/mp3", "audio/mpeg"),
            ("audio/mpeg", "audio/mpeg"),
            ("audio/wav", "audio/wav"),
            ("audio/aac", "audio/aac"),
        ],
    )
    def test_supported(self, mime_type, expected):
        assert normalize_audio_mime(mime_type) == expected

    @pytest.mark.parametrize("mime_type", ["audio/flac", "video/mp4", "", None])
    def test_unsupported(self, mime_type):
        with pytest.raises(UnsupportedMediaError):
            normalize_audio_mime(mime_type)

