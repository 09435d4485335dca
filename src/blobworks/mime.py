"""Content sniffing for blob payloads.

Detection looks at leading magic bytes for common binary formats, then
falls back to text detection: payloads that decode as UTF-8 without control
characters are JSON (when they parse as a JSON object or array), XML,
or plain text. Anything else is left undetected.
"""

from __future__ import annotations

import json
import mimetypes

# (prefix, offset, mime type); checked in order
_SIGNATURES: tuple[tuple[bytes, int, str], ...] = (
    (b"\x89PNG\r\n\x1a\n", 0, "image/png"),
    (b"\xff\xd8\xff", 0, "image/jpeg"),
    (b"GIF87a", 0, "image/gif"),
    (b"GIF89a", 0, "image/gif"),
    (b"II*\x00", 0, "image/tiff"),
    (b"MM\x00*", 0, "image/tiff"),
    (b"\x00\x00\x01\x00", 0, "image/x-icon"),
    (b"%PDF-", 0, "application/pdf"),
    (b"PK\x03\x04", 0, "application/zip"),
    (b"\x1f\x8b", 0, "application/gzip"),
    (b"BZh", 0, "application/x-bzip2"),
    (b"7z\xbc\xaf\x27\x1c", 0, "application/x-7z-compressed"),
    (b"Rar!\x1a\x07", 0, "application/vnd.rar"),
    (b"\xfd7zXZ\x00", 0, "application/x-xz"),
    (b"ustar", 257, "application/x-tar"),
    (b"OggS", 0, "audio/ogg"),
    (b"fLaC", 0, "audio/flac"),
    (b"ID3", 0, "audio/mpeg"),
    (b"\x1aE\xdf\xa3", 0, "video/webm"),
    (b"wOFF", 0, "font/woff"),
    (b"wOF2", 0, "font/woff2"),
    (b"\x00asm", 0, "application/wasm"),
)

# Mime types whose preferred extension differs from mimetypes' first guess
_EXTENSIONS: dict[str, str] = {
    "text/plain": "txt",
    "application/json": "json",
    "application/ld+json": "jsonld",
    "application/xml": "xml",
    "image/png": "png",
    "image/jpeg": "jpeg",
    "image/gif": "gif",
    "image/bmp": "bmp",
    "image/tiff": "tiff",
    "image/webp": "webp",
    "image/x-icon": "ico",
    "application/pdf": "pdf",
    "application/zip": "zip",
    "application/gzip": "gz",
    "application/x-bzip2": "bz2",
    "application/x-7z-compressed": "7z",
    "application/vnd.rar": "rar",
    "application/x-xz": "xz",
    "application/x-tar": "tar",
    "audio/ogg": "ogg",
    "audio/flac": "flac",
    "audio/mpeg": "mp3",
    "audio/wav": "wav",
    "video/webm": "webm",
    "video/mp4": "mp4",
    "font/woff": "woff",
    "font/woff2": "woff2",
    "application/wasm": "wasm",
}

_TEXT_CONTROL_ALLOWED = {"\t", "\n", "\r", "\f"}


def _detect_riff(data: bytes) -> str | None:
    if data[:4] != b"RIFF" or len(data) < 12:
        return None
    kind = data[8:12]
    if kind == b"WEBP":
        return "image/webp"
    if kind == b"WAVE":
        return "audio/wav"
    return None


def _detect_text(data: bytes) -> str | None:
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError:
        return None
    if any(ch < " " and ch not in _TEXT_CONTROL_ALLOWED for ch in text):
        return None

    stripped = text.strip()
    if stripped[:1] in ("{", "["):
        try:
            json.loads(stripped)
        except ValueError:
            pass
        else:
            return "application/json"
    if stripped.startswith("<?xml"):
        return "application/xml"
    return "text/plain"


def detect(data: bytes) -> str | None:
    """Detect the mime type of a payload.

    Args:
        data: Plaintext payload

    Returns:
        The mime type, or None if the payload is empty or unrecognised
    """
    if not data:
        return None

    for prefix, offset, mime_type in _SIGNATURES:
        if data[offset : offset + len(prefix)] == prefix:
            return mime_type

    if data[4:8] == b"ftyp":
        return "video/mp4"

    return _detect_riff(data) or _detect_text(data)


def default_extension(mime_type: str | None) -> str | None:
    """Default file extension (without dot) for a mime type."""
    if not mime_type:
        return None
    base = mime_type.split(";", 1)[0].strip().lower()
    if base in _EXTENSIONS:
        return _EXTENSIONS[base]
    guessed = mimetypes.guess_extension(base)
    return guessed.lstrip(".") if guessed else None
