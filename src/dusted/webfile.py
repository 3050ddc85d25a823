"""
Helpers for files uploaded through web forms.

Uploaded files arrive as seekable binary streams (for example the ``file``
attribute of a FastAPI ``UploadFile``). Both helpers read from the current
stream and rewind it afterwards so the file can still be stored.

Features:
    - **mime_type():** Media type from the file extension, falling back to
      sniffing the first 512 bytes
    - **hash_file():** Salted SHA-256 of the file content, e.g. to derive
      de-duplicated storage names
    - **detect_content_type():** Magic-number based content sniffing

Examples:
    >>> import io
    >>> mime_type(io.BytesIO(b"\\x89PNG\\r\\n\\x1a\\n...."), "upload")
    'image/png'
    >>> len(hash_file(io.BytesIO(b"hello")))
    64

Tags:
    upload, mime, hashing, dusted
"""

from __future__ import annotations

import hashlib
import mimetypes
from typing import BinaryIO

from dusted.fault import system_wrap

SNIFF_LENGTH = 512

# (prefix, mask, media type); mask None means exact prefix match
_SIGNATURES: list[tuple[bytes, bytes | None, str]] = [
    (b"%PDF-", None, "application/pdf"),
    (b"%!PS-Adobe-", None, "application/postscript"),
    (b"\xfe\xff", None, "text/plain; charset=utf-16be"),
    (b"\xff\xfe", None, "text/plain; charset=utf-16le"),
    (b"\xef\xbb\xbf", None, "text/plain; charset=utf-8"),
    (b"\x00\x00\x01\x00", None, "image/x-icon"),
    (b"\x00\x00\x02\x00", None, "image/x-icon"),
    (b"BM", None, "image/bmp"),
    (b"GIF87a", None, "image/gif"),
    (b"GIF89a", None, "image/gif"),
    (
        b"RIFF\x00\x00\x00\x00WEBPVP",
        b"\xff\xff\xff\xff\x00\x00\x00\x00\xff\xff\xff\xff\xff\xff",
        "image/webp",
    ),
    (b"\x89PNG\r\n\x1a\n", None, "image/png"),
    (b"\xff\xd8\xff", None, "image/jpeg"),
    (b"FORM\x00\x00\x00\x00AIFF", b"\xff\xff\xff\xff\x00\x00\x00\x00\xff\xff\xff\xff", "audio/aiff"),
    (b"ID3", None, "audio/mpeg"),
    (b"OggS\x00", None, "application/ogg"),
    (b"MThd\x00\x00\x00\x06", None, "audio/midi"),
    (b"RIFF\x00\x00\x00\x00AVI ", b"\xff\xff\xff\xff\x00\x00\x00\x00\xff\xff\xff\xff", "video/avi"),
    (b"RIFF\x00\x00\x00\x00WAVE", b"\xff\xff\xff\xff\x00\x00\x00\x00\xff\xff\xff\xff", "audio/wave"),
    (b"\x1a\x45\xdf\xa3", None, "video/webm"),
    (b"Rar!\x1a\x07\x00", None, "application/x-rar-compressed"),
    (b"Rar!\x1a\x07\x01\x00", None, "application/x-rar-compressed"),
    (b"\x1f\x8b\x08", None, "application/x-gzip"),
    (b"PK\x03\x04", None, "application/zip"),
    (b"\x00asm", None, "application/wasm"),
    (b"wOFF", None, "font/woff"),
    (b"wOF2", None, "font/woff2"),
]

_HTML_TAGS = [
    b"<!DOCTYPE HTML",
    b"<HTML",
    b"<HEAD",
    b"<SCRIPT",
    b"<IFRAME",
    b"<H1",
    b"<DIV",
    b"<FONT",
    b"<TABLE",
    b"<A",
    b"<STYLE",
    b"<TITLE",
    b"<B",
    b"<BODY",
    b"<BR",
    b"<P",
    b"<!--",
]

_WHITESPACE = b"\t\n\x0c\r "

# Bytes that never appear in text files
_BINARY_BYTES = frozenset(
    list(range(0x00, 0x09)) + [0x0B] + list(range(0x0E, 0x1B)) + list(range(0x1C, 0x20))
)


def _matches(data: bytes, prefix: bytes, mask: bytes | None) -> bool:
    if len(data) < len(prefix):
        return False
    if mask is None:
        return data.startswith(prefix)
    return all((data[i] & mask[i]) == prefix[i] for i in range(len(prefix)))


def _is_mp4(data: bytes) -> bool:
    if len(data) < 12:
        return False
    box_size = int.from_bytes(data[:4], "big")
    if box_size % 4 != 0 or len(data) < box_size or data[4:8] != b"ftyp":
        return False
    for start in range(8, box_size, 4):
        if start == 12:
            # minor version, not a brand
            continue
        if data[start:start + 3] == b"mp4":
            return True
    return False


def detect_content_type(data: bytes) -> str:
    """Sniff the media type of ``data``; considers at most the first 512 bytes.

    Always returns a valid media type, ``application/octet-stream`` when
    nothing more specific matches.
    """
    data = data[:SNIFF_LENGTH]

    for prefix, mask, media_type in _SIGNATURES:
        if _matches(data, prefix, mask):
            return media_type

    if _is_mp4(data):
        return "video/mp4"

    stripped = data.lstrip(_WHITESPACE)
    upper = stripped[:16].upper()
    for tag in _HTML_TAGS:
        if upper.startswith(tag) and len(stripped) > len(tag):
            terminator = stripped[len(tag)]
            if terminator in (ord(" "), ord(">")):
                return "text/html; charset=utf-8"
    if stripped.startswith(b"<?xml"):
        return "text/xml; charset=utf-8"

    if any(byte in _BINARY_BYTES for byte in data):
        return "application/octet-stream"
    return "text/plain; charset=utf-8"


def mime_type(file: BinaryIO, filename: str) -> str:
    """Return the media type of an uploaded file.

    The file extension is consulted first; only when it is unknown are the
    first 512 bytes read and sniffed.
    """
    guessed, _ = mimetypes.guess_type(filename)
    if guessed:
        return guessed

    try:
        head = file.read(SNIFF_LENGTH)
    except OSError as exc:
        raise system_wrap(exc, "webfile", "mime_type", "reading the first 512 bytes failed") from exc

    try:
        file.seek(0)
    except OSError as exc:
        raise system_wrap(exc, "webfile", "mime_type", "seeking file failed") from exc

    return detect_content_type(head)


def hash_file(file: BinaryIO, salt: bytes = b"") -> str:
    """Compute the hex SHA-256 of a file's content.

    Apply an optional salt to create a unique hash if needed.
    """
    try:
        content = file.read()
    except OSError as exc:
        raise system_wrap(exc, "webfile", "hash_file", "reading file failed") from exc

    try:
        file.seek(0)
    except OSError as exc:
        raise system_wrap(exc, "webfile", "hash_file", "seeking file failed") from exc

    hasher = hashlib.sha256()
    hasher.update(content)
    hasher.update(salt)
    return hasher.hexdigest()


__all__ = [
    "SNIFF_LENGTH",
    "detect_content_type",
    "mime_type",
    "hash_file",
]
