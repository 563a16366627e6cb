"""Content type detection from leading file bytes.

Follows the WHATWG MIME sniffing table: only the first ``SNIFF_LEN`` bytes are
inspected and the client-supplied name or header is never consulted.
"""

from collections.abc import Callable

SNIFF_LEN = 512

TEXT_PLAIN = "text/plain; charset=utf-8"
OCTET_STREAM = "application/octet-stream"

_WHITESPACE = b"\t\n\x0c\r "

# Bytes that never appear in text, per the WHATWG "binary data byte" definition
_BINARY_BYTES = frozenset([*range(0x00, 0x09), 0x0B, *range(0x0E, 0x1B), *range(0x1C, 0x20)])

_HTML_TAGS = (
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
)

# (prefix, mime) pairs matched verbatim at offset 0
_EXACT_SIGNATURES: tuple[tuple[bytes, str], ...] = (
    (b"%PDF-", "application/pdf"),
    (b"%!PS-Adobe-", "application/postscript"),
    (b"\xfe\xff", "text/plain; charset=utf-16be"),
    (b"\xff\xfe", "text/plain; charset=utf-16le"),
    (b"\xef\xbb\xbf", TEXT_PLAIN),
    (b"\x00\x00\x01\x00", "image/x-icon"),
    (b"\x00\x00\x02\x00", "image/x-icon"),
    (b"BM", "image/bmp"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b".snd", "audio/basic"),
    (b"OggS\x00", "application/ogg"),
    (b"MThd\x00\x00\x00\x06", "audio/midi"),
    (b"ID3", "audio/mpeg"),
    (b"\x1a\x45\xdf\xa3", "video/webm"),
    (b"\x00\x01\x00\x00", "font/ttf"),
    (b"OTTO", "font/otf"),
    (b"ttcf", "font/collection"),
    (b"wOFF", "font/woff"),
    (b"wOF2", "font/woff2"),
    (b"\x1f\x8b\x08", "application/x-gzip"),
    (b"PK\x03\x04", "application/zip"),
    (b"Rar!\x1a\x07\x00", "application/x-rar-compressed"),
    (b"Rar!\x1a\x07\x01\x00", "application/x-rar-compressed"),
    (b"7z\xbc\xaf\x27\x1c", "application/x-7z-compressed"),
    (b"\x00asm", "application/wasm"),
)

# RIFF containers: "RIFF" + 4 size bytes + form type
_RIFF_FORMS = {
    b"WEBP": "image/webp",
    b"WAVE": "audio/wave",
    b"AVI ": "video/avi",
}


def _skip_whitespace(data: bytes) -> bytes:
    return data.lstrip(_WHITESPACE)


def _match_html(data: bytes) -> str | None:
    data = _skip_whitespace(data)
    for tag in _HTML_TAGS:
        if len(data) <= len(tag):
            continue
        if data[: len(tag)].upper() == tag and data[len(tag)] in b" >":
            return "text/html; charset=utf-8"
    return None


def _match_xml(data: bytes) -> str | None:
    if _skip_whitespace(data).startswith(b"<?xml"):
        return "text/xml; charset=utf-8"
    return None


def _match_riff(data: bytes) -> str | None:
    if len(data) >= 12 and data.startswith(b"RIFF"):
        return _RIFF_FORMS.get(data[8:12])
    return None


def _match_mp4(data: bytes) -> str | None:
    """ISO base media file: a leading ``ftyp`` box whose brands include ``mp4``."""
    if len(data) < 12:
        return None
    box_size = int.from_bytes(data[:4], "big")
    if box_size % 4 != 0 or len(data) < box_size or data[4:8] != b"ftyp":
        return None
    for start in range(8, box_size, 4):
        if start == 12:
            # minor version, not a brand
            continue
        if data[start : start + 3] == b"mp4":
            return "video/mp4"
    return None


def _match_signature(data: bytes) -> str | None:
    for prefix, mime in _EXACT_SIGNATURES:
        if data.startswith(prefix):
            return mime
    return None


_MATCHERS: tuple[Callable[[bytes], str | None], ...] = (
    _match_html,
    _match_xml,
    _match_signature,
    _match_riff,
    _match_mp4,
)


def detect_content_type(data: bytes) -> str:
    """Return the MIME type sniffed from at most the first SNIFF_LEN bytes of ``data``.

    Falls back to ``text/plain; charset=utf-8`` when no binary bytes are present
    and to ``application/octet-stream`` otherwise. Never fails.
    """
    data = data[:SNIFF_LEN]
    for matcher in _MATCHERS:
        if mime := matcher(data):
            return mime
    if any(b in _BINARY_BYTES for b in data):
        return OCTET_STREAM
    return TEXT_PLAIN


def mime_matches(allowed: str, mime: str) -> bool:
    """Case-insensitive MIME comparison; ``type/*`` allows any subtype."""
    pattern = allowed.strip().lower()
    candidate = mime.strip().lower()
    if pattern in {"*", "*/*"}:
        return True
    if pattern.endswith("/*"):
        return candidate.split("/", 1)[0] == pattern[:-2]
    return pattern == candidate
