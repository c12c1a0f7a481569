from __future__ import annotations

import base64
import re

_NON_BASE64_RE = re.compile(r"[^A-Za-z0-9+/]")


def encode_text(text: str) -> str:
    """Encode UTF-8 text as base64 for the Judge0 wire format."""
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def decode_text(encoded: str | None) -> str:
    """Decode a base64 field from Judge0 into text; missing fields decode to ''.

    Lenient: characters outside the base64 alphabet are dropped, padding is
    repaired and a dangling final character is ignored, so any input decodes.
    """
    if not encoded:
        return ""
    cleaned = _NON_BASE64_RE.sub("", str(encoded))
    if len(cleaned) % 4 == 1:
        cleaned = cleaned[:-1]
    cleaned += "=" * (-len(cleaned) % 4)
    return base64.b64decode(cleaned).decode("utf-8", errors="replace")


def encode_bytes(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def decode_bytes(encoded: str) -> bytes:
    return base64.b64decode(encoded)
