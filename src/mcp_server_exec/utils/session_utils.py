from __future__ import annotations

import re
import secrets
import string

ID_ALPHABET = string.ascii_letters + string.digits + "-_"
ID_LENGTH = 21

_ID_RE = re.compile(r"^[A-Za-z0-9_-]+$")


def generate_id() -> str:
    """Return a fresh fixed-length, URL-safe opaque token (never contains '/')."""
    return "".join(secrets.choice(ID_ALPHABET) for _ in range(ID_LENGTH))


def validate_session_id(session_id: str | None) -> str:
    """Validate that session_id is a non-empty URL-safe token and return the stripped value."""
    if session_id is None:
        raise ValueError("session_id is required")
    if not isinstance(session_id, str):
        raise ValueError("session_id must be a non-empty string")
    cleaned = session_id.strip()
    if not cleaned:
        raise ValueError("session_id must be a non-empty string")
    if not _ID_RE.match(cleaned):
        raise ValueError(f"session_id contains invalid characters: {cleaned!r}")
    return cleaned


def split_file_path(file_path: str) -> tuple[str, str]:
    """Split a compound "{session_id}/{file_id}" path on the first '/'.

    Raises ValueError when either half is missing.
    """
    session_id, sep, file_id = file_path.strip().partition("/")
    if not sep or not session_id or not file_id:
        raise ValueError(
            f"file path must look like '<session_id>/<file_id>', got {file_path!r}"
        )
    return session_id, file_id
