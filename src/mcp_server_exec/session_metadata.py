"""
Session Metadata

This module contains the SessionMetadata class shared by the local
SessionStore implementations to track a session's timestamps and file index.
"""

from dataclasses import dataclass, field

from .storage_types import FileMetadata


@dataclass
class SessionMetadata:
    """Metadata for a session: timestamps plus file_id -> FileMetadata."""

    session_id: str
    created_at: float
    last_access: float
    files: dict[str, FileMetadata] = field(default_factory=dict)

    @property
    def total_size_bytes(self) -> int:
        return sum(meta.size for meta in self.files.values())

    def is_expired(self, now: float, ttl_seconds: float) -> bool:
        """A session is valid iff now - last_access < ttl."""
        return now - self.last_access >= ttl_seconds
