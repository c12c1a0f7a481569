"""
Storage Types and Data Classes

This module contains the core data structures and enums used by the
session/file storage system.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum


class StorageTier(Enum):
    """Backend a SessionStore keeps its data in."""

    MEMORY = "memory"
    FILESYSTEM = "filesystem"
    REDIS = "redis"


@dataclass
class StorageStats:
    """Aggregate store counters for monitoring."""

    session_count: int
    total_files: int
    total_size: int
    tier: StorageTier
    memory_usage_percent: float = 0.0
    disk_usage_percent: float = 0.0


def to_iso_timestamp(epoch_seconds: float) -> str:
    """Render epoch seconds as a UTC ISO-8601 string with millisecond precision."""
    moment = datetime.fromtimestamp(epoch_seconds, tz=timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass
class FileInfo:
    """Listing entry for a stored file."""

    id: str
    name: str
    size: int
    last_modified: str

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "name": self.name,
            "size": self.size,
            "lastModified": self.last_modified,
        }


@dataclass
class FileMetadata:
    """Metadata for a stored file, without its payload."""

    id: str
    name: str
    size: int
    created_at: float

    def to_info(self) -> FileInfo:
        return FileInfo(
            id=self.id,
            name=self.name,
            size=self.size,
            last_modified=to_iso_timestamp(self.created_at),
        )


@dataclass
class StoredFile:
    """An immutable named byte payload owned by one session."""

    id: str
    name: str
    data: bytes
    size: int
    created_at: float
