"""
DiskCache-based Session Store Implementation

A filesystem-based SessionStore using the diskcache library. Expiry is native
(per-key expire time in the SQLite index), so sessions survive a restart of
this process on the same host and no sweep thread is needed.

Key structure:
  session:{session_id}         -> SessionMetadata (timestamps + file index)
  file:{session_id}:{file_id}  -> bytes

Every access re-touches all keys of a session inside one diskcache
transaction so they share a single lifetime.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Callable

import diskcache
import psutil

from .base_session_store import SessionStore
from .session_metadata import SessionMetadata
from .storage_types import (
    FileInfo,
    FileMetadata,
    StorageStats,
    StorageTier,
    StoredFile,
)
from .utils.session_utils import generate_id

logger = logging.getLogger(__name__)


class DiskCacheSessionStore(SessionStore):
    """
    Filesystem-based SessionStore using diskcache.

    diskcache evaluates expire times against the wall clock, so this store
    always uses time.time for its own timestamps.
    """

    def __init__(
        self,
        cache_dir: str = "/tmp/mcp_exec_cache",
        ttl_seconds: float = 24 * 60 * 60,
        size_limit: int = int(1024**4),
    ) -> None:
        """
        Initialize DiskCacheSessionStore.

        Args:
            cache_dir: Directory for cache storage
            ttl_seconds: Idle TTL for sessions
            size_limit: Maximum on-disk size before diskcache culls
        """
        super().__init__(ttl_seconds, time.time)
        self._cache_dir = Path(cache_dir)
        self._cache_dir.mkdir(parents=True, exist_ok=True)

        # Eviction is by expire time only; "none" disables LRU culling of live sessions
        self._cache = diskcache.Cache(
            directory=str(self._cache_dir),
            eviction_policy="none",
            size_limit=size_limit,
        )
        self._closed = False

    def _session_key(self, session_id: str) -> str:
        return f"session:{session_id}"

    def _file_key(self, session_id: str, file_id: str) -> str:
        return f"file:{session_id}:{file_id}"

    def _live_metadata(self, session_id: str) -> SessionMetadata | None:
        metadata = self._cache.get(self._session_key(session_id))
        if metadata is None:
            return None
        if metadata.is_expired(self._now(), self._ttl_seconds):
            return None
        return metadata

    def _touch(self, metadata: SessionMetadata) -> None:
        """Persist a refreshed last_access and extend every key of the session."""
        session_id = metadata.session_id
        metadata.last_access = self._now()
        self._cache.set(
            self._session_key(session_id), metadata, expire=self._ttl_seconds
        )
        for file_id in metadata.files:
            self._cache.touch(self._file_key(session_id, file_id), expire=self._ttl_seconds)

    def _new_metadata(self, session_id: str) -> SessionMetadata:
        now = self._now()
        return SessionMetadata(session_id=session_id, created_at=now, last_access=now)

    # SessionStore interface
    def create_session(self) -> str:
        while True:
            session_id = generate_id()
            # add() only stores when the key is absent
            if self._cache.add(
                self._session_key(session_id),
                self._new_metadata(session_id),
                expire=self._ttl_seconds,
            ):
                return session_id

    def is_session_valid(self, session_id: str) -> bool:
        return self._live_metadata(session_id) is not None

    def add_file(self, session_id: str, name: str, data: bytes) -> str:
        with self._cache.transact():
            metadata = self._live_metadata(session_id)
            if metadata is None:
                # Adopt the caller-supplied id
                metadata = self._new_metadata(session_id)

            file_id = generate_id()
            while file_id in metadata.files:
                file_id = generate_id()

            metadata.files[file_id] = FileMetadata(
                id=file_id, name=name, size=len(data), created_at=self._now()
            )
            self._cache.set(
                self._file_key(session_id, file_id),
                bytes(data),
                expire=self._ttl_seconds,
            )
            self._touch(metadata)
            return file_id

    def get_file(self, session_id: str, file_id: str) -> StoredFile | None:
        with self._cache.transact():
            metadata = self._live_metadata(session_id)
            if metadata is None:
                return None
            meta = metadata.files.get(file_id)
            if meta is None:
                return None
            data = self._cache.get(self._file_key(session_id, file_id))
            if data is None:
                return None
            self._touch(metadata)
            return StoredFile(
                id=meta.id,
                name=meta.name,
                data=data,
                size=meta.size,
                created_at=meta.created_at,
            )

    def list_files(self, session_id: str) -> list[FileInfo]:
        with self._cache.transact():
            metadata = self._live_metadata(session_id)
            if metadata is None:
                return []
            self._touch(metadata)
            return [meta.to_info() for meta in metadata.files.values()]

    def cleanup(self) -> int:
        """Purge expired rows from the cache index."""
        removed = self._cache.expire()
        if removed:
            logger.info(f"Purged {removed} expired cache entries")
        return 0

    def get_stats(self) -> StorageStats:
        """Get storage statistics."""
        session_count = 0
        total_files = 0
        total_size = 0

        for key in self._cache.iterkeys():
            if not isinstance(key, str) or not key.startswith("session:"):
                continue
            metadata = self._cache.get(key)
            if metadata is None or metadata.is_expired(self._now(), self._ttl_seconds):
                continue
            session_count += 1
            total_files += len(metadata.files)
            total_size += metadata.total_size_bytes

        return StorageStats(
            session_count=session_count,
            total_files=total_files,
            total_size=total_size,
            tier=StorageTier.FILESYSTEM,
            disk_usage_percent=self._get_disk_usage_percent(),
        )

    def _get_disk_usage_percent(self) -> float:
        """Get current disk usage percentage."""
        try:
            disk_usage = psutil.disk_usage(str(self._cache_dir))
            return float((disk_usage.used / disk_usage.total) * 100)
        except OSError:
            return 0.0

    def destroy(self) -> None:
        """Close the cache. Persisted sessions remain on disk until they expire."""
        if self._closed:
            return
        self._closed = True
        self._cache.close()
