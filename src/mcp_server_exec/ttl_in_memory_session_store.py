"""
TTL In-Memory Session Store Implementation (Cacheout-backed)

Provides a SessionStore implementation with sliding TTL. Sessions are cached
with a TTL that is refreshed on every successful read or write.

Design notes:
- Uses a single Cacheout cache keyed by session_id.
- Each session value is a small dict containing:
  - metadata: SessionMetadata (timestamps + file index)
  - data: mapping of file_id -> bytes
- Sliding TTL is achieved by re-setting the same payload on every access.
- A daemon thread sweeps expired sessions on a fixed interval, since a
  session that is never accessed again would otherwise never be evicted.
- Data does not survive a process restart.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable, Optional, cast

import psutil
from cacheout import Cache

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


class TTLInMemorySessionStore(SessionStore):
    """In-process SessionStore with sliding TTL and a background sweep."""

    def __init__(
        self,
        ttl_seconds: float = 24 * 60 * 60,
        cleanup_interval_seconds: float = 5 * 60,
        start_sweeper: bool = True,
        timer: Callable[[], float] = time.time,
    ) -> None:
        super().__init__(ttl_seconds, timer)
        self._cleanup_interval_seconds = cleanup_interval_seconds

        # maxsize=0 means unbounded; eviction is by TTL only
        self._sessions = Cache(maxsize=0, ttl=ttl_seconds, timer=timer)
        # Re-entrant lock to avoid deadlocks when nested helpers acquire it
        self._lock = threading.RLock()

        self._stop_event = threading.Event()
        self._sweeper: threading.Thread | None = None
        if start_sweeper:
            self._sweeper = threading.Thread(
                target=self._sweep_loop, name="session-sweeper", daemon=True
            )
            self._sweeper.start()

    # Internal helpers
    def _touch(self, session_id: str, payload: dict[str, Any]) -> None:
        metadata: SessionMetadata = payload["metadata"]
        metadata.last_access = self._now()
        # Re-set to refresh TTL (sliding TTL behavior)
        self._sessions.set(session_id, payload, ttl=self._ttl_seconds)

    def _live_payload(
        self, session_id: str, touch: bool = True
    ) -> dict[str, Any] | None:
        """Return the session payload if it is within TTL, refreshing it when asked."""
        payload = cast(Optional[dict[str, Any]], self._sessions.get(session_id))
        if payload is None:
            return None
        metadata: SessionMetadata = payload["metadata"]
        if metadata.is_expired(self._now(), self._ttl_seconds):
            self._sessions.delete(session_id)
            return None
        if touch:
            self._touch(session_id, payload)
        return payload

    def _new_payload(self, session_id: str) -> dict[str, Any]:
        now = self._now()
        payload = {
            "metadata": SessionMetadata(
                session_id=session_id, created_at=now, last_access=now
            ),
            "data": {},
        }
        self._sessions.set(session_id, payload, ttl=self._ttl_seconds)
        return payload

    def _sweep_loop(self) -> None:
        while not self._stop_event.wait(self._cleanup_interval_seconds):
            try:
                self.cleanup()
            except Exception as e:  # noqa: BLE001
                logger.error(f"Session sweep failed: {e}")

    # SessionStore interface
    def create_session(self) -> str:
        with self._lock:
            session_id = generate_id()
            while self._live_payload(session_id, touch=False) is not None:
                session_id = generate_id()
            self._new_payload(session_id)
            return session_id

    def is_session_valid(self, session_id: str) -> bool:
        with self._lock:
            return self._live_payload(session_id, touch=False) is not None

    def add_file(self, session_id: str, name: str, data: bytes) -> str:
        with self._lock:
            payload = self._live_payload(session_id)
            if payload is None:
                # Adopt the caller-supplied id
                payload = self._new_payload(session_id)

            metadata: SessionMetadata = payload["metadata"]
            file_id = generate_id()
            while file_id in metadata.files:
                file_id = generate_id()

            metadata.files[file_id] = FileMetadata(
                id=file_id, name=name, size=len(data), created_at=self._now()
            )
            payload["data"][file_id] = bytes(data)
            self._touch(session_id, payload)
            return file_id

    def get_file(self, session_id: str, file_id: str) -> StoredFile | None:
        with self._lock:
            payload = self._live_payload(session_id)
            if payload is None:
                return None
            meta = payload["metadata"].files.get(file_id)
            if meta is None:
                return None
            return StoredFile(
                id=meta.id,
                name=meta.name,
                data=payload["data"][file_id],
                size=meta.size,
                created_at=meta.created_at,
            )

    def list_files(self, session_id: str) -> list[FileInfo]:
        with self._lock:
            payload = self._live_payload(session_id)
            if payload is None:
                return []
            return [meta.to_info() for meta in payload["metadata"].files.values()]

    def cleanup(self) -> int:
        """Remove expired sessions."""
        with self._lock:
            before = len(self._sessions)
            for session_id in list(self._sessions.keys()):
                # Drops the session if it is past its TTL
                self._live_payload(session_id, touch=False)
            self._sessions.delete_expired()
            cleaned = before - len(self._sessions)

        if cleaned > 0:
            logger.info(f"Cleaned up {cleaned} expired session(s)")
        return cleaned

    def get_stats(self) -> StorageStats:
        """Get storage statistics from a snapshot, without holding the store lock."""
        now = self._now()
        snapshot = list(self._sessions.values())

        session_count = 0
        total_files = 0
        total_size = 0
        for payload in snapshot:
            metadata: SessionMetadata = payload["metadata"]
            if metadata.is_expired(now, self._ttl_seconds):
                continue
            files = list(metadata.files.values())
            session_count += 1
            total_files += len(files)
            total_size += sum(meta.size for meta in files)

        return StorageStats(
            session_count=session_count,
            total_files=total_files,
            total_size=total_size,
            tier=StorageTier.MEMORY,
            memory_usage_percent=psutil.virtual_memory().percent,
        )

    def destroy(self) -> None:
        """Stop the sweep thread. In-process data is dropped with the process."""
        self._stop_event.set()
        if self._sweeper is not None:
            self._sweeper.join(timeout=5)
            self._sweeper = None
