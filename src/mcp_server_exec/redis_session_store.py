"""
Redis Session Store Implementation

A replicated SessionStore backed by Redis. Expiry is native (per-key PEXPIRE),
so sessions survive a restart of this process and no sweep is needed.

Key structure:
  session:{session_id}            -> Hash {id, created_at, last_access}
  session:{session_id}:files      -> Hash {file_id -> JSON FileMetadata}
  file:{session_id}:{file_id}     -> String (base64 encoded payload)

All keys belonging to one session share a single lifetime: every access
refreshes them together inside one MULTI/EXEC transaction, so no key of a
session expires strictly before another under normal operation.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
import time
from typing import Any, Callable

import redis

from .base_session_store import SessionStore
from .storage_types import (
    FileInfo,
    FileMetadata,
    StorageStats,
    StorageTier,
    StoredFile,
)
from .utils.session_utils import generate_id

logger = logging.getLogger(__name__)

SESSION_KEY_PREFIX = "session:"
FILES_KEY_SUFFIX = ":files"
FILE_KEY_PREFIX = "file:"


class RedisSessionStore(SessionStore):
    """SessionStore backed by Redis with native TTL expiry."""

    def __init__(
        self,
        redis_url: str = "redis://localhost:6379",
        ttl_seconds: float = 24 * 60 * 60,
        client: redis.Redis | None = None,
        timer: Callable[[], float] = time.time,
    ) -> None:
        super().__init__(ttl_seconds, timer)
        self._ttl_ms = max(1, int(ttl_seconds * 1000))
        self._redis = client or redis.Redis.from_url(redis_url, decode_responses=True)
        self._closed = False

    # Key helpers
    def _session_key(self, session_id: str) -> str:
        return f"{SESSION_KEY_PREFIX}{session_id}"

    def _files_key(self, session_id: str) -> str:
        return f"{SESSION_KEY_PREFIX}{session_id}{FILES_KEY_SUFFIX}"

    def _file_data_key(self, session_id: str, file_id: str) -> str:
        return f"{FILE_KEY_PREFIX}{session_id}:{file_id}"

    @staticmethod
    def _text(value: Any) -> str:
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return str(value)

    def _touch(self, session_id: str, extra_file_ids: list[str] | None = None) -> None:
        """Refresh last_access and the TTL of every key composing the session."""
        file_ids = [self._text(fid) for fid in self._redis.hkeys(self._files_key(session_id))]
        for file_id in extra_file_ids or []:
            if file_id not in file_ids:
                file_ids.append(file_id)

        pipe = self._redis.pipeline(transaction=True)
        pipe.hset(self._session_key(session_id), "last_access", repr(self._now()))
        pipe.pexpire(self._session_key(session_id), self._ttl_ms)
        pipe.pexpire(self._files_key(session_id), self._ttl_ms)
        for file_id in file_ids:
            pipe.pexpire(self._file_data_key(session_id, file_id), self._ttl_ms)
        pipe.execute()

    def _claim_session(self, session_id: str) -> bool:
        """Atomically create session metadata under session_id; False if it already exists."""
        key = self._session_key(session_id)
        now = repr(self._now())
        pipe = self._redis.pipeline(transaction=True)
        pipe.hsetnx(key, "id", session_id)
        pipe.hsetnx(key, "created_at", now)
        pipe.hsetnx(key, "last_access", now)
        pipe.pexpire(key, self._ttl_ms)
        claimed, _, _, _ = pipe.execute()
        return bool(claimed)

    def _decode_metadata(self, file_id: str, raw: Any) -> FileMetadata | None:
        try:
            meta = json.loads(self._text(raw))
            return FileMetadata(
                id=file_id,
                name=meta["name"],
                size=int(meta["size"]),
                created_at=float(meta["created_at"]),
            )
        except (ValueError, KeyError, TypeError) as e:
            logger.debug(f"Skipping unreadable file metadata {file_id}: {e}")
            return None

    # SessionStore interface
    def create_session(self) -> str:
        session_id = generate_id()
        while not self._claim_session(session_id):
            session_id = generate_id()
        return session_id

    def is_session_valid(self, session_id: str) -> bool:
        return self._redis.exists(self._session_key(session_id)) == 1

    def add_file(self, session_id: str, name: str, data: bytes) -> str:
        # Adopt unknown ids; HSETNX leaves an existing session untouched
        self._claim_session(session_id)

        file_id = generate_id()
        metadata = json.dumps(
            {"name": name, "size": len(data), "created_at": self._now()}
        )
        pipe = self._redis.pipeline(transaction=True)
        pipe.hset(self._files_key(session_id), file_id, metadata)
        pipe.pexpire(self._files_key(session_id), self._ttl_ms)
        pipe.set(
            self._file_data_key(session_id, file_id),
            base64.b64encode(data).decode("ascii"),
            px=self._ttl_ms,
        )
        pipe.execute()

        self._touch(session_id, extra_file_ids=[file_id])
        return file_id

    def get_file(self, session_id: str, file_id: str) -> StoredFile | None:
        if not self.is_session_valid(session_id):
            return None

        raw_meta = self._redis.hget(self._files_key(session_id), file_id)
        if raw_meta is None:
            return None
        raw_data = self._redis.get(self._file_data_key(session_id, file_id))
        if raw_data is None:
            return None

        meta = self._decode_metadata(file_id, raw_meta)
        if meta is None:
            return None
        try:
            data = base64.b64decode(self._text(raw_data))
        except (binascii.Error, ValueError) as e:
            logger.warning(f"Corrupt payload for {session_id}/{file_id}: {e}")
            return None

        self._touch(session_id)
        return StoredFile(
            id=file_id,
            name=meta.name,
            data=data,
            size=meta.size,
            created_at=meta.created_at,
        )

    def list_files(self, session_id: str) -> list[FileInfo]:
        if not self.is_session_valid(session_id):
            return []

        files = []
        for raw_id, raw_meta in self._redis.hgetall(self._files_key(session_id)).items():
            meta = self._decode_metadata(self._text(raw_id), raw_meta)
            if meta is not None:
                files.append(meta.to_info())

        self._touch(session_id)
        return files

    def cleanup(self) -> int:
        """No-op: Redis expires keys natively."""
        return 0

    def get_stats(self) -> StorageStats:
        """Count sessions by incrementally scanning keys (expensive for large datasets)."""
        session_count = 0
        total_files = 0
        total_size = 0

        for raw_key in self._redis.scan_iter(match=f"{SESSION_KEY_PREFIX}*", count=100):
            key = self._text(raw_key)
            if key.endswith(FILES_KEY_SUFFIX):
                continue
            session_count += 1
            session_id = key[len(SESSION_KEY_PREFIX):]
            for raw_meta in self._redis.hvals(self._files_key(session_id)):
                try:
                    meta = json.loads(self._text(raw_meta))
                except ValueError:
                    continue
                total_files += 1
                total_size += int(meta.get("size", 0))

        return StorageStats(
            session_count=session_count,
            total_files=total_files,
            total_size=total_size,
            tier=StorageTier.REDIS,
        )

    def destroy(self) -> None:
        """Close the Redis connection. Data stays in Redis until its TTL elapses."""
        if self._closed:
            return
        self._closed = True
        self._redis.close()
        logger.info("Redis connection closed")
