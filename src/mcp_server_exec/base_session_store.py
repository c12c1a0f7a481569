"""
Abstract Base Session Store

This module contains the abstract base class that defines the interface
for all session/file storage implementations.
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from typing import Callable

from .storage_types import FileInfo, StorageStats, StoredFile


class SessionStore(ABC):
    """
    Abstract base class for session-scoped file storage.

    The ExecutionTranslator and the tool surface use this interface to create
    sessions and store/retrieve files without knowing the underlying backend.
    Implementations must behave identically to callers:

    - A session is valid iff ``now - last_access < ttl``; an expired session
      behaves as absent to every read even if it has not been purged yet.
    - Every successful read or write refreshes ``last_access`` (touch-on-access),
      except ``is_session_valid`` which is a pure existence check.
    - ``add_file`` on an unknown session id adopts that id instead of failing.
    """

    def __init__(
        self, ttl_seconds: float, timer: Callable[[], float] = time.time
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self._ttl_seconds = ttl_seconds
        self._timer = timer

    @property
    def ttl_seconds(self) -> float:
        return self._ttl_seconds

    def _now(self) -> float:
        return self._timer()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - release background resources."""
        self.destroy()

    @abstractmethod
    def create_session(self) -> str:
        """
        Allocate a fresh, unique session with an empty file set.

        Returns:
            The new session identifier
        """
        pass

    @abstractmethod
    def is_session_valid(self, session_id: str) -> bool:
        """
        Check whether a session exists and is within TTL, without refreshing it.

        Args:
            session_id: The session identifier

        Returns:
            True if the session is live, False otherwise
        """
        pass

    @abstractmethod
    def add_file(self, session_id: str, name: str, data: bytes) -> str:
        """
        Store a file in a session, creating the session under the given id if needed.

        Args:
            session_id: The session identifier (adopted if unknown)
            name: Display name of the file
            data: Raw payload

        Returns:
            The new file identifier
        """
        pass

    @abstractmethod
    def get_file(self, session_id: str, file_id: str) -> StoredFile | None:
        """
        Fetch a file from a session.

        Args:
            session_id: The session identifier
            file_id: The file identifier

        Returns:
            The StoredFile, or None if the session is invalid or the file unknown
        """
        pass

    @abstractmethod
    def list_files(self, session_id: str) -> list[FileInfo]:
        """
        List the files of a session.

        Args:
            session_id: The session identifier

        Returns:
            FileInfo entries in no particular order; empty if the session is invalid
        """
        pass

    @abstractmethod
    def cleanup(self) -> int:
        """
        Remove sessions whose TTL has elapsed.

        Returns:
            Number of sessions removed (0 for backends with native expiry)
        """
        pass

    @abstractmethod
    def get_stats(self) -> StorageStats:
        """
        Get aggregate storage statistics (eventually consistent).

        Returns:
            StorageStats with session, file and byte counters
        """
        pass

    @abstractmethod
    def destroy(self) -> None:
        """Release background resources (sweep thread, connections). Idempotent."""
        pass

    def close(self) -> None:
        """Alias for destroy()."""
        self.destroy()
