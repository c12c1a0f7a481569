"""
Unit Tests for DiskCacheSessionStore

Tests the diskcache-based filesystem store, including persistence across
reopen and native expiry.
"""

import time

import pytest

from mcp_server_exec.diskcache_session_store import DiskCacheSessionStore
from mcp_server_exec.storage_types import StorageTier


class TestDiskCacheSessionStore:
    """Test suite for DiskCacheSessionStore."""

    def test_initialization_creates_directory(self, tmp_path):
        cache_dir = tmp_path / "nested" / "cache"
        with DiskCacheSessionStore(cache_dir=str(cache_dir), ttl_seconds=10):
            assert cache_dir.is_dir()

    def test_survives_reopen(self, tmp_path):
        cache_dir = str(tmp_path / "cache")
        with DiskCacheSessionStore(cache_dir=cache_dir, ttl_seconds=60) as store:
            session_id = store.create_session()
            file_id = store.add_file(session_id, "report.pdf", b"%PDF-1.4")

        with DiskCacheSessionStore(cache_dir=cache_dir, ttl_seconds=60) as reopened:
            assert reopened.is_session_valid(session_id)
            stored = reopened.get_file(session_id, file_id)
            assert stored.data == b"%PDF-1.4"
            assert stored.name == "report.pdf"

    def test_file_keys_share_session_ttl(self, disk_store):
        session_id = disk_store.create_session()
        file_id = disk_store.add_file(session_id, "a.txt", b"a")

        _, session_expire = disk_store._cache.get(
            f"session:{session_id}", expire_time=True
        )
        _, file_expire = disk_store._cache.get(
            f"file:{session_id}:{file_id}", expire_time=True
        )
        assert session_expire == pytest.approx(file_expire, abs=1.0)

    @pytest.mark.slow
    def test_ttl_expiry(self, tmp_path):
        with DiskCacheSessionStore(cache_dir=str(tmp_path), ttl_seconds=0.5) as store:
            session_id = store.create_session()
            file_id = store.add_file(session_id, "a.txt", b"a")
            time.sleep(0.8)

            assert not store.is_session_valid(session_id)
            assert store.get_file(session_id, file_id) is None
            assert store.list_files(session_id) == []
            assert store.get_stats().session_count == 0

    @pytest.mark.slow
    def test_touch_on_access_refreshes_ttl(self, tmp_path):
        with DiskCacheSessionStore(cache_dir=str(tmp_path), ttl_seconds=1) as store:
            session_id = store.create_session()
            file_id = store.add_file(session_id, "a.txt", b"a")
            time.sleep(0.6)
            assert store.get_file(session_id, file_id) is not None
            time.sleep(0.6)
            assert store.get_file(session_id, file_id) is not None

    def test_cleanup_reports_zero(self, disk_store):
        disk_store.create_session()
        assert disk_store.cleanup() == 0

    def test_stats_tier(self, disk_store):
        stats = disk_store.get_stats()
        assert stats.tier == StorageTier.FILESYSTEM
        assert stats.disk_usage_percent >= 0.0
