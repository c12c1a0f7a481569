"""Unit tests for environment configuration and language mapping."""

import pytest

from mcp_server_exec.config import BridgeConfig
from mcp_server_exec.languages import (
    SUPPORTED_LANGUAGES,
    get_judge0_language_id,
    is_valid_language,
)
from mcp_server_exec.store_factory import create_session_store
from mcp_server_exec.diskcache_session_store import DiskCacheSessionStore
from mcp_server_exec.ttl_in_memory_session_store import TTLInMemorySessionStore


class TestBridgeConfig:
    def test_defaults(self):
        config = BridgeConfig.from_env({})
        assert config.judge0_api_url == "https://ce.judge0.com"
        assert config.storage_type == "memory"
        assert config.session_expiry_ms == 86_400_000
        assert config.session_ttl_seconds == 86_400
        assert config.max_file_size == 150 * 1024 * 1024
        assert config.judge0_verify_ssl is True
        assert config.submission_limits == {}

    def test_reads_environment(self):
        config = BridgeConfig.from_env(
            {
                "JUDGE0_API_URL": "http://judge0.local:2358/",
                "JUDGE0_API_KEY": "secret",
                "STORAGE_TYPE": "REDIS",
                "REDIS_URL": "redis://cache:6379/2",
                "SESSION_EXPIRY_MS": "1500",
                "JUDGE0_VERIFY_SSL": "false",
                "JUDGE0_CPU_TIME_LIMIT": "2.5",
                "JUDGE0_MEMORY_LIMIT": "128000",
            }
        )
        assert config.judge0_api_url == "http://judge0.local:2358"
        assert config.judge0_api_key == "secret"
        assert config.storage_type == "redis"
        assert config.redis_url == "redis://cache:6379/2"
        assert config.session_ttl_seconds == 1.5
        assert config.judge0_verify_ssl is False
        assert config.submission_limits == {"cpu_time_limit": 2.5, "memory_limit": 128000}

    def test_malformed_numbers_fall_back(self):
        config = BridgeConfig.from_env(
            {"SESSION_EXPIRY_MS": "soon", "MAX_FILE_SIZE": "", "JUDGE0_WALL_TIME_LIMIT": "x"}
        )
        assert config.session_expiry_ms == 86_400_000
        assert config.max_file_size == 150 * 1024 * 1024
        assert config.submission_limits == {}

    def test_unknown_storage_type_falls_back_to_memory(self):
        assert BridgeConfig.from_env({"STORAGE_TYPE": "s3"}).storage_type == "memory"


class TestStoreFactory:
    def test_memory_store(self):
        store = create_session_store(BridgeConfig(cleanup_interval_seconds=3600))
        try:
            assert isinstance(store, TTLInMemorySessionStore)
            assert store.ttl_seconds == 86_400
        finally:
            store.destroy()

    def test_disk_store(self, tmp_path):
        config = BridgeConfig(storage_type="disk", cache_dir=str(tmp_path))
        with create_session_store(config) as store:
            assert isinstance(store, DiskCacheSessionStore)


class TestLanguages:
    def test_known_ids(self):
        assert get_judge0_language_id("py") == 71
        assert get_judge0_language_id("java") == 62
        assert get_judge0_language_id("r") == 80

    def test_supported_codes(self):
        assert set(SUPPORTED_LANGUAGES) == {
            "py", "js", "ts", "c", "cpp", "java", "php", "rs", "go", "d", "f90", "r",
        }

    def test_unknown_language(self):
        assert not is_valid_language("cobol")
        with pytest.raises(ValueError, match="Unsupported language: cobol"):
            get_judge0_language_id("cobol")
