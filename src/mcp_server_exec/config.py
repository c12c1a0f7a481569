"""
Bridge configuration loaded from environment variables.
"""

from __future__ import annotations

import logging
import os
import tempfile
from dataclasses import dataclass, field
from typing import Mapping

logger = logging.getLogger(__name__)

STORAGE_TYPES = ("memory", "redis", "disk")


def _int_env(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Ignoring non-integer {name}={raw!r}, using {default}")
        return default


def _optional_float_env(env: Mapping[str, str], name: str) -> float | None:
    raw = env.get(name)
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"Ignoring non-numeric {name}={raw!r}")
        return None


def _bool_env(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    return raw.lower() in {"1", "true", "yes"}


@dataclass
class BridgeConfig:
    judge0_api_url: str = "https://ce.judge0.com"
    judge0_api_key: str = ""
    judge0_timeout_seconds: float = 60.0
    judge0_verify_ssl: bool = True
    # Optional per-submission limits forwarded to Judge0
    submission_limits: dict[str, float] = field(default_factory=dict)
    storage_type: str = "memory"
    redis_url: str = "redis://localhost:6379"
    cache_dir: str = os.path.join(tempfile.gettempdir(), "mcp_exec_cache")
    session_expiry_ms: int = 24 * 60 * 60 * 1000
    cleanup_interval_seconds: int = 5 * 60
    max_file_size: int = 150 * 1024 * 1024

    @property
    def session_ttl_seconds(self) -> float:
        return self.session_expiry_ms / 1000

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "BridgeConfig":
        """Build a config from the process environment (or a given mapping)."""
        env = os.environ if env is None else env
        defaults = cls()

        storage_type = env.get("STORAGE_TYPE", defaults.storage_type).lower()
        if storage_type not in STORAGE_TYPES:
            logger.warning(
                f"Unknown STORAGE_TYPE={storage_type!r}, falling back to 'memory'"
            )
            storage_type = "memory"

        limits = {}
        for env_name, field_name in (
            ("JUDGE0_CPU_TIME_LIMIT", "cpu_time_limit"),
            ("JUDGE0_WALL_TIME_LIMIT", "wall_time_limit"),
            ("JUDGE0_MEMORY_LIMIT", "memory_limit"),
        ):
            value = _optional_float_env(env, env_name)
            if value is not None:
                limits[field_name] = int(value) if field_name == "memory_limit" else value

        return cls(
            judge0_api_url=env.get("JUDGE0_API_URL", defaults.judge0_api_url).rstrip("/"),
            judge0_api_key=env.get("JUDGE0_API_KEY", ""),
            judge0_timeout_seconds=float(
                _int_env(env, "JUDGE0_TIMEOUT_SECONDS", int(defaults.judge0_timeout_seconds))
            ),
            judge0_verify_ssl=_bool_env(env, "JUDGE0_VERIFY_SSL", True),
            submission_limits=limits,
            storage_type=storage_type,
            redis_url=env.get("REDIS_URL", defaults.redis_url),
            cache_dir=env.get("CACHE_DIR", defaults.cache_dir),
            session_expiry_ms=_int_env(env, "SESSION_EXPIRY_MS", defaults.session_expiry_ms),
            cleanup_interval_seconds=_int_env(
                env, "CLEANUP_INTERVAL_SECONDS", defaults.cleanup_interval_seconds
            ),
            max_file_size=_int_env(env, "MAX_FILE_SIZE", defaults.max_file_size),
        )
