"""
Select and construct the SessionStore implementation at startup.

Callers receive a SessionStore and never branch on which variant it is.
"""

from __future__ import annotations

import logging

from .base_session_store import SessionStore
from .config import BridgeConfig

logger = logging.getLogger(__name__)


def create_session_store(config: BridgeConfig) -> SessionStore:
    """Build the SessionStore configured by ``config.storage_type``."""
    ttl_seconds = config.session_ttl_seconds

    if config.storage_type == "redis":
        from .redis_session_store import RedisSessionStore

        logger.info("Using Redis session store")
        return RedisSessionStore(redis_url=config.redis_url, ttl_seconds=ttl_seconds)

    if config.storage_type == "disk":
        from .diskcache_session_store import DiskCacheSessionStore

        logger.info(f"Using diskcache session store in {config.cache_dir}")
        return DiskCacheSessionStore(cache_dir=config.cache_dir, ttl_seconds=ttl_seconds)

    from .ttl_in_memory_session_store import TTLInMemorySessionStore

    logger.info("Using in-memory session store")
    return TTLInMemorySessionStore(
        ttl_seconds=ttl_seconds,
        cleanup_interval_seconds=config.cleanup_interval_seconds,
    )
