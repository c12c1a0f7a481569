import logging

import psutil

from .base_session_store import SessionStore

logger = logging.getLogger(__name__)


def log_system_status(store: SessionStore, include_process_rss: bool = True) -> None:
    """Log SessionStore counters alongside host RAM/disk usage."""
    store_name = store.__class__.__name__
    try:
        vm = psutil.virtual_memory()
        du = psutil.disk_usage("/")
        process_rss_mb: int | None = None
        if include_process_rss:
            try:
                process_rss_mb = psutil.Process().memory_info().rss // (1024**2)
            except psutil.Error:
                process_rss_mb = None

        stats = store.get_stats()
        msg = (
            f"SessionStore={store_name} | sessions={stats.session_count} "
            f"files={stats.total_files} bytes={stats.total_size} | "
            f"RAM used={vm.percent:.1f}% "
            f"({vm.used // (1024**2)}MB/{vm.total // (1024**2)}MB) | "
            f"Disk used={du.percent:.1f}% "
            f"({du.used // (1024**3)}GB/{du.total // (1024**3)}GB)"
            + (
                f" | Process RSS={process_rss_mb}MB"
                if process_rss_mb is not None
                else ""
            )
        )
        logger.info(msg)
    except Exception as exc:  # pragma: no cover
        logger.debug(f"Failed to log system status: {exc}")
