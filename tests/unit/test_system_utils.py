"""
Unit tests for System Utils

Tests the system status logging used before each execution.
"""

from unittest.mock import MagicMock, patch

import psutil

from mcp_server_exec.system_utils import log_system_status


class TestSystemUtils:
    """Test suite for system utilities."""

    def _patch_resources(self, mock_vm, mock_du):
        mock_vm.return_value.percent = 75.5
        mock_vm.return_value.used = 8 * 1024**3  # 8GB
        mock_vm.return_value.total = 16 * 1024**3  # 16GB
        mock_du.return_value.percent = 60.0
        mock_du.return_value.used = 100 * 1024**3  # 100GB
        mock_du.return_value.total = 500 * 1024**3  # 500GB

    def test_log_system_status_success(self, memory_store):
        """Store counters and host usage end up in one log line."""
        session_id = memory_store.create_session()
        memory_store.add_file(session_id, "a.txt", b"12345")

        with (
            patch("psutil.virtual_memory") as mock_vm,
            patch("psutil.disk_usage") as mock_du,
            patch("psutil.Process") as mock_process,
            patch("mcp_server_exec.system_utils.logger") as mock_logger,
        ):
            self._patch_resources(mock_vm, mock_du)
            mock_process_instance = MagicMock()
            mock_process_instance.memory_info.return_value.rss = 512 * 1024**2
            mock_process.return_value = mock_process_instance

            log_system_status(memory_store, include_process_rss=True)

            mock_logger.info.assert_called_once()
            log_message = mock_logger.info.call_args[0][0]
            assert "SessionStore=TTLInMemorySessionStore" in log_message
            assert "sessions=1 files=1 bytes=5" in log_message
            assert "RAM used=75.5%" in log_message
            assert "Disk used=60.0%" in log_message
            assert "Process RSS=512MB" in log_message

    def test_log_system_status_without_process_rss(self, memory_store):
        with (
            patch("psutil.virtual_memory") as mock_vm,
            patch("psutil.disk_usage") as mock_du,
            patch("mcp_server_exec.system_utils.logger") as mock_logger,
        ):
            self._patch_resources(mock_vm, mock_du)
            log_system_status(memory_store, include_process_rss=False)

            log_message = mock_logger.info.call_args[0][0]
            assert "Process RSS" not in log_message

    def test_process_rss_failure_is_tolerated(self, memory_store):
        with (
            patch("psutil.virtual_memory") as mock_vm,
            patch("psutil.disk_usage") as mock_du,
            patch("psutil.Process", side_effect=psutil.AccessDenied()),
            patch("mcp_server_exec.system_utils.logger") as mock_logger,
        ):
            self._patch_resources(mock_vm, mock_du)
            log_system_status(memory_store)

            mock_logger.info.assert_called_once()
            assert "Process RSS" not in mock_logger.info.call_args[0][0]

    def test_log_system_status_exception_handling(self, memory_store):
        """Failures while collecting stats are logged at debug and swallowed."""
        with (
            patch("psutil.virtual_memory", side_effect=Exception("psutil error")),
            patch("mcp_server_exec.system_utils.logger") as mock_logger,
        ):
            log_system_status(memory_store)

            mock_logger.info.assert_not_called()
            mock_logger.debug.assert_called_once()
            assert "psutil error" in mock_logger.debug.call_args[0][0]
