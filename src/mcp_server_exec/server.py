import base64
import binascii
import logging
import mimetypes
import sys
from datetime import datetime, timezone
from typing import Any

# FastMCP 2.0 import
from fastmcp import FastMCP

from .base_session_store import SessionStore
from .config import BridgeConfig
from .exec_types import FileReference
from .execution_translator import ExecutionBackend, ExecutionTranslator
from .judge0_client import Judge0Client
from .languages import SUPPORTED_LANGUAGES, is_valid_language
from .store_factory import create_session_store
from .system_utils import log_system_status
from .utils.session_utils import split_file_path, validate_session_id

logger = logging.getLogger(__name__)
# Ensure package logs are visible even if no handlers are configured.
# stderr, because stdout carries the MCP stdio protocol.
_package_logger = logging.getLogger("mcp_server_exec")
if not _package_logger.handlers:
    _handler = logging.StreamHandler(sys.stderr)
    _handler.setLevel(logging.INFO)
    _formatter = logging.Formatter("%(asctime)s - %(levelname)s - %(message)s")
    _handler.setFormatter(_formatter)
    _package_logger.addHandler(_handler)
    _package_logger.setLevel(logging.INFO)

SERVER_TITLE = "Code Execution Bridge ⚙️"


# CodeExecutionBridge owns the store, the backend client and the translator
class CodeExecutionBridge:
    def __init__(
        self,
        config: BridgeConfig | None = None,
        store: SessionStore | None = None,
        backend: ExecutionBackend | None = None,
    ):
        self.config = config or BridgeConfig.from_env()
        self.store = store or create_session_store(self.config)
        self.backend = backend or Judge0Client(
            base_url=self.config.judge0_api_url,
            api_key=self.config.judge0_api_key,
            timeout=self.config.judge0_timeout_seconds,
            verify_ssl=self.config.judge0_verify_ssl,
        )
        self.translator = ExecutionTranslator(
            self.store, self.backend, self.config.submission_limits
        )
        logger.info(
            f"CodeExecutionBridge initialized with {self.store.__class__.__name__} "
            f"-> {self.config.judge0_api_url}"
        )

    def log_system_status(self) -> None:
        """Delegate to system utils for logging."""
        log_system_status(self.store)

    def execute(
        self,
        lang: str,
        code: str,
        files: list[dict[str, Any]] | None = None,
        args: list[str] | None = None,
    ) -> dict[str, Any]:
        """Validate an execution request and run it through the translator."""
        if not lang:
            raise ValueError("Missing required field: lang")
        if not code:
            raise ValueError("Missing required field: code")
        if not is_valid_language(lang):
            raise ValueError(
                f"Unsupported language: {lang}. Supported: {', '.join(SUPPORTED_LANGUAGES)}"
            )

        try:
            references = [FileReference.from_dict(item) for item in files or []]
        except (KeyError, TypeError) as e:
            raise ValueError(f"Invalid file reference: {e}") from e

        result = self.translator.execute(lang, code, references, args)
        return result.to_dict()

    def upload(
        self, filename: str, content: bytes, entity_id: str | None = None
    ) -> dict[str, Any]:
        """Store an uploaded file in a new session."""
        if not filename:
            raise ValueError("No file uploaded")
        if len(content) > self.config.max_file_size:
            raise ValueError(
                f"File too large: {len(content)} bytes (max {self.config.max_file_size})"
            )

        session_id = self.store.create_session()
        file_id = self.store.add_file(session_id, filename, content)
        if entity_id:
            logger.info(f"File uploaded for entity: {entity_id}")

        return {
            "message": "success",
            "session_id": session_id,
            "files": [{"fileId": file_id, "filename": filename}],
        }

    def list_files(self, session_id: str, detail: str = "summary") -> list[dict[str, Any]]:
        """List a session's files as "<session_id>/<file_id>" entries."""
        session_id = validate_session_id(session_id)
        if not self.store.is_session_valid(session_id):
            raise ValueError("Session not found or expired")

        items = []
        for info in self.store.list_files(session_id):
            item: dict[str, Any] = {
                "name": f"{session_id}/{info.id}",
                "lastModified": info.last_modified,
            }
            if detail == "full":
                item["metadata"] = {"original-filename": info.name}
            items.append(item)
        return items

    def download(self, file_path: str) -> dict[str, Any]:
        """Fetch a file by its "<session_id>/<file_id>" path."""
        session_id, file_id = split_file_path(file_path)
        stored = self.store.get_file(session_id, file_id)
        if stored is None:
            raise ValueError("File not found")

        mime_type, _ = mimetypes.guess_type(stored.name)
        return {
            "filename": stored.name,
            "mime_type": mime_type or "application/octet-stream",
            "size": stored.size,
            "content_base64": base64.b64encode(stored.data).decode("ascii"),
        }

    def health(self) -> dict[str, Any]:
        backend_health = self.translator.health_check()
        stats = self.store.get_stats()
        return {
            "status": "ok",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "judge0": {
                "url": self.config.judge0_api_url,
                "healthy": backend_health.get("healthy", False),
                "version": backend_health.get("version"),
                "error": backend_health.get("error"),
            },
            "storage": {
                "type": stats.tier.value,
                "sessions": stats.session_count,
                "files": stats.total_files,
                "totalSize": stats.total_size,
            },
        }

    def close(self) -> None:
        """Release the store and the backend client."""
        self.store.destroy()
        close_backend = getattr(self.backend, "close", None)
        if close_backend is not None:
            close_backend()


def build_server(bridge: CodeExecutionBridge) -> FastMCP:
    """Create the FastMCP instance with tools bound to ``bridge``."""
    mcp = FastMCP(SERVER_TITLE)

    # === TOOLS ===
    @mcp.tool
    def execute_code(
        lang: str,
        code: str,
        files: list[dict[str, str]] | None = None,
        args: list[str] | None = None,
    ) -> dict[str, Any]:
        """Execute code in a sandbox and return stdout, stderr and any output files.

        Args:
            lang: Language code (py, js, ts, c, cpp, java, php, rs, go, d, f90, r)
            code: Source code; files referenced under /mnt/data are available
            files: Optional input files as {session_id, id, name} references
            args: Optional command line arguments

        Returns:
            {stdout, stderr, session_id, files?}
        """
        bridge.log_system_status()
        return bridge.execute(lang, code, files, args)

    @mcp.tool
    def upload_file(
        filename: str, content_base64: str, entity_id: str | None = None
    ) -> dict[str, Any]:
        """Upload a file into a new session.

        Args:
            filename: Original file name
            content_base64: File content, base64 encoded
            entity_id: Optional caller entity for tracking
        """
        try:
            content = base64.b64decode(content_base64, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ValueError(f"content_base64 is not valid base64: {e}") from e
        bridge.log_system_status()
        return bridge.upload(filename, content, entity_id)

    @mcp.tool
    def list_files(session_id: str, detail: str = "summary") -> list[dict[str, Any]]:
        """List files in a session. detail="full" adds the original filename."""
        bridge.log_system_status()
        return bridge.list_files(session_id, detail)

    @mcp.tool
    def download_file(file_path: str) -> dict[str, Any]:
        """Download a file given as "<session_id>/<file_id>"."""
        bridge.log_system_status()
        return bridge.download(file_path)

    @mcp.tool
    def health() -> dict[str, Any]:
        """Report Judge0 reachability and storage counters."""
        return bridge.health()

    return mcp


# === MAIN ENTRY POINT ===
def main():
    """Main entry point: build the bridge, serve, and release resources on exit."""
    bridge = CodeExecutionBridge(BridgeConfig.from_env())
    mcp = build_server(bridge)
    try:
        mcp.run()
    finally:
        logger.info("Shutting down, releasing session store")
        bridge.close()


if __name__ == "__main__":
    main()
