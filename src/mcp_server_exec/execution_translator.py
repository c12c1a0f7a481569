"""
Execution Translator

Turns one (language, code, input files, args) request into one normalized
ExecResponse, absorbing Judge0's quirks:

1. Rewrites the client's /mnt/data mount path to the submission's working dir.
2. Resolves input file references through the SessionStore and zips them.
3. Submits synchronously to Judge0.
4. Classifies the Judge0 status into stdout/stderr.
5. Extracts genuine output files from the post-execution archive into a
   freshly minted session.

Backend outcomes, including transport failures, always come back as an
ExecResponse; only store failures propagate.
"""

from __future__ import annotations

import binascii
import logging
import zipfile
from typing import Any, Iterable, Protocol

import httpx

from .base_session_store import SessionStore
from .exec_types import (
    RUNTIME_FAILURE_STATUSES,
    ExecResponse,
    FileReference,
    Judge0Status,
    OutputFile,
)
from .languages import get_judge0_language_id
from .utils.archive_utils import pack_archive, unpack_archive
from .utils.artifact_filter import filter_artifacts
from .utils.encoding_utils import decode_bytes, decode_text, encode_bytes, encode_text
from .utils.path_rewrite import MOUNT_PATH_NOTICE, rewrite_mount_paths

logger = logging.getLogger(__name__)

COMPILATION_ERROR_FALLBACK = "Compilation error"
INTERNAL_ERROR_FALLBACK = "Internal execution error"


class ExecutionBackend(Protocol):
    def submit(self, submission: dict[str, Any]) -> dict[str, Any]: ...

    def health_check(self) -> dict[str, Any]: ...


def classify_result(result: dict[str, Any]) -> tuple[str, str]:
    """Map a Judge0 submission result to (stdout, stderr)."""
    status = result.get("status")
    if not isinstance(status, dict):
        status = {}
    status_id = status.get("id")
    description = status.get("description") or ""

    stdout = decode_text(result.get("stdout"))

    if status_id == Judge0Status.COMPILATION_ERROR:
        stderr = decode_text(result.get("compile_output")) or COMPILATION_ERROR_FALLBACK
    elif status_id in RUNTIME_FAILURE_STATUSES:
        stderr = decode_text(result.get("stderr"))
        if description:
            stderr = f"{stderr}\n[{description}]".strip()
    elif status_id == Judge0Status.INTERNAL_ERROR:
        stderr = decode_text(result.get("message")) or INTERNAL_ERROR_FALLBACK
    else:
        # Accepted, Wrong Answer, and anything unrecognized: pass output through
        stderr = decode_text(result.get("stderr"))

    return stdout, stderr


def describe_transport_error(error: Exception) -> str:
    """Turn a failed Judge0 round trip into a stderr message."""
    if isinstance(error, httpx.HTTPStatusError):
        message = f"Judge0 error ({error.response.status_code})"
        try:
            body = error.response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            detail = body.get("error") or body.get("message")
            if detail:
                message += f": {detail}"
        return message
    if isinstance(error, httpx.ConnectError):
        return "Judge0 service unavailable"
    if isinstance(error, httpx.TimeoutException):
        return "Execution timed out"
    return f"Execution failed: {error}"


class ExecutionTranslator:
    """Bridges stateful session/file semantics onto stateless Judge0 submissions."""

    def __init__(
        self,
        store: SessionStore,
        backend: ExecutionBackend,
        submission_limits: dict[str, float] | None = None,
    ) -> None:
        self.store = store
        self.backend = backend
        self.submission_limits = dict(submission_limits or {})

    def execute(
        self,
        lang: str,
        code: str,
        files: Iterable[FileReference] | None = None,
        args: list[str] | None = None,
    ) -> ExecResponse:
        translated_code, rewritten = rewrite_mount_paths(code)

        submission: dict[str, Any] = {
            "source_code": encode_text(translated_code),
            "language_id": get_judge0_language_id(lang),
            **self.submission_limits,
        }
        if args:
            submission["command_line_arguments"] = " ".join(args)

        input_names = set()
        resolved = self._resolve_inputs(files or [])
        if resolved:
            submission["additional_files"] = encode_bytes(pack_archive(resolved))
            input_names = {name for name, _ in resolved}

        try:
            result = self.backend.submit(submission)
            if not isinstance(result, dict):
                raise ValueError(
                    f"unexpected Judge0 response: {type(result).__name__}"
                )
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Judge0 submission failed: {e}")
            response = ExecResponse(
                stdout="",
                stderr=describe_transport_error(e),
                session_id=self.store.create_session(),
            )
        else:
            response = self._translate_result(result, input_names)

        if rewritten:
            response.stdout = f"{MOUNT_PATH_NOTICE}\n{response.stdout}"
        return response

    def health_check(self) -> dict[str, Any]:
        return self.backend.health_check()

    def _resolve_inputs(
        self, files: Iterable[FileReference]
    ) -> list[tuple[str, bytes]]:
        resolved = []
        for ref in files:
            stored = self.store.get_file(ref.session_id, ref.id)
            if stored is None:
                logger.warning(f"Input file not found: {ref.session_id}/{ref.id}")
                continue
            resolved.append((ref.name, stored.data))
        return resolved

    def _translate_result(
        self, result: dict[str, Any], input_names: set[str]
    ) -> ExecResponse:
        # Minted before classification so every path returns a usable session
        session_id = self.store.create_session()
        stdout, stderr = classify_result(result)

        response = ExecResponse(stdout=stdout, stderr=stderr, session_id=session_id)

        archive = result.get("post_execution_filesystem")
        if archive:
            for name, data in self._extract_outputs(archive, input_names):
                file_id = self.store.add_file(session_id, name, data)
                response.files.append(OutputFile(id=file_id, name=name))

        return response

    def _extract_outputs(
        self, archive: str, input_names: set[str]
    ) -> list[tuple[str, bytes]]:
        try:
            entries = unpack_archive(decode_bytes(archive))
        except (zipfile.BadZipFile, binascii.Error, ValueError) as e:
            logger.error(f"Failed to extract output files: {e}")
            return []
        return filter_artifacts(entries, input_names)
