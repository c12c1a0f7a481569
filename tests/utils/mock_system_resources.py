"""
Mock System Resources for Testing

Utilities to control time and fake the Judge0 backend for deterministic
tests of the session stores and the execution translator.
"""

import base64
import io
import zipfile
from typing import Any


class FakeClock:
    """Manually advanced clock usable as a ``timer`` callable."""

    def __init__(self, start: float = 1_700_000_000.0):
        self._now = start

    def __call__(self) -> float:
        return self._now

    def advance(self, seconds: float) -> None:
        self._now += seconds


class FakeJudge0Backend:
    """Records submissions and replays a canned result or raises a canned error."""

    def __init__(self, result: dict[str, Any] | None = None, error: Exception | None = None):
        self.result = result if result is not None else accepted_result()
        self.error = error
        self.submissions: list[dict[str, Any]] = []
        self.health = {"healthy": True, "version": "1.13.1"}
        self.closed = False

    def submit(self, submission: dict[str, Any]) -> dict[str, Any]:
        self.submissions.append(submission)
        if self.error is not None:
            raise self.error
        return self.result

    def health_check(self) -> dict[str, Any]:
        return self.health

    def close(self) -> None:
        self.closed = True


def b64(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def zip_b64(entries: dict[str, bytes]) -> str:
    """Build a base64 zip the way Judge0 returns post_execution_filesystem."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        for name, data in entries.items():
            archive.writestr(name, data)
    return base64.b64encode(buffer.getvalue()).decode("ascii")


def accepted_result(stdout: str = "", stderr: str = "", **extra: Any) -> dict[str, Any]:
    result: dict[str, Any] = {
        "stdout": b64(stdout) if stdout else None,
        "stderr": b64(stderr) if stderr else None,
        "status": {"id": 3, "description": "Accepted"},
    }
    result.update(extra)
    return result
