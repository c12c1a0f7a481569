"""
Execution request/response types and the Judge0 status vocabulary.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class Judge0Status(IntEnum):
    """Judge0 status codes."""

    IN_QUEUE = 1
    PROCESSING = 2
    ACCEPTED = 3
    WRONG_ANSWER = 4
    TIME_LIMIT_EXCEEDED = 5
    COMPILATION_ERROR = 6
    RUNTIME_ERROR_SIGSEGV = 7
    RUNTIME_ERROR_SIGXFSZ = 8
    RUNTIME_ERROR_SIGFPE = 9
    RUNTIME_ERROR_SIGABRT = 10
    RUNTIME_ERROR_NZEC = 11
    RUNTIME_ERROR_OTHER = 12
    INTERNAL_ERROR = 13
    EXEC_FORMAT_ERROR = 14


# Statuses whose stderr gets the status description appended
RUNTIME_FAILURE_STATUSES = frozenset(
    {
        Judge0Status.TIME_LIMIT_EXCEEDED,
        Judge0Status.RUNTIME_ERROR_SIGSEGV,
        Judge0Status.RUNTIME_ERROR_SIGXFSZ,
        Judge0Status.RUNTIME_ERROR_SIGFPE,
        Judge0Status.RUNTIME_ERROR_SIGABRT,
        Judge0Status.RUNTIME_ERROR_NZEC,
        Judge0Status.RUNTIME_ERROR_OTHER,
        Judge0Status.EXEC_FORMAT_ERROR,
    }
)


@dataclass
class FileReference:
    """A file from a previous session passed as execution input."""

    session_id: str
    id: str
    name: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FileReference":
        return cls(session_id=data["session_id"], id=data["id"], name=data["name"])


@dataclass
class OutputFile:
    id: str
    name: str


@dataclass
class ExecResponse:
    """Normalized result of one execution."""

    stdout: str
    stderr: str
    session_id: str
    files: list[OutputFile] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Serialize; the files key is omitted entirely when there are none."""
        result: dict[str, Any] = {
            "stdout": self.stdout,
            "stderr": self.stderr,
            "session_id": self.session_id,
        }
        if self.files:
            result["files"] = [{"id": f.id, "name": f.name} for f in self.files]
        return result
