from __future__ import annotations

from typing import AbstractSet, Iterable

from ..languages import LANGUAGES

# Judge0's own compile/run driver scripts
JUDGE0_DRIVER_SCRIPTS = frozenset({"compile.sh", "run.sh"})

# Files Judge0 creates internally, not user-generated output
JUDGE0_ARTIFACTS = frozenset(
    {spec.source_filename for spec in LANGUAGES.values()} | JUDGE0_DRIVER_SCRIPTS
)


def is_user_artifact(name: str, input_names: AbstractSet[str] = frozenset()) -> bool:
    """True if a flattened archive entry name is genuine user output.

    Exact, case-sensitive match against the Judge0 internals and the
    display names of the files that were sent in with the submission.
    """
    return name not in JUDGE0_ARTIFACTS and name not in input_names


def filter_artifacts(
    entries: Iterable[tuple[str, bytes]], input_names: AbstractSet[str] = frozenset()
) -> list[tuple[str, bytes]]:
    return [(name, data) for name, data in entries if is_user_artifact(name, input_names)]
