"""
Zip archive helpers for the Judge0 wire format.

Judge0 receives auxiliary input files as a zip (``additional_files``) and
returns the post-execution working directory as a zip
(``post_execution_filesystem``).
"""

from __future__ import annotations

import io
import posixpath
import zipfile
from typing import Iterable


def pack_archive(files: Iterable[tuple[str, bytes]]) -> bytes:
    """Pack (name, bytes) pairs into a zip archive."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
        for name, data in files:
            archive.writestr(name, data)
    return buffer.getvalue()


def unpack_archive(blob: bytes) -> list[tuple[str, bytes]]:
    """Unpack a zip archive into (name, bytes) pairs.

    Directory entries and hidden files are skipped, and every entry name is
    flattened to its final path segment. Raises zipfile.BadZipFile on
    malformed input.
    """
    entries = []
    with zipfile.ZipFile(io.BytesIO(blob)) as archive:
        for info in archive.infolist():
            if info.is_dir():
                continue
            name = posixpath.basename(info.filename.replace("\\", "/"))
            if not name or name.startswith("."):
                continue
            entries.append((name, archive.read(info)))
    return entries
