from __future__ import annotations

import re

# Where the client tells users their files live
MOUNT_PATH = "/mnt/data"

MOUNT_PATH_NOTICE = (
    f"[Note: file paths under {MOUNT_PATH} were rewritten to ./ for execution]"
)

# Anchored on path-segment boundaries: not preceded by a segment character,
# and followed either by "/" or by something that cannot continue the segment.
_MOUNT_PATH_RE = re.compile(
    r"(?<![\w.~/-])" + re.escape(MOUNT_PATH) + r"(?:/|(?![\w.-]))"
)


def _replacement(match: re.Match) -> str:
    return "./" if match.group(0).endswith("/") else "."


def rewrite_mount_paths(code: str) -> tuple[str, bool]:
    """Rewrite ``/mnt/data/x`` to ``./x`` and a bare ``/mnt/data`` to ``.``.

    Returns the rewritten code and whether anything was substituted.
    """
    rewritten, count = _MOUNT_PATH_RE.subn(_replacement, code)
    return rewritten, count > 0
