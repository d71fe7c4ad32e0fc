"""Filesystem and clock primitives."""

from datetime import datetime
from pathlib import Path


def parse_timestamp(value: str | None) -> int:
    """Parse an ISO-8601 timestamp to epoch seconds.

    Handles a trailing ``Z``, explicit offsets, naive local times and
    fractional seconds. Returns 0 when the value cannot be parsed.
    """
    if not value or not isinstance(value, str):
        return 0
    try:
        dt = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        # Naive values are local time, which is what .timestamp() assumes
        return int(dt.timestamp())
    except (ValueError, OverflowError, OSError):
        return 0


def file_mod_time(path: Path | None) -> int:
    """Get a file's modification time in epoch seconds, 0 if missing."""
    if path is None:
        return 0
    try:
        return int(Path(path).stat().st_mtime)
    except OSError:
        return 0


def find_most_recent_file(root: Path, pattern: str) -> Path | None:
    """Find the most recently modified file matching pattern under root."""
    if not root.is_dir():
        return None

    newest: Path | None = None
    newest_mtime = -1.0
    for path in sorted(root.rglob(pattern)):
        try:
            if not path.is_file():
                continue
            mtime = path.stat().st_mtime
        except OSError:
            continue
        if mtime > newest_mtime:
            newest, newest_mtime = path, mtime
    return newest
