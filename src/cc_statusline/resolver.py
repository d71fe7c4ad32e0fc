"""Locate the transcript of the active Claude Code session."""

import logging
import re
from pathlib import Path

from cc_statusline.primitives import find_most_recent_file

logger = logging.getLogger(__name__)

TRANSCRIPT_GLOB = "*.jsonl"


def project_key(working_dir: Path | str) -> str:
    """Encode a working directory the way Claude Code names project dirs.

    /Users/name/Code/project -> -Users-name-Code-project
    """
    return re.sub(r"[/\\]", "-", str(working_dir))


def session_id_from_path(path: Path | None) -> str:
    """Session id of a transcript (its file stem), or "" when unknown."""
    return path.stem if path is not None else ""


def _find_by_session_id(session_id: str, search_root: Path) -> Path | None:
    # Compared by name, never globbed: ids come from untrusted stdin
    if "/" in session_id or "\\" in session_id:
        logger.debug("Ignoring session id with a path separator: %r", session_id)
        return None
    filename = f"{session_id}.jsonl"
    for path in sorted(search_root.rglob(TRANSCRIPT_GLOB)):
        if path.name == filename and path.is_file():
            return path
    return None


def _find_in_project_dirs(working_dir: Path, search_root: Path) -> Path | None:
    key = project_key(working_dir)
    for project_dir in sorted(search_root.iterdir()):
        if not project_dir.is_dir() or key not in project_dir.name:
            continue
        transcript = find_most_recent_file(project_dir, TRANSCRIPT_GLOB)
        if transcript is not None:
            return transcript
    return None


def resolve_transcript(
    session_id: str | None,
    transcript_path: Path | None,
    working_dir: Path,
    search_root: Path,
) -> Path | None:
    """Pick the transcript file to treat as the current session.

    Precedence: an explicit transcript path, then {session_id}.jsonl anywhere
    under search_root, then the newest transcript in a project directory
    matching working_dir, then the newest transcript overall.

    Returns None when nothing matches; that is a normal state, not an error.
    """
    if transcript_path is not None and transcript_path.is_file():
        logger.debug("Using transcript path from payload: %s", transcript_path)
        return transcript_path

    if not search_root.is_dir():
        logger.debug("No transcript directory at %s", search_root)
        return None

    try:
        if session_id:
            found = _find_by_session_id(session_id, search_root)
            if found is not None:
                logger.debug("Resolved session %s to %s", session_id, found)
                return found

        found = _find_in_project_dirs(working_dir, search_root)
        if found is not None:
            logger.debug("Resolved project %s to %s", working_dir, found)
            return found
    except OSError as e:
        logger.debug("Transcript search under %s failed: %s", search_root, e)

    found = find_most_recent_file(search_root, TRANSCRIPT_GLOB)
    if found is not None:
        logger.debug("Falling back to newest transcript: %s", found)
    return found
