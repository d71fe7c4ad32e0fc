"""Parse the JSON session payload Claude Code pipes to status line commands."""

import json
import logging
import math
import threading
from pathlib import Path
from typing import Any, TextIO

from cc_statusline.models import Payload

logger = logging.getLogger(__name__)


def read_stdin(stream: TextIO, timeout: float) -> str:
    """Read all of stream, giving up after timeout seconds.

    An interactive terminal never carries a payload, so it is not read.
    """
    try:
        if stream.isatty():
            return ""
    except (AttributeError, ValueError):
        return ""

    chunks: list[str] = []

    def _read() -> None:
        try:
            chunks.append(stream.read())
        except (OSError, ValueError) as e:
            logger.debug("stdin read failed: %s", e)

    reader = threading.Thread(target=_read, daemon=True)
    reader.start()
    reader.join(timeout)
    if reader.is_alive():
        logger.debug("No payload on stdin after %.1fs", timeout)
        return ""
    return "".join(chunks)


def _get(data: dict[str, Any], *keys: str) -> Any:
    """Walk nested dict keys, returning None at the first miss."""
    value: Any = data
    for key in keys:
        if not isinstance(value, dict):
            return None
        value = value.get(key)
    return value


def _first_str(*values: Any) -> str:
    for value in values:
        if isinstance(value, str) and value.strip():
            return value.strip()
    return ""


def _as_int(value: Any) -> int:
    # bool is an int subclass but never a token count
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        # JSON allows 1e400 (inf); NaN arrives through json.loads too
        return int(value) if math.isfinite(value) else 0
    if isinstance(value, str):
        try:
            return int(value.strip())
        except (ValueError, OverflowError):
            return 0
    return 0


def parse_payload(raw: str) -> Payload:
    """Parse a payload, treating anything unparseable as an empty one."""
    if not raw or not raw.strip():
        return Payload()
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.debug("Ignoring malformed payload: %s", e)
        return Payload()
    if not isinstance(data, dict):
        return Payload()

    session_id = _first_str(data.get("session_id"))
    transcript = _first_str(data.get("transcript_path"))
    if not session_id and not transcript:
        # Older hosts used different key names
        session_id = _first_str(data.get("sessionId"), data.get("id"))
        transcript = _first_str(data.get("transcriptPath"), data.get("file"))

    model_id = _first_str(_get(data, "model", "id"))
    cwd = _first_str(data.get("cwd"), _get(data, "workspace", "current_dir"))

    return Payload(
        session_id=session_id,
        model_name=_first_str(_get(data, "model", "display_name"), model_id) or "Claude",
        model_id=model_id,
        transcript_path=Path(transcript).expanduser() if transcript else None,
        cwd=Path(cwd).expanduser() if cwd else None,
        output_style=_first_str(_get(data, "output_style", "name")) or "default",
        current_tokens=_as_int(data.get("current_tokens")),
        expected_total_tokens=_as_int(data.get("expected_total_tokens")),
        min_tokens_for_perf_hint=_as_int(data.get("min_tokens_for_perf_hint")),
    )
