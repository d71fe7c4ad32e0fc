"""Read Claude Code transcripts from the end.

Transcripts are append-only JSONL, so the most recent record matching a
condition is found by scanning backwards and stopping at the first hit.
"""

import json
import logging
import os
import time
from collections.abc import Iterator
from itertools import islice
from pathlib import Path
from typing import Any

from cc_statusline.models import LastMessage
from cc_statusline.primitives import file_mod_time, parse_timestamp

logger = logging.getLogger(__name__)

BLOCK_SIZE = 64 * 1024

# Text that lands in "user" records without the user typing it
TOOL_OUTPUT_MARKERS = (
    "<local-command-stdout>",
    "<local-command-stderr>",
    "<bash-stdout>",
    "<bash-stderr>",
)
COMMAND_MARKERS = ("<command-name>", "<command-message>")
SYSTEM_REMINDER_MARKER = "<system-reminder>"
AUTO_RESPONSE_PREFIXES = (
    "Caveat: The messages below",
    "[Request interrupted by user",
    "No response requested.",
)

# Model lookups only need the tail of the transcript
MODEL_SCAN_RECORDS = 50


def iter_lines_reversed(path: Path, block_size: int = BLOCK_SIZE) -> Iterator[bytes]:
    """Yield the non-blank lines of a file, last line first."""
    with open(path, "rb") as f:
        f.seek(0, os.SEEK_END)
        position = f.tell()
        remainder = b""
        while position > 0:
            read_size = min(block_size, position)
            position -= read_size
            f.seek(position)
            lines = (f.read(read_size) + remainder).split(b"\n")
            # The first piece may be the tail of a line that starts in an earlier block
            remainder = lines.pop(0)
            for line in reversed(lines):
                if line.strip():
                    yield line
        if remainder.strip():
            yield remainder


def iter_records_reversed(path: Path, block_size: int = BLOCK_SIZE) -> Iterator[dict[str, Any]]:
    """Yield transcript records most-recent-first, skipping malformed lines."""
    for line in iter_lines_reversed(path, block_size):
        try:
            record = json.loads(line.decode("utf-8", errors="replace"))
        except json.JSONDecodeError:
            # Partial writes show up as truncated last lines
            continue
        if isinstance(record, dict):
            yield record


def message_text(record: dict[str, Any]) -> str | None:
    """Text of a human-authored user record, or None if it is not one.

    String content is used as-is; for block lists the first text block
    is taken. A list with no text block (e.g. only tool_result blocks)
    yields "".
    """
    if record.get("type") != "user":
        return None
    message = record.get("message")
    if not isinstance(message, dict) or message.get("role") != "user":
        return None

    content = message.get("content")
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        for block in content:
            if isinstance(block, dict) and block.get("type") == "text":
                text = block.get("text")
                return text if isinstance(text, str) else ""
        return ""
    return None


def is_filtered(text: str) -> bool:
    """True for text that did not come from the user typing a message."""
    if not text.strip():
        return True
    if any(marker in text for marker in TOOL_OUTPUT_MARKERS):
        return True
    if any(marker in text for marker in COMMAND_MARKERS):
        return True
    if SYSTEM_REMINDER_MARKER in text:
        return True
    return text.lstrip().startswith(AUTO_RESPONSE_PREFIXES)


def extract_last_message(path: Path | None, now: int | None = None) -> LastMessage:
    """Find the most recent genuine user message in a transcript.

    Falls back to the transcript's mtime when no record qualifies, and to
    ``now`` (zero elapsed time) when there is no transcript at all.
    """
    if now is None:
        now = int(time.time())

    if path is None or not path.is_file():
        return LastMessage(timestamp=now, origin="none")

    try:
        for record in iter_records_reversed(path):
            text = message_text(record)
            if text is None or is_filtered(text):
                continue
            timestamp = parse_timestamp(record.get("timestamp")) or file_mod_time(path) or now
            return LastMessage(timestamp=timestamp, text=text, origin="human-transcript")
    except OSError as e:
        logger.debug("Could not scan %s: %s", path, e)

    return LastMessage(timestamp=file_mod_time(path) or now, origin="file-mtime")


def model_from_transcript(path: Path | None) -> str | None:
    """Model id of the most recent assistant record, if any."""
    if path is None or not path.is_file():
        return None
    try:
        for record in islice(iter_records_reversed(path), MODEL_SCAN_RECORDS):
            if record.get("type") != "assistant":
                continue
            message = record.get("message")
            model = message.get("model") if isinstance(message, dict) else None
            if isinstance(model, str) and model and model != "<synthetic>":
                return model
    except OSError as e:
        logger.debug("Could not scan %s for model: %s", path, e)
    return None


def elapsed_seconds(message: LastMessage, now: int) -> int:
    """Seconds since the message, clamped at zero for clock skew."""
    return max(0, now - message.timestamp)


def format_elapsed(seconds: int) -> str:
    """Format elapsed seconds as a short bucketed duration."""
    seconds = max(0, seconds)
    if seconds < 10:
        return "<10s"
    if seconds < 60:
        return f"{seconds}s"
    if seconds < 300:
        minutes, secs = divmod(seconds, 60)
        return f"{minutes}m{secs}s" if secs else f"{minutes}m"
    if seconds < 3600:
        return f"{seconds // 60}m"
    if seconds < 86400:
        return f"{seconds // 3600}h"
    return f"{seconds // 86400}d"


def elapsed_style(seconds: int) -> str:
    """Rich style for an elapsed duration: fresh, waiting, stale."""
    if seconds < 60:
        return "green"
    if seconds < 3600:
        return "yellow"
    return "bright_black"


def preview(text: str, width: int) -> str:
    """Collapse whitespace and shorten text to at most width characters."""
    collapsed = " ".join(text.split())
    if width <= 0 or len(collapsed) <= width:
        return collapsed
    return collapsed[: width - 1].rstrip() + "…"
