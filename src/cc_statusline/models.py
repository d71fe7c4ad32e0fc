"""Data models for cc-statusline."""

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path


@dataclass
class Payload:
    """Session data piped in by Claude Code on stdin."""

    session_id: str = ""
    model_name: str = "Claude"
    model_id: str = ""
    transcript_path: Path | None = None
    cwd: Path | None = None
    output_style: str = "default"
    current_tokens: int = 0
    expected_total_tokens: int = 0
    min_tokens_for_perf_hint: int = 0


@dataclass
class Overhead:
    """Fixed token cost of everything loaded before the first message."""

    system_prompt: int = 0
    system_tools: int = 0
    mcp: int = 0
    memory: int = 0
    settings: int = 0
    mcp_matches: int = 0  # diagnostic only, not part of the total

    @property
    def total(self) -> int:
        return self.system_prompt + self.system_tools + self.mcp + self.memory + self.settings


@dataclass
class ContextEstimate:
    """Estimated context-window usage for the current session."""

    consumed_tokens: int
    capacity: int
    source: str  # "authoritative" | "transcript"
    perf_hint: bool = False

    @property
    def percent(self) -> int:
        return self.consumed_tokens * 100 // self.capacity

    @property
    def remaining(self) -> int:
        return self.capacity - self.consumed_tokens


@dataclass
class LastMessage:
    """The most recent human message in a transcript."""

    timestamp: int
    text: str = ""
    origin: str = "none"  # "human-transcript" | "file-mtime" | "none"


@dataclass
class ModelCapacity:
    """One row of the model -> context window table."""

    name: str
    patterns: tuple[str, ...]
    capacity: int

    def matches(self, model_id: str) -> bool:
        # An entry without patterns is the catch-all.
        if not self.patterns:
            return True
        return any(pattern in model_id for pattern in self.patterns)


@dataclass
class StatusLine:
    """Everything one render of the status line shows."""

    now: datetime
    model_name: str
    project_name: str
    last_message: LastMessage
    elapsed: int
    estimate: ContextEstimate | None = None
    overhead: Overhead | None = None
    transcript_path: Path | None = None
    output_style: str = "default"
