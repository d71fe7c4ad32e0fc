"""Runtime configuration for cc-statusline."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

# Calibration values observed against /context output. Override per deployment.
SYSTEM_PROMPT_TOKENS = 3_100
SYSTEM_TOOLS_TOKENS = 11_800
MCP_TOKENS = 10_900
MEMORY_FILE_TOKENS = 1_600
SETTINGS_FILE_TOKENS = 500
MESSAGE_OVERLAP_TOKENS = 3_500  # transcript bytes vs. /context "Messages"

# Transcript estimation
CHARS_PER_TOKEN = 125
LARGE_TRANSCRIPT_BYTES = 10 * 1024 * 1024
SANITY_CEILING_TOKENS = 400_000
TRANSCRIPT_CAPACITY = 200_000

# Display
DEFAULT_TIMEZONE = "America/Los_Angeles"
PREVIEW_LENGTH = 40
STDIN_TIMEOUT = 1.0

TOKENIZERS = ("bytes", "tiktoken")


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name, "").strip()
    if not value:
        return default
    try:
        parsed = int(value)
    except ValueError:
        logger.warning("Ignoring non-integer %s=%r", name, value)
        return default
    if parsed <= 0:
        logger.warning("Ignoring non-positive %s=%r", name, value)
        return default
    return parsed


@dataclass
class StatusConfig:
    """Everything a render needs from the environment.

    Built once per invocation and handed to each component, so tests can
    point every lookup at a temporary directory.
    """

    home_dir: Path
    claude_dir: Path
    project_dir: Path
    process_dir: Path
    chars_per_token: int = CHARS_PER_TOKEN
    tokenizer: str = "bytes"
    timezone: str = DEFAULT_TIMEZONE
    preview_length: int = PREVIEW_LENGTH
    stdin_timeout: float = STDIN_TIMEOUT

    system_prompt_tokens: int = SYSTEM_PROMPT_TOKENS
    system_tools_tokens: int = SYSTEM_TOOLS_TOKENS
    mcp_tokens: int = MCP_TOKENS
    memory_file_tokens: int = MEMORY_FILE_TOKENS
    settings_file_tokens: int = SETTINGS_FILE_TOKENS
    message_overlap_tokens: int = MESSAGE_OVERLAP_TOKENS
    large_transcript_bytes: int = LARGE_TRANSCRIPT_BYTES
    sanity_ceiling_tokens: int = SANITY_CEILING_TOKENS
    transcript_capacity: int = TRANSCRIPT_CAPACITY

    @property
    def projects_dir(self) -> Path:
        """Where Claude Code keeps session transcripts."""
        return self.claude_dir / "projects"

    @classmethod
    def from_env(cls, home_dir: Path | None = None, process_dir: Path | None = None) -> "StatusConfig":
        """Build a config from environment variables and the process state."""
        home = home_dir or Path.home()
        cwd = process_dir or Path.cwd()

        claude_dir_env = os.environ.get("CLAUDE_CONFIG_DIR", "").strip()
        # CLAUDE_CONFIG_DIR may hold a comma-separated list; the first entry wins
        claude_dir = Path(claude_dir_env.split(",")[0]).expanduser() if claude_dir_env else home / ".claude"

        project_env = os.environ.get("CLAUDE_PROJECT_DIR", "").strip()
        project_dir = Path(project_env) if project_env else cwd

        tokenizer = os.environ.get("CC_STATUSLINE_TOKENIZER", "bytes").strip().lower() or "bytes"
        if tokenizer not in TOKENIZERS:
            logger.warning("Unknown tokenizer %r, using byte estimation", tokenizer)
            tokenizer = "bytes"

        return cls(
            home_dir=home,
            claude_dir=claude_dir,
            project_dir=project_dir,
            process_dir=cwd,
            chars_per_token=_env_int("CLAUDE_CHARS_PER_TOKEN", CHARS_PER_TOKEN),
            tokenizer=tokenizer,
            timezone=os.environ.get("CC_STATUSLINE_TIMEZONE", "").strip() or DEFAULT_TIMEZONE,
        )
