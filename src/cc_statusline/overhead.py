"""Fixed context overhead from system prompt, tools and config files.

Scoring is presence-based: a file that exists contributes a calibrated
constant regardless of its size. The constants live on StatusConfig.
"""

import logging
from pathlib import Path

from cc_statusline.config import StatusConfig
from cc_statusline.models import Overhead

logger = logging.getLogger(__name__)

MEMORY_FILES = ("CLAUDE.md", "CLAUDE.local.md")

MCP_CONFIG_FILES = (
    ".claude.json",
    ".claude.local.json",
    "CLAUDE.md",
    "CLAUDE.local.md",
    ".claude/settings.json",
    ".claude/settings.local.json",
)

MEMORY_ANCESTOR_LEVELS = 3
MCP_ANCESTOR_LEVELS = 5


def _mentions_mcp(path: Path) -> bool:
    try:
        return "mcp" in path.read_text(encoding="utf-8", errors="replace").lower()
    except OSError as e:
        logger.debug("Could not read %s: %s", path, e)
        return False


def global_mcp_configs(home_dir: Path) -> list[Path]:
    """User-level files whose existence alone signals MCP servers."""
    return [
        home_dir / ".claude" / "claude_desktop_config.json",
        home_dir / ".config" / "claude" / "claude_desktop_config.json",
        home_dir / ".claude.json",
    ]


def count_mcp_evidence(working_dir: Path, home_dir: Path, project_dir: Path) -> int:
    """Tally every piece of MCP evidence. Only zero vs. non-zero matters for cost."""
    matches = 0

    for location in (project_dir / ".claude", working_dir / ".claude", home_dir):
        for name in MCP_CONFIG_FILES:
            path = location / name
            if path.is_file() and _mentions_mcp(path):
                matches += 1

    # .claude.json in the project dir and its ancestors, stopping at / or ~
    check_dir = project_dir
    for _ in range(MCP_ANCESTOR_LEVELS + 1):
        if (check_dir / ".claude.json").is_file():
            matches += 1
        parent = check_dir.parent
        if parent == check_dir or parent == home_dir:
            break
        check_dir = parent

    matches += sum(1 for path in global_mcp_configs(home_dir) if path.is_file())
    return matches


def memory_file_locations(working_dir: Path, home_dir: Path) -> list[Path]:
    """Every place a CLAUDE.md memory file is looked for.

    The same physical file can appear twice (e.g. when working_dir sits
    directly under home); both hits are counted.
    """
    directories = [home_dir / ".claude", working_dir, working_dir / ".claude"]

    check_dir = working_dir
    for _ in range(MEMORY_ANCESTOR_LEVELS):
        check_dir = check_dir.parent
        if check_dir == check_dir.parent:
            break
        directories.extend([check_dir, check_dir / ".claude"])

    return [directory / name for directory in directories for name in MEMORY_FILES]


def settings_file_locations(working_dir: Path, home_dir: Path) -> list[Path]:
    return [
        home_dir / ".claude" / "settings.json",
        home_dir / ".claude" / "settings.local.json",
        working_dir / ".claude" / "settings.json",
        working_dir / ".claude" / "settings.local.json",
    ]


def compute_overhead(
    working_dir: Path,
    home_dir: Path,
    config: StatusConfig,
    project_dir: Path | None = None,
) -> Overhead:
    """Compute the fixed token overhead for a session rooted at working_dir.

    Args:
        working_dir: The session's working directory.
        home_dir: User home, root of the user-level config files.
        config: Supplies the per-component calibration constants.
        project_dir: Directory whose .claude/ is checked first for MCP
            config. Defaults to working_dir.
    """
    project_dir = project_dir or working_dir

    mcp_matches = count_mcp_evidence(working_dir, home_dir, project_dir)
    memory_files = sum(1 for path in memory_file_locations(working_dir, home_dir) if path.is_file())
    settings_files = sum(1 for path in settings_file_locations(working_dir, home_dir) if path.is_file())

    overhead = Overhead(
        system_prompt=config.system_prompt_tokens,
        system_tools=config.system_tools_tokens,
        mcp=config.mcp_tokens if mcp_matches else 0,
        memory=memory_files * config.memory_file_tokens,
        settings=settings_files * config.settings_file_tokens,
        mcp_matches=mcp_matches,
    )
    logger.debug(
        "Overhead: %d total (mcp evidence=%d, memory files=%d, settings files=%d)",
        overhead.total,
        mcp_matches,
        memory_files,
        settings_files,
    )
    return overhead
