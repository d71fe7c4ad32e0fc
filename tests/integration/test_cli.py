"""Integration tests for the CLI."""

import json
import os
import re
import subprocess
import sys

import pytest
from typer.testing import CliRunner

from cc_statusline.cli import app
from cc_statusline.resolver import project_key
from tests.conftest import user_record, write_jsonl

ANSI = re.compile(r"\x1b\[[0-9;]*m")

runner = CliRunner()


def _plain(text: str) -> str:
    return ANSI.sub("", text)


@pytest.fixture
def env(home_dir, work_dir):
    """Environment pointing every lookup into the temp tree."""
    return {
        "HOME": str(home_dir),
        "CLAUDE_PROJECT_DIR": str(work_dir),
        "CLAUDE_CONFIG_DIR": "",
        "CC_STATUSLINE_TIMEZONE": "UTC",
        "NO_COLOR": "1",
    }


@pytest.fixture
def transcript(home_dir, work_dir):
    path = home_dir / ".claude" / "projects" / project_key(work_dir) / "abc-123.jsonl"
    return write_jsonl(path, [user_record("refactor the config loader")])


def test_cli_help():
    """Test that --help works."""
    result = subprocess.run(
        [sys.executable, "-m", "cc_statusline.cli", "--help"],
        capture_output=True,
        text=True,
    )
    assert result.returncode == 0
    assert "--compact" in result.stdout
    assert "breakdown" in result.stdout


def test_cli_version():
    """Test that --version works."""
    result = subprocess.run(
        [sys.executable, "-m", "cc_statusline.cli", "--version"],
        capture_output=True,
        text=True,
    )
    assert result.returncode == 0
    assert "cc-statusline" in result.stdout


def test_cli_renders_one_line_from_piped_payload(env, work_dir, transcript):
    payload = json.dumps(
        {
            "session_id": "abc-123",
            "cwd": str(work_dir),
            "model": {"id": "claude-opus-4-1", "display_name": "Opus 4.1"},
            "current_tokens": 50_000,
            "expected_total_tokens": 200_000,
        }
    )
    result = subprocess.run(
        [sys.executable, "-m", "cc_statusline.cli", "--compact"],
        input=payload,
        capture_output=True,
        text=True,
        env={**os.environ, **env},
    )

    assert result.returncode == 0
    line = _plain(result.stdout)
    assert line.startswith("25% • ")
    assert line.endswith(" • project\n")
    assert result.stdout.count("\n") == 1


def test_compact_mode_without_payload(env, transcript):
    result = runner.invoke(app, ["-c"], input="", env=env)

    assert result.exit_code == 0
    line = _plain(result.stdout)
    # A tiny transcript, so fixed overhead dominates the estimate
    assert re.fullmatch(r"\d+% • \S+ • project\n", line)


def test_custom_format(env, work_dir, transcript):
    payload = json.dumps({"transcript_path": str(transcript), "cwd": str(work_dir), "current_tokens": 20_000})

    result = runner.invoke(app, ["--format", "[%percent%] %model% %message%"], input=payload, env=env)

    assert result.exit_code == 0
    assert _plain(result.stdout) == "[10%] Claude refactor the config loader\n"


def test_mode_option(env, transcript):
    result = runner.invoke(app, ["--mode", "verbose"], input="", env=env)

    assert result.exit_code == 0
    assert _plain(result.stdout).startswith("▸ Context: ")


def test_invalid_mode_is_usage_error(env):
    result = runner.invoke(app, ["--mode", "fancy"], input="", env=env)

    assert result.exit_code != 0


def test_no_transcript_shows_not_available(env):
    result = runner.invoke(app, ["--compact"], input="not json", env=env)

    assert result.exit_code == 0
    assert _plain(result.stdout) == "N/A • <10s • project\n"


def test_breakdown(env, transcript):
    result = runner.invoke(app, ["breakdown"], input="", env=env)

    assert result.exit_code == 0
    assert "abc-123.jsonl" in result.stdout
    assert "System tools" in result.stdout
    assert "source: transcript" in result.stdout


def test_infinite_token_count_still_renders(env):
    result = subprocess.run(
        [sys.executable, "-m", "cc_statusline.cli", "--compact"],
        input='{"current_tokens": 1e400}',
        capture_output=True,
        text=True,
        env={**os.environ, **env},
    )

    assert result.returncode == 0
    assert _plain(result.stdout) == "N/A • <10s • project\n"


def test_short_flags(env, transcript):
    result = runner.invoke(app, ["-v"], input="", env=env)

    assert result.exit_code == 0
    assert _plain(result.stdout).startswith("▸ Context: ")

    result = runner.invoke(app, ["-V"])

    assert "cc-statusline" in result.stdout
