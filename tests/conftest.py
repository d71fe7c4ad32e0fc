"""Pytest fixtures for cc-statusline tests."""

import json
import os
import tempfile
from pathlib import Path

import pytest

from cc_statusline.config import StatusConfig


def write_jsonl(path: Path, records: list, mtime: float | None = None) -> Path:
    """Write records as JSONL, optionally backdating the file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        for record in records:
            f.write((record if isinstance(record, str) else json.dumps(record)) + "\n")
    if mtime is not None:
        os.utime(path, (mtime, mtime))
    return path


def user_record(content, timestamp: str = "2024-01-15T10:00:00Z") -> dict:
    return {
        "type": "user",
        "timestamp": timestamp,
        "message": {"role": "user", "content": content},
    }


def assistant_record(text: str, model: str = "claude-sonnet-4-20250514", timestamp: str = "2024-01-15T10:00:05Z") -> dict:
    return {
        "type": "assistant",
        "timestamp": timestamp,
        "message": {
            "role": "assistant",
            "model": model,
            "content": [{"type": "text", "text": text}],
        },
    }


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir).resolve()


@pytest.fixture
def home_dir(temp_dir):
    home = temp_dir / "home"
    home.mkdir()
    return home


@pytest.fixture
def work_dir(temp_dir):
    """A project directory a few levels deep, away from home."""
    work = temp_dir / "work" / "code" / "project"
    work.mkdir(parents=True)
    return work


@pytest.fixture
def config(home_dir, work_dir):
    return StatusConfig(
        home_dir=home_dir,
        claude_dir=home_dir / ".claude",
        project_dir=work_dir,
        process_dir=work_dir,
        timezone="UTC",
    )


@pytest.fixture
def sample_transcript(temp_dir):
    """A transcript whose latest user record is tool output."""
    records = [
        user_record("How do I implement authentication?", "2024-01-15T10:00:00Z"),
        assistant_record("For authentication, you can use JWT tokens...", timestamp="2024-01-15T10:00:05Z"),
        user_record("fix the bug in parser.go please", "2024-01-15T10:01:00Z"),
        assistant_record("Looking at parser.go now.", timestamp="2024-01-15T10:01:10Z"),
        user_record("<local-command-stdout>x</local-command-stdout>", "2024-01-15T10:02:00Z"),
    ]
    return write_jsonl(temp_dir / "transcripts" / "session-abc.jsonl", records)
