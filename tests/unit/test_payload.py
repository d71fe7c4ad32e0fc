"""Tests for the payload module."""

import io
import json
from pathlib import Path

from cc_statusline.models import Payload
from cc_statusline.payload import parse_payload, read_stdin


def test_full_payload():
    raw = json.dumps(
        {
            "session_id": "abc-123",
            "transcript_path": "/tmp/abc-123.jsonl",
            "cwd": "/home/u/project",
            "model": {"id": "claude-opus-4-1", "display_name": "Opus 4.1"},
            "output_style": {"name": "Explanatory"},
            "current_tokens": 42_000,
            "expected_total_tokens": 200_000,
            "min_tokens_for_perf_hint": 150_000,
        }
    )

    payload = parse_payload(raw)

    assert payload == Payload(
        session_id="abc-123",
        model_name="Opus 4.1",
        model_id="claude-opus-4-1",
        transcript_path=Path("/tmp/abc-123.jsonl"),
        cwd=Path("/home/u/project"),
        output_style="Explanatory",
        current_tokens=42_000,
        expected_total_tokens=200_000,
        min_tokens_for_perf_hint=150_000,
    )


def test_defaults_for_missing_fields():
    payload = parse_payload('{"session_id": "s"}')

    assert payload.model_name == "Claude"
    assert payload.output_style == "default"
    assert payload.cwd is None
    assert payload.transcript_path is None
    assert payload.current_tokens == 0


def test_model_id_used_when_no_display_name():
    assert parse_payload('{"model": {"id": "gpt-4o"}}').model_name == "gpt-4o"


def test_workspace_current_dir_fallback():
    payload = parse_payload('{"workspace": {"current_dir": "/srv/app"}}')
    assert payload.cwd == Path("/srv/app")


def test_alternative_key_names():
    payload = parse_payload('{"sessionId": "s1", "transcriptPath": "/t/s1.jsonl"}')

    assert payload.session_id == "s1"
    assert payload.transcript_path == Path("/t/s1.jsonl")


def test_alternative_keys_ignored_when_primary_present():
    payload = parse_payload('{"session_id": "s1", "id": "other", "file": "/x.jsonl"}')

    assert payload.session_id == "s1"
    assert payload.transcript_path is None


def test_malformed_input_is_empty_payload():
    assert parse_payload("") == Payload()
    assert parse_payload("{not json") == Payload()
    assert parse_payload("[1, 2, 3]") == Payload()
    assert parse_payload('"just a string"') == Payload()


def test_token_fields_coerced():
    payload = parse_payload(
        '{"current_tokens": "1234", "expected_total_tokens": 2.5e5, "min_tokens_for_perf_hint": true}'
    )

    assert payload.current_tokens == 1234
    assert payload.expected_total_tokens == 250_000
    assert payload.min_tokens_for_perf_hint == 0


def test_non_finite_token_fields_are_zero():
    payload = parse_payload(
        '{"current_tokens": 1e400, "expected_total_tokens": NaN, "min_tokens_for_perf_hint": -Infinity}'
    )

    assert payload.current_tokens == 0
    assert payload.expected_total_tokens == 0
    assert payload.min_tokens_for_perf_hint == 0


def test_read_stdin():
    assert read_stdin(io.StringIO('{"a": 1}'), timeout=1.0) == '{"a": 1}'


class _Tty(io.StringIO):
    def isatty(self):
        return True


def test_read_stdin_skips_tty():
    assert read_stdin(_Tty("ignored"), timeout=1.0) == ""


class _Blocking(io.StringIO):
    def read(self, *args):
        import time

        time.sleep(1)
        return "late"


def test_read_stdin_times_out():
    assert read_stdin(_Blocking(), timeout=0.05) == ""
