"""Collect everything one status line render needs."""

import logging
from datetime import datetime, timezone
from pathlib import Path

from rich.text import Text

from cc_statusline.config import StatusConfig
from cc_statusline.estimator import estimate_context, get_tokenizer
from cc_statusline.models import LastMessage, Payload, StatusLine
from cc_statusline.overhead import compute_overhead
from cc_statusline.renderer import DEFAULT_TEMPLATE, DisplayMode, render
from cc_statusline.resolver import resolve_transcript
from cc_statusline.transcript import elapsed_seconds, extract_last_message, model_from_transcript

logger = logging.getLogger(__name__)


def working_dir_for(payload: Payload, config: StatusConfig) -> Path:
    return payload.cwd or config.project_dir


def project_name(working_dir: Path) -> str:
    return working_dir.name or str(working_dir)


def collect_status(payload: Payload, config: StatusConfig, now: datetime | None = None) -> StatusLine:
    """Resolve the transcript and compute every value the line shows."""
    now = now or datetime.now(tz=timezone.utc)
    epoch = int(now.timestamp())
    working_dir = working_dir_for(payload, config)

    transcript = resolve_transcript(
        payload.session_id, payload.transcript_path, working_dir, config.projects_dir
    )

    model_name = payload.model_name
    model_id = payload.model_id or payload.model_name
    if not payload.model_id and payload.model_name == "Claude":
        # No model in the payload; the transcript knows which one answered last
        found = model_from_transcript(transcript)
        if found:
            model_name = model_id = found

    overhead = compute_overhead(working_dir, config.home_dir, config, project_dir=config.process_dir)
    estimate = estimate_context(
        authoritative_tokens=payload.current_tokens,
        reported_capacity=payload.expected_total_tokens,
        model_id=model_id,
        transcript_path=transcript,
        overhead=overhead,
        config=config,
        tokenizer=get_tokenizer(config.tokenizer),
        perf_hint_threshold=payload.min_tokens_for_perf_hint,
    )
    last_message = extract_last_message(transcript, now=epoch)

    return StatusLine(
        now=now,
        model_name=model_name,
        project_name=project_name(working_dir),
        last_message=last_message,
        elapsed=elapsed_seconds(last_message, epoch),
        estimate=estimate,
        overhead=overhead,
        transcript_path=transcript,
        output_style=payload.output_style,
    )


def unavailable_status(payload: Payload, config: StatusConfig, now: datetime | None = None) -> StatusLine:
    """A status with every computed value missing."""
    now = now or datetime.now(tz=timezone.utc)
    return StatusLine(
        now=now,
        model_name=payload.model_name,
        project_name=project_name(working_dir_for(payload, config)),
        last_message=LastMessage(timestamp=int(now.timestamp())),
        elapsed=0,
        output_style=payload.output_style,
    )


def render_status_line(
    payload: Payload,
    config: StatusConfig,
    mode: DisplayMode = DisplayMode.verbose,
    template: str = DEFAULT_TEMPLATE,
    now: datetime | None = None,
) -> Text:
    """Render the status line. Never raises; missing values show as N/A."""
    now = now or datetime.now(tz=timezone.utc)
    try:
        status = collect_status(payload, config, now=now)
    except Exception:
        logger.exception("Could not collect status, rendering placeholders")
        status = unavailable_status(payload, config, now=now)
    return render(status, mode, template, timezone=config.timezone, preview_length=config.preview_length)
