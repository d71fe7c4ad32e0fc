"""Render a StatusLine as a single line of styled text."""

import logging
import re
from datetime import datetime
from enum import Enum
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from rich.console import Console
from rich.text import Text

from cc_statusline.models import ContextEstimate, StatusLine
from cc_statusline.transcript import elapsed_style, format_elapsed, preview

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE = "Context: %context% | Last: %last% | %project%"
NOT_AVAILABLE = "N/A"
SEPARATOR_STYLE = "cyan"

TEMPLATE_VAR = re.compile(r"(%[a-z]+%)")


class DisplayMode(str, Enum):
    verbose = "verbose"
    compact = "compact"
    custom = "custom"


def context_style(percent: int) -> str:
    if percent > 80:
        return "red"
    if percent > 60:
        return "yellow"
    return "green"


def remaining_k(estimate: ContextEstimate) -> int:
    # Truncate toward zero so -1500 reads as -1k, not -2k
    return int(estimate.remaining / 1000)


def percent_text(estimate: ContextEstimate | None) -> Text:
    if estimate is None:
        return Text(NOT_AVAILABLE, style="bright_black")
    return Text(f"{estimate.percent}%", style=context_style(estimate.percent))


def remaining_text(estimate: ContextEstimate | None) -> Text:
    if estimate is None:
        return Text(NOT_AVAILABLE, style="bright_black")
    return Text(f"{remaining_k(estimate)}k left")


def context_text(estimate: ContextEstimate | None) -> Text:
    """Percentage plus remaining tokens, e.g. "64% (71k left)"."""
    if estimate is None:
        return Text(NOT_AVAILABLE, style="bright_black")
    text = percent_text(estimate)
    text.append(f" ({remaining_k(estimate)}k left)")
    if estimate.perf_hint:
        text.append(" ⚡", style="bold yellow")
    return text


def last_text(status: StatusLine) -> Text:
    return Text(format_elapsed(status.elapsed), style=elapsed_style(status.elapsed))


def preview_text(status: StatusLine, width: int) -> Text:
    return Text(preview(status.last_message.text, width), style="italic")


def _zone(name: str):
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone %r, using local time", name)
        return None


def session_date(now: datetime) -> str:
    return now.astimezone().strftime("%m/%d")


def clock_time(now: datetime, timezone: str) -> str:
    return now.astimezone(_zone(timezone)).strftime("%I:%M %p %Z")


def _join(parts: list[Text], separator: Text) -> Text:
    line = Text()
    for i, part in enumerate(parts):
        if i:
            line.append_text(separator)
        line.append_text(part)
    return line


def render_verbose(status: StatusLine, timezone: str, preview_length: int) -> Text:
    """Full display: context, model, date, time, last message, project."""
    model = Text(status.model_name, style="blue")
    if status.output_style != "default":
        model.append(f" ({status.output_style})", style="bright_black")

    last = Text("Last: ").append_text(last_text(status))
    if status.last_message.text:
        snippet = preview(status.last_message.text, preview_length)
        last.append(f' "{snippet}"', style="italic bright_black")

    parts = [
        Text("Context: ").append_text(context_text(status.estimate)),
        model,
        Text("Session: ").append(session_date(status.now), style="bright_cyan"),
        Text(clock_time(status.now, timezone)),
        last,
        Text(status.project_name, style="bright_magenta"),
    ]
    arrow = Text("▸", style=SEPARATOR_STYLE)
    return Text.assemble(arrow, " ", _join(parts, Text.assemble(" ", arrow, " ")))


def render_compact(status: StatusLine) -> Text:
    """Essentials only: percent, time since last message, project."""
    parts = [
        percent_text(status.estimate),
        last_text(status),
        Text(status.project_name, style="bright_magenta"),
    ]
    return _join(parts, Text(" • "))


def template_values(status: StatusLine, timezone: str, preview_length: int) -> dict[str, Text]:
    """Values for each %name% placeholder in a custom template."""
    return {
        "%context%": context_text(status.estimate),
        "%percent%": percent_text(status.estimate),
        "%remaining%": remaining_text(status.estimate),
        "%session%": Text(session_date(status.now)),
        "%time%": Text(clock_time(status.now, timezone)),
        "%last%": last_text(status),
        "%project%": Text(status.project_name),
        "%model%": Text(status.model_name),
        "%message%": preview_text(status, preview_length),
        "%style%": Text(status.output_style),
    }


def render_custom(status: StatusLine, template: str, timezone: str, preview_length: int) -> Text:
    """Substitute placeholders in template; everything else is kept verbatim."""
    values = template_values(status, timezone, preview_length)
    line = Text()
    for piece in TEMPLATE_VAR.split(template):
        if piece in values:
            line.append_text(values[piece])
        elif piece:
            line.append(piece)
    return line


def render(
    status: StatusLine,
    mode: DisplayMode = DisplayMode.verbose,
    template: str = DEFAULT_TEMPLATE,
    timezone: str = "UTC",
    preview_length: int = 40,
) -> Text:
    if mode == DisplayMode.compact:
        return render_compact(status)
    if mode == DisplayMode.custom:
        return render_custom(status, template, timezone, preview_length)
    return render_verbose(status, timezone, preview_length)


def make_console() -> Console:
    """Console for the status line itself.

    Claude Code reads the line through a pipe but renders ANSI, so the
    console is forced into terminal mode. NO_COLOR still disables styles.
    """
    return Console(
        force_terminal=True,
        color_system="standard",
        highlight=False,
        emoji=False,
        soft_wrap=True,
    )
