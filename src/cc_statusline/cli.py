"""CLI for cc-statusline."""

import logging
import sys
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from cc_statusline import __version__
from cc_statusline.config import TOKENIZERS, StatusConfig
from cc_statusline.renderer import DEFAULT_TEMPLATE, DisplayMode, make_console

app = typer.Typer(
    name="cc-statusline",
    help="Context usage, last message and project for the Claude Code status line.",
    add_completion=False,
)
console = Console()
err_console = Console(stderr=True)


def version_callback(value: bool) -> None:
    if value:
        console.print(f"cc-statusline {__version__}")
        raise typer.Exit()


def setup_logging(debug: bool) -> None:
    """Send diagnostics to stderr; stdout carries only the status line."""
    if not debug:
        return
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _load_config(tokenizer: str | None, timeout: float | None) -> StatusConfig:
    config = StatusConfig.from_env()
    if tokenizer is not None:
        if tokenizer not in TOKENIZERS:
            raise typer.BadParameter(f"must be one of: {', '.join(TOKENIZERS)}", param_hint="--tokenizer")
        config.tokenizer = tokenizer
    if timeout is not None:
        config.stdin_timeout = timeout
    return config


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    mode: Annotated[
        DisplayMode, typer.Option("--mode", "-m", help="Display mode (verbose, compact, custom)")
    ] = DisplayMode.verbose,
    compact: Annotated[bool, typer.Option("--compact", "-c", help="Shorthand for --mode compact")] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Shorthand for --mode verbose")] = False,
    template: Annotated[
        str | None,
        typer.Option(
            "--format",
            "-f",
            help="Custom template (implies --mode custom). Variables: %context% %percent% "
            "%remaining% %session% %time% %last% %project% %model% %message% %style%",
        ),
    ] = None,
    tokenizer: Annotated[
        str | None, typer.Option("--tokenizer", help="Transcript tokenizer (bytes, tiktoken)")
    ] = None,
    timeout: Annotated[
        float | None, typer.Option("--timeout", help="Seconds to wait for the JSON payload on stdin")
    ] = None,
    debug: Annotated[bool, typer.Option("--debug", help="Log diagnostics to stderr")] = False,
    version: Annotated[
        bool | None,
        typer.Option("--version", "-V", callback=version_callback, is_eager=True),
    ] = None,
) -> None:
    """Print the status line for the current Claude Code session."""
    setup_logging(debug)
    ctx.obj = _load_config(tokenizer, timeout)
    if ctx.invoked_subcommand is not None:
        return

    from cc_statusline.payload import parse_payload, read_stdin
    from cc_statusline.status import render_status_line

    if template is not None:
        mode = DisplayMode.custom
    elif compact:
        mode = DisplayMode.compact
    elif verbose:
        mode = DisplayMode.verbose

    config: StatusConfig = ctx.obj
    payload = parse_payload(read_stdin(sys.stdin, config.stdin_timeout))
    line = render_status_line(payload, config, mode=mode, template=template or DEFAULT_TEMPLATE)
    make_console().print(line)


@app.command()
def breakdown(ctx: typer.Context) -> None:
    """Show how the context estimate was put together."""
    from cc_statusline.payload import parse_payload, read_stdin
    from cc_statusline.status import collect_status

    config: StatusConfig = ctx.obj
    payload = parse_payload(read_stdin(sys.stdin, config.stdin_timeout))
    status = collect_status(payload, config)

    transcript = escape(str(status.transcript_path)) if status.transcript_path else "[yellow]not found[/yellow]"
    console.print(f"Transcript: {transcript}", soft_wrap=True)
    console.print(f"Model: {status.model_name}")
    console.print(f"Project: {status.project_name}")

    if status.overhead is not None:
        table = Table(title="Overhead", show_header=True)
        table.add_column("Component")
        table.add_column("Tokens", justify="right")
        table.add_row("System prompt", f"{status.overhead.system_prompt:,}")
        table.add_row("System tools", f"{status.overhead.system_tools:,}")
        table.add_row(f"MCP ({status.overhead.mcp_matches} matches)", f"{status.overhead.mcp:,}")
        table.add_row("Memory files", f"{status.overhead.memory:,}")
        table.add_row("Settings files", f"{status.overhead.settings:,}")
        table.add_row("[bold]Total[/bold]", f"[bold]{status.overhead.total:,}[/bold]")
        console.print(table)

    estimate = status.estimate
    if estimate is None:
        console.print("[yellow]Context usage not available[/yellow]")
    else:
        console.print(
            f"Context: {estimate.consumed_tokens:,} / {estimate.capacity:,} tokens "
            f"({estimate.percent}%, {estimate.remaining:,} remaining, source: {estimate.source})",
            soft_wrap=True,
        )
    console.print(f"Last message: {status.last_message.origin}, {status.elapsed}s ago")


if __name__ == "__main__":
    app()
