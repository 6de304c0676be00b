"""dodobox CLI (Typer + Rich).

The CLI is only the input source and the render sink: it reads text, shows a
progress bar fed by per-group snapshots, then prints the results table.
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import Optional

import structlog
import typer
from rich.console import Console
from rich.markup import escape
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TaskProgressColumn, TextColumn
from rich.text import Text

from adapters.json_exporter import export_run_json
from adapters.reputation_sources import build_lookup_client
from cli import doctor
from cli.ui_components import build_errors_panel, build_outcomes_table, print_banner
from core.config import AppSettings, LookupProvider
from core.domain.models import RunSnapshot
from core.logging_setup import configure_logging
from core.services.batch_runner import BatchHooks, check_text

app = typer.Typer(
    no_args_is_help=True,
    help="Extract IPv4 addresses from text and check their abuse reputation.",
)
app.add_typer(doctor.app, name="doctor")

_console = Console()
logger = structlog.get_logger(__name__)


def _read_input(source: Optional[Path]) -> str:
    if source is None or str(source) == "-":
        return sys.stdin.read()
    if not source.exists():
        raise typer.BadParameter(f"file not found: {source}", param_hint="INPUT")
    return source.read_text(encoding="utf-8", errors="replace")


async def _run_check(*, text: str, settings: AppSettings, show_progress: bool) -> RunSnapshot:
    progress = Progress(
        TextColumn("[cyan]Checking"),
        BarColumn(),
        TaskProgressColumn(),
        MofNCompleteColumn(),
        console=_console,
        transient=True,
        disable=not show_progress,
    )
    task_id = progress.add_task("check", total=None)

    def on_snapshot(snapshot: RunSnapshot) -> None:
        progress.update(task_id, total=snapshot.total, completed=snapshot.completed)

    async with build_lookup_client(settings) as lookup:
        with progress:
            return await check_text(
                text=text,
                lookup=lookup,
                settings=settings,
                hooks=BatchHooks(snapshot=on_snapshot),
            )


@app.command()
def check(
    source: Optional[Path] = typer.Argument(
        None,
        metavar="INPUT",
        help="Text file to scan for IPv4 addresses ('-' or omitted: stdin).",
    ),
    batch_size: Optional[int] = typer.Option(
        None, "--batch-size", "-b", min=1, max=100, help="Concurrent lookups per group."
    ),
    delay_ms: Optional[int] = typer.Option(
        None, "--delay-ms", min=0, help="Pause between groups (milliseconds)."
    ),
    endpoint: Optional[str] = typer.Option(None, "--endpoint", help="Check endpoint URL."),
    provider: Optional[LookupProvider] = typer.Option(
        None, "--provider", case_sensitive=False, help="Lookup provider."
    ),
    json_path: Optional[Path] = typer.Option(
        None, "--json", help="Also write the final results to this JSON file."
    ),
    no_banner: bool = typer.Option(False, "--no-banner", help="Do not print the banner."),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Log level (stderr)."),
) -> None:
    """Check every IPv4 address found in INPUT."""

    overrides: dict[str, object] = {}
    if batch_size is not None:
        overrides["batch_size"] = batch_size
    if delay_ms is not None:
        overrides["batch_delay_ms"] = delay_ms
    if endpoint:
        overrides["lookup_endpoint"] = endpoint
    if provider is not None:
        overrides["provider"] = provider
    if log_level:
        overrides["log_level"] = log_level
    settings = AppSettings().model_copy(update=overrides)

    configure_logging(settings.log_level, json_logs=settings.log_json)

    if not no_banner:
        print_banner(_console)

    text = _read_input(source)

    try:
        snapshot = asyncio.run(
            _run_check(text=text, settings=settings, show_progress=_console.is_terminal)
        )
    except ValueError as exc:
        # missing API key and similar provider configuration problems
        raise typer.BadParameter(str(exc)) from exc

    if snapshot.total == 0:
        for message in snapshot.errors:
            _console.print(Text(message, style="yellow"))
        raise typer.Exit(code=1)

    _console.print(build_outcomes_table(snapshot))
    if snapshot.errors:
        _console.print(build_errors_panel(snapshot.errors))

    if json_path:
        out = export_run_json(snapshot=snapshot, output_path=json_path)
        _console.print(f"[green]JSON written to:[/green] {escape(str(out))}")

    logger.info("cli.check_done", total=snapshot.total, errors=len(snapshot.errors))


def run() -> None:
    app()


if __name__ == "__main__":
    run()
