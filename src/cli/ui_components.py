"""CLI UI components (Rich).

Why separate components:
- Keeps command logic apart from visual details.
- The results table and errors panel are shared by `check` and tests.
"""

from __future__ import annotations

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.models import PLACEHOLDER, LookupFailure, RunSnapshot


def print_banner(console: Console) -> None:
    """Print the welcome banner.

    Can be turned off for non-interactive use (JSON/pipelines).
    """

    title = Text("DODOBOX", style="bold cyan")
    subtitle = Text("Batch IPv4 reputation checks", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def _score_style(score: int | None) -> str:
    if score is None:
        return "dim"
    if score >= 75:
        return "bold red"
    if score >= 25:
        return "yellow"
    return "green"


def build_outcomes_table(snapshot: RunSnapshot) -> Table:
    """One row per outcome, in extraction order."""

    table = Table(title=f"Results ({snapshot.completed}/{snapshot.total})")
    table.add_column("#", style="dim", justify="right")
    table.add_column("IP Address", style="cyan", no_wrap=True)
    table.add_column("Abuse Score", justify="right")
    table.add_column("Country", style="white")
    table.add_column("ISP", style="white")
    table.add_column("Domain", style="magenta")

    for position, outcome in enumerate(snapshot.outcomes, start=1):
        if isinstance(outcome, LookupFailure):
            table.add_row(
                str(position),
                Text(outcome.ip_address),
                PLACEHOLDER,
                PLACEHOLDER,
                Text(f"Error: {outcome.reason}", style="red"),
                PLACEHOLDER,
            )
            continue
        record = outcome.record
        table.add_row(
            str(position),
            Text(record.ip_address),
            Text(record.score_label, style=_score_style(record.abuse_confidence_score)),
            Text(record.country_name),
            Text(record.isp),
            Text(record.domain),
        )
    return table


def build_errors_panel(errors: tuple[str, ...] | list[str]) -> Panel:
    body = Text()
    for message in errors:
        body.append(f"- {message}\n")
    return Panel(body, title=Text("Errors", style="bold red"), border_style="red")
