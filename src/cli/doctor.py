"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from adapters.reputation_sources import build_lookup_client
from core.config import AppSettings, LookupProvider, write_user_env_vars
from core.domain.models import LookupSuccess

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()

# Public resolver address, used only to probe the configured provider.
_PROBE_IP = "8.8.8.8"


async def _check_lookup(settings: AppSettings) -> tuple[bool, str]:
    try:
        async with build_lookup_client(settings) as lookup:
            outcome = await lookup.lookup(_PROBE_IP)
    except ValueError as exc:
        return False, str(exc)
    if isinstance(outcome, LookupSuccess):
        return True, f"{_PROBE_IP} -> score {outcome.record.score_label}"
    return False, outcome.reason


@app.command()
def run() -> None:
    """Show the effective configuration and probe the lookup provider."""

    settings = AppSettings()

    table = Table(title="dodobox Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    table.add_row("Batch size", "OK", str(settings.batch_size))
    table.add_row("Batch delay", "OK", f"{settings.batch_delay_ms} ms")
    table.add_row("Provider", "OK", settings.provider.value)
    if settings.provider is LookupProvider.ENDPOINT:
        table.add_row("Endpoint", "OK", Text(settings.lookup_endpoint))
    elif settings.abuseipdb_api_key:
        table.add_row("AbuseIPDB key", "OK", settings.abuseipdb_base_url)
    else:
        table.add_row("AbuseIPDB key", "MISSING", "Run `dodobox doctor setup`")

    ok_lookup, detail_lookup = asyncio.run(_check_lookup(settings))
    table.add_row("Lookup probe", "OK" if ok_lookup else "FAIL", Text(detail_lookup))

    _console.print(table)


@app.command(name="setup")
def setup() -> None:
    """Interactive provider setup (stored in the user config .env)."""

    provider = typer.prompt(
        "Lookup provider (endpoint/abuseipdb)",
        default=LookupProvider.ENDPOINT.value,
        show_default=True,
    ).strip().lower()

    values: dict[str, str] = {}
    if provider == LookupProvider.ABUSEIPDB.value:
        api_key = typer.prompt("AbuseIPDB API key", hide_input=True).strip()
        if not api_key:
            raise typer.BadParameter("API key is required for abuseipdb")
        values["DODOBOX_ABUSEIPDB_API_KEY"] = api_key
    elif provider == LookupProvider.ENDPOINT.value:
        endpoint = typer.prompt(
            "Check endpoint URL",
            default=AppSettings().lookup_endpoint,
            show_default=True,
        ).strip()
        values["DODOBOX_LOOKUP_ENDPOINT"] = endpoint
    else:
        raise typer.BadParameter(f"unknown provider: {provider}")

    values["DODOBOX_PROVIDER"] = provider
    env_path = write_user_env_vars(values)
    _console.print(f"[green]Saved config to:[/green] {escape(str(env_path))}")
