"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from adapters.http_client import build_async_client
from core.config import AppSettings, write_user_env_vars
from core.services.candidates import split_root_entry

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


async def _check_http(url: str, settings: AppSettings) -> tuple[bool, str]:
    try:
        async with build_async_client(settings) as client:
            response = await client.head(url)
        return True, f"HTTP {response.status_code}"
    except Exception as exc:
        return False, str(exc) or exc.__class__.__name__


async def _check_roots(settings: AppSettings) -> list[tuple[str, bool, str]]:
    roots = [r for r in settings.fallback_roots if split_root_entry(r) is not None]
    checks = await asyncio.gather(*(_check_http(f"https://{root}", settings) for root in roots))
    return [(root, ok, detail) for root, (ok, detail) in zip(roots, checks)]


@app.command()
def run(
    offline: bool = typer.Option(False, "--offline", help="Skip connectivity checks."),
) -> None:
    """Show the effective configuration and reachability of the fallback roots."""

    settings = AppSettings()

    table = Table(title="shardfix Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    table.add_row("Probe timeout", "OK", f"{settings.probe_timeout_seconds}s")
    table.add_row("Candidate cap", "OK", str(settings.max_candidates))
    table.add_row("Shard sweep", "OK", f"0..{settings.max_shard_number}")
    table.add_row("Fallback prefixes", "OK", ", ".join(settings.fallback_prefixes))

    bad_roots = [r for r in settings.fallback_roots if split_root_entry(r) is None]
    if bad_roots:
        table.add_row("Fallback roots", "WARN", "ignored (not label.tld): " + ", ".join(bad_roots))
    else:
        table.add_row("Fallback roots", "OK", ", ".join(settings.fallback_roots))

    if not offline:
        for root, ok, detail in asyncio.run(_check_roots(settings)):
            table.add_row(f"HTTP {root}", "OK" if ok else "FAIL", detail)

    _console.print(table)


@app.command(name="set")
def set_value(
    key: str = typer.Argument(..., help="Setting name, e.g. probe_timeout_seconds."),
    value: str = typer.Argument(..., help="New value (lists as JSON)."),
) -> None:
    """Store a setting in the user config .env."""

    name = key.strip().lower().removeprefix("shardfix_")
    if name not in AppSettings.model_fields:
        raise typer.BadParameter(f"unknown setting: {key}")

    env_path = write_user_env_vars({f"SHARDFIX_{name.upper()}": value})
    _console.print(f"[green]Saved {name} to:[/green] {env_path}")
