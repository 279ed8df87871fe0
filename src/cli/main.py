"""CLI de shardfix (Typer + Rich).

La CLI solo orquesta: parseo de argumentos, presentación y ficheros. Toda la
lógica de descubrimiento de mirrors vive en `core.services`.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

import typer
from rich.console import Console

from adapters.html_document import repair_html
from adapters.image_prober import HttpImageProber
from adapters.json_exporter import export_results_json, results_payload
from cli import doctor
from cli.ui_components import (
    build_attempts_table,
    build_candidates_table,
    build_resolution_panel,
    print_banner,
)
from core.config import AppSettings
from core.domain.models import ImageReference, ResolutionState
from core.logging_config import setup_logging
from core.services.candidates import generate_tagged_candidates
from core.services.resolver import MirrorResolver
from core.services.url_parser import parse_reference

app = typer.Typer(
    no_args_is_help=True,
    help="Repair broken shard-hosted image URLs by finding a working mirror.",
)
app.add_typer(doctor.app, name="doctor")

_console = Console()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging."),
) -> None:
    settings = AppSettings()
    setup_logging("DEBUG" if verbose else settings.log_level)


@app.command()
def candidates(url: str = typer.Argument(..., help="Broken image URL.")) -> None:
    """List the mirror candidates for URL, in probe order."""

    parsed = parse_reference(url)
    if parsed is None:
        raise typer.BadParameter("not a shard URL (expected <letters><digits>.<root>.<org|net|to>)")
    tagged = generate_tagged_candidates(parsed, AppSettings())
    _console.print(build_candidates_table(tagged))


@app.command()
def probe(url: str = typer.Argument(..., help="Image URL to probe.")) -> None:
    """Probe a single URL as an image."""

    settings = AppSettings()
    result = asyncio.run(HttpImageProber(settings).probe(url))
    if result.ok:
        _console.print(f"[green]ok[/green] {url} ({result.width}px, {result.elapsed_seconds:.2f}s)")
        return
    _console.print(f"[red]{result.reason.value}[/red] {url} {result.detail or ''}")
    raise typer.Exit(code=1)


@app.command()
def resolve(
    url: str = typer.Argument(..., help="Broken image URL."),
    srcset: str | None = typer.Option(None, "--srcset", help="Companion srcset to rewrite."),
    as_json: bool = typer.Option(False, "--json", help="Print the result as JSON."),
) -> None:
    """Find a working mirror for URL."""

    settings = AppSettings()
    resolver = MirrorResolver(HttpImageProber(settings), settings)
    reference = ImageReference(current_url=url, descriptor=srcset)
    result = asyncio.run(resolver.fix(reference))

    if as_json:
        payload = results_payload([result])[0]
        payload["descriptor"] = reference.descriptor
        typer.echo(json.dumps(payload, ensure_ascii=False, indent=2))
    else:
        print_banner(_console)
        if result.attempts:
            _console.print(build_attempts_table(result))
        _console.print(build_resolution_panel(result))
        if srcset and result.state is ResolutionState.RESOLVED:
            _console.print(f"[bold]srcset:[/bold] {reference.descriptor}")

    if result.state is not ResolutionState.RESOLVED:
        raise typer.Exit(code=1)


@app.command(name="fix-html")
def fix_html(
    input_path: Path = typer.Argument(..., exists=True, dir_okay=False, help="HTML document."),
    output: Path | None = typer.Option(None, "--output", "-o", help="Where to write the fixed HTML."),
    json_report: Path | None = typer.Option(None, "--json-report", help="Write resolution details as JSON."),
) -> None:
    """Repair broken shard images in an HTML document."""

    settings = AppSettings()
    html = input_path.read_text(encoding="utf-8")
    repair = asyncio.run(repair_html(html, prober=HttpImageProber(settings), settings=settings))

    target = output or input_path
    target.write_text(repair.html, encoding="utf-8")
    if json_report:
        export_results_json(results=repair.results, output_path=json_report)

    _console.print(
        f"{len(repair.references)} images, {len(repair.broken)} broken, "
        f"[green]{len(repair.fixed)} fixed[/green] -> {target}"
    )
    for ref in repair.broken:
        if ref not in repair.fixed:
            _console.print(f"[yellow]unresolved:[/yellow] {ref.current_url}")


def run() -> None:
    app()
