"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Permite reutilizar tablas/paneles en múltiples comandos.
"""

from __future__ import annotations

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.models import ProbeResult, ResolutionResult, ResolutionState
from core.services.candidates import CandidateStrategy


def print_banner(console: Console) -> None:
    """Imprime el banner de bienvenida.

    Se omite en modos no interactivos (--json).
    """

    title = Text("shardfix", style="bold cyan")
    subtitle = Text("Mirror discovery for broken shard images", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def build_candidates_table(candidates: list[tuple[str, CandidateStrategy]]) -> Table:
    table = Table(title="Candidates (probe order)")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Strategy", style="cyan", no_wrap=True)
    table.add_column("URL", style="magenta")
    for index, (url, strategy) in enumerate(candidates, start=1):
        table.add_row(str(index), strategy.value, url)
    return table


def _outcome_cell(probe: ProbeResult) -> Text:
    if probe.ok:
        return Text(f"ok ({probe.width}px)", style="green")
    return Text(probe.reason.value if probe.reason else "fail", style="red")


def build_attempts_table(result: ResolutionResult) -> Table:
    table = Table(title="Probes")
    table.add_column("#", style="dim", justify="right")
    table.add_column("URL", style="magenta")
    table.add_column("Outcome", no_wrap=True)
    table.add_column("Time", style="dim", justify="right")
    table.add_column("Detail", style="dim")
    for index, probe in enumerate(result.attempts, start=1):
        table.add_row(
            str(index),
            probe.url,
            _outcome_cell(probe),
            f"{probe.elapsed_seconds:.2f}s",
            probe.detail or "",
        )
    return table


def build_resolution_panel(result: ResolutionResult) -> Panel:
    body = Text()
    body.append("Original: ", style="bold")
    body.append(result.original_url + "\n")
    if result.state is ResolutionState.RESOLVED:
        body.append("Mirror:   ", style="bold")
        body.append(str(result.resolved_url), style="green")
        border = "green"
    elif not result.parsed:
        body.append("Not a shard URL; nothing to try.", style="yellow")
        border = "yellow"
    else:
        body.append(
            f"No working mirror among {len(result.candidates)} candidates.",
            style="red",
        )
        border = "red"
    return Panel(body, title=Text(result.state.value, style="bold"), border_style=border)
