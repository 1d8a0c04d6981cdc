"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Permite reutilizar tablas/paneles en `dump` y `doctor`.
"""

from __future__ import annotations

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.models import DumpSummary


def print_banner(console: Console) -> None:
    """Imprime el banner de bienvenida."""

    title = Text("depot-dumper", style="bold cyan")
    subtitle = Text("Licencias • Depots • Claves", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def summary_lines(summary: DumpSummary) -> list[str]:
    """Líneas del resumen final (el skipped solo tiene sentido con filtro)."""

    if summary.filter_active:
        return [
            f"Dumped: {summary.dumped} new depot keys",
            f"Skipped: {summary.skipped} depot keys (already in database)",
        ]
    return [f"Dumped: {summary.dumped} depot keys"]


def build_summary_panel(summary: DumpSummary) -> Panel:
    body = Text("\n".join(summary_lines(summary)))
    return Panel(body, title=Text("Summary", style="bold green"), border_style="green")


def build_products_table(summary: DumpSummary) -> Table:
    """Tabla por app, solo con las que aportaron claves o saltos."""

    table = Table(title="Apps")
    table.add_column("App", style="cyan", no_wrap=True)
    table.add_column("Dumped", style="green", justify="right")
    table.add_column("Skipped", style="yellow", justify="right")
    for result in summary.products:
        if not result.dumped and not result.skipped:
            continue
        table.add_row(str(result.product_id), str(result.dumped), str(result.skipped))
    return table
