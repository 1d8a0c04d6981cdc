"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio
import importlib.util
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from adapters.http_client import build_async_client
from adapters.known_depots import fetch_existing_depot_ids
from core.config import AppSettings, save_user_settings
from core.errors import FilterServiceUnavailable

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


async def _check_http(url: str, settings: AppSettings) -> tuple[bool, str]:
    try:
        async with build_async_client(settings) as client:
            response = await client.get(url)
        return True, f"HTTP {response.status_code}"
    except Exception as exc:
        return False, str(exc)


async def _check_known_depots(api_key: str, settings: AppSettings) -> tuple[bool, str]:
    try:
        depot_ids = await fetch_existing_depot_ids(api_key, settings=settings)
    except FilterServiceUnavailable as exc:
        return False, str(exc)
    return True, f"{len(depot_ids)} depot IDs"


def _check_output_dir(path: Path) -> tuple[bool, str]:
    """Attempt to create and remove a file in the output directory."""

    try:
        path.mkdir(parents=True, exist_ok=True)
        marker = path / ".depot-dumper-doctor"
        marker.write_text("ok\n", encoding="utf-8")
        marker.unlink()
        return True, str(path.resolve())
    except OSError as exc:
        return False, str(exc)


@app.command()
def run() -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()

    table = Table(title="depot-dumper Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    # Live sessions
    if importlib.util.find_spec("steam") is not None:
        table.add_row("steam package", "OK", "Live sessions available")
    else:
        table.add_row("steam package", "OPTIONAL", "Not installed -> only --snapshot sessions")

    # Known-depot API
    if settings.known_depots_api_key:
        ok_api, detail_api = asyncio.run(_check_known_depots(settings.known_depots_api_key, settings))
        table.add_row("Known-depot API", "OK" if ok_api else "FAIL", detail_api)
    else:
        ok_http, detail_http = asyncio.run(_check_http(settings.known_depots_url, settings))
        table.add_row("Known-depot API", "OPTIONAL", f"No key set ({detail_http if ok_http else 'unreachable'})")

    ok_out, detail_out = _check_output_dir(settings.output_dir)
    table.add_row("Output dir", "OK" if ok_out else "FAIL", detail_out)

    _console.print(table)

    if not ok_out:
        _console.print("\n[yellow]Note:[/yellow] Set DEPOT_DUMPER_OUTPUT_DIR or pass --output-dir.")


@app.command(name="setup-api")
def setup_api() -> None:
    """Interactive known-depot API setup (stores config in the user config .env)."""

    settings = AppSettings()
    url = typer.prompt("Known-depot API URL", default=settings.known_depots_url, show_default=True).strip()
    api_key = typer.prompt("API key", hide_input=True, confirmation_prompt=False).strip()

    if not url or not api_key:
        raise typer.BadParameter("url and api key are required")

    env_path = save_user_settings(
        {
            "known_depots_url": url,
            "known_depots_api_key": api_key,
        }
    )

    _console.print(f"[green]Saved API config to:[/green] {env_path}")
