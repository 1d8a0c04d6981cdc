"""CLI principal (Typer).

Por qué la CLI es fina:
- Solo traduce flags a `DumpRequest`, elige la sesión (snapshot o live) y
  los ficheros de salida, y presenta el resumen.
- La lógica de resolución y deduplicación vive en `core.services.dump_pipeline`.
"""

from __future__ import annotations

import asyncio
from dataclasses import replace
from pathlib import Path
from typing import Callable, Optional

import typer
from rich.console import Console

from adapters.known_depots import fetch_existing_depot_ids
from adapters.snapshot_session import SnapshotSession
from adapters.steam_session import LiveSteamSession
from adapters.text_output import open_account_writer, open_product_writer
from cli import doctor
from cli.logging_setup import configure_logging
from cli.ui_components import build_products_table, build_summary_panel, print_banner
from core.config import AppSettings
from core.domain.models import DumpSummary
from core.errors import CredentialFailure, DumpAborted, FilterServiceUnavailable
from core.interfaces.session import SteamSession
from core.services.dump_pipeline import (
    DumpHooks,
    DumpRequest,
    dump_account,
    dump_single_product,
)
from core.services.known_depots import ContinueDecision, FetchKnownDepots, load_existing_depots

app = typer.Typer(no_args_is_help=True, help="Dump depot decryption keys for an account.")
app.add_typer(doctor.app, name="doctor")

_console = Console()


async def run_dump(
    *,
    open_session: Callable[[], SteamSession],
    settings: AppSettings,
    request: DumpRequest,
    api_key: str | None,
    decide: ContinueDecision,
    output_dir: Path,
    hooks: DumpHooks | None = None,
    fetch: FetchKnownDepots | None = None,
) -> DumpSummary:
    """Filtro remoto → sesión y login → dump en el modo que indique `request`.

    La sesión se construye después de la consulta de depots conocidos, así
    el operador decide continuar o abortar antes de introducir credenciales.
    """

    async def _fetch(key: str) -> frozenset[int]:
        return await fetch_existing_depot_ids(key, settings=settings)

    existing = await load_existing_depots(api_key=api_key, fetch=fetch or _fetch, decide=decide)
    request = replace(request, existing_depots=existing)

    session = open_session()
    await session.login()
    try:
        if request.target_product_id is None:
            with open_account_writer(output_dir, session.account_name) as sink:
                return await dump_account(session=session, sink=sink, request=request, hooks=hooks)
        with open_product_writer(output_dir, request.target_product_id) as sink:
            return await dump_single_product(session=session, sink=sink, request=request, hooks=hooks)
    finally:
        await session.close()


def _session_factory(
    *,
    snapshot: Path | None,
    username: str | None,
    auth_code: str | None,
    two_factor_code: str | None,
    settings: AppSettings,
) -> Callable[[], SteamSession]:
    if snapshot is not None:
        return lambda: SnapshotSession(path=snapshot)

    if not username or not username.strip():
        raise typer.BadParameter(
            "Username is required (or use --snapshot). Anonymous login is not supported."
        )

    def _open_live() -> SteamSession:
        password = ""
        while not password:
            password = typer.prompt("Password", hide_input=True, default="", show_default=False)
        return LiveSteamSession(
            username=username.strip(),
            password=password,
            settings=settings,
            auth_code=auth_code,
            two_factor_code=two_factor_code,
        )

    return _open_live


def _prompt_continue(exc: FilterServiceUnavailable) -> bool:
    _console.print(f"[yellow]Failed to fetch depot IDs from API:[/yellow] {exc}")
    return typer.confirm("Continue dumping without API key filtering?", default=False)


@app.command()
def dump(
    snapshot: Optional[Path] = typer.Option(
        None, "--snapshot", exists=True, dir_okay=False, help="Offline session snapshot (JSON)."
    ),
    username: Optional[str] = typer.Option(None, "--username", "-u", help="Steam account name."),
    auth_code: Optional[str] = typer.Option(None, "--auth-code", help="Steam Guard email code."),
    two_factor_code: Optional[str] = typer.Option(None, "--2fa", help="Steam Guard mobile code."),
    app_id: Optional[int] = typer.Option(None, "--app", min=0, help="Dump a single app only."),
    dump_unreleased: Optional[bool] = typer.Option(
        None, "--dump-unreleased/--skip-unreleased", help="Include apps that are not released."
    ),
    api_key: Optional[str] = typer.Option(None, "--apikey", help="Known-depot API key (enables filtering)."),
    output_dir: Optional[Path] = typer.Option(None, "--output-dir", "-o", file_okay=False),
    continue_without_filter: bool = typer.Option(
        False, "--continue-without-filter", help="Do not ask when the known-depot API fails."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
    no_banner: bool = typer.Option(False, "--no-banner"),
) -> None:
    """Dump depot keys for every owned app, or for a single `--app`."""

    settings = AppSettings()
    configure_logging("DEBUG" if verbose else settings.log_level)
    if not no_banner:
        print_banner(_console)

    open_session = _session_factory(
        snapshot=snapshot,
        username=username,
        auth_code=auth_code,
        two_factor_code=two_factor_code,
        settings=settings,
    )
    request = DumpRequest(
        target_product_id=app_id,
        allow_unreleased=settings.dump_unreleased if dump_unreleased is None else dump_unreleased,
    )
    decide: ContinueDecision = (lambda _exc: True) if continue_without_filter else _prompt_continue
    hooks = DumpHooks(notice=lambda message: _console.print(f"[yellow]{message}[/yellow]"))

    try:
        summary = asyncio.run(
            run_dump(
                open_session=open_session,
                settings=settings,
                request=request,
                api_key=api_key or settings.known_depots_api_key,
                decide=decide,
                output_dir=output_dir or settings.output_dir,
                hooks=hooks,
            )
        )
    except CredentialFailure as exc:
        _console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1) from exc
    except DumpAborted as exc:
        _console.print("Exiting...")
        raise typer.Exit(code=1) from exc

    if summary.products:
        _console.print(build_products_table(summary))
    _console.print(build_summary_panel(summary))


def run() -> None:
    app()


if __name__ == "__main__":
    run()
