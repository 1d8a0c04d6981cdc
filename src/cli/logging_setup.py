"""Logging de la CLI (Rich).

El Core y los adaptadores solo usan `logging.getLogger(__name__)`; aquí se
decide nivel y formato una única vez por proceso.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler


def configure_logging(level: str = "INFO", *, console: Console | None = None) -> None:
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
        markup=False,
    )
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[handler],
        force=True,
    )
    # httpx registra cada request en INFO.
    logging.getLogger("httpx").setLevel(logging.WARNING)
