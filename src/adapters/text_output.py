"""Exportación a ficheros de texto.

Por qué texto plano:
- Son los artefactos que consumen otras herramientas (una línea por registro,
  separador `;`), sin formato binario ni versiones.

Un writer agrupa hasta cuatro streams: packages, apps (tokens), keys y el
índice de nombres. Los ficheros se abren al escribir la primera línea, así
una ejecución sin resultados no deja ficheros vacíos.
"""

from __future__ import annotations

from contextlib import ExitStack
from pathlib import Path
from typing import Callable, TextIO

from core.domain.models import ManifestBranch, format_key_hex

StreamFactory = Callable[[], TextIO]


def entitlement_line(entitlement_id: int, token: int | None) -> str:
    return f"{entitlement_id};{token if token is not None else 0}"


def product_line(product_id: int, token: int) -> str:
    return f"{product_id};{token}"


def key_line(depot_id: int, key: bytes) -> str:
    return f"{depot_id};{format_key_hex(key)}"


def product_name_line(product_id: int, name: str) -> str:
    return f"{product_id} - {name}"


def depot_name_line(depot_id: int, note: str | None = None) -> str:
    if note:
        return f"\t{depot_id} ({note})"
    return f"\t{depot_id}"


def branch_line(branch: ManifestBranch) -> str:
    return f"\t\t{branch.name} - {branch.gid}"


class TextDumpWriter:
    """`DumpSink` que escribe una línea por registro en cada stream."""

    def __init__(
        self,
        *,
        products: StreamFactory,
        keys: StreamFactory,
        names: StreamFactory,
        entitlements: StreamFactory | None = None,
    ) -> None:
        self._factories: dict[str, StreamFactory | None] = {
            "entitlements": entitlements,
            "products": products,
            "keys": keys,
            "names": names,
        }
        self._streams: dict[str, TextIO] = {}
        self._stack = ExitStack()

    def __enter__(self) -> "TextDumpWriter":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._stack.close()
        self._streams.clear()

    def write_entitlement(self, entitlement_id: int, token: int | None) -> None:
        self._write("entitlements", entitlement_line(entitlement_id, token))

    def write_product(self, product_id: int, token: int) -> None:
        self._write("products", product_line(product_id, token))

    def write_key(self, depot_id: int, key: bytes) -> None:
        self._write("keys", key_line(depot_id, key))

    def write_product_name(self, product_id: int, name: str) -> None:
        self._write("names", product_name_line(product_id, name))

    def write_depot_name(self, depot_id: int, *, note: str | None = None) -> None:
        self._write("names", depot_name_line(depot_id, note))

    def write_branch(self, branch: ManifestBranch) -> None:
        self._write("names", branch_line(branch))

    def _write(self, stream: str, line: str) -> None:
        handle = self._streams.get(stream)
        if handle is None:
            factory = self._factories[stream]
            if factory is None:
                return
            handle = self._stack.enter_context(factory())
            self._streams[stream] = handle
        handle.write(line + "\n")
        # AutoFlush: cada línea llega a disco al escribirse.
        handle.flush()


def _file_factory(path: Path) -> StreamFactory:
    def _open() -> TextIO:
        path.parent.mkdir(parents=True, exist_ok=True)
        return path.open("w", encoding="utf-8", newline="\n")

    return _open


def open_account_writer(output_dir: Path, account: str) -> TextDumpWriter:
    """Ficheros `<account>_pkgs/apps/keys/appnames.txt`."""

    return TextDumpWriter(
        entitlements=_file_factory(output_dir / f"{account}_pkgs.txt"),
        products=_file_factory(output_dir / f"{account}_apps.txt"),
        keys=_file_factory(output_dir / f"{account}_keys.txt"),
        names=_file_factory(output_dir / f"{account}_appnames.txt"),
    )


def open_product_writer(output_dir: Path, product_id: int) -> TextDumpWriter:
    """Ficheros `app_<id>_token/keys/names.txt` (sin fichero de packages)."""

    return TextDumpWriter(
        products=_file_factory(output_dir / f"app_{product_id}_token.txt"),
        keys=_file_factory(output_dir / f"app_{product_id}_keys.txt"),
        names=_file_factory(output_dir / f"app_{product_id}_names.txt"),
    )
