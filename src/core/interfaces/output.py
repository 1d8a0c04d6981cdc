"""Contrato de salida del dump.

El Core emite registros; el adaptador decide el formato y el destino
(ficheros de texto por cuenta o por app).
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from core.domain.models import ManifestBranch


@runtime_checkable
class DumpSink(Protocol):
    def write_entitlement(self, entitlement_id: int, token: int | None) -> None:
        ...

    def write_product(self, product_id: int, token: int) -> None:
        ...

    def write_key(self, depot_id: int, key: bytes) -> None:
        ...

    def write_product_name(self, product_id: int, name: str) -> None:
        ...

    def write_depot_name(self, depot_id: int, *, note: str | None = None) -> None:
        ...

    def write_branch(self, branch: ManifestBranch) -> None:
        ...
