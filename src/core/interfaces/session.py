"""Contrato de la sesión/catálogo de Steam.

Por qué Protocol:
- El Core no establece conexiones ni conoce el protocolo CM; solo consume
  esta capacidad (licencias, metadatos PICS, tokens y claves de depot).
- Permite intercambiar la sesión live (`steam`) por una offline basada en
  snapshot, y testear el Core con dobles en memoria.
"""

from __future__ import annotations

from typing import Iterable, Protocol, runtime_checkable

from core.domain.models import Entitlement, ProductRecord


@runtime_checkable
class ProductCatalog(Protocol):
    """Subconjunto que necesita el resolver para seguir indirecciones."""

    async def fetch_product_metadata(self, product_ids: Iterable[int]) -> None:
        """Solicita (en bloque) los metadatos de productos para `metadata_of`."""

        ...

    def metadata_of(self, product_id: int) -> ProductRecord | None:
        """Metadatos ya obtenidos del producto, o `None` si el catálogo no lo devolvió."""

        ...


@runtime_checkable
class SteamSession(ProductCatalog, Protocol):
    """Sesión autenticada completa.

    Reglas de diseño:
    - Todo método que hace I/O es asíncrono; el Core los espera de uno en uno.
    - Las ausencias (producto desconocido, clave denegada) se devuelven como
      `None`, nunca como excepción. Solo `login` falla con `CredentialFailure`.
    """

    account_name: str

    async def login(self) -> None:
        ...

    async def licenses(self) -> list[int]:
        """Ids de package poseídos, sin duplicados y en orden de la cuenta."""

        ...

    async def fetch_entitlement_metadata(self, entitlement_ids: Iterable[int]) -> None:
        ...

    def entitlements(self) -> list[Entitlement]:
        """Licencias cuyos metadatos devolvió el catálogo."""

        ...

    def product_token(self, product_id: int) -> int | None:
        ...

    def entitlement_token(self, entitlement_id: int) -> int | None:
        ...

    async def fetch_depot_key(self, depot_id: int, owning_product_id: int) -> bytes | None:
        ...

    async def close(self) -> None:
        ...
