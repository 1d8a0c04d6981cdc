"""Propiedad de depots/apps a partir de las licencias de la cuenta.

Regla de la plataforma que se conserva tal cual:
- Un id es "poseído" si aparece en los `depotids` **o** en los `appids` de
  cualquier licencia. Poseer una app con el mismo id numérico que un depot
  cuenta como poseer ese depot.
"""

from __future__ import annotations

from typing import Iterable

from core.domain.models import Entitlement


def is_owned(item_id: int, entitlements: Iterable[Entitlement]) -> bool:
    for entitlement in entitlements:
        if item_id in entitlement.depot_ids or item_id in entitlement.product_ids:
            return True
    return False


class OwnershipIndex:
    """Vista de solo lectura sobre las licencias de una ejecución.

    Precalcula la unión de ids para que cada consulta sea O(1); el resultado
    es idéntico a `is_owned` sobre las mismas licencias.
    """

    def __init__(self, entitlements: Iterable[Entitlement]) -> None:
        self._entitlements = tuple(entitlements)
        owned: set[int] = set()
        for entitlement in self._entitlements:
            owned.update(entitlement.product_ids)
            owned.update(entitlement.depot_ids)
        self._owned = frozenset(owned)

    @property
    def entitlements(self) -> tuple[Entitlement, ...]:
        return self._entitlements

    def is_owned(self, item_id: int) -> bool:
        return item_id in self._owned

    def __len__(self) -> int:
        return len(self._entitlements)
