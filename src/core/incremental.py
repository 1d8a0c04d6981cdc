"""Filtro incremental contra depots ya registrados externamente.

Por qué existe:
- Pedir una clave de depot es una operación sensible y limitada por la
  plataforma; si el sistema de destino ya la tiene, no se solicita.
"""

from __future__ import annotations

from enum import Enum
from typing import AbstractSet


class FetchDecision(str, Enum):
    NEEDS_FETCH = "needs_fetch"
    ALREADY_KNOWN = "already_known"


def classify(depot_id: int, existing: AbstractSet[int] | None) -> FetchDecision:
    """Sin conjunto externo el filtro no hace nada."""

    if existing is not None and depot_id in existing:
        return FetchDecision.ALREADY_KNOWN
    return FetchDecision.NEEDS_FETCH
