"""Filtro por estado de lanzamiento (`common/ReleaseState`)."""

from __future__ import annotations

from core.domain.models import ProductRecord

RELEASED = "released"


def admit(product: ProductRecord, allow_unreleased: bool) -> bool:
    """Indica si el producto entra en el dump.

    Sin campo de estado se asume publicado; con `allow_unreleased` todo pasa.
    """

    if allow_unreleased or product.release_state is None:
        return True
    return product.release_state == RELEASED
