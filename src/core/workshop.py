"""Depot de workshop de un producto (`depots/workshopdepot`)."""

from __future__ import annotations

from core.domain.models import ProductRecord


def resolve_workshop(product: ProductRecord) -> int | None:
    """Id del depot de workshop, o `None` si falta o es 0.

    No se valida propiedad ni manifests: poseer el producto implica poseer
    su workshop, y la plataforma no publica manifests para este depot.
    """

    depot_id = product.workshop_depot_id
    if not depot_id:
        return None
    return depot_id
