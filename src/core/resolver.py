"""Resolución de depots de un producto.

Un depot es resoluble si tiene ramas de manifest, bien declaradas en el
propio producto o en otro producto indicado por `depotfromapp`. La
indirección se sigue exactamente un salto.
"""

from __future__ import annotations

import logging
from typing import Callable

from core.domain.models import DepotDefinition, ProductRecord, ResolvedDepot
from core.interfaces.session import ProductCatalog

logger = logging.getLogger(__name__)


class DepotResolver:
    """Enumera los depots resolubles de un producto, en orden del árbol."""

    def __init__(self, *, notice: Callable[[str], None] | None = None) -> None:
        self._notice = notice

    async def resolve(self, product: ProductRecord, catalog: ProductCatalog) -> list[ResolvedDepot]:
        resolved: list[ResolvedDepot] = []
        for definition in product.depots or ():
            depot = await self._resolve_one(product, definition, catalog)
            if depot is not None:
                resolved.append(depot)
        return resolved

    async def _resolve_one(
        self,
        product: ProductRecord,
        definition: DepotDefinition,
        catalog: ProductCatalog,
    ) -> ResolvedDepot | None:
        depot_id = definition.depot_id
        if depot_id is None:
            return None

        if definition.manifests is not None:
            return ResolvedDepot(
                depot_id=depot_id,
                product_id=product.product_id,
                source_product_id=product.product_id,
                branches=definition.manifests,
            )

        target_id = definition.depot_from_app
        if target_id is None:
            # Depot sin contenido distribuible (herramientas, futuros).
            return None

        if target_id == product.product_id:
            self._emit(
                f"App {product.product_id}, Depot {depot_id} has depotfromapp of {target_id}!"
            )
            return None

        await catalog.fetch_product_metadata({target_id})
        target = catalog.metadata_of(target_id)
        if target is None:
            logger.debug("depotfromapp target %s of depot %s not returned", target_id, depot_id)
            return None

        target_definition = target.depot(depot_id)
        if target_definition is None or target_definition.manifests is None:
            return None

        return ResolvedDepot(
            depot_id=depot_id,
            product_id=product.product_id,
            source_product_id=target_id,
            branches=target_definition.manifests,
        )

    def _emit(self, message: str) -> None:
        logger.warning(message)
        if self._notice:
            self._notice(message)
