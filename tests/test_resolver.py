"""Depot resolution, including single-hop `depotfromapp` indirection."""

from __future__ import annotations

import asyncio
from typing import Iterable

from core.domain.models import DepotDefinition, ManifestBranch, ProductRecord
from core.resolver import DepotResolver

PUBLIC = (ManifestBranch(name="public", gid=55),)


class FakeCatalog:
    def __init__(self, *products: ProductRecord) -> None:
        self._products = {product.product_id: product for product in products}
        self.requested: list[int] = []

    async def fetch_product_metadata(self, product_ids: Iterable[int]) -> None:
        self.requested.extend(product_ids)

    def metadata_of(self, product_id: int) -> ProductRecord | None:
        return self._products.get(product_id)


def _product(product_id: int, *depots: DepotDefinition) -> ProductRecord:
    return ProductRecord(product_id=product_id, token=1, name=f"App {product_id}", depots=depots)


def _resolve(product: ProductRecord, catalog: FakeCatalog, notices: list[str] | None = None):
    resolver = DepotResolver(notice=notices.append if notices is not None else None)
    return asyncio.run(resolver.resolve(product, catalog))


def test_direct_manifests_resolve_in_tree_order() -> None:
    product = _product(
        100,
        DepotDefinition(name="201", manifests=PUBLIC),
        DepotDefinition(name="200", manifests=(ManifestBranch(name="beta", gid=7),)),
    )

    resolved = _resolve(product, FakeCatalog())

    assert [d.depot_id for d in resolved] == [201, 200]
    assert resolved[0].branches == PUBLIC
    assert all(d.source_product_id == 100 for d in resolved)


def test_present_but_empty_manifests_still_resolve() -> None:
    product = _product(100, DepotDefinition(name="200", manifests=()))

    resolved = _resolve(product, FakeCatalog())

    assert [d.depot_id for d in resolved] == [200]
    assert resolved[0].branches == ()


def test_malformed_and_sentinel_ids_are_skipped() -> None:
    product = _product(
        100,
        DepotDefinition(name="branches", manifests=PUBLIC),
        DepotDefinition(name="4294967295", manifests=PUBLIC),
        DepotDefinition(name="-5", manifests=PUBLIC),
        DepotDefinition(name="200", manifests=PUBLIC),
    )

    assert [d.depot_id for d in _resolve(product, FakeCatalog())] == [200]


def test_non_ascii_digit_ids_are_skipped() -> None:
    product = _product(
        100,
        DepotDefinition(name="²", manifests=PUBLIC),
        DepotDefinition(name="٣", manifests=PUBLIC),
        DepotDefinition(name="", manifests=PUBLIC),
        DepotDefinition(name="201", manifests=PUBLIC),
    )

    assert [d.depot_id for d in _resolve(product, FakeCatalog())] == [201]


def test_depot_without_manifests_or_indirection_is_skipped() -> None:
    product = _product(100, DepotDefinition(name="228988"))
    catalog = FakeCatalog()

    assert _resolve(product, catalog) == []
    assert catalog.requested == []


def test_indirection_reads_branches_from_target_product() -> None:
    target_branches = (ManifestBranch(name="public", gid=900),)
    product = _product(100, DepotDefinition(name="201", depot_from_app=99))
    target = _product(99, DepotDefinition(name="201", manifests=target_branches))
    catalog = FakeCatalog(product, target)

    resolved = _resolve(product, catalog)

    assert len(resolved) == 1
    assert resolved[0].depot_id == 201
    assert resolved[0].product_id == 100
    assert resolved[0].source_product_id == 99
    assert resolved[0].branches == target_branches
    assert catalog.requested == [99]


def test_self_referential_indirection_is_skipped_with_notice() -> None:
    product = _product(
        100,
        DepotDefinition(name="201", depot_from_app=100),
        DepotDefinition(name="202", manifests=PUBLIC),
    )
    catalog = FakeCatalog(product)
    notices: list[str] = []

    resolved = _resolve(product, catalog, notices)

    assert [d.depot_id for d in resolved] == [202]
    assert notices == ["App 100, Depot 201 has depotfromapp of 100!"]
    assert catalog.requested == []


def test_indirection_is_followed_a_single_hop() -> None:
    """A target that itself redirects elsewhere does not resolve."""

    product = _product(100, DepotDefinition(name="201", depot_from_app=99))
    middle = _product(99, DepotDefinition(name="201", depot_from_app=98))
    last = _product(98, DepotDefinition(name="201", manifests=PUBLIC))
    catalog = FakeCatalog(product, middle, last)

    assert _resolve(product, catalog) == []
    assert catalog.requested == [99]


def test_missing_target_or_target_depot_is_skipped() -> None:
    product = _product(
        100,
        DepotDefinition(name="201", depot_from_app=99),
        DepotDefinition(name="202", depot_from_app=98),
    )
    other = _product(98, DepotDefinition(name="999", manifests=PUBLIC))
    catalog = FakeCatalog(product, other)

    assert _resolve(product, catalog) == []
    assert catalog.requested == [99, 98]
