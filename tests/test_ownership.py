"""Ownership checks over entitlement product/depot id sets."""

from __future__ import annotations

import pytest

from core.domain.models import Entitlement
from core.ownership import OwnershipIndex, is_owned

ENTITLEMENTS = [
    Entitlement(entitlement_id=1, product_ids=(100, 101), depot_ids=()),
    Entitlement(entitlement_id=2, product_ids=(300,), depot_ids=(201, 202)),
]


@pytest.mark.parametrize("item_id", [100, 101, 300, 201, 202])
def test_id_in_either_set_is_owned(item_id: int) -> None:
    assert is_owned(item_id, ENTITLEMENTS)
    assert OwnershipIndex(ENTITLEMENTS).is_owned(item_id)


@pytest.mark.parametrize("item_id", [0, 99, 200, 203])
def test_id_in_neither_set_is_not_owned(item_id: int) -> None:
    assert not is_owned(item_id, ENTITLEMENTS)
    assert not OwnershipIndex(ENTITLEMENTS).is_owned(item_id)


def test_product_id_matching_a_depot_id_counts_as_owning_the_depot() -> None:
    """Owning app 480 implies owning depot 480."""

    entitlements = [Entitlement(entitlement_id=7, product_ids=(480,))]

    assert is_owned(480, entitlements)


def test_empty_index_owns_nothing() -> None:
    index = OwnershipIndex([])

    assert len(index) == 0
    assert not index.is_owned(100)
