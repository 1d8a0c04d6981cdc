"""Incremental filter and workshop depot lookup."""

from __future__ import annotations

from core.domain.models import ProductRecord
from core.incremental import FetchDecision, classify
from core.workshop import resolve_workshop


def test_classify_without_existing_set_always_fetches() -> None:
    assert classify(200, None) is FetchDecision.NEEDS_FETCH


def test_classify_against_existing_set() -> None:
    existing = frozenset({200, 300})

    assert classify(200, existing) is FetchDecision.ALREADY_KNOWN
    assert classify(201, existing) is FetchDecision.NEEDS_FETCH
    assert classify(201, frozenset()) is FetchDecision.NEEDS_FETCH


def test_workshop_depot_absent_or_zero_yields_nothing() -> None:
    assert resolve_workshop(ProductRecord(product_id=100, token=1)) is None
    assert resolve_workshop(ProductRecord(product_id=100, token=1, workshop_depot_id=0)) is None


def test_workshop_depot_id_is_returned() -> None:
    product = ProductRecord(product_id=100, token=1, workshop_depot_id=241100)

    assert resolve_workshop(product) == 241100
