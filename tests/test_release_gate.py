"""Release-state gating."""

from __future__ import annotations

from core.domain.models import ProductRecord
from core.release_gate import admit


def _product(release_state: str | None) -> ProductRecord:
    return ProductRecord(product_id=100, token=1, release_state=release_state)


def test_released_and_missing_state_are_admitted() -> None:
    assert admit(_product("released"), allow_unreleased=False)
    assert admit(_product(None), allow_unreleased=False)


def test_other_states_are_excluded_unless_allowed() -> None:
    for state in ("unreleased", "prerelease", "preloadonly", "Released"):
        assert not admit(_product(state), allow_unreleased=False)
        assert admit(_product(state), allow_unreleased=True)
