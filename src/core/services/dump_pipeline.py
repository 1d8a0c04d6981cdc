"""Depot key dump orchestration.

This module drives the resolution engine for one account: it turns the
license list into an ownership index, walks each owned product through the
release gate, the depot resolver, the ownership check, the incremental
filter and the run accumulator, and only then asks the session for a depot
key. Output goes to a `DumpSink`; printing and prompts stay in the CLI.

Everything runs in a single control flow. Each collaborator call is awaited
before the next step so the accumulator never needs locking.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import AbstractSet, Callable

from core.accumulator import RunAccumulator
from core.domain.models import DumpSummary, ProductDumpResult, ResolvedDepot
from core.incremental import FetchDecision, classify
from core.interfaces.output import DumpSink
from core.interfaces.session import SteamSession
from core.ownership import OwnershipIndex
from core.release_gate import admit
from core.resolver import DepotResolver
from core.workshop import resolve_workshop

logger = logging.getLogger(__name__)


@dataclass
class DumpRequest:
    """Parameters that control a dump run."""

    target_product_id: int | None = None
    allow_unreleased: bool = False
    existing_depots: frozenset[int] | None = None


@dataclass
class DumpHooks:
    """Optional callbacks for UI layers (diagnostics, progress)."""

    notice: Callable[[str], None] | None = None
    products_found: Callable[[int], None] | None = None
    product_done: Callable[[ProductDumpResult], None] | None = None


@dataclass
class _ProductCounters:
    dumped: int = 0
    skipped: int = 0


class DumpOrchestrator:
    """Processes products one at a time against a shared accumulator."""

    def __init__(
        self,
        *,
        session: SteamSession,
        ownership: OwnershipIndex,
        sink: DumpSink,
        existing_depots: AbstractSet[int] | None = None,
        allow_unreleased: bool = False,
        accumulator: RunAccumulator | None = None,
        hooks: DumpHooks | None = None,
    ) -> None:
        self._session = session
        self._ownership = ownership
        self._sink = sink
        self._existing = existing_depots
        self._allow_unreleased = allow_unreleased
        self._hooks = hooks or DumpHooks()
        self.accumulator = accumulator if accumulator is not None else RunAccumulator()
        self._resolver = DepotResolver(notice=self._hooks.notice)

    async def dump_product(self, product_id: int) -> ProductDumpResult:
        counters = _ProductCounters()

        product = self._session.metadata_of(product_id)
        if product is None or product.token is None:
            logger.debug("app %s has no metadata or token, skipping", product_id)
            return ProductDumpResult(product_id=product_id)

        if not admit(product, self._allow_unreleased):
            logger.debug("app %s not released (%s), skipping", product_id, product.release_state)
            return ProductDumpResult(product_id=product_id)

        self._sink.write_product(product_id, product.token)
        self._sink.write_product_name(product_id, product.name)

        if product.depots is None:
            return ProductDumpResult(product_id=product_id)

        for depot in await self._resolver.resolve(product, self._session):
            if not self._ownership.is_owned(depot.depot_id):
                continue
            await self._dump_depot(depot, counters)

        workshop_id = resolve_workshop(product)
        if workshop_id is not None:
            await self._dump_workshop(workshop_id, product_id, counters)

        return ProductDumpResult(
            product_id=product_id,
            dumped=counters.dumped,
            skipped=counters.skipped,
        )

    async def _dump_depot(self, depot: ResolvedDepot, counters: _ProductCounters) -> None:
        depot_id = depot.depot_id

        if classify(depot_id, self._existing) is FetchDecision.ALREADY_KNOWN:
            if self.accumulator.should_fetch(depot_id):
                self.accumulator.record_skipped(depot_id)
                counters.skipped += 1
            self._write_depot_names(depot)
            return

        if not self.accumulator.should_fetch(depot_id):
            # Ya volcado desde otra app en esta ejecución.
            self._write_depot_names(depot)
            return

        key = await self._session.fetch_depot_key(depot_id, depot.product_id)
        if key is None:
            logger.info("No key for depot %s (app %s)", depot_id, depot.product_id)
            return

        self._sink.write_key(depot_id, key)
        self.accumulator.record_dumped(depot_id)
        counters.dumped += 1
        self._write_depot_names(depot)

    async def _dump_workshop(self, depot_id: int, product_id: int, counters: _ProductCounters) -> None:
        if not self.accumulator.should_fetch(depot_id):
            return

        if classify(depot_id, self._existing) is FetchDecision.ALREADY_KNOWN:
            logger.info("Workshop depot %s already exists in database, skipping", depot_id)
            self.accumulator.record_skipped(depot_id)
            counters.skipped += 1
            self._sink.write_depot_name(depot_id, note="workshop - already in DB")
            return

        key = await self._session.fetch_depot_key(depot_id, product_id)
        if key is None:
            logger.info("No key for workshop depot %s (app %s)", depot_id, product_id)
            return

        self._sink.write_key(depot_id, key)
        self.accumulator.record_dumped(depot_id)
        counters.dumped += 1
        self._sink.write_depot_name(depot_id, note="workshop")
        logger.info("Dumped workshop depot key for depot %s", depot_id)

    def _write_depot_names(self, depot: ResolvedDepot) -> None:
        self._sink.write_depot_name(depot.depot_id)
        for branch in depot.branches:
            self._sink.write_branch(branch)


async def _load_ownership(session: SteamSession) -> tuple[list[int], OwnershipIndex]:
    licenses = await session.licenses()
    await session.fetch_entitlement_metadata(licenses)
    return licenses, OwnershipIndex(session.entitlements())


def _summarize(
    results: list[ProductDumpResult],
    accumulator: RunAccumulator,
    request: DumpRequest,
) -> DumpSummary:
    dumped, skipped = accumulator.summary()
    return DumpSummary(
        dumped=dumped,
        skipped=skipped,
        products=results,
        filter_active=request.existing_depots is not None,
    )


async def dump_account(
    *,
    session: SteamSession,
    sink: DumpSink,
    request: DumpRequest,
    hooks: DumpHooks | None = None,
) -> DumpSummary:
    """Dump every product reachable from the account's licenses."""

    hooks = hooks or DumpHooks()
    licenses, ownership = await _load_ownership(session)
    by_id = {entitlement.entitlement_id: entitlement for entitlement in ownership.entitlements}

    product_ids: list[int] = []
    collected: set[int] = set()
    for license_id in licenses:
        entitlement = by_id.get(license_id)
        if entitlement is None:
            continue
        sink.write_entitlement(license_id, entitlement.token)
        for product_id in entitlement.product_ids:
            if product_id not in collected:
                collected.add(product_id)
                product_ids.append(product_id)

    if hooks.products_found:
        hooks.products_found(len(product_ids))

    await session.fetch_product_metadata(product_ids)

    orchestrator = DumpOrchestrator(
        session=session,
        ownership=ownership,
        sink=sink,
        existing_depots=request.existing_depots,
        allow_unreleased=request.allow_unreleased,
        hooks=hooks,
    )
    results: list[ProductDumpResult] = []
    for product_id in product_ids:
        result = await orchestrator.dump_product(product_id)
        results.append(result)
        if hooks.product_done:
            hooks.product_done(result)

    return _summarize(results, orchestrator.accumulator, request)


async def dump_single_product(
    *,
    session: SteamSession,
    sink: DumpSink,
    request: DumpRequest,
    hooks: DumpHooks | None = None,
) -> DumpSummary:
    """Dump one product with a fresh accumulator (`--app`)."""

    if request.target_product_id is None:
        raise ValueError("target_product_id is required for a single product dump")

    hooks = hooks or DumpHooks()
    _, ownership = await _load_ownership(session)

    product_id = request.target_product_id
    await session.fetch_product_metadata({product_id})

    orchestrator = DumpOrchestrator(
        session=session,
        ownership=ownership,
        sink=sink,
        existing_depots=request.existing_depots,
        allow_unreleased=request.allow_unreleased,
        accumulator=RunAccumulator(),
        hooks=hooks,
    )
    if session.product_token(product_id) is None:
        logger.warning("No access token for app %s, nothing to dump", product_id)
        return _summarize([], orchestrator.accumulator, request)

    result = await orchestrator.dump_product(product_id)
    if hooks.product_done:
        hooks.product_done(result)
    return _summarize([result], orchestrator.accumulator, request)
