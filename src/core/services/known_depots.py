"""Known-depot filter bootstrap.

The remote lookup is optional. When it fails, the run may still proceed
without filtering; that choice belongs to the operator and is injected as a
plain callable so the flow is testable without a terminal.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable

from core.errors import DumpAborted, FilterServiceUnavailable

logger = logging.getLogger(__name__)

FetchKnownDepots = Callable[[str], Awaitable[frozenset[int]]]
ContinueDecision = Callable[[FilterServiceUnavailable], bool]


async def load_existing_depots(
    *,
    api_key: str | None,
    fetch: FetchKnownDepots,
    decide: ContinueDecision,
) -> frozenset[int] | None:
    """Return the known-depot set, or `None` when filtering is disabled.

    Raises `DumpAborted` if the lookup fails and `decide` declines to continue.
    """

    if not api_key or not api_key.strip():
        return None

    try:
        existing = await fetch(api_key.strip())
    except FilterServiceUnavailable as exc:
        logger.warning("Failed to fetch depot IDs from API: %s", exc)
        if not decide(exc):
            raise DumpAborted("aborted after known-depot lookup failure") from exc
        logger.info("Continuing without API key filtering")
        return None

    logger.info("Loaded %d depot IDs already in database", len(existing))
    return existing
