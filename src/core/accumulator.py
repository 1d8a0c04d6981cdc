"""Estado de deduplicación de una ejecución."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class RunAccumulator:
    """Depots ya escritos en esta ejecución y sus contadores.

    Invariante: `dumped + skipped == len(seen)`. Solo crece; lo usa un único
    flujo de control, por eso no tiene locks.
    """

    seen: set[int] = field(default_factory=set)
    dumped: int = 0
    skipped: int = 0

    def should_fetch(self, depot_id: int) -> bool:
        return depot_id not in self.seen

    def record_dumped(self, depot_id: int) -> None:
        self._add(depot_id)
        self.dumped += 1

    def record_skipped(self, depot_id: int) -> None:
        self._add(depot_id)
        self.skipped += 1

    def summary(self) -> tuple[int, int]:
        return self.dumped, self.skipped

    def _add(self, depot_id: int) -> None:
        if depot_id in self.seen:
            raise ValueError(f"depot {depot_id} already recorded in this run")
        self.seen.add(depot_id)
