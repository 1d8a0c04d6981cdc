"""Shared fixtures: in-memory snapshots and output buffers."""

from __future__ import annotations

import io
from typing import Any

import pytest

from adapters.snapshot_session import SessionSnapshot, SnapshotSession
from adapters.text_output import TextDumpWriter

KEY_200 = "0123456789ABCDEF0123456789ABCDEF0123456789ABCDEF0123456789ABCDEF"


class RecordingSession(SnapshotSession):
    """Snapshot session that remembers every depot key request."""

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.key_requests: list[tuple[int, int]] = []

    async def fetch_depot_key(self, depot_id: int, owning_product_id: int) -> bytes | None:
        self.key_requests.append((depot_id, owning_product_id))
        return await super().fetch_depot_key(depot_id, owning_product_id)


class _Buffer(io.StringIO):
    """StringIO whose contents survive the writer closing it."""

    def close(self) -> None:
        pass


class MemoryOutput:
    def __init__(self) -> None:
        self.buffers: dict[str, _Buffer] = {}
        self.writer = TextDumpWriter(
            entitlements=self._factory("entitlements"),
            products=self._factory("products"),
            keys=self._factory("keys"),
            names=self._factory("names"),
        )

    def _factory(self, name: str):
        def _open() -> _Buffer:
            buffer = _Buffer()
            self.buffers[name] = buffer
            return buffer

        return _open

    def lines(self, name: str) -> list[str]:
        buffer = self.buffers.get(name)
        if buffer is None:
            return []
        return buffer.getvalue().splitlines()


def app_info(
    name: str,
    depots: dict[str, Any] | None = None,
    *,
    release_state: str | None = None,
) -> dict[str, Any]:
    common: dict[str, Any] = {"name": name}
    if release_state is not None:
        common["ReleaseState"] = release_state
    info: dict[str, Any] = {"common": common}
    if depots is not None:
        info["depots"] = depots
    return info


def make_session(
    *,
    packages: dict[int, dict[str, Any]],
    apps: dict[int, dict[str, Any]],
    keys: dict[int, str] | None = None,
    licenses: list[int] | None = None,
    account: str = "alice",
) -> RecordingSession:
    snapshot = SessionSnapshot.model_validate(
        {
            "account": account,
            "licenses": licenses if licenses is not None else list(packages),
            "packages": {str(k): v for k, v in packages.items()},
            "apps": {str(k): v for k, v in apps.items()},
            "depot_keys": {str(k): v for k, v in (keys or {}).items()},
        }
    )
    return RecordingSession(snapshot=snapshot)


@pytest.fixture
def output() -> MemoryOutput:
    return MemoryOutput()
