"""Sesión offline basada en un snapshot JSON.

Por qué existe:
- Permite ejecutar y auditar un dump sin conexión a Steam, a partir de los
  datos PICS de una cuenta (licencias, packages, apps, tokens y claves).
- Implementa `core.interfaces.session.SteamSession`, así que el Core no
  distingue entre esta sesión y la live.

Formato (todas las claves de id pueden ir como string):

    {
      "account": "alice",
      "licenses": [1, 2],
      "packages": {"1": {"token": 0, "info": {"appids": {"0": 100}, "depotids": {}}}},
      "apps": {"100": {"token": 123, "info": {"common": {...}, "depots": {...}}}},
      "depot_keys": {"200": "00AB..."}
    }
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable

from pydantic import BaseModel, Field, ValidationError

from adapters.pics import entitlement_from_keyvalues, product_from_keyvalues
from core.domain.models import Entitlement, ProductRecord
from core.errors import CredentialFailure

logger = logging.getLogger(__name__)


class PackageSnapshot(BaseModel):
    token: int | None = None
    info: dict[str, Any] | None = None


class AppSnapshot(BaseModel):
    token: int | None = None
    info: dict[str, Any] | None = None


class SessionSnapshot(BaseModel):
    account: str = Field(..., min_length=1)
    licenses: list[int] = Field(default_factory=list)
    packages: dict[int, PackageSnapshot] = Field(default_factory=dict)
    apps: dict[int, AppSnapshot] = Field(default_factory=dict)
    depot_keys: dict[int, str] = Field(default_factory=dict)


def load_snapshot(path: Path) -> SessionSnapshot:
    raw = path.read_text(encoding="utf-8")
    data = json.loads(raw)
    return SessionSnapshot.model_validate(data)


class SnapshotSession:
    """`SteamSession` que responde desde un `SessionSnapshot`."""

    def __init__(self, *, path: Path | None = None, snapshot: SessionSnapshot | None = None) -> None:
        if path is None and snapshot is None:
            raise ValueError("path or snapshot is required")
        self._path = path
        self._snapshot = snapshot
        self._entitlements: dict[int, Entitlement] = {}
        self._products: dict[int, ProductRecord] = {}

    @property
    def account_name(self) -> str:
        return self._require().account

    async def login(self) -> None:
        if self._snapshot is not None:
            return
        if self._path is None:
            raise CredentialFailure("no snapshot to load")
        try:
            self._snapshot = load_snapshot(self._path)
        except (OSError, json.JSONDecodeError, ValidationError) as exc:
            raise CredentialFailure(f"cannot load session snapshot {self._path}: {exc}") from exc
        logger.info("Loaded snapshot for account %s", self._snapshot.account)

    async def licenses(self) -> list[int]:
        return list(dict.fromkeys(self._require().licenses))

    async def fetch_entitlement_metadata(self, entitlement_ids: Iterable[int]) -> None:
        snapshot = self._require()
        for entitlement_id in entitlement_ids:
            package = snapshot.packages.get(entitlement_id)
            if package is None or package.info is None:
                continue
            self._entitlements[entitlement_id] = entitlement_from_keyvalues(
                entitlement_id, package.info, token=package.token
            )

    def entitlements(self) -> list[Entitlement]:
        return list(self._entitlements.values())

    async def fetch_product_metadata(self, product_ids: Iterable[int]) -> None:
        snapshot = self._require()
        for product_id in product_ids:
            if product_id in self._products:
                continue
            app = snapshot.apps.get(product_id)
            if app is None or app.info is None:
                continue
            self._products[product_id] = product_from_keyvalues(product_id, app.info, token=app.token)

    def metadata_of(self, product_id: int) -> ProductRecord | None:
        return self._products.get(product_id)

    def product_token(self, product_id: int) -> int | None:
        app = self._require().apps.get(product_id)
        return app.token if app else None

    def entitlement_token(self, entitlement_id: int) -> int | None:
        package = self._require().packages.get(entitlement_id)
        return package.token if package else None

    async def fetch_depot_key(self, depot_id: int, owning_product_id: int) -> bytes | None:
        raw = self._require().depot_keys.get(depot_id)
        if raw is None:
            return None
        try:
            return bytes.fromhex(raw)
        except ValueError:
            logger.warning("Snapshot key for depot %s is not valid hex", depot_id)
            return None

    async def close(self) -> None:
        return None

    def _require(self) -> SessionSnapshot:
        if self._snapshot is None:
            raise CredentialFailure("session is not logged in")
        return self._snapshot
