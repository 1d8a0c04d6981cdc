"""Sesión live contra la red de Steam (ValvePython `steam`).

Responsabilidad:
- Login con usuario/contraseña (y códigos de Steam Guard si se piden).
- Licencias, tokens de acceso, info PICS de packages/apps y claves de depot.

Notas:
- `steam` es una dependencia opcional (`pip install depot-dumper[steam]`);
  se importa solo al crear la sesión.
- El cliente es síncrono (gevent). Los métodos `async` lo llaman en línea:
  el Core espera cada llamada antes de la siguiente, no hay concurrencia.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable

from adapters.pics import entitlement_from_keyvalues, product_from_keyvalues
from core.config import AppSettings
from core.domain.models import Entitlement, ProductRecord
from core.errors import CredentialFailure

logger = logging.getLogger(__name__)


def _import_steam() -> tuple[Any, Any, Any]:
    try:
        from steam.client import SteamClient  # type: ignore
        from steam.enums import EResult  # type: ignore
        from steam.enums.emsg import EMsg  # type: ignore
    except ImportError as exc:
        raise RuntimeError(
            "The 'steam' package is required for live sessions. "
            "Install it with 'pip install depot-dumper[steam]'."
        ) from exc
    return SteamClient, EResult, EMsg


class LiveSteamSession:
    """`SteamSession` respaldada por `steam.client.SteamClient`."""

    def __init__(
        self,
        *,
        username: str,
        password: str,
        settings: AppSettings | None = None,
        auth_code: str | None = None,
        two_factor_code: str | None = None,
    ) -> None:
        self.account_name = username
        self._password = password
        self._auth_code = auth_code
        self._two_factor_code = two_factor_code
        self._settings = settings or AppSettings()
        self._client: Any | None = None
        self._entitlements: dict[int, Entitlement] = {}
        self._products: dict[int, ProductRecord] = {}
        self._product_tokens: dict[int, int] = {}
        self._entitlement_tokens: dict[int, int] = {}
        self._depot_keys: dict[int, bytes] = {}

    async def login(self) -> None:
        steam_client_cls, eresult, emsg = _import_steam()
        client = steam_client_cls()
        result = client.login(
            self.account_name,
            self._password,
            auth_code=self._auth_code,
            two_factor_code=self._two_factor_code,
        )
        if result != eresult.OK:
            raise CredentialFailure(f"Unable to get steam3 credentials ({result!r})")

        logger.info("Getting licenses...")
        if not client.licenses:
            client.wait_event(emsg.ClientLicenseList, timeout=self._settings.steam_login_timeout_seconds)
        if not client.licenses:
            client.logout()
            raise CredentialFailure("license list not received after login")

        self._client = client

    async def licenses(self) -> list[int]:
        return list(dict.fromkeys(int(package_id) for package_id in self._require().licenses))

    async def fetch_entitlement_metadata(self, entitlement_ids: Iterable[int]) -> None:
        client = self._require()
        wanted = [i for i in entitlement_ids if i not in self._entitlements]
        if not wanted:
            return

        tokens = client.get_access_tokens(package_ids=wanted) or {}
        self._entitlement_tokens.update(tokens.get("packages", {}))

        request = [
            {"packageid": package_id, "access_token": self._entitlement_tokens.get(package_id, 0)}
            for package_id in wanted
        ]
        info = client.get_product_info(packages=request, auto_access_tokens=False) or {}
        for package_id, tree in (info.get("packages") or {}).items():
            if not isinstance(tree, dict):
                continue
            package_id = int(package_id)
            self._entitlements[package_id] = entitlement_from_keyvalues(
                package_id, tree, token=self._entitlement_tokens.get(package_id)
            )

    def entitlements(self) -> list[Entitlement]:
        return list(self._entitlements.values())

    async def fetch_product_metadata(self, product_ids: Iterable[int]) -> None:
        client = self._require()
        wanted = [i for i in product_ids if i not in self._products]
        if not wanted:
            return

        tokens = client.get_access_tokens(app_ids=wanted) or {}
        self._product_tokens.update(tokens.get("apps", {}))

        request = [
            {"appid": app_id, "access_token": self._product_tokens.get(app_id, 0)}
            for app_id in wanted
        ]
        info = client.get_product_info(apps=request, auto_access_tokens=False) or {}
        for app_id, tree in (info.get("apps") or {}).items():
            if not isinstance(tree, dict):
                continue
            app_id = int(app_id)
            self._products[app_id] = product_from_keyvalues(
                app_id, tree, token=self._product_tokens.get(app_id)
            )

    def metadata_of(self, product_id: int) -> ProductRecord | None:
        return self._products.get(product_id)

    def product_token(self, product_id: int) -> int | None:
        return self._product_tokens.get(product_id)

    def entitlement_token(self, entitlement_id: int) -> int | None:
        return self._entitlement_tokens.get(entitlement_id)

    async def fetch_depot_key(self, depot_id: int, owning_product_id: int) -> bytes | None:
        if depot_id in self._depot_keys:
            return self._depot_keys[depot_id]

        _, eresult, _ = _import_steam()
        response = self._require().get_depot_key(owning_product_id, depot_id)
        if response is None or response.eresult != eresult.OK:
            logger.debug("Depot key denied for depot %s (app %s)", depot_id, owning_product_id)
            return None

        key = bytes(response.depot_encryption_key)
        self._depot_keys[depot_id] = key
        return key

    async def close(self) -> None:
        if self._client is not None:
            self._client.logout()
            self._client = None

    def _require(self) -> Any:
        if self._client is None:
            raise CredentialFailure("session is not logged in")
        return self._client
