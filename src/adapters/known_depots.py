"""Cliente del servicio remoto de depots conocidos.

Contrato:
- GET `<known_depots_url>?api_key=<key>`.
- Respuesta válida: `{"status": "success", "existing_count": int,
  "depot_ids": ["123", ...], "timestamp": str}`.

Cualquier fallo (red, HTTP no 2xx, `status` distinto de "success", cuerpo
malformado) se traduce a `FilterServiceUnavailable`; decidir si se sigue sin
filtro es cosa de la capa superior.
"""

from __future__ import annotations

import logging

import httpx
from pydantic import BaseModel, Field, ValidationError
from pydantic.config import ConfigDict

from adapters.http_client import build_async_client
from adapters.pics import as_uint
from core.config import AppSettings
from core.errors import FilterServiceUnavailable

logger = logging.getLogger(__name__)


class KnownDepotsResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    status: str = Field(..., description="Debe ser 'success'.")
    existing_count: int = Field(default=0, description="Depots ya registrados en la base.")
    total_depot_ids: int | None = Field(default=None)
    depot_ids: list[object] | None = Field(
        default=None,
        description="Ids como strings decimales; las entradas no válidas se descartan.",
    )
    timestamp: str | None = Field(default=None)

    def parsed_depot_ids(self) -> frozenset[int]:
        ids: set[int] = set()
        for raw in self.depot_ids or ():
            if not isinstance(raw, str):
                continue
            depot_id = as_uint(raw)
            if depot_id is not None:
                ids.add(depot_id)
        return frozenset(ids)


async def fetch_existing_depot_ids(
    api_key: str,
    *,
    settings: AppSettings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> frozenset[int]:
    settings = settings or AppSettings()

    try:
        async with build_async_client(settings, transport=transport) as client:
            response = await client.get(settings.known_depots_url, params={"api_key": api_key})
    except httpx.HTTPError as exc:
        raise FilterServiceUnavailable(f"request failed: {exc}") from exc

    if not response.is_success:
        raise FilterServiceUnavailable(f"API request failed with status code: {response.status_code}")

    try:
        payload = KnownDepotsResponse.model_validate_json(response.content)
    except ValidationError as exc:
        raise FilterServiceUnavailable("malformed API response") from exc

    if payload.status != "success":
        raise FilterServiceUnavailable(f"API returned unsuccessful status: {payload.status!r}")

    depot_ids = payload.parsed_depot_ids()
    logger.info(
        "API: %s existing in DB, %s listed (as of %s)",
        payload.existing_count,
        len(payload.depot_ids or ()),
        payload.timestamp,
    )
    return depot_ids
