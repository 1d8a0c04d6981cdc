"""Conversión de árboles PICS (KeyValues) a modelos del dominio.

Por qué un módulo aparte:
- Tanto la sesión live (`steam`) como la offline (snapshot JSON) devuelven
  el mismo árbol anidado de dicts; aquí se interpreta una sola vez.
- Las claves KeyValues son case-insensitive y los valores suelen venir como
  strings. Cada lookup devuelve `None` si la clave no existe, de modo que
  "ausente" y "presente pero vacío" se distinguen en el Core.
"""

from __future__ import annotations

from typing import Any, Mapping

from core.domain.models import (
    INVALID_ID,
    MAX_GID,
    DepotDefinition,
    Entitlement,
    ManifestBranch,
    ProductRecord,
    parse_uint,
)


def child(tree: Any, key: str) -> Any | None:
    """Hijo `key` de un nodo, sin distinguir mayúsculas."""

    if not isinstance(tree, Mapping):
        return None
    if key in tree:
        return tree[key]
    lowered = key.lower()
    for name, value in tree.items():
        if str(name).lower() == lowered:
            return value
    return None


def as_uint(value: Any, *, maximum: int = INVALID_ID) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        return parse_uint(value, maximum=maximum)
    if isinstance(value, int) and 0 <= value <= maximum:
        return value
    return None


def _id_list(node: Any) -> tuple[int, ...]:
    """Lista de ids de `appids`/`depotids` (dict indexado "0","1",... o lista)."""

    if isinstance(node, Mapping):
        values = list(node.values())
    elif isinstance(node, (list, tuple)):
        values = list(node)
    else:
        return ()

    out: list[int] = []
    for value in values:
        number = as_uint(value)
        if number is not None and number not in out:
            out.append(number)
    return tuple(out)


def parse_branches(node: Any) -> tuple[ManifestBranch, ...] | None:
    if not isinstance(node, Mapping):
        return None

    branches: list[ManifestBranch] = []
    for name, value in node.items():
        if not str(name):
            continue
        # Formato nuevo: {"public": {"gid": "..."}}; antiguo: {"public": "..."}.
        raw_gid = child(value, "gid") if isinstance(value, Mapping) else value
        gid = as_uint(raw_gid, maximum=MAX_GID) or 0
        branches.append(ManifestBranch(name=str(name), gid=gid))
    return tuple(branches)


def parse_depot(name: str, node: Mapping[str, Any]) -> DepotDefinition:
    return DepotDefinition(
        name=str(name),
        manifests=parse_branches(child(node, "manifests")),
        depot_from_app=as_uint(child(node, "depotfromapp")),
    )


def product_from_keyvalues(
    product_id: int,
    tree: Mapping[str, Any],
    *,
    token: int | None,
) -> ProductRecord:
    common = child(tree, "common")
    name = child(common, "name")
    release_state = child(common, "ReleaseState")

    depots_node = child(tree, "depots")
    depots: tuple[DepotDefinition, ...] | None = None
    workshop_depot_id: int | None = None
    if isinstance(depots_node, Mapping):
        # Solo las secciones son depots; `workshopdepot` y similares son escalares.
        depots = tuple(
            parse_depot(key, value)
            for key, value in depots_node.items()
            if isinstance(value, Mapping)
        )
        workshop = child(depots_node, "workshopdepot")
        if workshop is not None:
            workshop_depot_id = as_uint(workshop) or 0

    return ProductRecord(
        product_id=product_id,
        token=token,
        name=str(name) if name is not None else "",
        release_state=str(release_state) if release_state is not None else None,
        depots=depots,
        workshop_depot_id=workshop_depot_id,
    )


def entitlement_from_keyvalues(
    entitlement_id: int,
    tree: Mapping[str, Any],
    *,
    token: int | None,
) -> Entitlement:
    return Entitlement(
        entitlement_id=entitlement_id,
        token=token,
        product_ids=_id_list(child(tree, "appids")),
        depot_ids=_id_list(child(tree, "depotids")),
    )
