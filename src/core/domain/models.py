"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- Nos da validación estricta y documentación autocontenida (Field) sin acoplar
  el Core a SteamKit, HTTP ni al formato de los ficheros de salida.
- Los modelos son inmutables (`frozen`): se construyen una vez por ejecución
  a partir de los árboles PICS y el Core solo los lee.

Nota:
- Estos modelos describen *qué* es la información, no *cómo* se obtiene.
"""

from __future__ import annotations

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

# Los ids de depot/app son uint32; el máximo se usa como "no válido".
INVALID_ID = 0xFFFFFFFF
MAX_GID = 0xFFFFFFFFFFFFFFFF


def parse_uint(raw: str, *, maximum: int = INVALID_ID) -> int | None:
    """Entero decimal sin signo (solo dígitos ASCII) hasta `maximum`, o `None`."""

    text = raw.strip()
    if not (text.isascii() and text.isdigit()):
        return None
    value = int(text)
    if value > maximum:
        return None
    return value


def parse_depot_id(raw: str) -> int | None:
    """Convierte la clave de una sección de depot en id, o `None` si no es válida."""

    return parse_uint(raw, maximum=INVALID_ID - 1)


class ManifestBranch(BaseModel):
    """Rama de un depot (p.ej. 'public', 'beta') fijada a un manifest."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Nombre de la rama.")
    gid: int = Field(
        default=0,
        ge=0,
        le=MAX_GID,
        description="Identificador de contenido (manifest gid) de la rama.",
    )


class DepotDefinition(BaseModel):
    """Entrada del árbol `depots` de un producto.

    `manifests is None` significa que la sección no existe; una lista vacía
    significa que existe pero sin ramas. El Core trata ambos casos distinto.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(
        ...,
        description="Clave cruda de la sección (normalmente el id numérico del depot).",
    )
    manifests: tuple[ManifestBranch, ...] | None = Field(
        default=None,
        description="Ramas con manifest declaradas directamente en este producto.",
    )
    depot_from_app: int | None = Field(
        default=None,
        ge=0,
        description="Producto que define realmente el depot ('depotfromapp').",
    )

    @property
    def depot_id(self) -> int | None:
        return parse_depot_id(self.name)


class ProductRecord(BaseModel):
    """Un producto distribuible (app) tal como lo devuelve el catálogo."""

    model_config = ConfigDict(frozen=True)

    product_id: int = Field(..., ge=0, description="Id del producto (appid).")
    token: int | None = Field(
        default=None,
        description="Access token del producto; sin token el producto se ignora.",
    )
    name: str = Field(default="", description="Nombre visible del producto.")
    release_state: str | None = Field(
        default=None,
        description="Valor de `common/ReleaseState` si el producto lo declara.",
    )
    depots: tuple[DepotDefinition, ...] | None = Field(
        default=None,
        description="Definiciones de depot en orden del árbol; `None` si no hay sección.",
    )
    workshop_depot_id: int | None = Field(
        default=None,
        ge=0,
        description="Valor de `depots/workshopdepot` si está presente.",
    )

    def depot(self, depot_id: int) -> DepotDefinition | None:
        """Busca la definición de un depot por id (sin seguir indirecciones)."""

        for definition in self.depots or ():
            if definition.depot_id == depot_id:
                return definition
        return None


class Entitlement(BaseModel):
    """Licencia (package) poseída por la cuenta."""

    model_config = ConfigDict(frozen=True)

    entitlement_id: int = Field(..., ge=0, description="Id del package.")
    token: int | None = Field(default=None, description="Access token del package.")
    product_ids: tuple[int, ...] = Field(
        default_factory=tuple,
        description="Apps incluidas en el package (orden del árbol, sin duplicados).",
    )
    depot_ids: tuple[int, ...] = Field(
        default_factory=tuple,
        description="Depots incluidos explícitamente en el package.",
    )


class ResolvedDepot(BaseModel):
    """Depot con datos de manifest resolubles para un producto."""

    model_config = ConfigDict(frozen=True)

    depot_id: int
    product_id: int = Field(..., description="Producto que declara el depot.")
    source_product_id: int = Field(
        ...,
        description="Producto del que se leyeron las ramas (distinto si hubo indirección).",
    )
    branches: tuple[ManifestBranch, ...] = Field(default_factory=tuple)


class ProductDumpResult(BaseModel):
    """Contadores de un producto procesado."""

    product_id: int
    dumped: int = 0
    skipped: int = 0


class DumpSummary(BaseModel):
    """Resultado agregado de una ejecución."""

    dumped: int = 0
    skipped: int = 0
    products: list[ProductDumpResult] = Field(default_factory=list)
    filter_active: bool = False


def format_key_hex(key: bytes) -> str:
    """Clave en hexadecimal mayúsculas, sin separadores."""

    return key.hex().upper()
