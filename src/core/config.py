"""Configuración del Core.

Por qué aquí:
- Centraliza variables de entorno (pydantic-settings) sin contaminar la CLI.
- Permite que adaptadores (HTTP/sesión) lean config de forma consistente.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Mapping

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


ENV_PREFIX = "DEPOT_DUMPER_"


def get_user_config_dir() -> Path:
    """Directorio de configuración por usuario (APPDATA, Application Support o XDG)."""

    if sys.platform.startswith("win"):
        return Path(os.environ.get("APPDATA", str(Path.home()))) / "depot-dumper"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "depot-dumper"
    return Path(os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config") / "depot-dumper"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def env_var_name(field_name: str) -> str:
    """`known_depots_api_key` -> `DEPOT_DUMPER_KNOWN_DEPOTS_API_KEY`."""

    return f"{ENV_PREFIX}{field_name.upper()}"


def read_env_file(env_path: Path) -> dict[str, str]:
    """Variables de un `.env` (`KEY=value`, comentarios `#`, `export` opcional)."""

    if not env_path.exists():
        return {}

    data: dict[str, str] = {}
    for raw_line in env_path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if line.startswith("export "):
            line = line[len("export "):].lstrip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        if key:
            data[key] = value.strip().strip('"').strip("'")
    return data


def save_user_settings(values: Mapping[str, str | None], *, env_path: Path | None = None) -> Path:
    """Guarda campos de `AppSettings` en el `.env` de usuario.

    Las claves son nombres de campo; `None` borra la variable. El resto de
    variables del fichero se conserva.
    """

    unknown = sorted(set(values) - set(AppSettings.model_fields))
    if unknown:
        raise ValueError(f"unknown settings: {', '.join(unknown)}")

    env_path = env_path or get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)

    current = read_env_file(env_path)
    for field_name, value in values.items():
        if value is None:
            current.pop(env_var_name(field_name), None)
        else:
            current[env_var_name(field_name)] = value

    lines = ["# depot-dumper user config (.env)"]
    lines.extend(f"{key}={current[key]}" for key in sorted(current))
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return env_path


class AppSettings(BaseSettings):
    """Configuración central de la aplicación.

    Por qué pydantic-settings:
    - Tipado + validación en el borde (env vars) sin ensuciar el Core con lógica.
    - Un único contrato de configuración para CLI/adapters.
    """

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        extra="ignore",
        case_sensitive=False,
        # Orden: proyecto primero (dev), luego config global de usuario.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    http_timeout_seconds: float = Field(
        default=20.0,
        gt=0,
        description="Timeout por request (segundos).",
    )
    user_agent: str = Field(
        default="depot-dumper/0.1",
        min_length=1,
        description="User-Agent para la API de depots conocidos.",
    )

    known_depots_url: str = Field(
        default="https://manifest.morrenus.xyz/api/v1/depot-keys",
        min_length=8,
        description="Endpoint que devuelve los depot ids ya registrados.",
    )
    known_depots_api_key: str | None = Field(
        default=None,
        description="API key del servicio de depots conocidos (activa el filtrado).",
    )

    output_dir: Path = Field(
        default=Path("."),
        description="Directorio donde se escriben los ficheros de salida.",
    )
    dump_unreleased: bool = Field(
        default=False,
        description="Procesar también productos cuyo ReleaseState no es 'released'.",
    )

    steam_login_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Espera máxima para la lista de licencias tras el login (sesión live).",
    )

    log_level: str = Field(
        default="INFO",
        description="Nivel de logging por defecto de la CLI.",
    )
