"""Errores del Core.

Por qué una jerarquía propia:
- La CLI distingue fallos fatales (credenciales) de fallos recuperables
  (servicio de depots conocidos) sin depender de excepciones de adaptadores.
- Los demás casos (datos ausentes, claves denegadas) no son errores: se
  absorben como omisiones en la salida.
"""

from __future__ import annotations


class DepotDumperError(Exception):
    """Base de todos los errores del dumper."""


class CredentialFailure(DepotDumperError):
    """No se pudo establecer la sesión u obtener las licencias de la cuenta."""


class FilterServiceUnavailable(DepotDumperError):
    """El servicio remoto de depots conocidos falló o respondió sin éxito."""


class DumpAborted(DepotDumperError):
    """El operador decidió abortar tras un fallo recuperable."""
