"""Adaptadores de infraestructura (sesiones Steam, HTTP, ficheros de salida)."""
