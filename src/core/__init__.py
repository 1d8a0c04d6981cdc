"""Core: dominio, contratos y motor de resolución de depots.

No depende de la CLI ni de SteamKit; los adaptadores implementan sus contratos.
"""
