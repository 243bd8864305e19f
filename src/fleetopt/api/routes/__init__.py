"""Route group exports."""

from . import eta, health, routes

__all__ = ["routes", "eta", "health"]
