"""Route group exports."""

from . import admin, delivery, health

__all__ = ["delivery", "admin", "health"]
