"""Row-store access for settings, zones and the geocode cache."""

from .geocode_cache import GeocodeCache

__all__ = ["GeocodeCache"]
