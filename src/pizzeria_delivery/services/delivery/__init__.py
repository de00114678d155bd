"""Delivery zone resolution services."""

from .geocoding import GeocodingClient, parse_geocode_response
from .resolver import DeliveryResolver, resolve_delivery
from .zones import find_overlapping_zone, match_zone

__all__ = [
    "DeliveryResolver",
    "GeocodingClient",
    "find_overlapping_zone",
    "match_zone",
    "parse_geocode_response",
    "resolve_delivery",
]
