"""Domain models for delivery zone resolution."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True, slots=True)
class Coordinate:
    latitude: float
    longitude: float


@dataclass(frozen=True, slots=True)
class DeliveryConfiguration:
    """Snapshot of the pizzeria's geolocation settings for a single resolution."""

    home: Coordinate
    max_radius_km: float
    geolocation_enabled: bool
    fallback_fee: Decimal
    provider_credential: str
    home_address_label: str
    cache_freshness: timedelta


@dataclass(frozen=True, slots=True)
class DeliveryZone:
    """A distance band around the pizzeria mapped to a fee and ETA."""

    id: int
    name: str
    min_distance_km: float
    max_distance_km: float
    fee: Decimal
    estimated_time_minutes: int
    color: str
    active: bool = True
    description: Optional[str] = None

    def contains(self, distance_km: float) -> bool:
        return self.min_distance_km <= distance_km <= self.max_distance_km


@dataclass(frozen=True, slots=True)
class GeocodeResult:
    coordinate: Coordinate
    formatted_address: str
    city: str
    state: str
    postal_code: str


@dataclass(slots=True)
class GeocodeCacheEntry:
    """Last resolution outcome stored for a raw address text."""

    address_text: str
    formatted_address: str
    coordinate: Coordinate
    distance_km: Optional[float]
    zone_id: Optional[int]
    deliverable: bool
    last_verified_at: datetime
    city: str = ""
    state: str = ""

    def is_fresh(self, now: datetime, window: timedelta) -> bool:
        return now - self.last_verified_at < window


@dataclass(slots=True)
class DeliveryDecision:
    """Outcome of a delivery resolution, discriminated by ``method``."""

    method: str
    message: str
    deliverable: Optional[bool] = None
    fee: Optional[Decimal] = None
    eta_minutes: Optional[int] = None
    distance_km: Optional[float] = None
    max_radius_km: Optional[float] = None
    zone_id: Optional[int] = None
    zone_name: Optional[str] = None
    zone_color: Optional[str] = None
    formatted_address: Optional[str] = None
    error: Optional[str] = None
    home_address: Optional[str] = None
