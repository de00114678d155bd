"""Delivery fee and ETA resolution for checkout."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional

from ...config import settings
from ...errors import GeocodingError, InvalidInput, StoreUnavailable
from ...models.domain import (
    Coordinate,
    DeliveryConfiguration,
    DeliveryDecision,
    DeliveryZone,
    GeocodeCacheEntry,
)
from ...persistence import zones as zone_store
from ...persistence.geocode_cache import GeocodeCache
from ...persistence.settings_store import load_configuration
from ...persistence.store import utcnow
from ..geospatial import distance_km
from .geocoding import GeocodingClient
from .zones import match_zone

logger = logging.getLogger(__name__)

GEOCODING_FAILURE_MESSAGES = {
    "address_not_found": "Address not found",
    "provider_unavailable": "Address lookup is temporarily unavailable, please try again",
    "configuration_missing": "Address lookup is not configured",
}


class DeliveryResolver:
    """Decide whether, at what fee and how fast an address can be served.

    Every call loads configuration, zones and cache entries fresh; the
    resolver itself holds no per-request state and is safe to share between
    threads.
    """

    def __init__(
        self,
        cache: GeocodeCache | None = None,
        geocoder: GeocodingClient | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.cache = cache or GeocodeCache(clock=clock)
        self.geocoder = geocoder or GeocodingClient()
        self.clock = clock

    def resolve(
        self,
        address_text: Optional[str] = None,
        coordinate: Optional[Coordinate] = None,
    ) -> DeliveryDecision:
        if address_text is not None and not address_text.strip():
            address_text = None
        if address_text is None and coordinate is None:
            raise InvalidInput("An address or coordinates are required.")

        config = load_configuration()
        if not config.geolocation_enabled:
            return self._fallback_decision(
                config,
                message="Geolocation delivery calculation disabled",
            )

        formatted_address = address_text
        city = state = ""
        if coordinate is None:
            entry = self.cache.lookup(address_text, freshness=config.cache_freshness)
            if entry is not None:
                if entry.zone_id is not None and entry.distance_km is not None and entry.distance_km <= config.max_radius_km:
                    cached = self._cached_zone_decision(entry, config)
                    if cached is not None:
                        return cached
                    # Cached zone is gone or inactive: resolve as a miss.
                else:
                    logger.debug(f"Reusing cached coordinates for {address_text!r}")
                    coordinate = entry.coordinate
                    formatted_address = entry.formatted_address
                    city, state = entry.city, entry.state

        if coordinate is None:
            try:
                result = self.geocoder.geocode(address_text, config.provider_credential)
            except GeocodingError as exc:
                logger.warning(f"Geocoding failed ({exc.reason}): {exc.message}")
                return DeliveryDecision(
                    method="geocoding_failed",
                    message=GEOCODING_FAILURE_MESSAGES.get(exc.reason, "Address not found"),
                    deliverable=False,
                    error=exc.reason,
                    home_address=config.home_address_label or None,
                )
            coordinate = result.coordinate
            formatted_address = result.formatted_address or address_text
            city, state = result.city, result.state

        distance = distance_km(config.home, coordinate)
        logger.info(f"Delivery distance computed: {distance:.2f} km")

        if distance > config.max_radius_km:
            self._remember(address_text, formatted_address, coordinate, distance, None, False, city, state)
            return DeliveryDecision(
                method="out_of_range",
                message=(
                    f"Address outside the delivery area. Distance: {distance:.1f}km "
                    f"(maximum: {config.max_radius_km:g}km)"
                ),
                deliverable=False,
                distance_km=distance,
                max_radius_km=config.max_radius_km,
                formatted_address=formatted_address,
                home_address=config.home_address_label or None,
            )

        zone = match_zone(distance, self._active_zones())
        self._remember(
            address_text,
            formatted_address,
            coordinate,
            distance,
            zone.id if zone else None,
            True,
            city,
            state,
        )
        if zone is None:
            decision = self._fallback_decision(config, message=f"Delivery available - {settings.fallback_zone_name}")
        else:
            decision = self._zone_decision(zone, method="zone_match", config=config)
        decision.distance_km = distance
        decision.formatted_address = formatted_address
        logger.info(
            f"Delivery resolved via {decision.method}: fee={decision.fee} eta={decision.eta_minutes}min"
        )
        return decision

    def _cached_zone_decision(
        self, entry: GeocodeCacheEntry, config: DeliveryConfiguration
    ) -> Optional[DeliveryDecision]:
        try:
            zone = zone_store.get_active_zone(entry.zone_id)
        except StoreUnavailable as exc:
            logger.warning(f"Could not re-validate cached zone {entry.zone_id}: {exc}")
            return None
        if zone is None:
            logger.info(f"Cached zone {entry.zone_id} is no longer active, re-resolving")
            return None

        decision = self._zone_decision(zone, method="cache", config=config)
        decision.distance_km = entry.distance_km
        decision.formatted_address = entry.formatted_address
        logger.info(f"Delivery resolved from cache: zone={zone.name} distance={entry.distance_km:.2f} km")
        return decision

    def _active_zones(self) -> list[DeliveryZone]:
        try:
            return zone_store.list_active_zones()
        except StoreUnavailable as exc:
            logger.warning(f"Delivery zones unavailable, using fallback fee: {exc}")
            return []

    def _remember(
        self,
        address_text: Optional[str],
        formatted_address: Optional[str],
        coordinate: Coordinate,
        distance: float,
        zone_id: Optional[int],
        deliverable: bool,
        city: str,
        state: str,
    ) -> None:
        if address_text is None:
            return
        self.cache.upsert(
            address_text,
            GeocodeCacheEntry(
                address_text=address_text,
                formatted_address=formatted_address or address_text,
                coordinate=coordinate,
                distance_km=distance,
                zone_id=zone_id,
                deliverable=deliverable,
                last_verified_at=self.clock(),
                city=city,
                state=state,
            ),
        )

    @staticmethod
    def _zone_decision(zone: DeliveryZone, *, method: str, config: DeliveryConfiguration) -> DeliveryDecision:
        return DeliveryDecision(
            method=method,
            message=f"Delivery available - {zone.name}",
            deliverable=True,
            fee=zone.fee,
            eta_minutes=zone.estimated_time_minutes,
            zone_id=zone.id,
            zone_name=zone.name,
            zone_color=zone.color,
            home_address=config.home_address_label or None,
        )

    @staticmethod
    def _fallback_decision(config: DeliveryConfiguration, *, message: str) -> DeliveryDecision:
        return DeliveryDecision(
            method="fallback",
            message=message,
            deliverable=True,
            fee=config.fallback_fee,
            eta_minutes=settings.fallback_eta_minutes,
            zone_name=settings.fallback_zone_name,
            zone_color=settings.fallback_zone_color,
            home_address=config.home_address_label or None,
        )


def resolve_delivery(
    address_text: Optional[str] = None,
    coordinate: Optional[Coordinate] = None,
) -> DeliveryDecision:
    return DeliveryResolver().resolve(address_text=address_text, coordinate=coordinate)
