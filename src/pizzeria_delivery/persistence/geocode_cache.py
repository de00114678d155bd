"""Persistent cache of geocoded addresses and their last delivery outcome."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any, Callable, Optional

from ..errors import StoreUnavailable
from ..models.domain import Coordinate, GeocodeCacheEntry
from .store import parse_timestamp, require_client, run_query, utcnow

logger = logging.getLogger(__name__)

TABLE = "geocoded_addresses"
DEFAULT_FRESHNESS = timedelta(days=7)
GEOCODING_SERVICE = "google"

_COLUMNS = (
    "address_text, formatted_address, latitude, longitude, distance_km, "
    "delivery_zone_id, is_deliverable, city, state, last_verified"
)


def _optional_float(value: Any) -> Optional[float]:
    return None if value is None else float(value)


def _entry_from_row(row: dict[str, Any]) -> Optional[GeocodeCacheEntry]:
    if row.get("latitude") is None or row.get("longitude") is None:
        return None
    try:
        zone_id = row.get("delivery_zone_id")
        return GeocodeCacheEntry(
            address_text=str(row["address_text"]),
            formatted_address=str(row.get("formatted_address") or row["address_text"]),
            coordinate=Coordinate(latitude=float(row["latitude"]), longitude=float(row["longitude"])),
            distance_km=_optional_float(row.get("distance_km")),
            zone_id=None if zone_id is None else int(zone_id),
            deliverable=bool(row.get("is_deliverable")),
            last_verified_at=parse_timestamp(row["last_verified"]),
            city=str(row.get("city") or ""),
            state=str(row.get("state") or ""),
        )
    except (KeyError, TypeError, ValueError) as exc:
        logger.warning(f"Ignoring malformed geocode cache row: {exc}")
        return None


class GeocodeCache:
    """Read-through/write-behind cache over the ``geocoded_addresses`` table.

    Store failures never escape: ``lookup`` degrades to a miss and ``upsert``
    reports ``False``.
    """

    def __init__(self, clock: Callable[[], datetime] = utcnow) -> None:
        self.clock = clock

    def lookup(self, address_text: str, *, freshness: timedelta = DEFAULT_FRESHNESS) -> Optional[GeocodeCacheEntry]:
        """Return the cached entry for ``address_text`` only if it is fresh."""

        try:
            client = require_client()
            rows = run_query(
                client.table(TABLE).select(_COLUMNS).eq("address_text", address_text).limit(1),
                "Geocode cache lookup",
            )
        except StoreUnavailable as exc:
            logger.warning(f"Geocode cache unavailable, resolving live: {exc}")
            return None

        if not rows:
            return None
        entry = _entry_from_row(rows[0])
        if entry is None:
            return None
        if not entry.is_fresh(self.clock(), freshness):
            logger.debug(f"Geocode cache entry is stale (last verified {entry.last_verified_at.isoformat()})")
            return None
        return entry

    def upsert(self, address_text: str, entry: GeocodeCacheEntry) -> bool:
        """Insert or replace the row keyed by ``address_text`` in a single write."""

        row = {
            "address_text": address_text,
            "formatted_address": entry.formatted_address,
            "latitude": entry.coordinate.latitude,
            "longitude": entry.coordinate.longitude,
            "distance_km": entry.distance_km,
            "delivery_zone_id": entry.zone_id,
            "is_deliverable": entry.deliverable,
            "city": entry.city,
            "state": entry.state,
            "geocoding_service": GEOCODING_SERVICE,
            "last_verified": entry.last_verified_at.isoformat(),
        }
        try:
            client = require_client()
            run_query(client.table(TABLE).upsert(row, on_conflict="address_text"), "Geocode cache upsert")
        except StoreUnavailable as exc:
            logger.warning(f"Failed to write geocode cache entry: {exc}")
            return False
        return True

    def invalidate_distances(self) -> int:
        """Forget every cached distance/zone so entries are re-resolved on next use.

        Used after the pizzeria moves: coordinates stay, but entries are
        back-dated a year so they fail the freshness check.
        """

        client = require_client()
        rows = run_query(
            client.table(TABLE)
            .update(
                {
                    "distance_km": None,
                    "delivery_zone_id": None,
                    "last_verified": (self.clock() - timedelta(days=365)).isoformat(),
                }
            )
            .gte("distance_km", 0),
            "Geocode cache invalidation",
        )
        logger.info(f"Invalidated {len(rows)} cached delivery distances")
        return len(rows)

    def invalidate_zone(self, zone_id: int) -> int:
        """Detach cached entries from ``zone_id``.

        Coordinates and distances stay valid, so the next lookup reuses them
        and matches against the current zone bands without a provider call.
        """

        client = require_client()
        rows = run_query(
            client.table(TABLE).update({"delivery_zone_id": None}).eq("delivery_zone_id", zone_id),
            f"Geocode cache invalidation for zone {zone_id}",
        )
        logger.info(f"Detached {len(rows)} cached addresses from zone {zone_id}")
        return len(rows)
