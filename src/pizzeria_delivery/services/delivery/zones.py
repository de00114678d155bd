"""Distance band matching for delivery zones."""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

from ...models.domain import DeliveryZone


def match_zone(distance_km: float, zones: Sequence[DeliveryZone]) -> Optional[DeliveryZone]:
    """Return the first zone whose band contains ``distance_km``.

    ``zones`` must already be filtered to active zones and sorted ascending by
    ``min_distance_km``; on overlapping bands the earlier zone wins.
    """

    for zone in zones:
        if zone.contains(distance_km):
            return zone
    return None


def find_overlapping_zone(
    min_distance_km: float,
    max_distance_km: float,
    zones: Iterable[DeliveryZone],
) -> Optional[DeliveryZone]:
    """Return the first active zone whose band intersects ``[min, max]``."""

    for zone in zones:
        if not zone.active:
            continue
        if zone.min_distance_km <= max_distance_km and zone.max_distance_km >= min_distance_km:
            return zone
    return None
