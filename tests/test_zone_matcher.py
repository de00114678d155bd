from decimal import Decimal

from pizzeria_delivery.models.domain import DeliveryZone
from pizzeria_delivery.services.delivery.zones import find_overlapping_zone, match_zone


def _zone(zone_id: int, low: float, high: float, fee: str = "5.00", active: bool = True) -> DeliveryZone:
    return DeliveryZone(
        id=zone_id,
        name=f"Zone {zone_id}",
        min_distance_km=low,
        max_distance_km=high,
        fee=Decimal(fee),
        estimated_time_minutes=30,
        color="#000000",
        active=active,
    )


BANDS = [_zone(1, 0, 3, "0.00"), _zone(2, 3.01, 7), _zone(3, 7.01, 12), _zone(4, 12.01, 15)]


def test_matches_containing_band() -> None:
    assert match_zone(1.5, BANDS).id == 1
    assert match_zone(5.0, BANDS).id == 2
    assert match_zone(14.9, BANDS).id == 4


def test_band_edges_are_inclusive() -> None:
    assert match_zone(0.0, BANDS).id == 1
    assert match_zone(3.0, BANDS).id == 1
    assert match_zone(7.0, BANDS).id == 2
    assert match_zone(15.0, BANDS).id == 4


def test_gap_between_bands_has_no_match() -> None:
    assert match_zone(3.005, BANDS) is None
    assert match_zone(20.0, BANDS) is None


def test_empty_zone_list() -> None:
    assert match_zone(1.0, []) is None


def test_overlap_resolved_by_supplied_order() -> None:
    zones = [_zone(1, 0, 5, "1.00"), _zone(2, 4, 10, "2.00")]
    assert match_zone(4.5, zones).id == 1


def test_matcher_does_not_resort() -> None:
    zones = [_zone(2, 4, 10), _zone(1, 0, 5)]
    assert match_zone(4.5, zones).id == 2


def test_every_match_contains_distance() -> None:
    for tenth in range(0, 200):
        distance = tenth / 10
        zone = match_zone(distance, BANDS)
        if zone is not None:
            assert zone.min_distance_km <= distance <= zone.max_distance_km
        else:
            assert not any(z.contains(distance) for z in BANDS)


def test_find_overlapping_zone() -> None:
    assert find_overlapping_zone(2, 4, BANDS).id == 1
    assert find_overlapping_zone(15.5, 20, BANDS) is None
    assert find_overlapping_zone(0, 100, BANDS).id == 1


def test_find_overlapping_zone_ignores_inactive() -> None:
    zones = [_zone(1, 0, 5, active=False)]
    assert find_overlapping_zone(1, 2, zones) is None
