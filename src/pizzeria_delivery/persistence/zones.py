"""Database access for delivery zones."""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Optional

from ..models.domain import DeliveryZone
from .store import require_client, run_query, utcnow

logger = logging.getLogger(__name__)

TABLE = "delivery_zones"

DEFAULT_ZONES: tuple[dict[str, Any], ...] = (
    {
        "name": "Centro - Entrega Grátis",
        "min_distance_km": 0,
        "max_distance_km": 3,
        "delivery_fee": "0.00",
        "estimated_time_minutes": 25,
        "color_hex": "#10B981",
        "description": "Região central com entrega gratuita",
    },
    {
        "name": "Zona Próxima",
        "min_distance_km": 3.01,
        "max_distance_km": 7,
        "delivery_fee": "5.00",
        "estimated_time_minutes": 35,
        "color_hex": "#3B82F6",
        "description": "Bairros próximos ao centro",
    },
    {
        "name": "Zona Intermediária",
        "min_distance_km": 7.01,
        "max_distance_km": 12,
        "delivery_fee": "8.00",
        "estimated_time_minutes": 45,
        "color_hex": "#F59E0B",
        "description": "Bairros intermediários",
    },
    {
        "name": "Zona Distante",
        "min_distance_km": 12.01,
        "max_distance_km": 15,
        "delivery_fee": "12.00",
        "estimated_time_minutes": 60,
        "color_hex": "#EF4444",
        "description": "Limite da área de entrega",
    },
)


def zone_from_row(row: dict[str, Any]) -> DeliveryZone:
    return DeliveryZone(
        id=int(row["id"]),
        name=str(row["name"]),
        min_distance_km=float(row["min_distance_km"]),
        max_distance_km=float(row["max_distance_km"]),
        fee=Decimal(str(row["delivery_fee"])),
        estimated_time_minutes=int(row["estimated_time_minutes"]),
        color=str(row.get("color_hex") or ""),
        active=bool(row.get("active", True)),
        description=row.get("description"),
    )


def _zones_from_rows(rows: list[dict[str, Any]]) -> list[DeliveryZone]:
    zones: list[DeliveryZone] = []
    for row in rows:
        try:
            zones.append(zone_from_row(row))
        except (KeyError, TypeError, ValueError, ArithmeticError) as e:
            # Skip invalid rows but continue processing
            logger.warning(f"Skipping invalid delivery zone row: {e}")
    return zones


def list_active_zones() -> list[DeliveryZone]:
    """Active zones ordered by ascending ``min_distance_km``."""

    client = require_client()
    rows = run_query(
        client.table(TABLE).select("*").eq("active", True).order("min_distance_km"),
        "Active zone listing",
    )
    return _zones_from_rows(rows)


def get_active_zone(zone_id: int) -> Optional[DeliveryZone]:
    client = require_client()
    rows = run_query(
        client.table(TABLE).select("*").eq("id", zone_id).eq("active", True).limit(1),
        "Zone lookup",
    )
    zones = _zones_from_rows(rows)
    return zones[0] if zones else None


def list_zones() -> list[DeliveryZone]:
    client = require_client()
    rows = run_query(client.table(TABLE).select("*").order("min_distance_km"), "Zone listing")
    return _zones_from_rows(rows)


def zone_cache_stats() -> dict[int, dict[str, int]]:
    """Count cached addresses (and deliverable ones) per zone id."""

    client = require_client()
    rows = run_query(
        client.table("geocoded_addresses").select("delivery_zone_id, is_deliverable"),
        "Zone statistics",
    )
    stats: dict[int, dict[str, int]] = {}
    for row in rows:
        zone_id = row.get("delivery_zone_id")
        if zone_id is None:
            continue
        entry = stats.setdefault(int(zone_id), {"cached_addresses": 0, "deliverable_addresses": 0})
        entry["cached_addresses"] += 1
        if row.get("is_deliverable"):
            entry["deliverable_addresses"] += 1
    return stats


def create_zone(
    *,
    name: str,
    min_distance_km: float,
    max_distance_km: float,
    delivery_fee: Decimal,
    estimated_time_minutes: int,
    color_hex: str,
    description: str | None = None,
    active: bool = True,
) -> DeliveryZone:
    client = require_client()
    rows = run_query(
        client.table(TABLE).insert(
            {
                "name": name.strip(),
                "min_distance_km": min_distance_km,
                "max_distance_km": max_distance_km,
                "delivery_fee": str(delivery_fee),
                "estimated_time_minutes": estimated_time_minutes,
                "color_hex": color_hex,
                "description": description,
                "active": active,
            }
        ),
        "Zone creation",
    )
    if not rows:
        raise ValueError("Zone insert returned no row.")
    zone = zone_from_row(rows[0])
    logger.info(f"Created delivery zone {zone.name} ({zone.min_distance_km}-{zone.max_distance_km} km)")
    return zone


def seed_default_zones() -> int:
    """Insert the default distance bands when the zone table is empty."""

    client = require_client()
    existing = run_query(client.table(TABLE).select("id").limit(1), "Zone count")
    if existing:
        logger.info("Delivery zones already exist, skipping default seed")
        return 0
    rows = run_query(
        client.table(TABLE).insert([{**zone, "active": True} for zone in DEFAULT_ZONES]),
        "Default zone seed",
    )
    logger.info(f"Seeded {len(rows)} default delivery zones")
    return len(rows)


def get_zone(zone_id: int) -> Optional[DeliveryZone]:
    client = require_client()
    rows = run_query(client.table(TABLE).select("*").eq("id", zone_id).limit(1), "Zone lookup")
    zones = _zones_from_rows(rows)
    return zones[0] if zones else None


def update_zone(zone_id: int, changes: dict[str, Any]) -> Optional[DeliveryZone]:
    """Apply a partial update; returns ``None`` when no zone has this id."""

    row = dict(changes)
    if "name" in row:
        row["name"] = str(row["name"]).strip()
    if "delivery_fee" in row:
        row["delivery_fee"] = str(row["delivery_fee"])
    row["updated_at"] = utcnow().isoformat()

    client = require_client()
    rows = run_query(client.table(TABLE).update(row).eq("id", zone_id), f"Update of zone {zone_id}")
    if not rows:
        return None
    zone = zone_from_row(rows[0])
    logger.info(f"Updated delivery zone {zone.id}: {sorted(changes)}")
    return zone


def deactivate_zone(zone_id: int) -> Optional[DeliveryZone]:
    """Soft-delete a zone; cached entries pointing at it are re-resolved on next use."""

    zone = update_zone(zone_id, {"active": False})
    if zone is not None:
        logger.info(f"Deactivated delivery zone {zone.name}")
    return zone
