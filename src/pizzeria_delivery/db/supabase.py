"""Supabase access for the delivery tables."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any

from supabase import Client, create_client

from ..config import settings

logger = logging.getLogger(__name__)

# admin_settings      (setting_key UNIQUE, setting_value, setting_type, description, updated_at)
# delivery_zones      (id, name, min_distance_km, max_distance_km, delivery_fee,
#                      estimated_time_minutes, color_hex, description, active, updated_at)
# geocoded_addresses  (address_text UNIQUE, formatted_address, latitude, longitude,
#                      distance_km, delivery_zone_id, is_deliverable, city, state,
#                      geocoding_service, last_verified)
DELIVERY_TABLES = ("admin_settings", "delivery_zones", "geocoded_addresses")


@lru_cache()
def get_supabase_client() -> Client | None:
    """Return the shared client, or ``None`` when PIZZA_SUPABASE_URL/KEY are unset.

    Building the client does not contact the server; connection problems
    surface on the first query.
    """
    if not settings.supabase_url or not settings.supabase_key:
        logger.warning("Supabase credentials not configured (missing URL or key)")
        return None

    try:
        return create_client(settings.supabase_url, settings.supabase_key)
    except Exception as e:
        logger.error(f"Failed to create Supabase client: {e}")
        return None


def database_status() -> dict[str, Any]:
    """Report whether the store is configured and each delivery table answers."""
    client = get_supabase_client()
    if client is None:
        return {
            "configured": False,
            "message": "Supabase not configured. Set PIZZA_SUPABASE_URL and PIZZA_SUPABASE_KEY environment variables.",
        }

    tables: dict[str, bool] = {}
    zones_configured = False
    errors: list[str] = []
    for table in DELIVERY_TABLES:
        try:
            response = client.table(table).select("*").limit(1).execute()
        except Exception as exc:
            logger.warning(f"Health check query on {table} failed: {exc}")
            tables[table] = False
            errors.append(f"{table}: {exc}")
            continue
        tables[table] = True
        if table == "delivery_zones":
            zones_configured = bool(response.data)

    connected = all(tables.values())
    status: dict[str, Any] = {
        "configured": True,
        "connected": connected,
        "tables": tables,
        "zones_configured": zones_configured,
        "message": "Database connected." if connected else "Database connection error.",
    }
    if errors:
        status["error"] = "; ".join(errors)
    return status
