"""Geolocation settings stored as key/value rows in ``admin_settings``."""

from __future__ import annotations

import logging
from datetime import timedelta
from decimal import Decimal, InvalidOperation
from typing import Callable, Mapping

from ..config import settings
from ..errors import StoreUnavailable
from ..models.domain import Coordinate, DeliveryConfiguration
from .store import require_client, run_query, utcnow

logger = logging.getLogger(__name__)

TABLE = "admin_settings"
SETTING_TYPE = "geolocation"

HOME_LATITUDE = "pizzaria_latitude"
HOME_LONGITUDE = "pizzaria_longitude"
HOME_ADDRESS = "pizzaria_address"
MAX_RADIUS = "max_delivery_radius_km"
GEOLOCATION_ENABLED = "enable_geolocation_delivery"
FALLBACK_FEE = "fallback_delivery_fee"
API_KEY = "google_maps_api_key"
CACHE_HOURS = "geocoding_cache_hours"

DEFAULT_SETTINGS: tuple[tuple[str, str, str], ...] = (
    (HOME_LATITUDE, "", "Latitude da pizzaria"),
    (HOME_LONGITUDE, "", "Longitude da pizzaria"),
    (HOME_ADDRESS, "", "Endereço completo da pizzaria"),
    (MAX_RADIUS, "15", "Raio máximo de entrega em km"),
    (API_KEY, "", "Chave da API do Google Maps"),
    (GEOLOCATION_ENABLED, "false", "Habilitar cálculo por geolocalização"),
    (FALLBACK_FEE, "8.00", "Taxa padrão quando não conseguir calcular"),
    (CACHE_HOURS, "168", "Horas para manter cache (168 = 1 semana)"),
)
CONFIGURATION_KEYS = tuple(key for key, _, _ in DEFAULT_SETTINGS)


def _as_float(value: str | None, default: float) -> float:
    try:
        return float(value) if value not in (None, "") else default
    except ValueError:
        return default


def _as_decimal(value: str | None, default: Decimal) -> Decimal:
    try:
        return Decimal(value) if value not in (None, "") else default
    except InvalidOperation:
        return default


def _as_int(value: str | None, default: int) -> int:
    try:
        return int(value) if value not in (None, "") else default
    except ValueError:
        return default


def configuration_from_values(values: Mapping[str, str]) -> DeliveryConfiguration:
    """Build a configuration snapshot, using process defaults for missing keys."""

    enabled = values.get(GEOLOCATION_ENABLED)
    cache_hours = _as_int(values.get(CACHE_HOURS), settings.default_cache_hours)
    if cache_hours <= 0:
        cache_hours = settings.default_cache_hours
    return DeliveryConfiguration(
        home=Coordinate(
            latitude=_as_float(values.get(HOME_LATITUDE), settings.default_home_latitude),
            longitude=_as_float(values.get(HOME_LONGITUDE), settings.default_home_longitude),
        ),
        max_radius_km=_as_float(values.get(MAX_RADIUS), settings.default_max_radius_km),
        geolocation_enabled=(
            enabled.strip().lower() == "true" if enabled is not None else settings.default_geolocation_enabled
        ),
        fallback_fee=_as_decimal(values.get(FALLBACK_FEE), settings.default_fallback_fee),
        provider_credential=(values.get(API_KEY) or "").strip(),
        home_address_label=values.get(HOME_ADDRESS) or "",
        cache_freshness=timedelta(hours=cache_hours),
    )


def load_configuration() -> DeliveryConfiguration:
    """Read the current geolocation settings; degrade to process defaults on store failure."""

    try:
        client = require_client()
        rows = run_query(
            client.table(TABLE)
            .select("setting_key, setting_value")
            .in_("setting_key", list(CONFIGURATION_KEYS)),
            "Configuration load",
        )
    except StoreUnavailable as exc:
        logger.warning(f"Delivery configuration unavailable, using defaults: {exc}")
        return configuration_from_values({})

    values = {
        str(row["setting_key"]): "" if row.get("setting_value") is None else str(row["setting_value"])
        for row in rows
        if row.get("setting_key")
    }
    logger.debug(f"Loaded delivery configuration keys: {sorted(values)}")
    return configuration_from_values(values)


def get_geolocation_settings() -> dict[str, str]:
    client = require_client()
    rows = run_query(
        client.table(TABLE)
        .select("setting_key, setting_value, description")
        .eq("setting_type", SETTING_TYPE)
        .order("setting_key"),
        "Geolocation settings listing",
    )
    return {str(row["setting_key"]): str(row.get("setting_value") or "") for row in rows}


def _in_range(low: float, high: float, *, low_inclusive: bool = True) -> Callable[[str], bool]:
    def check(value: str) -> bool:
        try:
            number = float(value)
        except ValueError:
            return False
        above_low = number >= low if low_inclusive else number > low
        return above_low and number <= high

    return check


def _valid_cache_hours(value: str) -> bool:
    try:
        hours = int(value)
    except ValueError:
        return False
    return 0 < hours <= 8760


def _non_negative_decimal(value: str) -> bool:
    try:
        return Decimal(value) >= 0
    except InvalidOperation:
        return False


VALIDATORS: dict[str, Callable[[str], bool]] = {
    HOME_LATITUDE: _in_range(-90, 90),
    HOME_LONGITUDE: _in_range(-180, 180),
    MAX_RADIUS: _in_range(0, 100, low_inclusive=False),
    FALLBACK_FEE: _non_negative_decimal,
    CACHE_HOURS: _valid_cache_hours,
}


def validate_geolocation_settings(values: Mapping[str, str]) -> None:
    """Raise ``ValueError`` naming the first invalid setting."""

    for key, value in values.items():
        validator = VALIDATORS.get(key)
        if validator is not None and not validator(str(value).strip()):
            raise ValueError(f"Invalid value for {key}: {value}")


def mask_secret(value: str) -> str:
    if len(value) <= 8:
        return "*" * len(value)
    return f"{value[:4]}...{value[-4:]}"


def _stored_value(client, key: str) -> str:
    rows = run_query(
        client.table(TABLE).select("setting_value").eq("setting_key", key).limit(1),
        f"Read of setting {key}",
    )
    return str(rows[0].get("setting_value") or "") if rows else ""


def update_geolocation_settings(values: Mapping[str, str]) -> int:
    """Write each setting; individual failures are logged and skipped.

    A credential submitted in its masked form (as served by the settings
    listing) is left untouched.
    """

    client = require_client()
    values = dict(values)
    if API_KEY in values and values[API_KEY] == mask_secret(_stored_value(client, API_KEY)):
        logger.debug("Masked API key submitted, keeping the stored credential")
        del values[API_KEY]

    updated = 0
    for key, value in values.items():
        try:
            rows = run_query(
                client.table(TABLE)
                .update({"setting_value": str(value), "updated_at": utcnow().isoformat()})
                .eq("setting_key", key)
                .eq("setting_type", SETTING_TYPE),
                f"Update of setting {key}",
            )
        except StoreUnavailable as exc:
            logger.error(f"Failed to update geolocation setting {key}: {exc}")
            continue
        if rows:
            updated += 1
        else:
            logger.warning(f"Unknown geolocation setting {key}, nothing updated")
    logger.info(f"Updated {updated} geolocation settings")
    return updated


def ensure_default_settings() -> int:
    """Insert missing geolocation settings without overwriting configured values."""

    client = require_client()
    now = utcnow().isoformat()
    rows = run_query(
        client.table(TABLE).upsert(
            [
                {
                    "setting_key": key,
                    "setting_value": value,
                    "setting_type": SETTING_TYPE,
                    "description": description,
                    "updated_at": now,
                }
                for key, value, description in DEFAULT_SETTINGS
            ],
            on_conflict="setting_key",
            ignore_duplicates=True,
        ),
        "Default settings seed",
    )
    return len(rows)
