"""Admin endpoints for geolocation settings and delivery zones."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, HTTPException, status

from ...errors import StoreUnavailable
from ...models.domain import DeliveryZone
from ...persistence import settings_store
from ...persistence import zones as zone_store
from ...persistence.geocode_cache import GeocodeCache
from ...schemas.admin import (
    DeliveryZoneCreate,
    DeliveryZoneDeleteResponse,
    DeliveryZoneListResponse,
    DeliveryZoneModel,
    DeliveryZoneUpdate,
    GeolocationSettingsResponse,
    GeolocationSettingsUpdateResponse,
    GeolocationSetupResponse,
)
from ...services.delivery.zones import find_overlapping_zone

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


def _store_error(exc: StoreUnavailable) -> HTTPException:
    logger.error(f"Row store unavailable: {exc}")
    return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=exc.message)


def _zone_not_found(zone_id: int) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Delivery zone {zone_id} not found")


def _overlap_error(zone: DeliveryZone) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=f'Overlaps zone "{zone.name}" ({zone.min_distance_km}km - {zone.max_distance_km}km)',
    )


@router.get("/geolocation/settings", response_model=GeolocationSettingsResponse)
def get_geolocation_settings() -> GeolocationSettingsResponse:
    try:
        values = settings_store.get_geolocation_settings()
    except StoreUnavailable as exc:
        raise _store_error(exc) from exc
    if values.get(settings_store.API_KEY):
        values[settings_store.API_KEY] = settings_store.mask_secret(values[settings_store.API_KEY])
    return GeolocationSettingsResponse(settings=values, count=len(values))


@router.put("/geolocation/settings", response_model=GeolocationSettingsUpdateResponse)
def update_geolocation_settings(payload: dict[str, Any] = Body(...)) -> GeolocationSettingsUpdateResponse:
    """Update geolocation settings; moving the pizzeria invalidates cached distances."""
    values = {key: "" if value is None else str(value).strip() for key, value in payload.items()}
    try:
        settings_store.validate_geolocation_settings(values)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    try:
        current = settings_store.get_geolocation_settings()
        home_moved = any(
            key in values and values[key] != current.get(key)
            for key in (settings_store.HOME_LATITUDE, settings_store.HOME_LONGITUDE)
        )
        updated = settings_store.update_geolocation_settings(values)
        invalidated = 0
        if home_moved:
            invalidated = GeocodeCache().invalidate_distances()
    except StoreUnavailable as exc:
        raise _store_error(exc) from exc

    return GeolocationSettingsUpdateResponse(
        message="Settings updated",
        updated_count=updated,
        invalidated_cache_entries=invalidated,
    )


@router.post("/geolocation/setup", response_model=GeolocationSetupResponse)
def setup_geolocation() -> GeolocationSetupResponse:
    """Create missing geolocation settings and seed default zones into an empty table."""
    try:
        settings_created = settings_store.ensure_default_settings()
        zones_created = zone_store.seed_default_zones()
    except StoreUnavailable as exc:
        raise _store_error(exc) from exc
    logger.info(f"Geolocation setup finished: {settings_created} settings, {zones_created} zones")
    return GeolocationSetupResponse(
        message="Geolocation setup completed",
        settings_created=settings_created,
        zones_created=zones_created,
    )


@router.get("/delivery-zones", response_model=DeliveryZoneListResponse)
def list_delivery_zones() -> DeliveryZoneListResponse:
    try:
        zones = zone_store.list_zones()
        stats = zone_store.zone_cache_stats()
    except StoreUnavailable as exc:
        raise _store_error(exc) from exc
    models = [
        DeliveryZoneModel.from_zone(zone, stats.get(zone.id, {"cached_addresses": 0, "deliverable_addresses": 0}))
        for zone in zones
    ]
    return DeliveryZoneListResponse(zones=models, total=len(models))


@router.post("/delivery-zones", response_model=DeliveryZoneModel, status_code=status.HTTP_201_CREATED)
def create_delivery_zone(payload: DeliveryZoneCreate) -> DeliveryZoneModel:
    try:
        existing = zone_store.list_active_zones()
        overlapping = find_overlapping_zone(payload.min_distance_km, payload.max_distance_km, existing)
        if overlapping is not None:
            raise _overlap_error(overlapping)
        zone = zone_store.create_zone(**payload.model_dump())
    except StoreUnavailable as exc:
        raise _store_error(exc) from exc
    return DeliveryZoneModel.from_zone(zone)


@router.get("/delivery-zones/{zone_id}", response_model=DeliveryZoneModel)
def get_delivery_zone(zone_id: int) -> DeliveryZoneModel:
    try:
        zone = zone_store.get_zone(zone_id)
        if zone is None:
            raise _zone_not_found(zone_id)
        stats = zone_store.zone_cache_stats().get(zone_id, {"cached_addresses": 0, "deliverable_addresses": 0})
    except StoreUnavailable as exc:
        raise _store_error(exc) from exc
    return DeliveryZoneModel.from_zone(zone, stats)


@router.put("/delivery-zones/{zone_id}", response_model=DeliveryZoneModel)
def update_delivery_zone(zone_id: int, payload: DeliveryZoneUpdate) -> DeliveryZoneModel:
    """Partially update a zone; band changes detach cached addresses from it."""
    changes = payload.changes()
    if not changes:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No fields to update")

    try:
        existing = zone_store.get_zone(zone_id)
        if existing is None:
            raise _zone_not_found(zone_id)

        new_min = changes.get("min_distance_km", existing.min_distance_km)
        new_max = changes.get("max_distance_km", existing.max_distance_km)
        if new_max <= new_min:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="max_distance_km must be greater than min_distance_km",
            )

        band_changed = "min_distance_km" in changes or "max_distance_km" in changes
        active = changes.get("active", existing.active)
        if active and (band_changed or not existing.active):
            others = [zone for zone in zone_store.list_active_zones() if zone.id != zone_id]
            overlapping = find_overlapping_zone(new_min, new_max, others)
            if overlapping is not None:
                raise _overlap_error(overlapping)

        zone = zone_store.update_zone(zone_id, changes)
        if zone is None:
            raise _zone_not_found(zone_id)
        if band_changed or not zone.active:
            GeocodeCache().invalidate_zone(zone_id)
    except StoreUnavailable as exc:
        raise _store_error(exc) from exc
    return DeliveryZoneModel.from_zone(zone)


@router.delete("/delivery-zones/{zone_id}", response_model=DeliveryZoneDeleteResponse)
def delete_delivery_zone(zone_id: int) -> DeliveryZoneDeleteResponse:
    """Deactivate a zone. The last active zone cannot be removed."""
    try:
        existing = zone_store.get_zone(zone_id)
        if existing is None:
            raise _zone_not_found(zone_id)
        if existing.active and len(zone_store.list_active_zones()) <= 1:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cannot remove the last active delivery zone",
            )
        zone_store.deactivate_zone(zone_id)
        affected = GeocodeCache().invalidate_zone(zone_id)
    except StoreUnavailable as exc:
        raise _store_error(exc) from exc
    return DeliveryZoneDeleteResponse(
        message=f'Zone "{existing.name}" deactivated',
        affected_addresses=affected,
    )
