"""Pydantic request/response models for geolocation administration."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from ..models.domain import DeliveryZone


class GeolocationSettingsResponse(BaseModel):
    success: bool = True
    settings: dict[str, str]
    count: int


class GeolocationSettingsUpdateResponse(BaseModel):
    success: bool = True
    message: str
    updated_count: int
    invalidated_cache_entries: int = 0


class GeolocationSetupResponse(BaseModel):
    success: bool = True
    message: str
    settings_created: int
    zones_created: int


class ZoneStats(BaseModel):
    cached_addresses: int = 0
    deliverable_addresses: int = 0


class DeliveryZoneModel(BaseModel):
    id: int
    name: str
    min_distance_km: float
    max_distance_km: float
    delivery_fee: float
    estimated_time_minutes: int
    color_hex: str
    active: bool
    description: Optional[str] = None
    stats: Optional[ZoneStats] = None

    @classmethod
    def from_zone(cls, zone: DeliveryZone, stats: dict[str, int] | None = None) -> "DeliveryZoneModel":
        return cls(
            id=zone.id,
            name=zone.name,
            min_distance_km=zone.min_distance_km,
            max_distance_km=zone.max_distance_km,
            delivery_fee=float(zone.fee),
            estimated_time_minutes=zone.estimated_time_minutes,
            color_hex=zone.color,
            active=zone.active,
            description=zone.description,
            stats=ZoneStats(**stats) if stats is not None else None,
        )


class DeliveryZoneListResponse(BaseModel):
    success: bool = True
    zones: list[DeliveryZoneModel]
    total: int


class DeliveryZoneCreate(BaseModel):
    name: str = Field(..., description="Display name shown at checkout.")
    min_distance_km: float = Field(..., ge=0.0)
    max_distance_km: float
    delivery_fee: Decimal = Field(..., ge=0)
    estimated_time_minutes: int = Field(..., gt=0)
    color_hex: str = Field(default="#3B82F6", pattern=r"^#[0-9A-Fa-f]{6}$")
    description: Optional[str] = None
    active: bool = True

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("name must not be empty")
        return value.strip()

    @model_validator(mode="after")
    def validate_band(self) -> "DeliveryZoneCreate":
        if self.max_distance_km <= self.min_distance_km:
            raise ValueError("max_distance_km must be greater than min_distance_km")
        return self


class DeliveryZoneUpdate(BaseModel):
    """Partial zone update; omitted fields keep their stored value."""

    name: Optional[str] = None
    min_distance_km: Optional[float] = Field(default=None, ge=0.0)
    max_distance_km: Optional[float] = None
    delivery_fee: Optional[Decimal] = Field(default=None, ge=0)
    estimated_time_minutes: Optional[int] = Field(default=None, gt=0)
    color_hex: Optional[str] = Field(default=None, pattern=r"^#[0-9A-Fa-f]{6}$")
    description: Optional[str] = None
    active: Optional[bool] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            raise ValueError("name must not be empty")
        return value.strip() if value is not None else None

    def changes(self) -> dict:
        # Only description may be cleared with an explicit null.
        return {
            key: value
            for key, value in self.model_dump(exclude_unset=True).items()
            if value is not None or key == "description"
        }


class DeliveryZoneDeleteResponse(BaseModel):
    success: bool = True
    message: str
    affected_addresses: int
