"""Pydantic request/response models for delivery calculation."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from ..models.domain import Coordinate, DeliveryDecision

DeliveryMethod = Literal["fallback", "cache", "zone_match", "out_of_range", "geocoding_failed", "error"]


class DeliveryCalculationRequest(BaseModel):
    address: Optional[str] = Field(default=None, description="Free-text delivery address.")
    latitude: Optional[float] = Field(default=None, ge=-90.0, le=90.0)
    longitude: Optional[float] = Field(default=None, ge=-180.0, le=180.0)

    @field_validator("address")
    @classmethod
    def blank_address_is_missing(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            return None
        return value

    @model_validator(mode="after")
    def coordinates_come_in_pairs(self) -> "DeliveryCalculationRequest":
        if (self.latitude is None) != (self.longitude is None):
            raise ValueError("latitude and longitude must be supplied together")
        return self

    def coordinate(self) -> Optional[Coordinate]:
        if self.latitude is None or self.longitude is None:
            return None
        return Coordinate(latitude=self.latitude, longitude=self.longitude)


class DeliveryCalculationResponse(BaseModel):
    method: DeliveryMethod
    message: str
    deliverable: Optional[bool] = None
    delivery_fee: Optional[float] = None
    estimated_time: Optional[int] = None
    distance_km: Optional[float] = None
    max_radius_km: Optional[float] = None
    zone_name: Optional[str] = None
    zone_color: Optional[str] = None
    formatted_address: Optional[str] = None
    error: Optional[str] = None
    pizzaria_address: Optional[str] = None

    @classmethod
    def from_decision(cls, decision: DeliveryDecision) -> "DeliveryCalculationResponse":
        return cls(
            method=decision.method,
            message=decision.message,
            deliverable=decision.deliverable,
            delivery_fee=float(decision.fee) if decision.fee is not None else None,
            estimated_time=decision.eta_minutes,
            distance_km=decision.distance_km,
            max_radius_km=decision.max_radius_km,
            zone_name=decision.zone_name,
            zone_color=decision.zone_color,
            formatted_address=decision.formatted_address,
            error=decision.error,
            pizzaria_address=decision.home_address,
        )
