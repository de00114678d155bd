"""Application configuration and settings management."""

from decimal import Decimal
from typing import Any, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults.

    Per-request delivery configuration (home coordinates, radius, fees) lives in
    the ``admin_settings`` table; the ``default_*`` values here are only used
    when a row is missing or the store cannot be read.
    """

    model_config = SettingsConfigDict(
        env_prefix="PIZZA_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Pizzeria Delivery Zone API"
    api_prefix: str = "/api"
    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    geocoding_base_url: str = Field(
        default="https://maps.googleapis.com/maps/api/geocode/json",
        description="Google Geocoding JSON endpoint.",
    )
    geocoding_region: str = Field(default="br", description="Region bias sent to the geocoder.")
    geocoding_language: str = Field(default="pt-BR", description="Language for formatted addresses.")
    geocoding_timeout_seconds: float = Field(default=10.0, gt=0.0)

    fallback_eta_minutes: int = Field(default=45, ge=1)
    fallback_zone_name: str = "Taxa Padrão"
    fallback_zone_color: str = "#6B7280"

    default_home_latitude: float = Field(default=-23.5505, ge=-90.0, le=90.0)
    default_home_longitude: float = Field(default=-46.6333, ge=-180.0, le=180.0)
    default_max_radius_km: float = Field(default=15.0, gt=0.0)
    default_fallback_fee: Decimal = Field(default=Decimal("8.00"), ge=0)
    default_cache_hours: int = Field(default=168, ge=1)
    default_geolocation_enabled: bool = False

    # Supabase configuration
    supabase_url: Optional[str] = Field(
        default=None,
        description="Supabase project URL (e.g., https://xxx.supabase.co).",
    )
    supabase_key: Optional[str] = Field(
        default=None,
        description="Supabase service role key for backend operations.",
    )

    @field_validator("frontend_allowed_origins", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            # Try JSON first
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            if value.strip():
                return (value.strip(),)
        return tuple()


settings = Settings()
