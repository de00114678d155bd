from datetime import timedelta
from decimal import Decimal

import pytest

from conftest import FakeSupabase
from pizzeria_delivery.persistence import settings_store


def test_configuration_defaults_when_values_missing() -> None:
    config = settings_store.configuration_from_values({})

    assert config.home.latitude == pytest.approx(-23.5505)
    assert config.home.longitude == pytest.approx(-46.6333)
    assert config.max_radius_km == 15.0
    assert config.geolocation_enabled is False
    assert config.fallback_fee == Decimal("8.00")
    assert config.provider_credential == ""
    assert config.cache_freshness == timedelta(days=7)


def test_configuration_ignores_unparseable_values() -> None:
    config = settings_store.configuration_from_values(
        {
            "pizzaria_latitude": "",
            "max_delivery_radius_km": "ten",
            "fallback_delivery_fee": "free",
            "geocoding_cache_hours": "-5",
        }
    )

    assert config.home.latitude == pytest.approx(-23.5505)
    assert config.max_radius_km == 15.0
    assert config.fallback_fee == Decimal("8.00")
    assert config.cache_freshness == timedelta(hours=168)


def test_load_configuration_reads_settings(fake_db: FakeSupabase) -> None:
    fake_db.seed_settings(
        pizzaria_latitude="-22.9068",
        pizzaria_longitude="-43.1729",
        max_delivery_radius_km="8.5",
        fallback_delivery_fee="6.50",
        geocoding_cache_hours="24",
        enable_geolocation_delivery="TRUE",
    )

    config = settings_store.load_configuration()

    assert config.home.latitude == pytest.approx(-22.9068)
    assert config.max_radius_km == 8.5
    assert config.geolocation_enabled is True
    assert config.fallback_fee == Decimal("6.50")
    assert config.provider_credential == "test-api-key"
    assert config.home_address_label == "Praça da Sé, São Paulo"
    assert config.cache_freshness == timedelta(hours=24)


def test_load_configuration_degrades_when_store_fails(fake_db: FakeSupabase) -> None:
    fake_db.seed_settings()
    fake_db.failing_tables.add("admin_settings")

    config = settings_store.load_configuration()

    assert config.geolocation_enabled is False
    assert config.fallback_fee == Decimal("8.00")


def test_load_configuration_without_store(no_db) -> None:
    assert settings_store.load_configuration().geolocation_enabled is False


@pytest.mark.parametrize(
    "key,value",
    [
        ("pizzaria_latitude", "91"),
        ("pizzaria_longitude", "-180.5"),
        ("max_delivery_radius_km", "0"),
        ("max_delivery_radius_km", "101"),
        ("fallback_delivery_fee", "-1"),
        ("fallback_delivery_fee", "abc"),
        ("geocoding_cache_hours", "0"),
        ("geocoding_cache_hours", "8761"),
        ("geocoding_cache_hours", "1.5"),
    ],
)
def test_validation_rejects_out_of_range(key: str, value: str) -> None:
    with pytest.raises(ValueError, match=key):
        settings_store.validate_geolocation_settings({key: value})


def test_validation_accepts_good_values() -> None:
    settings_store.validate_geolocation_settings(
        {
            "pizzaria_latitude": "-23.5",
            "pizzaria_longitude": "-46.6",
            "max_delivery_radius_km": "100",
            "fallback_delivery_fee": "0",
            "geocoding_cache_hours": "8760",
            "google_maps_api_key": "anything",
        }
    )


def test_update_writes_matching_rows(fake_db: FakeSupabase) -> None:
    fake_db.seed_settings()

    updated = settings_store.update_geolocation_settings({"max_delivery_radius_km": "20"})

    assert updated == 1
    assert settings_store.get_geolocation_settings()["max_delivery_radius_km"] == "20"


def test_masked_api_key_is_not_written_back(fake_db: FakeSupabase) -> None:
    fake_db.seed_settings(google_maps_api_key="AIzaSyRealSecretKey9876")

    updated = settings_store.update_geolocation_settings(
        {"google_maps_api_key": "AIza...9876", "max_delivery_radius_km": "12"}
    )

    values = settings_store.get_geolocation_settings()
    assert updated == 1
    assert values["google_maps_api_key"] == "AIzaSyRealSecretKey9876"
    assert values["max_delivery_radius_km"] == "12"


def test_new_api_key_replaces_stored_one(fake_db: FakeSupabase) -> None:
    fake_db.seed_settings(google_maps_api_key="AIzaSyRealSecretKey9876")

    settings_store.update_geolocation_settings({"google_maps_api_key": "AIzaSyRotatedKey0000"})

    assert settings_store.get_geolocation_settings()["google_maps_api_key"] == "AIzaSyRotatedKey0000"


def test_mask_secret() -> None:
    assert settings_store.mask_secret("AIzaSyExampleKey123456") == "AIza...3456"
    assert settings_store.mask_secret("short") == "*****"
    assert settings_store.mask_secret("") == ""


def test_ensure_defaults_keeps_configured_values(fake_db: FakeSupabase) -> None:
    fake_db.seed_settings()
    settings_store.ensure_default_settings()

    values = settings_store.get_geolocation_settings()
    assert values["google_maps_api_key"] == "test-api-key"
    assert values["enable_geolocation_delivery"] == "true"


def test_ensure_defaults_creates_missing_rows(fake_db: FakeSupabase) -> None:
    created = settings_store.ensure_default_settings()

    assert created == len(settings_store.DEFAULT_SETTINGS)
    assert settings_store.get_geolocation_settings()["geocoding_cache_hours"] == "168"
