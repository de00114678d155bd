"""Exception hierarchy for delivery resolution failures."""

from __future__ import annotations


class DeliveryError(Exception):
    """Base class for failures with a machine-readable ``reason``."""

    reason = "delivery_error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.reason)
        self.message = message or self.reason


class InvalidInput(DeliveryError):
    """Neither an address nor a coordinate was supplied."""

    reason = "invalid_input"


class StoreUnavailable(DeliveryError):
    """The row store is not configured or a read/write against it failed."""

    reason = "store_unavailable"


class GeocodingError(DeliveryError):
    reason = "geocoding_error"


class ConfigurationMissing(GeocodingError):
    reason = "configuration_missing"


class ProviderUnavailable(GeocodingError):
    reason = "provider_unavailable"


class AddressNotFound(GeocodingError):
    reason = "address_not_found"
