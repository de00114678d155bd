"""HTTP client for the Google Geocoding API."""

from __future__ import annotations

import logging
from typing import Any, Sequence

import httpx

from ...config import settings
from ...errors import AddressNotFound, ConfigurationMissing, ProviderUnavailable
from ...models.domain import Coordinate, GeocodeResult

logger = logging.getLogger(__name__)


def address_component(
    components: Sequence[dict[str, Any]],
    component_type: str,
    field: str = "long_name",
) -> str:
    """Return ``field`` of the first component tagged ``component_type``, or ``""``."""

    for component in components:
        if not isinstance(component, dict):
            continue
        types = component.get("types") or []
        if component_type in types:
            value = component.get(field)
            return str(value) if value else ""
    return ""


def parse_geocode_response(payload: Any) -> GeocodeResult:
    """Turn a decoded Geocoding API response into a typed result.

    Raises ``AddressNotFound`` for non-OK statuses and empty result lists, and
    ``ProviderUnavailable`` when the body does not have the expected shape.
    """

    if not isinstance(payload, dict):
        raise ProviderUnavailable("Geocoding response is not a JSON object.")

    status = payload.get("status")
    results = payload.get("results") or []
    if status != "OK" or not results:
        logger.warning(f"Geocoding returned no usable result (status={status}, error={payload.get('error_message')})")
        raise AddressNotFound(f"Address not found (status: {status}).")

    best = results[0]
    try:
        location = best["geometry"]["location"]
        coordinate = Coordinate(latitude=float(location["lat"]), longitude=float(location["lng"]))
    except (KeyError, TypeError, ValueError) as exc:
        raise ProviderUnavailable(f"Geocoding result missing coordinates: {exc}") from exc

    components = best.get("address_components") or []
    city = address_component(components, "locality") or address_component(
        components, "administrative_area_level_2"
    )
    return GeocodeResult(
        coordinate=coordinate,
        formatted_address=str(best.get("formatted_address") or ""),
        city=city,
        state=address_component(components, "administrative_area_level_1", "short_name"),
        postal_code=address_component(components, "postal_code"),
    )


class GeocodingClient:
    def __init__(
        self,
        base_url: str | None = None,
        region: str | None = None,
        language: str | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url or settings.geocoding_base_url
        self.region = region or settings.geocoding_region
        self.language = language or settings.geocoding_language
        self.timeout = timeout if timeout is not None else settings.geocoding_timeout_seconds
        self._transport = transport

    def _get_client(self) -> httpx.Client:
        return httpx.Client(
            timeout=httpx.Timeout(self.timeout, connect=5.0),
            transport=self._transport,
        )

    def geocode(self, address: str, credential: str) -> GeocodeResult:
        """Resolve ``address`` to coordinates with a single provider call."""

        if not credential or not credential.strip():
            logger.warning("Google Maps API key is not configured")
            raise ConfigurationMissing("Geocoding credential is not configured.")

        params = {
            "address": address,
            "key": credential,
            "region": self.region,
            "language": self.language,
        }
        client = self._get_client()
        try:
            response = client.get(self.base_url, params=params)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as exc:
            # The request URL carries the API key, so only the status is logged.
            status_code = exc.response.status_code
            logger.error(f"Geocoding provider answered HTTP {status_code}")
            raise ProviderUnavailable(f"Geocoding provider answered HTTP {status_code}.") from exc
        except httpx.HTTPError as exc:
            logger.error(f"Geocoding request failed: {type(exc).__name__}")
            raise ProviderUnavailable(f"Geocoding provider request failed: {type(exc).__name__}.") from exc
        except ValueError as exc:
            logger.error(f"Geocoding response is not valid JSON: {exc}")
            raise ProviderUnavailable("Geocoding provider returned an invalid body.") from exc
        finally:
            client.close()

        result = parse_geocode_response(payload)
        logger.info(
            f"Geocoded address to ({result.coordinate.latitude:.6f}, {result.coordinate.longitude:.6f}): "
            f"{result.formatted_address}"
        )
        return result
