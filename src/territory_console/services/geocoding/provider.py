"""HTTP adapter for the Google Geocoding API."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol

import httpx

from ...config import settings
from ..geospatial import BoundingBox

logger = logging.getLogger(__name__)


class GeocodeErrorKind(str, Enum):
    """Closed set of reasons a geocode attempt did not yield a usable coordinate."""

    ZERO_RESULTS = "zero_results"
    RATE_LIMITED = "rate_limited"
    REQUEST_DENIED = "request_denied"
    INVALID_REQUEST = "invalid_request"
    NOT_IN_US = "not_in_us"
    OUTSIDE_BOUNDS = "outside_bounds"
    NO_GEOMETRY = "no_geometry"
    INVALID_COORDINATES = "invalid_coordinates"
    TIMEOUT = "timeout"
    NETWORK_ERROR = "network_error"
    UNKNOWN = "unknown"

    @property
    def retryable(self) -> bool:
        return self in RETRYABLE_ERRORS


RETRYABLE_ERRORS = frozenset(
    {GeocodeErrorKind.RATE_LIMITED, GeocodeErrorKind.TIMEOUT, GeocodeErrorKind.NETWORK_ERROR}
)

_STATUS_ERRORS = {
    "ZERO_RESULTS": GeocodeErrorKind.ZERO_RESULTS,
    "OVER_QUERY_LIMIT": GeocodeErrorKind.RATE_LIMITED,
    "OVER_DAILY_LIMIT": GeocodeErrorKind.RATE_LIMITED,
    "REQUEST_DENIED": GeocodeErrorKind.REQUEST_DENIED,
    "INVALID_REQUEST": GeocodeErrorKind.INVALID_REQUEST,
    "UNKNOWN_ERROR": GeocodeErrorKind.UNKNOWN,
}


@dataclass(slots=True, frozen=True)
class ProviderResult:
    """Outcome of one provider call: either a location or an error kind."""

    lat: Optional[float] = None
    lng: Optional[float] = None
    country: Optional[str] = None
    formatted_address: Optional[str] = None
    error: Optional[GeocodeErrorKind] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failure(cls, kind: GeocodeErrorKind) -> "ProviderResult":
        return cls(error=kind)


class GeocodingProvider(Protocol):
    async def geocode(self, address: str, *, region: str, bounds: BoundingBox) -> ProviderResult:
        ...


def _country_short_name(result: dict) -> Optional[str]:
    for component in result.get("address_components") or []:
        if "country" in (component.get("types") or []):
            return component.get("short_name")
    return None


def parse_geocode_payload(payload: dict) -> ProviderResult:
    """Translate a Geocoding API JSON body into a ProviderResult."""

    status = payload.get("status")
    if status != "OK":
        return ProviderResult.failure(_STATUS_ERRORS.get(status, GeocodeErrorKind.UNKNOWN))

    results = payload.get("results") or []
    if not results:
        return ProviderResult.failure(GeocodeErrorKind.ZERO_RESULTS)

    first = results[0]
    location = (first.get("geometry") or {}).get("location")
    if not location or "lat" not in location or "lng" not in location:
        return ProviderResult.failure(GeocodeErrorKind.NO_GEOMETRY)

    try:
        lat = float(location["lat"])
        lng = float(location["lng"])
    except (TypeError, ValueError):
        return ProviderResult.failure(GeocodeErrorKind.INVALID_COORDINATES)

    return ProviderResult(
        lat=lat,
        lng=lng,
        country=_country_short_name(first),
        formatted_address=first.get("formatted_address"),
    )


class GoogleGeocodingClient:
    """Geocoding API client that reports failures as GeocodeErrorKind values."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key or settings.google_maps_api_key
        self.base_url = base_url or settings.geocoding_base_url
        self.timeout = timeout if timeout is not None else settings.geocoding_timeout_seconds
        self._transport = transport

    def _get_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=httpx.Timeout(self.timeout), transport=self._transport)

    async def geocode(self, address: str, *, region: str, bounds: BoundingBox) -> ProviderResult:
        if not self.api_key:
            logger.warning("Google Maps API key not configured; geocoding disabled")
            return ProviderResult.failure(GeocodeErrorKind.REQUEST_DENIED)

        params = {
            "address": address,
            "region": region,
            "bounds": f"{bounds.south},{bounds.west}|{bounds.north},{bounds.east}",
            "key": self.api_key,
        }
        async with self._get_client() as client:
            try:
                response = await client.get(self.base_url, params=params)
            except httpx.TimeoutException:
                return ProviderResult.failure(GeocodeErrorKind.TIMEOUT)
            except httpx.TransportError as exc:
                logger.debug(f"Geocoding transport error for '{address}': {exc}")
                return ProviderResult.failure(GeocodeErrorKind.NETWORK_ERROR)

        if response.status_code == 429:
            return ProviderResult.failure(GeocodeErrorKind.RATE_LIMITED)
        if response.status_code >= 500:
            return ProviderResult.failure(GeocodeErrorKind.NETWORK_ERROR)
        if response.status_code >= 400:
            return ProviderResult.failure(GeocodeErrorKind.INVALID_REQUEST)

        try:
            payload = response.json()
        except ValueError:
            return ProviderResult.failure(GeocodeErrorKind.UNKNOWN)
        return parse_geocode_payload(payload)
