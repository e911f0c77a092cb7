"""Geocoding adapter and resolver."""

from .provider import (
    GeocodeErrorKind,
    GeocodingProvider,
    GoogleGeocodingClient,
    ProviderResult,
    parse_geocode_payload,
)
from .resolver import GeocodeResolver

__all__ = [
    "GeocodeErrorKind",
    "GeocodeResolver",
    "GeocodingProvider",
    "GoogleGeocodingClient",
    "ProviderResult",
    "parse_geocode_payload",
]
