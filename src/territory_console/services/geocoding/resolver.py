"""Address to coordinate resolution with bounded retry."""

from __future__ import annotations

import asyncio
import logging
import math
from typing import Awaitable, Callable, Optional

from ...config import settings
from ...models.domain import Coordinate
from ..geospatial import US_BOUNDS, BoundingBox
from .provider import GeocodeErrorKind, GeocodingProvider, ProviderResult

logger = logging.getLogger(__name__)

US_COUNTRY_CODES = frozenset({"US", "USA"})


class GeocodeResolver:
    """Resolve a single-line postal address to a coordinate inside ``bounds``.

    ``resolve`` never raises: every failure, including exhausting the retry
    budget, comes back as ``None``. Only rate limiting, timeouts and network
    failures are retried; each retry waits ``backoff_seconds * 2 ** attempt``.
    """

    def __init__(
        self,
        provider: GeocodingProvider,
        *,
        max_attempts: int | None = None,
        backoff_seconds: float | None = None,
        timeout_seconds: float | None = None,
        region: str | None = None,
        bounds: BoundingBox = US_BOUNDS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.provider = provider
        self.max_attempts = max_attempts if max_attempts is not None else settings.geocoding_max_attempts
        self.backoff_seconds = (
            backoff_seconds if backoff_seconds is not None else settings.geocoding_backoff_seconds
        )
        self.timeout_seconds = (
            timeout_seconds if timeout_seconds is not None else settings.geocoding_timeout_seconds
        )
        self.region = region or settings.geocoding_region
        self.bounds = bounds
        self._sleep = sleep

    async def resolve(self, address: str) -> Optional[Coordinate]:
        if not address or not address.strip():
            return None

        for attempt in range(self.max_attempts):
            coordinate, error = await self._attempt(address)
            if coordinate is not None:
                return coordinate

            if not error.retryable:
                logger.debug(f"Geocoding '{address}' failed permanently: {error.value}")
                return None

            if attempt + 1 >= self.max_attempts:
                break

            wait_time = self.backoff_seconds * (2**attempt)
            logger.debug(
                f"Geocoding '{address}' failed ({error.value}), retrying in {wait_time:.1f}s "
                f"(attempt {attempt + 1}/{self.max_attempts})"
            )
            await self._sleep(wait_time)

        logger.debug(f"Geocoding '{address}' gave up after {self.max_attempts} attempts")
        return None

    async def _attempt(self, address: str) -> tuple[Optional[Coordinate], Optional[GeocodeErrorKind]]:
        try:
            result = await asyncio.wait_for(
                self.provider.geocode(address, region=self.region, bounds=self.bounds),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            return None, GeocodeErrorKind.TIMEOUT
        except Exception as exc:
            logger.warning(f"Geocoding provider raised for '{address}': {exc}")
            return None, GeocodeErrorKind.UNKNOWN

        error = self._check(result)
        if error is not None:
            return None, error
        return Coordinate(result.lat, result.lng), None

    def _check(self, result: ProviderResult) -> Optional[GeocodeErrorKind]:
        if not result.ok:
            return result.error
        if (result.country or "").upper() not in US_COUNTRY_CODES:
            return GeocodeErrorKind.NOT_IN_US
        if result.lat is None or result.lng is None:
            return GeocodeErrorKind.NO_GEOMETRY
        if not (math.isfinite(result.lat) and math.isfinite(result.lng)):
            return GeocodeErrorKind.INVALID_COORDINATES
        if not self.bounds.contains(result.lat, result.lng):
            return GeocodeErrorKind.OUTSIDE_BOUNDS
        return None
