"""Turn a filtered customer list into map markers.

Each address is resolved from, in order: the in-memory MarkerCache, the
coordinate already persisted for the address, and finally the geocoder. Newly
geocoded coordinates are upserted back to the store so later runs skip the
provider entirely.

Customers are processed in sequential batches; addresses inside a batch are
resolved concurrently. Only addresses that reached the geocoder pay the
throttling delay.
"""

from __future__ import annotations

import asyncio
import logging
import math
from dataclasses import dataclass, field
from typing import AbstractSet, AsyncIterator, Awaitable, Callable, Optional, Protocol, Sequence

from ...config import settings
from ...models.domain import Address, Customer, Marker
from ..geocoding.resolver import GeocodeResolver
from ..geospatial import validate_point
from .cache import MarkerCache

logger = logging.getLogger(__name__)

SOURCE_CACHE = "cache"
SOURCE_DATABASE = "database"
SOURCE_GEOCODER = "geocoder"


class CoordinateStore(Protocol):
    def upsert_geocoded_location(self, address_id: str, latitude: float, longitude: float) -> None:
        ...


@dataclass(slots=True)
class MarkerProgress:
    """Snapshot emitted after each completed batch."""

    processed: int
    total: int
    batch: int
    batches: int
    generation: int
    markers: list[Marker] = field(default_factory=list)


class MarkerPipeline:
    def __init__(
        self,
        resolver: GeocodeResolver,
        store: CoordinateStore,
        *,
        cache: MarkerCache | None = None,
        batch_size: int | None = None,
        geocode_delay_seconds: float | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.resolver = resolver
        self.store = store
        self.cache = cache if cache is not None else MarkerCache()
        self.batch_size = batch_size or settings.marker_batch_size
        self.geocode_delay_seconds = (
            geocode_delay_seconds
            if geocode_delay_seconds is not None
            else settings.marker_geocode_delay_seconds
        )
        self._sleep = sleep
        self._generation = 0
        self.markers: list[Marker] = []
        self.processed_accounts = 0
        self.total_accounts = 0

    @property
    def generation(self) -> int:
        return self._generation

    def cancel(self) -> None:
        """Invalidate the run in flight; its remaining batches are discarded."""

        self._generation += 1

    @staticmethod
    def filter_customers(
        customers: Sequence[Customer],
        territory: Optional[str],
        classifications: AbstractSet[str],
    ) -> list[Customer]:
        return [
            customer
            for customer in customers
            if customer.matches(territory, classifications) and customer.addresses
        ]

    async def stream(
        self,
        customers: Sequence[Customer],
        territory: Optional[str],
        classifications: AbstractSet[str],
    ) -> AsyncIterator[MarkerProgress]:
        """Yield one MarkerProgress per batch, starting a new run.

        Starting a run supersedes any earlier one: a superseded run stops at
        its next batch boundary without touching pipeline state.
        """

        self._generation += 1
        generation = self._generation

        filtered = self.filter_customers(customers, territory, classifications)
        total = len(filtered)
        batches = math.ceil(total / self.batch_size)
        self.total_accounts = total
        self.processed_accounts = 0
        self.markers = []

        logger.info(f"Processing {total} accounts in {batches} batches (run {generation})")

        for index in range(batches):
            start = index * self.batch_size
            end = min(start + self.batch_size, total)
            batch = filtered[start:end]

            results = await asyncio.gather(
                *(
                    self._resolve_safely(address, customer)
                    for customer in batch
                    for address in customer.addresses
                )
            )

            if generation != self._generation:
                logger.info(f"Discarding batch {index + 1}/{batches} from superseded run {generation}")
                return

            new_markers = [marker for marker in results if marker is not None]
            self.markers.extend(new_markers)
            self.processed_accounts = end

            yield MarkerProgress(
                processed=end,
                total=total,
                batch=index + 1,
                batches=batches,
                generation=generation,
                markers=new_markers,
            )

    async def process_customers(
        self,
        customers: Sequence[Customer],
        territory: Optional[str],
        classifications: AbstractSet[str],
        on_progress: Callable[[MarkerProgress], None] | None = None,
    ) -> list[Marker]:
        markers: list[Marker] = []
        async for progress in self.stream(customers, territory, classifications):
            markers.extend(progress.markers)
            if on_progress is not None:
                on_progress(progress)
        return markers

    async def _resolve_safely(self, address: Address, customer: Customer) -> Optional[Marker]:
        try:
            return await self._resolve_address(address, customer)
        except Exception as exc:
            logger.warning(f"Error processing address {address.address_id} for {customer.customer_id}: {exc}")
            return None

    async def _resolve_address(self, address: Address, customer: Customer) -> Optional[Marker]:
        cached = self.cache.get(address.address_id)
        if cached is not None:
            return Marker(cached.lat, cached.lng, customer, address.address_id, SOURCE_CACHE)

        persisted = address.persisted_coordinate
        if persisted is not None and validate_point(persisted.lat, persisted.lng).is_valid:
            self.cache.put(address.address_id, persisted.lat, persisted.lng, customer)
            return Marker(persisted.lat, persisted.lng, customer, address.address_id, SOURCE_DATABASE)

        if not address.is_complete:
            return None

        marker = await self._geocode_and_store(address, customer)
        await self._sleep(self.geocode_delay_seconds)
        return marker

    async def _geocode_and_store(self, address: Address, customer: Customer) -> Optional[Marker]:
        coordinate = await self.resolver.resolve(address.single_line())
        if coordinate is None:
            return None

        try:
            await asyncio.to_thread(
                self.store.upsert_geocoded_location,
                address.address_id,
                coordinate.lat,
                coordinate.lng,
            )
        except Exception as exc:
            logger.warning(f"Error storing coordinates for address {address.address_id}: {exc}")
            return None

        self.cache.put(address.address_id, coordinate.lat, coordinate.lng, customer)
        return Marker(coordinate.lat, coordinate.lng, customer, address.address_id, SOURCE_GEOCODER)
