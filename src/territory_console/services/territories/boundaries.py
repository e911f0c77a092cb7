"""Load, group and validate territory boundary polygons."""

from __future__ import annotations

import asyncio
import logging
import math
from dataclasses import dataclass, field
from typing import Iterable, Protocol

from ...data.customers_repository import coerce_float
from ...models.domain import Coordinate, TerritoryBoundary
from ..geospatial import validate_polygon

logger = logging.getLogger(__name__)


class BoundaryPointSource(Protocol):
    def fetch_boundary_points(self) -> list[dict]:
        ...


@dataclass(slots=True)
class BoundaryLoadResult:
    boundaries: list[TerritoryBoundary] = field(default_factory=list)
    diagnostics: dict[str, list[str]] = field(default_factory=dict)


def _sequence_key(row: dict) -> tuple:
    sequence = coerce_float(row.get("sequence"))
    return ((row.get("territory_name") or "").strip(), sequence is None, sequence or 0.0)


def group_boundary_points(rows: Iterable[dict]) -> dict[str, list[Coordinate]]:
    """Group rows into per-territory point lists ordered by sequence.

    Points whose latitude or longitude does not parse to a finite number are
    dropped individually.
    """

    grouped: dict[str, list[Coordinate]] = {}
    for row in sorted(rows, key=_sequence_key):
        name = (row.get("territory_name") or "").strip()
        if not name:
            continue
        lat = coerce_float(row.get("latitude"))
        lng = coerce_float(row.get("longitude"))
        if lat is None or lng is None or not (math.isfinite(lat) and math.isfinite(lng)):
            continue
        grouped.setdefault(name, []).append(Coordinate(lat, lng))
    return grouped


def build_boundaries(rows: Iterable[dict]) -> BoundaryLoadResult:
    result = BoundaryLoadResult()
    for territory_name, points in group_boundary_points(rows).items():
        validation = validate_polygon(points)
        if not validation.is_valid:
            result.diagnostics[territory_name] = validation.messages()
            continue
        result.boundaries.append(TerritoryBoundary(territory_name=territory_name, points=points))

    if result.diagnostics:
        logger.warning(f"Territory boundary validation errors: {result.diagnostics}")
    return result


class TerritoryBoundaryLoader:
    """Fetches boundary rows and keeps only polygons that validate.

    ``diagnostics`` holds the validation messages of the most recent load,
    keyed by territory name. Fetch failures propagate to the caller.
    """

    def __init__(self, source: BoundaryPointSource) -> None:
        self.source = source
        self.diagnostics: dict[str, list[str]] = {}

    async def load(self) -> BoundaryLoadResult:
        rows = await asyncio.to_thread(self.source.fetch_boundary_points)
        result = build_boundaries(rows or [])
        self.diagnostics = result.diagnostics
        logger.info(
            f"Loaded {len(result.boundaries)} territory boundaries "
            f"({len(result.diagnostics)} rejected)"
        )
        return result
