"""Territory boundary and map overlay endpoints."""

from __future__ import annotations

import asyncio
from typing import List

from fastapi import APIRouter, Depends, Query, status

from ...data.customers_repository import RepositoryError, TerritoryRepository
from ...models.domain import CLASSIFICATIONS
from ...schemas.territories import BoundaryResponse, TerritoryBoundaryModel
from ...services.export import build_map_overlay
from ...services.markers import MarkerPipeline
from ...services.territories import TerritoryBoundaryLoader
from ..dependencies import bad_request, fetch_failed, pipeline_dependency, repository_dependency

router = APIRouter(prefix="/territories", tags=["territories"])


@router.get("/boundaries", response_model=BoundaryResponse, status_code=status.HTTP_200_OK)
async def get_boundaries(repository: TerritoryRepository = Depends(repository_dependency)) -> BoundaryResponse:
    loader = TerritoryBoundaryLoader(repository)
    try:
        result = await loader.load()
    except RepositoryError as exc:
        fetch_failed("territory boundaries", exc)
    return BoundaryResponse(
        boundaries=[TerritoryBoundaryModel.from_boundary(boundary) for boundary in result.boundaries],
        diagnostics=result.diagnostics,
    )


@router.get("/map.geojson", status_code=status.HTTP_200_OK)
async def get_map_overlay(
    territory: str | None = Query(default=None, description="Optional territory filter"),
    classification: List[str] | None = Query(default=None, description="Repeatable classification filter"),
    refresh: bool = Query(default=True, description="Run the marker pipeline instead of reusing the last run"),
    repository: TerritoryRepository = Depends(repository_dependency),
    pipeline: MarkerPipeline = Depends(pipeline_dependency),
) -> dict:
    """Boundaries and account markers as a single FeatureCollection."""
    allowed = set(classification) if classification else set(CLASSIFICATIONS)
    unknown = sorted(allowed - set(CLASSIFICATIONS))
    if unknown:
        bad_request(ValueError(f"Unknown classification(s): {', '.join(unknown)}"))

    loader = TerritoryBoundaryLoader(repository)
    if not refresh:
        try:
            result = await loader.load()
        except RepositoryError as exc:
            fetch_failed("territory boundaries", exc)
        return build_map_overlay(result.boundaries, pipeline.markers)

    try:
        result, customers = await asyncio.gather(
            loader.load(),
            asyncio.to_thread(repository.fetch_customers),
        )
    except RepositoryError as exc:
        fetch_failed("map data", exc)

    markers = await pipeline.process_customers(customers, territory, allowed)
    return build_map_overlay(result.boundaries, markers)
