"""Account marker endpoints backed by the per-application MarkerPipeline."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import AsyncIterator

from fastapi import APIRouter, Depends, status
from fastapi.responses import StreamingResponse

from ...data.customers_repository import RepositoryError, TerritoryRepository
from ...schemas.markers import MarkerModel, MarkerProgressModel, MarkerRequest, MarkerResponse
from ...services.markers import MarkerPipeline
from ..dependencies import fetch_failed, pipeline_dependency, repository_dependency

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/markers", tags=["markers"])


def _progress(pipeline: MarkerPipeline) -> MarkerProgressModel:
    return MarkerProgressModel(
        processed=pipeline.processed_accounts,
        total=pipeline.total_accounts,
        generation=pipeline.generation,
    )


async def _load_customers(repository: TerritoryRepository):
    try:
        return await asyncio.to_thread(repository.fetch_customers)
    except RepositoryError as exc:
        fetch_failed("customers", exc)


@router.post("", response_model=MarkerResponse, status_code=status.HTTP_200_OK)
async def build_markers(
    payload: MarkerRequest,
    repository: TerritoryRepository = Depends(repository_dependency),
    pipeline: MarkerPipeline = Depends(pipeline_dependency),
) -> MarkerResponse:
    customers = await _load_customers(repository)
    markers = await pipeline.process_customers(customers, payload.territory, set(payload.classifications))
    return MarkerResponse(
        markers=[MarkerModel.from_marker(marker) for marker in markers],
        progress=_progress(pipeline),
    )


@router.post("/stream", status_code=status.HTTP_200_OK)
async def stream_markers(
    payload: MarkerRequest,
    repository: TerritoryRepository = Depends(repository_dependency),
    pipeline: MarkerPipeline = Depends(pipeline_dependency),
) -> StreamingResponse:
    """Stream one NDJSON event per completed batch, then a closing summary line."""
    customers = await _load_customers(repository)

    async def events() -> AsyncIterator[str]:
        generation = None
        async for progress in pipeline.stream(customers, payload.territory, set(payload.classifications)):
            generation = progress.generation
            event = {
                "type": "batch",
                "processed": progress.processed,
                "total": progress.total,
                "batch": progress.batch,
                "batches": progress.batches,
                "generation": progress.generation,
                "markers": [MarkerModel.from_marker(marker).model_dump() for marker in progress.markers],
            }
            yield json.dumps(event) + "\n"

        superseded = generation is not None and generation != pipeline.generation
        if superseded:
            logger.info(f"Marker stream for run {generation} ended early; a newer run replaced it")
        summary = _progress(pipeline).model_dump()
        summary["type"] = "superseded" if superseded else "done"
        yield json.dumps(summary) + "\n"

    return StreamingResponse(events(), media_type="application/x-ndjson")


@router.get("/progress", response_model=MarkerProgressModel, status_code=status.HTTP_200_OK)
def get_marker_progress(pipeline: MarkerPipeline = Depends(pipeline_dependency)) -> MarkerProgressModel:
    return _progress(pipeline)


@router.delete("/cache", status_code=status.HTTP_200_OK)
def clear_marker_cache(pipeline: MarkerPipeline = Depends(pipeline_dependency)) -> dict:
    cleared = len(pipeline.cache)
    pipeline.cache.clear()
    return {"cleared": cleared}
