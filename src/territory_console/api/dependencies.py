"""Shared FastAPI dependencies for the route modules."""

from __future__ import annotations

from typing import NoReturn

from fastapi import HTTPException, Request, status

from ..data.customers_repository import RepositoryError, TerritoryRepository, get_repository
from ..services.markers import MarkerPipeline


def repository_dependency() -> TerritoryRepository:
    return get_repository()


def pipeline_dependency(request: Request) -> MarkerPipeline:
    return request.app.state.marker_pipeline


def fetch_failed(what: str, exc: RepositoryError) -> NoReturn:
    """Surface a failed store read as the page-level error banner."""
    raise HTTPException(
        status_code=status.HTTP_502_BAD_GATEWAY,
        detail=f"Failed to fetch {what}: {exc}",
    ) from exc


def bad_request(exc: ValueError) -> NoReturn:
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


def write_failed(what: str, exc: RepositoryError) -> NoReturn:
    raise HTTPException(
        status_code=status.HTTP_502_BAD_GATEWAY,
        detail=f"Failed to update {what}: {exc}",
    ) from exc
