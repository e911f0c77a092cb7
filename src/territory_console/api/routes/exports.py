"""CSV download endpoints."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Query, Response, status

from ...data.customers_repository import RepositoryError, TerritoryRepository
from ...services.customers import filter_customers
from ...services.export import customers_to_csv, resolve_export_fields, rollups_to_csv
from ...services.export.csv_export import DEFAULT_EXPORT_FIELDS
from ...services.sales import build_territory_dashboard
from ..dependencies import bad_request, fetch_failed, repository_dependency

router = APIRouter(prefix="/exports", tags=["exports"])


def _csv_response(content: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/customers.csv", status_code=status.HTTP_200_OK)
def export_customers(
    fields: List[str] = Query(default=list(DEFAULT_EXPORT_FIELDS), description="Export field keys"),
    territory: str | None = Query(default=None),
    repository: TerritoryRepository = Depends(repository_dependency),
) -> Response:
    try:
        resolve_export_fields(fields)
    except ValueError as exc:
        bad_request(exc)

    try:
        customers = repository.fetch_customers()
    except RepositoryError as exc:
        fetch_failed("customers", exc)

    return _csv_response(customers_to_csv(filter_customers(customers, territory), fields), "customers.csv")


@router.get("/territories.csv", status_code=status.HTTP_200_OK)
def export_territories(
    year: int | None = Query(default=None, ge=2000, le=2100),
    repository: TerritoryRepository = Depends(repository_dependency),
) -> Response:
    try:
        aggregation = build_territory_dashboard(repository, current_year=year)
    except RepositoryError as exc:
        fetch_failed("sales data", exc)

    content = rollups_to_csv(aggregation.per_territory, aggregation.current_year, aggregation.prior_year)
    return _csv_response(content, "territories.csv")
