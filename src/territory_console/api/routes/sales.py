"""Sales dashboard endpoints."""

from __future__ import annotations

from typing import List, Literal

from fastapi import APIRouter, Depends, Query, status

from ...config import settings
from ...data.customers_repository import RepositoryError, TerritoryRepository
from ...models.domain import CLASSIFICATIONS
from ...schemas.sales import SalesRollupModel, TerritoryDashboardResponse, TopAccountsResponse
from ...services.sales import (
    build_territory_dashboard,
    reporting_years,
    search_rollups,
    sort_rollups,
    top_accounts,
)
from ..dependencies import bad_request, fetch_failed, repository_dependency

router = APIRouter(prefix="/sales", tags=["sales"])


@router.get("/territories", response_model=TerritoryDashboardResponse, status_code=status.HTTP_200_OK)
def get_territory_sales(
    sort: Literal["revenue", "change", "customers"] = Query(default="revenue"),
    direction: Literal["asc", "desc"] = Query(default="desc"),
    search: str | None = Query(default=None, description="Territory name search"),
    year: int | None = Query(default=None, ge=2000, le=2100, description="Reporting year (defaults to current)"),
    repository: TerritoryRepository = Depends(repository_dependency),
) -> TerritoryDashboardResponse:
    try:
        aggregation = build_territory_dashboard(repository, current_year=year)
    except RepositoryError as exc:
        fetch_failed("sales data", exc)

    visible = sort_rollups(search_rollups(aggregation.per_territory, search), sort, direction == "desc")
    return TerritoryDashboardResponse(
        currentYear=aggregation.current_year,
        priorYear=aggregation.prior_year,
        territories=[SalesRollupModel.from_rollup(rollup) for rollup in visible],
        totals=SalesRollupModel.from_rollup(aggregation.totals),
        territoryCount=len(aggregation.per_territory),
    )


@router.get("/customers", response_model=TopAccountsResponse, status_code=status.HTTP_200_OK)
def get_top_accounts(
    territory: str | None = Query(default=None),
    classification: List[str] | None = Query(default=None, description="Repeatable classification filter"),
    sort: Literal["revenue", "change", "name", "account", "territory"] = Query(default="revenue"),
    direction: Literal["asc", "desc"] = Query(default="desc"),
    search: str | None = Query(default=None, description="Customer name or account number"),
    limit: int | None = Query(default=None, ge=1, le=1000),
    year: int | None = Query(default=None, ge=2000, le=2100),
    repository: TerritoryRepository = Depends(repository_dependency),
) -> TopAccountsResponse:
    allowed = set(classification) if classification else set(CLASSIFICATIONS)
    unknown = sorted(allowed - set(CLASSIFICATIONS))
    if unknown:
        bad_request(ValueError(f"Unknown classification(s): {', '.join(unknown)}"))

    try:
        customers = repository.fetch_customers()
    except RepositoryError as exc:
        fetch_failed("customers", exc)

    try:
        accounts = top_accounts(
            customers,
            allowed,
            territory,
            search=search,
            sort_by=sort,
            descending=direction == "desc",
            limit=limit,
            current_year=year,
        )
    except ValueError as exc:
        bad_request(exc)

    current, prior = reporting_years(year if year is not None else settings.sales_current_year)
    return TopAccountsResponse(
        currentYear=current,
        priorYear=prior,
        accounts=[SalesRollupModel.from_rollup(rollup) for rollup in accounts],
    )
