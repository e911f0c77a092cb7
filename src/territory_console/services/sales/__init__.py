"""Sales aggregation helpers."""

from .aggregator import (
    BUSINESS_UNIT_NAMES,
    BusinessUnitChange,
    SalesAggregation,
    SalesRollup,
    aggregate_sales,
    business_unit_name,
    compute_change_percent,
    reporting_years,
    sort_rollups,
)
from .dashboard import build_territory_dashboard, search_rollups, top_accounts

__all__ = [
    "BUSINESS_UNIT_NAMES",
    "BusinessUnitChange",
    "SalesAggregation",
    "SalesRollup",
    "aggregate_sales",
    "build_territory_dashboard",
    "business_unit_name",
    "compute_change_percent",
    "reporting_years",
    "search_rollups",
    "sort_rollups",
    "top_accounts",
]
