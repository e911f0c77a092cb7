"""Sales views backing the territory dashboard and the top-accounts table."""

from __future__ import annotations

from typing import AbstractSet, Optional, Protocol, Sequence

from ...config import settings
from ...models.domain import Customer, SalesRecord
from .aggregator import SalesAggregation, SalesRollup, aggregate_sales, reporting_years, sort_rollups


class SalesSource(Protocol):
    def fetch_sales_records(self, years) -> list[SalesRecord]:
        ...

    def count_customers(self, *, territory: Optional[str] = None) -> int:
        ...


def _resolve_year(current_year: Optional[int]) -> Optional[int]:
    return current_year if current_year is not None else settings.sales_current_year


def build_territory_dashboard(source: SalesSource, current_year: Optional[int] = None) -> SalesAggregation:
    """Fetch both reporting years in full, then aggregate by territory.

    Territory customer counts come from one count query per territory.
    """

    current, prior = reporting_years(_resolve_year(current_year))
    records = source.fetch_sales_records([prior, current])

    territories = sorted({record.territory for record in records if record.territory})
    counts = {territory: source.count_customers(territory=territory) for territory in territories}

    return aggregate_sales(records, current_year=current, customer_counts=counts)


def search_rollups(rollups: Sequence[SalesRollup], search: Optional[str]) -> list[SalesRollup]:
    if not search:
        return list(rollups)
    needle = search.strip().lower()
    return [rollup for rollup in rollups if needle in rollup.name.lower()]


def _matches_search(customer: Customer, search: Optional[str]) -> bool:
    if not search:
        return True
    needle = search.strip().lower()
    return needle in customer.customer_name.lower() or needle in customer.account_number.lower()


def top_accounts(
    customers: Sequence[Customer],
    classifications: AbstractSet[str],
    territory: Optional[str] = None,
    *,
    search: Optional[str] = None,
    sort_by: str = "revenue",
    descending: bool = True,
    limit: Optional[int] = None,
    current_year: Optional[int] = None,
) -> list[SalesRollup]:
    """Per-customer rollups for accounts on the current map filter."""

    filtered = [
        customer
        for customer in customers
        if customer.matches(territory, classifications) and _matches_search(customer, search)
    ]
    aggregation = aggregate_sales(
        (sale for customer in filtered for sale in customer.sales),
        current_year=_resolve_year(current_year),
        customers=filtered,
    )
    ranked = sort_rollups(aggregation.per_customer, sort_by, descending)
    return ranked[: limit if limit is not None else settings.top_accounts_limit]
