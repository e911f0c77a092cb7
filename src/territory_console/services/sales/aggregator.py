"""Fold sales records into per-customer and per-territory rollups.

Amounts are only summed inside a matching (year, comparison_type) window:

* ``revenue_current_ytd``  YTD rows of the current year
* ``revenue_prior_ytd``    YTD rows of the prior year
* ``revenue_prior_full``   FULL rows of the prior year
* ``business_units``       FULL rows of the prior year, per category

``business_unit_changes`` tracks the two YTD windows per category so the
same change rule can be applied at business-unit granularity.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Mapping, Optional, Sequence

from ...models.domain import FULL, YTD, Customer, SalesRecord

UNCATEGORIZED = "Uncategorized"

BUSINESS_UNIT_NAMES = {
    "HVAC": "HVAC Equipment & Parts",
    "PLUMB": "Plumbing Supplies",
    "PIPE": "Piping & Fittings",
    "TOOL": "Tools & Equipment",
    "WELD": "Welding Supplies",
    "ELEC": "Electrical Supplies",
    "SAFE": "Safety Equipment",
    "CHEM": "Chemical Products",
    "REFR": "Refrigeration",
    "CTRL": "Controls & Automation",
}


def business_unit_name(code: str) -> str:
    return BUSINESS_UNIT_NAMES.get(code, code)


def compute_change_percent(current: float, prior: float) -> float:
    """Percentage change from ``prior`` to ``current``; 0.0 without a positive baseline."""

    if prior > 0:
        return (current - prior) / prior * 100
    return 0.0


def reporting_years(current_year: Optional[int] = None) -> tuple[int, int]:
    current = current_year if current_year is not None else date.today().year
    return current, current - 1


@dataclass(slots=True)
class BusinessUnitChange:
    category: str
    revenue_prior_ytd: float = 0.0
    revenue_current_ytd: float = 0.0

    @property
    def change_percent(self) -> float:
        return compute_change_percent(self.revenue_current_ytd, self.revenue_prior_ytd)


@dataclass(slots=True)
class SalesRollup:
    key: str
    name: str
    territory: Optional[str] = None
    account_number: Optional[str] = None
    classification: Optional[str] = None
    revenue_current_ytd: float = 0.0
    revenue_prior_ytd: float = 0.0
    revenue_prior_full: float = 0.0
    business_units: dict[str, float] = field(default_factory=dict)
    business_unit_changes: dict[str, BusinessUnitChange] = field(default_factory=dict)
    customer_count: int = 0

    @property
    def change(self) -> float:
        return self.revenue_current_ytd - self.revenue_prior_ytd

    @property
    def change_percent(self) -> float:
        return compute_change_percent(self.revenue_current_ytd, self.revenue_prior_ytd)

    def business_unit_breakdown(self) -> list[tuple[str, float]]:
        """FULL prior-year amounts per category, largest first."""

        return sorted(self.business_units.items(), key=lambda item: item[1], reverse=True)

    def add(self, record: SalesRecord, current_year: int, prior_year: int) -> None:
        amount = record.amount
        if not amount or not math.isfinite(amount):
            return

        category = record.category or UNCATEGORIZED
        comparison_type = (record.comparison_type or "").upper()

        if comparison_type == YTD and record.year == current_year:
            self.revenue_current_ytd += amount
            self._unit_change(category).revenue_current_ytd += amount
        elif comparison_type == YTD and record.year == prior_year:
            self.revenue_prior_ytd += amount
            self._unit_change(category).revenue_prior_ytd += amount
        elif comparison_type == FULL and record.year == prior_year:
            self.revenue_prior_full += amount
            self.business_units[category] = self.business_units.get(category, 0.0) + amount

    def merge(self, other: "SalesRollup") -> None:
        self.revenue_current_ytd += other.revenue_current_ytd
        self.revenue_prior_ytd += other.revenue_prior_ytd
        self.revenue_prior_full += other.revenue_prior_full
        for category, amount in other.business_units.items():
            self.business_units[category] = self.business_units.get(category, 0.0) + amount
        for category, unit in other.business_unit_changes.items():
            target = self._unit_change(category)
            target.revenue_prior_ytd += unit.revenue_prior_ytd
            target.revenue_current_ytd += unit.revenue_current_ytd
        self.customer_count += other.customer_count

    def _unit_change(self, category: str) -> BusinessUnitChange:
        unit = self.business_unit_changes.get(category)
        if unit is None:
            unit = BusinessUnitChange(category)
            self.business_unit_changes[category] = unit
        return unit


@dataclass(slots=True)
class SalesAggregation:
    current_year: int
    prior_year: int
    per_customer: list[SalesRollup] = field(default_factory=list)
    per_territory: list[SalesRollup] = field(default_factory=list)

    @property
    def totals(self) -> SalesRollup:
        total = SalesRollup(key="__total__", name="All territories")
        for rollup in self.per_territory:
            total.merge(rollup)
        return total


SORT_KEYS = {
    "revenue": lambda rollup: rollup.revenue_current_ytd,
    "change": lambda rollup: rollup.change_percent,
    "customers": lambda rollup: rollup.customer_count,
    "name": lambda rollup: rollup.name.lower(),
    "account": lambda rollup: (rollup.account_number or "").lower(),
    "territory": lambda rollup: (rollup.territory or "").lower(),
}


def sort_rollups(
    rollups: Iterable[SalesRollup], sort_by: str = "revenue", descending: bool = True
) -> list[SalesRollup]:
    """Stable sort; ties keep their input order in both directions."""

    try:
        key = SORT_KEYS[sort_by]
    except KeyError as exc:
        raise ValueError(f"Unknown sort field '{sort_by}'.") from exc
    return sorted(rollups, key=key, reverse=descending)


def aggregate_sales(
    records: Iterable[SalesRecord],
    *,
    current_year: Optional[int] = None,
    customer_counts: Optional[Mapping[str, int]] = None,
    customers: Optional[Sequence[Customer]] = None,
) -> SalesAggregation:
    """Reduce a complete set of sales records into rollups.

    ``customers`` seeds the per-customer rollups so accounts without sales
    still appear, and supplies their current territory label.
    ``customer_counts`` maps territory -> number of customers carrying that
    label (from a count query); when given it replaces the number of
    customers seen here, which would miss accounts with no sales rows.
    """

    current, prior = reporting_years(current_year)
    by_customer: dict[str, SalesRollup] = {}
    territory_of: dict[str, Optional[str]] = {}

    for customer in customers or ():
        by_customer[customer.customer_id] = SalesRollup(
            key=customer.customer_id,
            name=customer.customer_name,
            territory=customer.territory,
            account_number=customer.account_number,
            classification=customer.account_classification,
            customer_count=1,
        )
        territory_of[customer.customer_id] = customer.territory

    for record in records:
        rollup = by_customer.get(record.customer_id)
        if rollup is None:
            rollup = SalesRollup(
                key=record.customer_id,
                name=record.customer_name or record.customer_id,
                territory=record.territory,
                customer_count=1,
            )
            by_customer[record.customer_id] = rollup
            territory_of[record.customer_id] = record.territory
        rollup.add(record, current, prior)

    by_territory: dict[str, SalesRollup] = {}
    for customer_id, rollup in by_customer.items():
        territory = territory_of.get(customer_id)
        if not territory:
            continue
        target = by_territory.get(territory)
        if target is None:
            target = SalesRollup(key=territory, name=territory, territory=territory)
            by_territory[territory] = target
        target.merge(rollup)

    if customer_counts is not None:
        for territory, count in customer_counts.items():
            if territory not in by_territory:
                by_territory[territory] = SalesRollup(key=territory, name=territory, territory=territory)
            by_territory[territory].customer_count = count

    return SalesAggregation(
        current_year=current,
        prior_year=prior,
        per_customer=sort_rollups(by_customer.values()),
        per_territory=sort_rollups(by_territory.values()),
    )
