import math

import pytest

from territory_console.models.domain import Customer, SalesRecord
from territory_console.services.sales import (
    aggregate_sales,
    build_territory_dashboard,
    business_unit_name,
    compute_change_percent,
    search_rollups,
    sort_rollups,
    top_accounts,
)
from territory_console.services.sales.aggregator import SalesRollup


def _sale(cid, amount, year, comparison_type, category="HVAC", territory="Denver Metro"):
    return SalesRecord(
        customer_id=cid,
        category=category,
        amount=amount,
        year=year,
        comparison_type=comparison_type,
        customer_name=f"Customer {cid}",
        territory=territory,
    )


def _customer(cid, territory="Denver Metro", classification="A", sales=()):
    return Customer(
        customer_id=cid,
        customer_name=f"Customer {cid}",
        account_number=f"ACCT-{cid}",
        territory=territory,
        account_classification=classification,
        sales=list(sales),
    )


def test_change_percent_saturates_without_prior_revenue():
    assert compute_change_percent(100.0, 0.0) == 0.0
    assert compute_change_percent(0.0, 0.0) == 0.0
    assert compute_change_percent(150.0, 100.0) == pytest.approx(50.0)
    assert compute_change_percent(50.0, 100.0) == pytest.approx(-50.0)


def test_amounts_only_count_in_matching_windows():
    records = [
        _sale("C1", 100.0, 2024, "YTD"),
        _sale("C1", 80.0, 2023, "YTD"),
        _sale("C1", 200.0, 2023, "FULL"),
        _sale("C1", 999.0, 2024, "FULL"),
        _sale("C1", 555.0, 2022, "YTD"),
    ]

    aggregation = aggregate_sales(records, current_year=2024)
    rollup = aggregation.per_customer[0]

    assert (rollup.revenue_current_ytd, rollup.revenue_prior_ytd, rollup.revenue_prior_full) == (100.0, 80.0, 200.0)
    assert rollup.change == pytest.approx(20.0)
    assert rollup.change_percent == pytest.approx(25.0)


def test_zero_and_missing_amounts_are_ignored():
    records = [
        _sale("C1", 0.0, 2024, "YTD"),
        _sale("C1", None, 2024, "YTD"),
        _sale("C1", math.nan, 2024, "YTD"),
        _sale("C1", 10.0, 2024, "YTD"),
    ]

    rollup = aggregate_sales(records, current_year=2024).per_customer[0]

    assert rollup.revenue_current_ytd == 10.0


def test_business_units_use_full_prior_year_only():
    records = [
        _sale("C1", 300.0, 2023, "FULL", category="HVAC"),
        _sale("C1", 100.0, 2023, "FULL", category="PLUMB"),
        _sale("C1", 50.0, 2024, "YTD", category="TOOL"),
        _sale("C1", 20.0, 2023, "FULL", category=None),
    ]

    rollup = aggregate_sales(records, current_year=2024).per_customer[0]

    assert rollup.business_unit_breakdown() == [("HVAC", 300.0), ("PLUMB", 100.0), ("Uncategorized", 20.0)]
    assert rollup.business_unit_changes["TOOL"].revenue_current_ytd == 50.0
    assert rollup.business_unit_changes["TOOL"].change_percent == 0.0


def test_business_unit_names_pass_unknown_codes_through():
    assert business_unit_name("HVAC") == "HVAC Equipment & Parts"
    assert business_unit_name("MISC") == "MISC"


def test_territory_rollups_sum_their_customers():
    records = [
        _sale("C1", 100.0, 2024, "YTD"),
        _sale("C2", 50.0, 2024, "YTD"),
        _sale("C2", 100.0, 2023, "YTD"),
        _sale("C3", 70.0, 2024, "YTD", territory="Western Colorado"),
    ]

    aggregation = aggregate_sales(records, current_year=2024)
    by_name = {rollup.name: rollup for rollup in aggregation.per_territory}

    assert by_name["Denver Metro"].revenue_current_ytd == 150.0
    assert by_name["Denver Metro"].revenue_prior_ytd == 100.0
    assert by_name["Denver Metro"].customer_count == 2
    assert by_name["Western Colorado"].customer_count == 1
    assert [rollup.name for rollup in aggregation.per_territory] == ["Denver Metro", "Western Colorado"]


def test_totals_match_sum_of_territories():
    records = [
        _sale("C1", 100.0, 2024, "YTD"),
        _sale("C1", 40.0, 2023, "YTD"),
        _sale("C2", 60.0, 2024, "YTD", territory="Western Colorado"),
        _sale("C2", 60.0, 2023, "YTD", territory="Western Colorado"),
    ]

    totals = aggregate_sales(records, current_year=2024).totals

    assert totals.revenue_current_ytd == 160.0
    assert totals.revenue_prior_ytd == 100.0
    assert totals.change_percent == pytest.approx(60.0)
    assert totals.customer_count == 2


def test_customer_counts_override_and_add_territories_without_sales():
    records = [_sale("C1", 100.0, 2024, "YTD")]

    aggregation = aggregate_sales(
        records,
        current_year=2024,
        customer_counts={"Denver Metro": 12, "Eastern Colorado": 3},
    )
    by_name = {rollup.name: rollup for rollup in aggregation.per_territory}

    assert by_name["Denver Metro"].customer_count == 12
    assert by_name["Eastern Colorado"].customer_count == 3
    assert by_name["Eastern Colorado"].revenue_current_ytd == 0.0


def test_sort_is_stable_for_ties_in_both_directions():
    rollups = [
        SalesRollup(key="a", name="Alpha", revenue_current_ytd=10.0),
        SalesRollup(key="b", name="Bravo", revenue_current_ytd=10.0),
        SalesRollup(key="c", name="Charlie", revenue_current_ytd=20.0),
    ]

    assert [r.key for r in sort_rollups(rollups, "revenue", descending=True)] == ["c", "a", "b"]
    assert [r.key for r in sort_rollups(rollups, "revenue", descending=False)] == ["a", "b", "c"]


def test_unknown_sort_field_is_rejected():
    with pytest.raises(ValueError):
        sort_rollups([], "volume")


def test_search_rollups_matches_name_case_insensitively():
    rollups = [SalesRollup(key="d", name="Denver Metro"), SalesRollup(key="w", name="Western Colorado")]

    assert [r.key for r in search_rollups(rollups, "  denver ")] == ["d"]
    assert len(search_rollups(rollups, None)) == 2


class FakeSalesSource:
    def __init__(self, records, counts):
        self.records = records
        self.counts = counts
        self.requested_years = None

    def fetch_sales_records(self, years):
        self.requested_years = list(years)
        return self.records

    def count_customers(self, *, territory=None):
        return self.counts[territory]


def test_dashboard_fetches_both_years_and_counts_each_territory():
    source = FakeSalesSource(
        [_sale("C1", 100.0, 2024, "YTD"), _sale("C2", 50.0, 2023, "YTD", territory="Western Colorado")],
        {"Denver Metro": 7, "Western Colorado": 4},
    )

    aggregation = build_territory_dashboard(source, current_year=2024)

    assert source.requested_years == [2023, 2024]
    assert (aggregation.current_year, aggregation.prior_year) == (2024, 2023)
    assert {r.name: r.customer_count for r in aggregation.per_territory} == {"Denver Metro": 7, "Western Colorado": 4}


def test_top_accounts_includes_customers_without_sales_and_truncates():
    customers = [
        _customer("C1", sales=[_sale("C1", 300.0, 2024, "YTD")]),
        _customer("C2", sales=[_sale("C2", 500.0, 2024, "YTD")]),
        _customer("C3"),
        _customer("C4", classification="C", sales=[_sale("C4", 900.0, 2024, "YTD")]),
    ]

    ranked = top_accounts(customers, {"A"}, current_year=2024, limit=10)
    assert [r.key for r in ranked] == ["C2", "C1", "C3"]
    assert ranked[2].revenue_current_ytd == 0.0
    assert ranked[0].account_number == "ACCT-C2"

    assert [r.key for r in top_accounts(customers, {"A"}, current_year=2024, limit=1)] == ["C2"]


def test_top_accounts_search_matches_account_number():
    customers = [_customer("C1"), _customer("C2")]

    ranked = top_accounts(customers, {"A"}, search="acct-c2", current_year=2024)

    assert [r.key for r in ranked] == ["C2"]
