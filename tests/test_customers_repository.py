import pytest

from territory_console.data.customers_repository import (
    RepositoryError,
    TerritoryRepository,
    coerce_float,
    parse_customer,
)


class FakeResponse:
    def __init__(self, data=None, count=None):
        self.data = data
        self.count = count


class FakeQuery:
    def __init__(self, client, table):
        self.client = client
        self.table = table
        self.filters = []
        self.orders = []
        self.select_args = None
        self.window = None
        self.payload = None
        self.deleting = False

    def select(self, columns, count=None, head=None):
        self.select_args = (columns, count, head)
        return self

    def update(self, payload):
        self.payload = payload
        return self

    def delete(self):
        self.deleting = True
        return self

    def order(self, column):
        self.orders.append(column)
        return self

    def eq(self, column, value):
        self.filters.append(("eq", column, value))
        return self

    def in_(self, column, values):
        self.filters.append(("in", column, list(values)))
        return self

    def range(self, start, end):
        self.window = (start, end)
        return self

    def execute(self):
        self.client.executed.append(self)
        if self.client.error is not None:
            raise self.client.error
        rows = self.client.tables.get(self.table, [])
        if self.select_args and self.select_args[1] == "exact":
            return FakeResponse(data=[], count=self.client.count)
        if self.payload is not None or self.deleting:
            return FakeResponse(data=[])
        if self.window is None:
            matching = [
                row for row in rows if all(row.get(column) == value for kind, column, value in self.filters if kind == "eq")
            ]
            return FakeResponse(data=matching)
        start, end = self.window
        return FakeResponse(data=rows[start : end + 1])


class FakeRpc:
    def __init__(self, client, name, params):
        self.client = client
        self.name = name
        self.params = params

    def execute(self):
        if self.client.error is not None:
            raise self.client.error
        self.client.rpcs.append((self.name, self.params))
        return FakeResponse(data=None)


class FakeSupabase:
    def __init__(self, tables=None, count=0, error=None):
        self.tables = tables or {}
        self.count = count
        self.error = error
        self.executed = []
        self.rpcs = []

    def table(self, name):
        return FakeQuery(self, name)

    def rpc(self, name, params):
        return FakeRpc(self, name, params)


def _customer_row(cid, **extra):
    row = {
        "customer_id": cid,
        "customer_name": f" Customer {cid} ",
        "account_number": f"ACCT-{cid}",
        "territory": "Denver Metro",
        "account_classification": "A",
        "introduced_myself": True,
        "visited_account": None,
        "sales": [{"category": "HVAC", "sales_amount": "1,250.50", "year": 2024, "comparison_type": "ytd"}],
        "addresses": [
            {
                "address_id": "a1",
                "street": "100 Main St",
                "city": "Denver",
                "state": "CO",
                "zip_code": "80202",
                "geocoded_locations": {"latitude": "39.7", "longitude": -104.9},
            }
        ],
        "contacts": [{"contact_id": "k1", "contact_name": "Pat Lee", "role": "Owner"}],
    }
    row.update(extra)
    return row


def test_coerce_float_handles_strings_and_blanks():
    assert coerce_float("1,234.5") == 1234.5
    assert coerce_float("") is None
    assert coerce_float(None) is None
    assert coerce_float("n/a") is None


def test_parse_customer_reads_nested_rows():
    customer = parse_customer(_customer_row("C1"))

    assert customer.customer_name == "Customer C1"
    assert customer.introduced_myself is True
    assert customer.visited_account is False
    assert customer.addresses[0].persisted_coordinate.lat == 39.7
    assert customer.sales[0].amount == 1250.5
    assert customer.sales[0].comparison_type == "YTD"
    assert customer.sales[0].territory == "Denver Metro"
    assert customer.contacts[0].contact_name == "Pat Lee"


def test_address_without_geocoded_location_has_no_coordinate():
    customer = parse_customer(_customer_row("C1", addresses=[{"address_id": "a1", "geocoded_locations": []}]))

    assert customer.addresses[0].persisted_coordinate is None
    assert customer.addresses[0].is_complete is False


def test_fetch_customers_pages_until_short_page():
    client = FakeSupabase({"customers": [_customer_row(f"C{i}") for i in range(5)]})
    repository = TerritoryRepository(client, page_size=2)

    customers = repository.fetch_customers()

    assert [c.customer_id for c in customers] == ["C0", "C1", "C2", "C3", "C4"]
    assert [query.window for query in client.executed] == [(0, 1), (2, 3), (4, 5)]


def test_fetch_sales_records_filters_years_and_joins_customer():
    client = FakeSupabase(
        {
            "sales": [
                {
                    "customer_id": "C1",
                    "category": "PIPE",
                    "sales_amount": 90,
                    "year": "2023",
                    "comparison_type": "FULL",
                    "customers": {"customer_id": "C1", "customer_name": "Acme", "territory": "Denver Metro"},
                }
            ]
        }
    )
    repository = TerritoryRepository(client, page_size=100)

    records = repository.fetch_sales_records([2024, 2023])

    assert records[0].year == 2023
    assert records[0].customer_name == "Acme"
    assert client.executed[0].filters == [("in", "year", [2023, 2024])]


def test_fetch_boundary_points_orders_by_name_then_sequence():
    client = FakeSupabase({"territory_boundaries": [{"territory_name": "Denver Metro", "sequence": 0}]})

    rows = TerritoryRepository(client, page_size=100).fetch_boundary_points()

    assert rows == [{"territory_name": "Denver Metro", "sequence": 0}]
    assert client.executed[0].orders == ["territory_name", "sequence"]


def test_upsert_calls_rpc():
    client = FakeSupabase()

    TerritoryRepository(client).upsert_geocoded_location("a1", 39.7, -104.9)

    assert client.rpcs == [
        ("upsert_geocoded_location", {"p_address_id": "a1", "p_latitude": 39.7, "p_longitude": -104.9})
    ]


def test_count_customers_uses_exact_head_count():
    client = FakeSupabase(count=42)

    count = TerritoryRepository(client).count_customers(territory="Denver Metro", introduced=True)

    query = client.executed[0]
    assert count == 42
    assert query.select_args == ("customer_id", "exact", True)
    assert query.filters == [("eq", "territory", "Denver Metro"), ("eq", "introduced_myself", "true")]


def test_failures_are_wrapped_in_repository_error():
    repository = TerritoryRepository(FakeSupabase(error=ConnectionError("connection reset")))

    with pytest.raises(RepositoryError, match="connection reset"):
        repository.fetch_customers()


def test_unconfigured_client_raises_repository_error():
    with pytest.raises(RepositoryError, match="not configured"):
        TerritoryRepository(None).count_customers()


def test_fetch_sales_records_uses_a_total_ordering():
    client = FakeSupabase({"sales": []})

    TerritoryRepository(client, page_size=100).fetch_sales_records([2024])

    assert client.executed[0].orders == ["customer_id", "year", "category", "period", "comparison_type", "sale_id"]


def test_set_introduced_stamps_time_and_actor_then_rereads():
    client = FakeSupabase({"customers": [_customer_row("C1"), _customer_row("C2")]})

    customer = TerritoryRepository(client).set_introduced("C1", True, "Pat Lee")

    update, reread = client.executed
    assert update.table == "customers"
    assert update.filters == [("eq", "customer_id", "C1")]
    assert update.payload["introduced_myself"] is True
    assert update.payload["introduced_myself_by"] == "Pat Lee"
    assert update.payload["introduced_myself_at"]
    assert reread.payload is None
    assert customer.customer_id == "C1"


def test_clearing_visited_clears_time_and_actor():
    client = FakeSupabase({"customers": [_customer_row("C1")]})

    TerritoryRepository(client).set_visited("C1", False, "Pat Lee")

    assert client.executed[0].payload == {
        "visited_account": False,
        "visited_account_at": None,
        "visited_account_by": None,
    }


def test_progress_update_for_missing_customer_returns_none():
    client = FakeSupabase({"customers": []})

    assert TerritoryRepository(client).set_visited("C9", True, "Pat Lee") is None


def test_update_address_normalizes_and_drops_stored_coordinate():
    client = FakeSupabase()

    TerritoryRepository(client).update_address(
        "a1", street=" 200 Oak Ave ", city="boulder", state="co", zip_code=" 80301 "
    )

    update, delete = client.executed
    assert (update.table, update.filters) == ("addresses", [("eq", "address_id", "a1")])
    assert update.payload == {"street": "200 OAK AVE", "city": "BOULDER", "state": "CO", "zip_code": "80301"}
    assert (delete.table, delete.deleting, delete.filters) == ("geocoded_locations", True, [("eq", "address_id", "a1")])


def test_update_address_failure_is_wrapped():
    repository = TerritoryRepository(FakeSupabase(error=ConnectionError("timed out")))

    with pytest.raises(RepositoryError, match="timed out"):
        repository.update_address("a1", street="1 A St", city="Denver", state="CO", zip_code="80202")
