"""Data access helpers for customers, sales, coordinates and territory boundaries."""

from __future__ import annotations

import functools
import logging
import math
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Optional

from ..config import settings
from ..db.supabase import get_supabase_client
from ..models.domain import Address, Contact, Customer, SalesRecord

logger = logging.getLogger(__name__)

CUSTOMER_SELECT = """
    customer_id,
    customer_name,
    account_number,
    territory,
    account_classification,
    introduced_myself,
    introduced_myself_at,
    introduced_myself_by,
    visited_account,
    visited_account_at,
    visited_account_by,
    sales (category, sales_amount, year, comparison_type, period),
    addresses (
        address_id, street, city, state, zip_code,
        geocoded_locations (latitude, longitude)
    ),
    contacts (contact_id, contact_name, role, phone_number, email)
"""

SALES_SELECT = """
    customer_id,
    category,
    sales_amount,
    year,
    comparison_type,
    period,
    customers (customer_id, customer_name, territory)
"""


class RepositoryError(RuntimeError):
    """A whole fetch or mutation against the hosted store failed."""


def coerce_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(str(value).replace(",", ""))
    except ValueError:
        return None


def _coerce_int(value: Any) -> Optional[int]:
    number = coerce_float(value)
    if number is None or not math.isfinite(number):
        return None
    return int(number)


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _as_list(value: Any) -> list:
    # One-to-one embeds come back as an object rather than a list.
    if value is None:
        return []
    if isinstance(value, dict):
        return [value]
    return list(value)


def parse_address(row: dict) -> Address:
    locations = _as_list(row.get("geocoded_locations"))
    location = locations[0] if locations else {}
    return Address(
        address_id=str(row.get("address_id") or ""),
        street=_clean(row.get("street")),
        city=_clean(row.get("city")),
        state=_clean(row.get("state")),
        zip_code=_clean(row.get("zip_code")),
        latitude=coerce_float(location.get("latitude")),
        longitude=coerce_float(location.get("longitude")),
    )


def parse_sales_record(row: dict, customer: Optional[dict] = None) -> SalesRecord:
    owner = customer if customer is not None else (row.get("customers") or {})
    comparison_type = _clean(row.get("comparison_type"))
    return SalesRecord(
        customer_id=str(owner.get("customer_id") or row.get("customer_id") or ""),
        category=_clean(row.get("category")),
        amount=coerce_float(row.get("sales_amount")),
        year=_coerce_int(row.get("year")),
        comparison_type=comparison_type.upper() if comparison_type else None,
        period=_coerce_int(row.get("period")),
        customer_name=_clean(owner.get("customer_name")),
        territory=_clean(owner.get("territory")),
    )


def parse_customer(row: dict) -> Customer:
    customer_id = str(row.get("customer_id") or "").strip()
    owner = {
        "customer_id": customer_id,
        "customer_name": row.get("customer_name"),
        "territory": row.get("territory"),
    }
    return Customer(
        customer_id=customer_id,
        customer_name=(row.get("customer_name") or "").strip(),
        account_number=str(row.get("account_number") or "").strip(),
        territory=_clean(row.get("territory")),
        account_classification=_clean(row.get("account_classification")),
        introduced_myself=bool(row.get("introduced_myself")),
        introduced_myself_at=row.get("introduced_myself_at"),
        introduced_myself_by=row.get("introduced_myself_by"),
        visited_account=bool(row.get("visited_account")),
        visited_account_at=row.get("visited_account_at"),
        visited_account_by=row.get("visited_account_by"),
        addresses=[parse_address(address) for address in _as_list(row.get("addresses"))],
        sales=[parse_sales_record(sale, owner) for sale in _as_list(row.get("sales"))],
        contacts=[
            Contact(
                contact_id=str(contact.get("contact_id") or ""),
                contact_name=_clean(contact.get("contact_name")),
                role=_clean(contact.get("role")),
                phone_number=_clean(contact.get("phone_number")),
                email=_clean(contact.get("email")),
            )
            for contact in _as_list(row.get("contacts"))
        ],
    )


class TerritoryRepository:
    """Reads and writes the console's tables through a Supabase client.

    Every public method either returns a complete result or raises
    RepositoryError; multi-row reads page through the table so callers never
    see a truncated result.
    """

    def __init__(self, client: Any = None, page_size: int | None = None) -> None:
        self._client = client
        self.page_size = page_size or settings.sales_page_size

    @property
    def client(self) -> Any:
        if self._client is None:
            raise RepositoryError(
                "Supabase not configured. Set TERRITORY_SUPABASE_URL and TERRITORY_SUPABASE_KEY."
            )
        return self._client

    def _fetch_all(self, build_query: Callable[[], Any]) -> list[dict]:
        rows: list[dict] = []
        start = 0
        while True:
            response = build_query().range(start, start + self.page_size - 1).execute()
            page = response.data or []
            rows.extend(page)
            if len(page) < self.page_size:
                return rows
            start += self.page_size

    def _run(self, description: str, operation: Callable[[], Any]) -> Any:
        try:
            return operation()
        except RepositoryError:
            raise
        except Exception as exc:
            logger.error(f"Failed to {description}: {exc}")
            raise RepositoryError(str(exc) or type(exc).__name__) from exc

    def fetch_customers(self) -> list[Customer]:
        rows = self._run(
            "fetch customers",
            lambda: self._fetch_all(
                lambda: self.client.table("customers").select(CUSTOMER_SELECT).order("customer_id")
            ),
        )
        return [parse_customer(row) for row in rows]

    def fetch_boundary_points(self) -> list[dict]:
        """Boundary point rows ordered by territory name, then sequence."""

        return self._run(
            "fetch territory boundaries",
            lambda: self._fetch_all(
                lambda: self.client.table("territory_boundaries")
                .select("territory_name, latitude, longitude, sequence")
                .order("territory_name")
                .order("sequence")
            ),
        )

    def fetch_sales_records(self, years: Iterable[int]) -> list[SalesRecord]:
        year_list = sorted(set(years))
        rows = self._run(
            "fetch sales",
            lambda: self._fetch_all(
                lambda: self.client.table("sales")
                .select(SALES_SELECT)
                .in_("year", year_list)
                .order("customer_id")
                .order("year")
                .order("category")
                .order("period")
                .order("comparison_type")
                .order(settings.sales_id_column)
            ),
        )
        return [parse_sales_record(row) for row in rows]

    def upsert_geocoded_location(self, address_id: str, latitude: float, longitude: float) -> None:
        """Insert or update the coordinate for ``address_id``."""

        self._run(
            f"store coordinates for address {address_id}",
            lambda: self.client.rpc(
                "upsert_geocoded_location",
                {"p_address_id": address_id, "p_latitude": latitude, "p_longitude": longitude},
            ).execute(),
        )

    def fetch_customer(self, customer_id: str) -> Optional[Customer]:
        rows = self._run(
            f"fetch customer {customer_id}",
            lambda: self.client.table("customers")
            .select(CUSTOMER_SELECT)
            .eq("customer_id", customer_id)
            .execute()
            .data,
        )
        return parse_customer(rows[0]) if rows else None

    def _set_progress_flag(self, customer_id: str, column: str, flag: bool, actor: Optional[str]) -> Optional[Customer]:
        # Clearing a flag clears its timestamp and actor as well.
        payload = {
            column: flag,
            f"{column}_at": datetime.now(timezone.utc).isoformat() if flag else None,
            f"{column}_by": actor if flag else None,
        }
        self._run(
            f"update {column} for customer {customer_id}",
            lambda: self.client.table("customers").update(payload).eq("customer_id", customer_id).execute(),
        )
        return self.fetch_customer(customer_id)

    def set_introduced(self, customer_id: str, flag: bool, actor: Optional[str]) -> Optional[Customer]:
        """Record (or clear) the introduction and return the re-read customer."""

        return self._set_progress_flag(customer_id, "introduced_myself", flag, actor)

    def set_visited(self, customer_id: str, flag: bool, actor: Optional[str]) -> Optional[Customer]:
        return self._set_progress_flag(customer_id, "visited_account", flag, actor)

    def update_address(self, address_id: str, *, street: str, city: str, state: str, zip_code: str) -> None:
        """Update an address and drop its stored coordinate so it is geocoded again."""

        payload = {
            "street": street.strip().upper(),
            "city": city.strip().upper(),
            "state": state.strip().upper(),
            "zip_code": zip_code.strip(),
        }
        self._run(
            f"update address {address_id}",
            lambda: self.client.table("addresses").update(payload).eq("address_id", address_id).execute(),
        )
        self._run(
            f"clear coordinates for address {address_id}",
            lambda: self.client.table("geocoded_locations").delete().eq("address_id", address_id).execute(),
        )

    def count_customers(
        self,
        *,
        territory: Optional[str] = None,
        introduced: Optional[bool] = None,
        visited: Optional[bool] = None,
    ) -> int:
        def _count() -> int:
            query = self.client.table("customers").select("customer_id", count="exact", head=True)
            if territory is not None:
                query = query.eq("territory", territory)
            if introduced is not None:
                query = query.eq("introduced_myself", str(introduced).lower())
            if visited is not None:
                query = query.eq("visited_account", str(visited).lower())
            return query.execute().count or 0

        return self._run("count customers", _count)


@functools.lru_cache(maxsize=1)
def get_repository() -> TerritoryRepository:
    return TerritoryRepository(get_supabase_client())
