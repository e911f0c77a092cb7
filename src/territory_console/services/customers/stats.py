"""Customer analytics helpers."""

from __future__ import annotations

from typing import AbstractSet, Literal, Optional, Protocol, Sequence

from ...models.domain import Customer

ContactStatus = Literal["all", "introduced", "visited"]


class CustomerCounter(Protocol):
    def count_customers(
        self,
        *,
        territory: Optional[str] = None,
        introduced: Optional[bool] = None,
        visited: Optional[bool] = None,
    ) -> int:
        ...


def compute_account_progress(counter: CustomerCounter) -> dict:
    """Account totals for the dashboard header, from count queries."""

    return {
        "total": counter.count_customers(),
        "introduced": counter.count_customers(introduced=True),
        "visited": counter.count_customers(visited=True),
    }


def list_territories(customers: Sequence[Customer]) -> list[str]:
    return sorted({customer.territory for customer in customers if customer.territory})


def filter_customers(
    customers: Sequence[Customer],
    territory: Optional[str] = None,
    classifications: Optional[AbstractSet[str]] = None,
) -> list[Customer]:
    return [customer for customer in customers if customer.matches(territory, classifications)]


def _contact_date(customer: Customer) -> str:
    return customer.introduced_myself_at or customer.visited_account_at or ""


_CONTACT_SORT_KEYS = {
    "name": lambda customer: customer.customer_name.lower(),
    "date": _contact_date,
    "territory": lambda customer: (customer.territory or "").lower(),
}


def list_contact_progress(
    customers: Sequence[Customer],
    *,
    territory: Optional[str] = None,
    status: ContactStatus = "all",
    search: Optional[str] = None,
    sort_by: str = "date",
    descending: bool = True,
) -> list[Customer]:
    """Accounts that were introduced to or visited, filtered and sorted."""

    try:
        sort_key = _CONTACT_SORT_KEYS[sort_by]
    except KeyError as exc:
        raise ValueError(f"Unknown sort field '{sort_by}'.") from exc

    needle = search.strip().lower() if search and search.strip() else None
    results: list[Customer] = []
    for customer in customers:
        if not (customer.introduced_myself or customer.visited_account):
            continue
        if territory and customer.territory != territory:
            continue
        if status == "introduced" and not customer.introduced_myself:
            continue
        if status == "visited" and not customer.visited_account:
            continue
        if needle and needle not in customer.customer_name.lower() and needle not in customer.account_number.lower():
            continue
        results.append(customer)

    return sorted(results, key=sort_key, reverse=descending)
