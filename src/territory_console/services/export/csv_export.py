"""Serialize customers and sales rollups into CSV text."""

from __future__ import annotations

import csv
import io
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Sequence

from ...models.domain import Customer
from ..sales.aggregator import SalesRollup


@dataclass(slots=True, frozen=True)
class ExportField:
    key: str
    label: str
    category: str
    getter: Callable[[Customer], Any]


def _first(items: list) -> Any:
    return items[0] if items else None


def _address_value(attribute: str) -> Callable[[Customer], Any]:
    def getter(customer: Customer) -> Any:
        address = _first(customer.addresses)
        return getattr(address, attribute, None) if address else None

    return getter


def _coordinate_value(attribute: str) -> Callable[[Customer], Any]:
    def getter(customer: Customer) -> Any:
        address = _first(customer.addresses)
        value = getattr(address, attribute, None) if address else None
        return f"{value:.6f}" if isinstance(value, float) else None

    return getter


def _contact_value(attribute: str) -> Callable[[Customer], Any]:
    def getter(customer: Customer) -> Any:
        contact = _first(customer.contacts)
        return getattr(contact, attribute, None) if contact else None

    return getter


def _total_sales(customer: Customer) -> str:
    return f"{sum(sale.amount or 0.0 for sale in customer.sales):.2f}"


EXPORT_FIELDS: tuple[ExportField, ...] = (
    ExportField("customer_name", "Customer Name", "customer", lambda customer: customer.customer_name),
    ExportField("account_number", "Account Number", "customer", lambda customer: customer.account_number),
    ExportField("territory", "Territory", "customer", lambda customer: customer.territory),
    ExportField(
        "account_classification",
        "Classification",
        "customer",
        lambda customer: customer.account_classification,
    ),
    ExportField("street", "Street Address", "address", _address_value("street")),
    ExportField("city", "City", "address", _address_value("city")),
    ExportField("state", "State", "address", _address_value("state")),
    ExportField("zip_code", "ZIP Code", "address", _address_value("zip_code")),
    ExportField("latitude", "Latitude", "location", _coordinate_value("latitude")),
    ExportField("longitude", "Longitude", "location", _coordinate_value("longitude")),
    ExportField("contact_name", "Contact Name", "contact", _contact_value("contact_name")),
    ExportField("role", "Contact Role", "contact", _contact_value("role")),
    ExportField("phone_number", "Phone Number", "contact", _contact_value("phone_number")),
    ExportField("email", "Email", "contact", _contact_value("email")),
    ExportField("total_sales", "Total Sales", "sales", _total_sales),
)

DEFAULT_EXPORT_FIELDS = ("customer_name", "account_number")

_FIELDS_BY_KEY = {field.key: field for field in EXPORT_FIELDS}


def resolve_export_fields(keys: Iterable[str]) -> list[ExportField]:
    """Return the requested fields in catalogue order; unknown keys raise ValueError."""

    requested = set(keys)
    unknown = requested - _FIELDS_BY_KEY.keys()
    if unknown:
        raise ValueError(f"Unknown export field(s): {', '.join(sorted(unknown))}")
    if not requested:
        raise ValueError("Select at least one field to export.")
    return [field for field in EXPORT_FIELDS if field.key in requested]


def customers_to_csv(customers: Sequence[Customer], keys: Iterable[str] = DEFAULT_EXPORT_FIELDS) -> str:
    fields = resolve_export_fields(keys)
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=[field.label for field in fields])
    writer.writeheader()
    for customer in customers:
        row = {}
        for field in fields:
            value = field.getter(customer)
            row[field.label] = "" if value is None else value
        writer.writerow(row)
    return buffer.getvalue()


def rollups_to_csv(rollups: Sequence[SalesRollup], current_year: int, prior_year: int) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(
        [
            "Territory",
            "Customers",
            f"{current_year} YTD",
            f"{prior_year} YTD",
            "Change %",
            f"{prior_year} Full Year",
        ]
    )
    for rollup in rollups:
        writer.writerow(
            [
                rollup.name,
                rollup.customer_count,
                f"{rollup.revenue_current_ytd:.2f}",
                f"{rollup.revenue_prior_ytd:.2f}",
                f"{rollup.change_percent:.1f}",
                f"{rollup.revenue_prior_full:.2f}",
            ]
        )
    return buffer.getvalue()
