"""Domain models for accounts, sales and territory geometry."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import AbstractSet, Optional

CLASSIFICATIONS: tuple[str, ...] = ("A", "B+", "B", "C")

CLASSIFICATION_COLORS = {
    "A": "#22C55E",
    "B+": "#3B82F6",
    "B": "#6366F1",
    "C": "#EAB308",
    "default": "#9CA3AF",
}

TERRITORY_COLORS = {
    "Denver Metro": "#FF6B6B",
    "Northern Colorado": "#4ECDC4",
    "Southern Colorado": "#45B7D1",
    "Western Colorado": "#96CEB4",
    "Eastern Colorado": "#FFEEAD",
    "default": "#D4A5A5",
}

YTD = "YTD"
FULL = "FULL"


def classification_color(classification: Optional[str]) -> str:
    return CLASSIFICATION_COLORS.get(classification or "", CLASSIFICATION_COLORS["default"])


def territory_color(territory_name: Optional[str]) -> str:
    return TERRITORY_COLORS.get(territory_name or "", TERRITORY_COLORS["default"])


@dataclass(slots=True, frozen=True)
class Coordinate:
    """A latitude/longitude pair in decimal degrees."""

    lat: float
    lng: float


@dataclass(slots=True)
class Address:
    """Postal address owned by a single customer."""

    address_id: str
    street: Optional[str]
    city: Optional[str]
    state: Optional[str]
    zip_code: Optional[str]
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    @property
    def is_complete(self) -> bool:
        return all(
            (value or "").strip()
            for value in (self.street, self.city, self.state, self.zip_code)
        )

    def single_line(self) -> str:
        """Compose the "street, city, state zip" form sent to the geocoder."""

        return f"{self.street}, {self.city}, {self.state} {self.zip_code}"

    @property
    def persisted_coordinate(self) -> Optional[Coordinate]:
        if self.latitude is None or self.longitude is None:
            return None
        return Coordinate(self.latitude, self.longitude)


@dataclass(slots=True)
class Contact:
    contact_id: str
    contact_name: Optional[str] = None
    role: Optional[str] = None
    phone_number: Optional[str] = None
    email: Optional[str] = None


@dataclass(slots=True)
class SalesRecord:
    """A single sales amount for one customer, category and reporting window."""

    customer_id: str
    category: Optional[str]
    amount: Optional[float]
    year: Optional[int]
    comparison_type: Optional[str]
    period: Optional[int] = None
    customer_name: Optional[str] = None
    territory: Optional[str] = None


@dataclass(slots=True)
class Customer:
    """Represents a sales account with its addresses, sales and contacts."""

    customer_id: str
    customer_name: str
    account_number: str = ""
    territory: Optional[str] = None
    account_classification: Optional[str] = None
    introduced_myself: bool = False
    introduced_myself_at: Optional[str] = None
    introduced_myself_by: Optional[str] = None
    visited_account: bool = False
    visited_account_at: Optional[str] = None
    visited_account_by: Optional[str] = None
    addresses: list[Address] = field(default_factory=list)
    sales: list[SalesRecord] = field(default_factory=list)
    contacts: list[Contact] = field(default_factory=list)

    def matches(self, territory: Optional[str], classifications: Optional[AbstractSet[str]]) -> bool:
        """Return True when the account passes the territory/classification filter.

        ``classifications=None`` disables the classification check; an empty
        set matches nothing.
        """

        if classifications is not None and (
            not self.account_classification or self.account_classification not in classifications
        ):
            return False
        return not territory or self.territory == territory


@dataclass(slots=True)
class TerritoryBoundary:
    territory_name: str
    points: list[Coordinate]


@dataclass(slots=True)
class Marker:
    """A customer pinned at a resolved coordinate."""

    lat: float
    lng: float
    customer: Customer
    address_id: str
    source: str

    @property
    def color(self) -> str:
        return classification_color(self.customer.account_classification)
