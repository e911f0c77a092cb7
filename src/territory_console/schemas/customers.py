"""Customer-facing API schemas."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from ..models.domain import Customer


class AddressModel(BaseModel):
    address_id: str
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class ContactModel(BaseModel):
    contact_id: str
    contact_name: Optional[str] = None
    role: Optional[str] = None
    phone_number: Optional[str] = None
    email: Optional[str] = None


class SalesRecordModel(BaseModel):
    category: Optional[str] = None
    sales_amount: Optional[float] = None
    year: Optional[int] = None
    comparison_type: Optional[str] = None
    period: Optional[int] = None


class CustomerSummaryModel(BaseModel):
    customer_id: str
    customer_name: str
    account_number: str
    territory: Optional[str] = None
    account_classification: Optional[str] = None

    @classmethod
    def from_customer(cls, customer: Customer) -> "CustomerSummaryModel":
        return cls(
            customer_id=customer.customer_id,
            customer_name=customer.customer_name,
            account_number=customer.account_number,
            territory=customer.territory,
            account_classification=customer.account_classification,
        )


class CustomerModel(CustomerSummaryModel):
    introduced_myself: bool = False
    introduced_myself_at: Optional[str] = None
    introduced_myself_by: Optional[str] = None
    visited_account: bool = False
    visited_account_at: Optional[str] = None
    visited_account_by: Optional[str] = None
    addresses: List[AddressModel] = []
    sales: List[SalesRecordModel] = []
    contacts: List[ContactModel] = []

    @classmethod
    def from_customer(cls, customer: Customer) -> "CustomerModel":
        return cls(
            customer_id=customer.customer_id,
            customer_name=customer.customer_name,
            account_number=customer.account_number,
            territory=customer.territory,
            account_classification=customer.account_classification,
            introduced_myself=customer.introduced_myself,
            introduced_myself_at=customer.introduced_myself_at,
            introduced_myself_by=customer.introduced_myself_by,
            visited_account=customer.visited_account,
            visited_account_at=customer.visited_account_at,
            visited_account_by=customer.visited_account_by,
            addresses=[
                AddressModel(
                    address_id=address.address_id,
                    street=address.street,
                    city=address.city,
                    state=address.state,
                    zip_code=address.zip_code,
                    latitude=address.latitude,
                    longitude=address.longitude,
                )
                for address in customer.addresses
            ],
            sales=[
                SalesRecordModel(
                    category=sale.category,
                    sales_amount=sale.amount,
                    year=sale.year,
                    comparison_type=sale.comparison_type,
                    period=sale.period,
                )
                for sale in customer.sales
            ],
            contacts=[
                ContactModel(
                    contact_id=contact.contact_id,
                    contact_name=contact.contact_name,
                    role=contact.role,
                    phone_number=contact.phone_number,
                    email=contact.email,
                )
                for contact in customer.contacts
            ],
        )


class CustomerListResponse(BaseModel):
    items: List[CustomerModel]
    total: int
    territories: List[str]


class AccountProgressResponse(BaseModel):
    total: int
    introduced: int
    visited: int


class ContactProgressModel(CustomerSummaryModel):
    introduced_myself: bool
    introduced_myself_at: Optional[str] = None
    introduced_myself_by: Optional[str] = None
    visited_account: bool
    visited_account_at: Optional[str] = None
    visited_account_by: Optional[str] = None
    contacts: List[ContactModel] = []


class ProgressUpdateRequest(BaseModel):
    """Set or clear the introduced/visited flags; omitted flags are left alone."""

    introduced: Optional[bool] = None
    visited: Optional[bool] = None
    actor: str = Field(default="Current User", min_length=1)


class AddressUpdateRequest(BaseModel):
    street: str = Field(min_length=1)
    city: str = Field(min_length=1)
    state: str = Field(min_length=1)
    zip_code: str = Field(min_length=1)

    @field_validator("street", "city", "state", "zip_code")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value


class AddressUpdateResponse(BaseModel):
    address_id: str
    cache_evicted: bool
