"""Customer dataset endpoints."""

from __future__ import annotations

from typing import List, Literal

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ...data.customers_repository import RepositoryError, TerritoryRepository
from ...models.domain import CLASSIFICATIONS
from ...schemas.customers import (
    AccountProgressResponse,
    AddressUpdateRequest,
    AddressUpdateResponse,
    ContactModel,
    ContactProgressModel,
    CustomerListResponse,
    CustomerModel,
    ProgressUpdateRequest,
)
from ...services.customers import (
    compute_account_progress,
    filter_customers,
    list_contact_progress,
    list_territories,
)
from ...services.markers import MarkerPipeline
from ..dependencies import bad_request, fetch_failed, pipeline_dependency, repository_dependency, write_failed

router = APIRouter(prefix="/customers", tags=["customers"])


def _classification_filter(classifications: List[str] | None) -> set[str] | None:
    if not classifications:
        return None
    unknown = [item for item in classifications if item not in CLASSIFICATIONS]
    if unknown:
        bad_request(ValueError(f"Unknown classification(s): {', '.join(unknown)}"))
    return set(classifications)


@router.get("", response_model=CustomerListResponse, status_code=status.HTTP_200_OK)
def list_customers(
    territory: str | None = Query(default=None, description="Optional territory filter"),
    classification: List[str] | None = Query(default=None, description="Repeatable classification filter"),
    repository: TerritoryRepository = Depends(repository_dependency),
) -> CustomerListResponse:
    allowed = _classification_filter(classification)
    try:
        customers = repository.fetch_customers()
    except RepositoryError as exc:
        fetch_failed("customers", exc)

    items = filter_customers(customers, territory, allowed)
    return CustomerListResponse(
        items=[CustomerModel.from_customer(customer) for customer in items],
        total=len(items),
        territories=list_territories(customers),
    )


@router.get("/territories", response_model=List[str], status_code=status.HTTP_200_OK)
def get_territories(repository: TerritoryRepository = Depends(repository_dependency)) -> List[str]:
    try:
        return list_territories(repository.fetch_customers())
    except RepositoryError as exc:
        fetch_failed("territories", exc)


@router.get("/progress", response_model=AccountProgressResponse, status_code=status.HTTP_200_OK)
def get_account_progress(repository: TerritoryRepository = Depends(repository_dependency)) -> AccountProgressResponse:
    try:
        return AccountProgressResponse(**compute_account_progress(repository))
    except RepositoryError as exc:
        fetch_failed("account progress", exc)


@router.get("/contact-progress", response_model=List[ContactProgressModel], status_code=status.HTTP_200_OK)
def get_contact_progress(
    territory: str | None = Query(default=None),
    contact_status: Literal["all", "introduced", "visited"] = Query(default="all", alias="status"),
    search: str | None = Query(default=None, description="Customer name or account number"),
    sort: Literal["name", "date", "territory"] = Query(default="date"),
    direction: Literal["asc", "desc"] = Query(default="desc"),
    repository: TerritoryRepository = Depends(repository_dependency),
) -> List[ContactProgressModel]:
    try:
        customers = repository.fetch_customers()
    except RepositoryError as exc:
        fetch_failed("contact progress", exc)

    rows = list_contact_progress(
        customers,
        territory=territory,
        status=contact_status,
        search=search,
        sort_by=sort,
        descending=direction == "desc",
    )
    return [
        ContactProgressModel(
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
        for customer in rows
    ]


@router.patch("/addresses/{address_id}", response_model=AddressUpdateResponse, status_code=status.HTTP_200_OK)
def update_address(
    address_id: str,
    payload: AddressUpdateRequest,
    repository: TerritoryRepository = Depends(repository_dependency),
    pipeline: MarkerPipeline = Depends(pipeline_dependency),
) -> AddressUpdateResponse:
    """Edit an address; its stored coordinate and cached marker are dropped."""

    try:
        repository.update_address(
            address_id,
            street=payload.street,
            city=payload.city,
            state=payload.state,
            zip_code=payload.zip_code,
        )
    except RepositoryError as exc:
        write_failed(f"address {address_id}", exc)
    return AddressUpdateResponse(address_id=address_id, cache_evicted=pipeline.cache.evict(address_id))


@router.patch("/{customer_id}/progress", response_model=CustomerModel, status_code=status.HTTP_200_OK)
def update_progress(
    customer_id: str,
    payload: ProgressUpdateRequest,
    repository: TerritoryRepository = Depends(repository_dependency),
) -> CustomerModel:
    if payload.introduced is None and payload.visited is None:
        bad_request(ValueError("Provide 'introduced' and/or 'visited'"))

    customer = None
    try:
        if payload.introduced is not None:
            customer = repository.set_introduced(customer_id, payload.introduced, payload.actor)
        if payload.visited is not None:
            customer = repository.set_visited(customer_id, payload.visited, payload.actor)
    except RepositoryError as exc:
        write_failed(f"customer {customer_id}", exc)

    if customer is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Customer {customer_id} not found")
    return CustomerModel.from_customer(customer)
