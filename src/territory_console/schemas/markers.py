"""Pydantic request/response models for marker endpoints."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from ..models.domain import CLASSIFICATIONS, Marker
from .customers import CustomerSummaryModel


class MarkerRequest(BaseModel):
    territory: Optional[str] = Field(default=None, description="Only include accounts in this territory.")
    classifications: List[str] = Field(
        default_factory=lambda: list(CLASSIFICATIONS),
        description="Account classifications to show on the map.",
    )

    @field_validator("classifications")
    @classmethod
    def validate_classifications(cls, value: List[str]) -> List[str]:
        unknown = [item for item in value if item not in CLASSIFICATIONS]
        if unknown:
            raise ValueError(f"Unknown classification(s): {', '.join(unknown)}")
        return value


class MarkerModel(BaseModel):
    lat: float
    lng: float
    address_id: str
    source: str
    color: str
    customer: CustomerSummaryModel

    @classmethod
    def from_marker(cls, marker: Marker) -> "MarkerModel":
        return cls(
            lat=marker.lat,
            lng=marker.lng,
            address_id=marker.address_id,
            source=marker.source,
            color=marker.color,
            customer=CustomerSummaryModel.from_customer(marker.customer),
        )


class MarkerProgressModel(BaseModel):
    processed: int
    total: int
    generation: int


class MarkerResponse(BaseModel):
    markers: List[MarkerModel]
    progress: MarkerProgressModel
