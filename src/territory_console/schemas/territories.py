"""Pydantic response models for territory boundary endpoints."""

from __future__ import annotations

from typing import Dict, List

from pydantic import BaseModel

from ..models.domain import TerritoryBoundary


class PointModel(BaseModel):
    lat: float
    lng: float


class TerritoryBoundaryModel(BaseModel):
    territory_name: str
    points: List[PointModel]

    @classmethod
    def from_boundary(cls, boundary: TerritoryBoundary) -> "TerritoryBoundaryModel":
        return cls(
            territory_name=boundary.territory_name,
            points=[PointModel(lat=point.lat, lng=point.lng) for point in boundary.points],
        )


class BoundaryResponse(BaseModel):
    boundaries: List[TerritoryBoundaryModel]
    diagnostics: Dict[str, List[str]]
