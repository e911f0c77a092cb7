"""Geospatial validation for account coordinates and territory polygons."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Sequence

from ..models.domain import Coordinate


@dataclass(slots=True, frozen=True)
class BoundingBox:
    south: float
    west: float
    north: float
    east: float

    def contains(self, lat: float, lng: float) -> bool:
        return self.south <= lat <= self.north and self.west <= lng <= self.east


# Continental United States.
US_BOUNDS = BoundingBox(south=24.396308, west=-125.0, north=49.384358, east=-66.934570)


class ValidationErrorKind(str, Enum):
    NON_FINITE = "non_finite"
    OUT_OF_BOUNDS = "out_of_bounds"
    TOO_FEW_POINTS = "too_few_points"
    NOT_CLOSED = "not_closed"
    SELF_INTERSECTING = "self_intersecting"


@dataclass(slots=True, frozen=True)
class ValidationIssue:
    kind: ValidationErrorKind
    message: str
    index: Optional[int] = None


@dataclass(slots=True)
class ValidationResult:
    errors: list[ValidationIssue] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def kinds(self) -> set[ValidationErrorKind]:
        return {issue.kind for issue in self.errors}

    def messages(self) -> list[str]:
        return [issue.message for issue in self.errors]


def is_finite_coordinate(lat: float, lng: float) -> bool:
    return math.isfinite(lat) and math.isfinite(lng)


def validate_point(
    lat: float, lng: float, *, bounds: BoundingBox = US_BOUNDS, index: Optional[int] = None
) -> ValidationResult:
    """Check a single point is finite and inside the bounding box."""

    prefix = f"Point {index + 1}: " if index is not None else ""
    errors: list[ValidationIssue] = []

    if not math.isfinite(lat):
        errors.append(ValidationIssue(ValidationErrorKind.NON_FINITE, f"{prefix}Invalid latitude value", index))
    elif not bounds.south <= lat <= bounds.north:
        errors.append(ValidationIssue(ValidationErrorKind.OUT_OF_BOUNDS, f"{prefix}Latitude outside US bounds", index))

    if not math.isfinite(lng):
        errors.append(ValidationIssue(ValidationErrorKind.NON_FINITE, f"{prefix}Invalid longitude value", index))
    elif not bounds.west <= lng <= bounds.east:
        errors.append(ValidationIssue(ValidationErrorKind.OUT_OF_BOUNDS, f"{prefix}Longitude outside US bounds", index))

    return ValidationResult(errors)


def _ccw(a: Coordinate, b: Coordinate, c: Coordinate) -> bool:
    return (c.lng - a.lng) * (b.lat - a.lat) > (b.lng - a.lng) * (c.lat - a.lat)


def segments_intersect(p1: Coordinate, p2: Coordinate, p3: Coordinate, p4: Coordinate) -> bool:
    """Counter-clockwise orientation test for segments p1-p2 and p3-p4."""

    return _ccw(p1, p3, p4) != _ccw(p2, p3, p4) and _ccw(p1, p2, p3) != _ccw(p1, p2, p4)


def find_self_intersection(points: Sequence[Coordinate]) -> Optional[tuple[int, int]]:
    """Return the first pair of crossing non-adjacent edge indices, if any.

    Edge ``i`` joins ``points[i]`` and ``points[i + 1]``. On a closed ring the
    first and last edges share the closing vertex and are not compared.
    """

    last_edge = len(points) - 2
    closed = len(points) > 1 and points[0] == points[-1]
    for i in range(len(points) - 1):
        for j in range(i + 2, len(points) - 1):
            if closed and i == 0 and j == last_edge:
                continue
            if segments_intersect(points[i], points[i + 1], points[j], points[j + 1]):
                return i, j
    return None


def validate_polygon(points: Sequence[Coordinate], *, bounds: BoundingBox = US_BOUNDS) -> ValidationResult:
    """Validate a territory ring.

    Every per-point problem is collected before the closure and
    self-intersection checks so callers get the complete error list.
    """

    if len(points) < 3:
        return ValidationResult(
            [ValidationIssue(ValidationErrorKind.TOO_FEW_POINTS, "Polygon must have at least 3 points")]
        )

    errors: list[ValidationIssue] = []
    for index, point in enumerate(points):
        errors.extend(validate_point(point.lat, point.lng, bounds=bounds, index=index).errors)

    first, last = points[0], points[-1]
    if first.lat != last.lat or first.lng != last.lng:
        errors.append(
            ValidationIssue(
                ValidationErrorKind.NOT_CLOSED,
                "Polygon is not closed (first and last points must match)",
            )
        )

    crossing = find_self_intersection(points)
    if crossing is not None:
        i, j = crossing
        errors.append(
            ValidationIssue(
                ValidationErrorKind.SELF_INTERSECTING,
                f"Polygon has self-intersecting edges ({i + 1} and {j + 1})",
            )
        )

    return ValidationResult(errors)
