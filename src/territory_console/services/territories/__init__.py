"""Territory boundary services."""

from .boundaries import (
    BoundaryLoadResult,
    TerritoryBoundaryLoader,
    build_boundaries,
    group_boundary_points,
)

__all__ = [
    "BoundaryLoadResult",
    "TerritoryBoundaryLoader",
    "build_boundaries",
    "group_boundary_points",
]
