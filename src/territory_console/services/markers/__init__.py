"""Marker cache and pipeline."""

from .cache import CachedMarker, MarkerCache
from .pipeline import CoordinateStore, MarkerPipeline, MarkerProgress

__all__ = [
    "CachedMarker",
    "CoordinateStore",
    "MarkerCache",
    "MarkerPipeline",
    "MarkerProgress",
]
