"""Export utilities (CSV and GeoJSON)."""

from .csv_export import EXPORT_FIELDS, customers_to_csv, resolve_export_fields, rollups_to_csv
from .geojson import build_map_overlay, map_viewport

__all__ = [
    "EXPORT_FIELDS",
    "build_map_overlay",
    "customers_to_csv",
    "map_viewport",
    "resolve_export_fields",
    "rollups_to_csv",
]
