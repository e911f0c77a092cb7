"""GeoJSON map overlay for territory polygons and account markers."""

from __future__ import annotations

from typing import Any, Dict, List, Sequence

from shapely.geometry import MultiPoint, Point, Polygon, mapping

from ...models.domain import Marker, TerritoryBoundary, territory_color

DEFAULT_CENTER = (39.7392, -104.9903)
DEFAULT_ZOOM = 7
MAX_FIT_ZOOM = 10

POLYGON_STYLE = {
    "strokeWeight": 2,
    "fillOpacity": 0.35,
    "strokeOpacity": 1.0,
}


def boundary_to_feature(boundary: TerritoryBoundary) -> Dict[str, Any]:
    # GeoJSON uses lon,lat order (x,y)
    polygon = Polygon([(point.lng, point.lat) for point in boundary.points])
    color = territory_color(boundary.territory_name)
    return {
        "type": "Feature",
        "geometry": mapping(polygon),
        "properties": {
            "kind": "territory",
            "territory_name": boundary.territory_name,
            "fillColor": color,
            "strokeColor": color,
            **POLYGON_STYLE,
        },
    }


def marker_to_feature(marker: Marker) -> Dict[str, Any]:
    customer = marker.customer
    return {
        "type": "Feature",
        "geometry": mapping(Point(marker.lng, marker.lat)),
        "properties": {
            "kind": "marker",
            "customer_id": customer.customer_id,
            "customer_name": customer.customer_name,
            "account_classification": customer.account_classification,
            "territory": customer.territory,
            "address_id": marker.address_id,
            "color": marker.color,
        },
    }


def map_viewport(boundaries: Sequence[TerritoryBoundary], markers: Sequence[Marker]) -> Dict[str, Any]:
    """Bounds covering every boundary point and marker, or the default center."""

    points: List[tuple[float, float]] = [
        (point.lng, point.lat) for boundary in boundaries for point in boundary.points
    ]
    points.extend((marker.lng, marker.lat) for marker in markers)

    if not points:
        lat, lng = DEFAULT_CENTER
        return {"center": {"lat": lat, "lng": lng}, "zoom": DEFAULT_ZOOM, "bounds": None}

    min_lng, min_lat, max_lng, max_lat = MultiPoint(points).bounds
    return {
        "center": {"lat": (min_lat + max_lat) / 2, "lng": (min_lng + max_lng) / 2},
        "zoom": MAX_FIT_ZOOM,
        "bounds": {"south": min_lat, "west": min_lng, "north": max_lat, "east": max_lng},
    }


def build_map_overlay(boundaries: Sequence[TerritoryBoundary], markers: Sequence[Marker]) -> Dict[str, Any]:
    return {
        "type": "FeatureCollection",
        "features": [boundary_to_feature(boundary) for boundary in boundaries]
        + [marker_to_feature(marker) for marker in markers],
        "viewport": map_viewport(boundaries, markers),
    }
