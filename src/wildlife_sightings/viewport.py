"""
Viewport geometry.

Converts a map viewport into the query shapes the providers accept, and
computes great-circle distances for deduplication.

The radius projection averages the latitude and longitude spans at a flat
111 km/degree. It ignores the shrinking of a longitude degree away from the
equator, so wide viewports have their corners under-covered.
"""

from __future__ import annotations

import math

from wildlife_sightings.schemas import BoundingBox, CenterRadius, LatLng, Viewport

KM_PER_DEGREE = 111.0
EARTH_RADIUS_KM = 6371.0

#: eBird's hard ceiling for ``dist`` on geo queries.
AVIAN_MAX_RADIUS_KM = 50.0


def to_bounding_box(viewport: Viewport) -> BoundingBox:
    """NE = center + half spans, SW = center - half spans."""
    half_lat = viewport.lat_delta / 2
    half_lng = viewport.lng_delta / 2
    return BoundingBox(
        ne=LatLng(lat=viewport.lat + half_lat, lng=viewport.lng + half_lng),
        sw=LatLng(lat=viewport.lat - half_lat, lng=viewport.lng - half_lng),
    )


def to_center_radius(
    viewport: Viewport,
    max_radius_km: float | None = AVIAN_MAX_RADIUS_KM,
) -> CenterRadius:
    """
    Approximate a viewport as a circle.

    Args:
        viewport: Map viewport.
        max_radius_km: Upper bound on the radius. ``None`` leaves it uncapped,
            which is what tiling callers need.

    Returns:
        CenterRadius at the viewport center.
    """
    avg_delta = (viewport.lat_delta + viewport.lng_delta) / 2
    radius_km = avg_delta * KM_PER_DEGREE / 2
    if max_radius_km is not None:
        radius_km = min(radius_km, max_radius_km)
    return CenterRadius(center=viewport.center, radius_km=radius_km)


def haversine_distance_km(p1: LatLng, p2: LatLng) -> float:
    """Great-circle distance between two points in kilometres."""
    d_lat = math.radians(p2.lat - p1.lat)
    d_lng = math.radians(p2.lng - p1.lng)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(p1.lat)) * math.cos(math.radians(p2.lat)) * math.sin(d_lng / 2) ** 2
    )
    a = min(a, 1.0)  # float error near antipodes
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
