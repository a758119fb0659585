"""Recent bird sightings, tiled to stay under the eBird radius ceiling."""

from __future__ import annotations

import logging
import math
from concurrent.futures import ThreadPoolExecutor
from typing import Any

import requests

from wildlife_sightings.datasources.ebird import client
from wildlife_sightings.errors import UpstreamProviderError
from wildlife_sightings.schemas import CenterRadius, LatLng
from wildlife_sightings.viewport import KM_PER_DEGREE

logger = logging.getLogger(__name__)

#: Radius above which a 3x3 grid is used instead of 2x2.
LARGE_RADIUS_KM = 100.0

# Keeps longitude offsets finite at the poles.
_MIN_COS_LAT = 0.01


# =============================================================================
# Tiling
# =============================================================================


def grid_size(radius_km: float) -> int:
    """Tiles per side: 1 within the ceiling, 2 up to 100 km, 3 beyond."""
    if radius_km <= client.MAX_RADIUS_KM:
        return 1
    return 3 if radius_km > LARGE_RADIUS_KM else 2


def _wrap_lng(lng: float) -> float:
    return ((lng + 180.0) % 360.0) - 180.0


def tile_centers(center: LatLng, radius_km: float) -> list[LatLng]:
    """
    Sub-centers of an evenly spaced grid covering a circle of ``radius_km``.

    Tiles are spaced ``2R / n`` km apart, with longitude offsets widened by
    ``1 / cos(lat)`` so that tiles stay evenly spaced on the ground.

    Returns:
        ``n * n`` points, row by row from south-west to north-east. A radius
        within the ceiling yields just the center.
    """
    n = grid_size(radius_km)
    if n == 1:
        return [center]

    spacing_km = (radius_km * 2) / n
    cos_lat = max(math.cos(math.radians(center.lat)), _MIN_COS_LAT)

    tiles: list[LatLng] = []
    for i in range(n):
        for j in range(n):
            offset_lat = ((i - (n - 1) / 2) * spacing_km) / KM_PER_DEGREE
            offset_lng = ((j - (n - 1) / 2) * spacing_km) / (KM_PER_DEGREE * cos_lat)
            tiles.append(
                LatLng(
                    lat=max(-90.0, min(90.0, center.lat + offset_lat)),
                    lng=_wrap_lng(center.lng + offset_lng),
                )
            )
    return tiles


# =============================================================================
# API Fetching
# =============================================================================


def _fetch_tile(
    tile: LatLng,
    back_days: int,
    api_key: str,
    base_url: str,
    http: requests.Session | None,
) -> list[dict[str, Any]]:
    """Fetch one tile; a failing tile contributes nothing."""
    try:
        return client.get_recent_geo(
            tile.lat,
            tile.lng,
            client.MAX_RADIUS_KM,
            back_days,
            api_key=api_key,
            base_url=base_url,
            http=http,
        )
    except UpstreamProviderError as exc:
        logger.warning("eBird tile (%.4f, %.4f) failed: %s", tile.lat, tile.lng, exc)
        return []


def fetch_recent_observations(
    query: CenterRadius,
    *,
    api_key: str,
    back_days: int = client.DEFAULT_BACK_DAYS,
    base_url: str = client.API_BASE,
    http: requests.Session | None = None,
    max_workers: int = 9,
) -> list[dict[str, Any]]:
    """
    Fetch recent eBird sightings around a center point.

    Radii within the 50 km ceiling are a single request. Larger radii are
    split into a 2x2 or 3x3 grid of 50 km requests issued concurrently and
    flattened in tile order. Records seen by overlapping tiles appear more
    than once; deduplication removes them downstream.

    Args:
        query: Center point and (uncapped) radius.
        api_key: eBird API token.
        back_days: Lookback window in days (clamped to 1-30).
        base_url: API root, overridable for tests.
        http: Session to use (defaults to the shared session).
        max_workers: Thread pool size for tiled requests.

    Returns:
        Raw eBird records.

    Raises:
        UpstreamProviderError: Only for the single-request case; tile
            failures are logged and skipped.
    """
    if query.radius_km <= client.MAX_RADIUS_KM:
        return client.get_recent_geo(
            query.center.lat,
            query.center.lng,
            query.radius_km,
            back_days,
            api_key=api_key,
            base_url=base_url,
            http=http,
        )

    tiles = tile_centers(query.center, query.radius_km)
    logger.debug("Tiling eBird query of %.1f km into %d requests", query.radius_km, len(tiles))

    with ThreadPoolExecutor(max_workers=min(max_workers, len(tiles))) as executor:
        per_tile = list(
            executor.map(
                lambda tile: _fetch_tile(tile, back_days, api_key, base_url, http),
                tiles,
            )
        )
    return [record for records in per_tile for record in records]
