"""Recent multi-taxa observations for a map region."""

from __future__ import annotations

import math
from datetime import date, timedelta
from typing import Any

import requests

from wildlife_sightings.datasources.inaturalist import client
from wildlife_sightings.schemas import BoundingBox, CenterRadius
from wildlife_sightings.viewport import KM_PER_DEGREE

DEFAULT_RECENT_DAYS = 14

# =============================================================================
# Parsing
# =============================================================================


def parse_location(location: Any) -> tuple[float, float] | None:
    """Parse an iNaturalist ``"lat,lng"`` string. Returns None if unusable."""
    if not location:
        return None

    parts = str(location).split(",")
    if len(parts) != 2:
        return None

    try:
        lat = float(parts[0])
        lng = float(parts[1])
    except ValueError:
        return None

    if not (math.isfinite(lat) and math.isfinite(lng)):
        return None
    if not (-90 <= lat <= 90 and -180 <= lng <= 180):
        return None
    return lat, lng


def _is_georeferenced(obs: dict[str, Any]) -> bool:
    return parse_location(obs.get("location")) is not None


# =============================================================================
# Request building
# =============================================================================


def build_params(
    query: BoundingBox | CenterRadius,
    *,
    recent_days: int = DEFAULT_RECENT_DAYS,
    has_photos: bool | None = None,
    today: date | None = None,
) -> dict[str, Any]:
    """
    Query parameters for ``GET /observations``.

    A bounding box maps to ``nelat/nelng/swlat/swlng``; a center+radius maps
    to ``lat/lng/radius`` with the radius in degrees. ``has_photos`` is only
    sent when it is not None.
    """
    params: dict[str, Any] = {}
    if isinstance(query, BoundingBox):
        params.update(
            {
                "nelat": query.ne.lat,
                "nelng": query.ne.lng,
                "swlat": query.sw.lat,
                "swlng": query.sw.lng,
            }
        )
    else:
        params.update(
            {
                "lat": query.center.lat,
                "lng": query.center.lng,
                "radius": query.radius_km / KM_PER_DEGREE,
            }
        )

    since = (today or date.today()) - timedelta(days=recent_days)
    params.update(
        {
            "per_page": client.PER_PAGE,
            "quality_grade": client.QUALITY_GRADES,
            "geoprivacy": client.GEOPRIVACY,
            "d1": since.isoformat(),
            "fields": client.FIELDS,
        }
    )
    if has_photos is not None:
        params["has_photos"] = "true" if has_photos else "false"
    return params


# =============================================================================
# API Fetching
# =============================================================================


def fetch_observations(
    query: BoundingBox | CenterRadius,
    *,
    recent_days: int = DEFAULT_RECENT_DAYS,
    has_photos: bool | None = None,
    base_url: str = client.API_BASE,
    http: requests.Session | None = None,
) -> list[dict[str, Any]]:
    """
    Fetch recent observations inside a region.

    Upstream is asked for georeferenced records only, but records without
    parseable coordinates are still dropped here.

    Raises:
        UpstreamProviderError: On transport failure or a malformed body.
    """
    params = build_params(query, recent_days=recent_days, has_photos=has_photos)
    data = client.get_observations(params, base_url=base_url, http=http)
    results = data.get("results") or []
    if not isinstance(results, list):
        return []
    return [obs for obs in results if isinstance(obs, dict) and _is_georeferenced(obs)]


def fetch_observation(
    observation_id: int,
    *,
    base_url: str = client.API_BASE,
    http: requests.Session | None = None,
) -> dict[str, Any] | None:
    """
    Fetch a single observation by its iNaturalist id.

    Returns None when the observation does not exist or is not georeferenced.
    """
    data = client.get_observation(observation_id, base_url=base_url, http=http)
    if data is None:
        return None

    # The single-record endpoint wraps the record in ``results`` like search does.
    results = data.get("results")
    obs = results[0] if isinstance(results, list) and results else data
    if not isinstance(obs, dict) or not _is_georeferenced(obs):
        return None
    return obs
