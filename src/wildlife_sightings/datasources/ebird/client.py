"""
eBird API client.

Low-level HTTP client for the eBird API 2.0 recent-observations geo endpoint.

API docs: https://documenter.getpostman.com/view/664302/S1ENwy59
The geo endpoint caps ``dist`` at 50 km and ``back`` at 30 days.
"""

from __future__ import annotations

from typing import Any

import requests

from wildlife_sightings.errors import UpstreamProviderError
from wildlife_sightings.services.http import session

# ---------------------------------------------------------------------------
# API configuration
# ---------------------------------------------------------------------------
API_BASE = "https://api.ebird.org/v2"
TOKEN_HEADER = "x-ebirdapitoken"
MAX_RADIUS_KM = 50.0
MAX_BACK_DAYS = 30
DEFAULT_BACK_DAYS = 7
MAX_RESULTS = 100

PROVIDER_TAG = "ebird"


def get_recent_geo(
    lat: float,
    lng: float,
    dist_km: float,
    back_days: int,
    *,
    api_key: str,
    base_url: str = API_BASE,
    http: requests.Session | None = None,
) -> list[dict[str, Any]]:
    """
    GET /data/obs/geo/recent: recent sightings within ``dist_km`` of a point.

    ``dist_km`` and ``back_days`` are clamped to the upstream ceilings.

    Raises:
        UpstreamProviderError: On transport failure, non-2xx status, or a body
            that is not a JSON array.
    """
    params: dict[str, Any] = {
        "lat": round(lat, 4),
        "lng": round(lng, 4),
        "dist": min(dist_km, MAX_RADIUS_KM),
        "back": max(1, min(back_days, MAX_BACK_DAYS)),
        "maxResults": MAX_RESULTS,
    }
    url = f"{base_url}/data/obs/geo/recent"
    try:
        resp = (http or session).get(url, params=params, headers={TOKEN_HEADER: api_key})
        resp.raise_for_status()
        data = resp.json()
    except (requests.RequestException, ValueError) as exc:
        raise UpstreamProviderError(PROVIDER_TAG, str(exc)) from exc

    if not isinstance(data, list):
        msg = f"expected a JSON array, got {type(data).__name__}"
        raise UpstreamProviderError(PROVIDER_TAG, msg)
    return [record for record in data if isinstance(record, dict)]
