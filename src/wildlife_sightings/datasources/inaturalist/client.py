"""
iNaturalist API client.

Low-level HTTP client for the iNaturalist API v1.

API docs: https://api.inaturalist.org/v1/docs/
Recommended practices: https://www.inaturalist.org/pages/api+recommended+practices
"""

from __future__ import annotations

from typing import Any

import requests

from wildlife_sightings.errors import UpstreamProviderError
from wildlife_sightings.services.http import session

# ---------------------------------------------------------------------------
# API configuration
# ---------------------------------------------------------------------------
API_BASE = "https://api.inaturalist.org/v1"
PER_PAGE = 100
QUALITY_GRADES = "research,needs_id"
GEOPRIVACY = "open"
FIELDS = "id,observed_on,observed_on_string,time_observed_at,location,place_guess,taxon,photos"

PROVIDER_TAG = "inat"


def _get(
    endpoint: str,
    params: dict[str, Any] | None = None,
    *,
    base_url: str = API_BASE,
    http: requests.Session | None = None,
) -> dict[str, Any]:
    """Make a GET request to the iNaturalist API v1 and decode the JSON object."""
    url = f"{base_url}/{endpoint}"
    try:
        resp = (http or session).get(url, params=params or {})
        resp.raise_for_status()
        data = resp.json()
    except (requests.RequestException, ValueError) as exc:
        raise UpstreamProviderError(PROVIDER_TAG, str(exc)) from exc

    if not isinstance(data, dict):
        msg = f"expected a JSON object, got {type(data).__name__}"
        raise UpstreamProviderError(PROVIDER_TAG, msg)
    return data


# ---------------------------------------------------------------------------
# Public helpers
# ---------------------------------------------------------------------------


def get_observations(
    params: dict[str, Any],
    *,
    base_url: str = API_BASE,
    http: requests.Session | None = None,
) -> dict[str, Any]:
    """GET /observations: search observations."""
    return _get("observations", params, base_url=base_url, http=http)


def get_observation(
    observation_id: int,
    *,
    base_url: str = API_BASE,
    http: requests.Session | None = None,
) -> dict[str, Any] | None:
    """GET /observations/{id}: one observation, or None when upstream says 404."""
    try:
        return _get(
            f"observations/{observation_id}",
            {"fields": FIELDS},
            base_url=base_url,
            http=http,
        )
    except UpstreamProviderError as exc:
        cause = exc.__cause__
        if isinstance(cause, requests.HTTPError) and cause.response is not None:
            if cause.response.status_code == 404:
                return None
        raise
