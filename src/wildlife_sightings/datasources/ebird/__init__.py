"""eBird recent-sightings data source (birds only, no photos).

Public API:
  - client: API constants and the raw geo/recent request
  - observations: tile_centers, fetch_recent_observations
"""

from wildlife_sightings.datasources.ebird.client import MAX_RADIUS_KM, get_recent_geo
from wildlife_sightings.datasources.ebird.observations import (
    fetch_recent_observations,
    grid_size,
    tile_centers,
)

__all__ = [
    "MAX_RADIUS_KM",
    "fetch_recent_observations",
    "get_recent_geo",
    "grid_size",
    "tile_centers",
]
