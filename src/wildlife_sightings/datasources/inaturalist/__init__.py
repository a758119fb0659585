"""iNaturalist multi-taxa data source.

Public API:
  - client: Low-level HTTP (search + point lookup)
  - observations: build_params, fetch_observations, fetch_observation, parse_location
"""

from wildlife_sightings.datasources.inaturalist.observations import (
    DEFAULT_RECENT_DAYS,
    build_params,
    fetch_observation,
    fetch_observations,
    parse_location,
)

__all__ = [
    "DEFAULT_RECENT_DAYS",
    "build_params",
    "fetch_observation",
    "fetch_observations",
    "parse_location",
]
