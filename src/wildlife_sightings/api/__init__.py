"""HTTP API (FastAPI) over the aggregation pipeline."""

from wildlife_sightings.api.app import create_app

__all__ = ["create_app"]
